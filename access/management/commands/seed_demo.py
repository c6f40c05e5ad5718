from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from access.models import HealthRecord, Migrant, User

DEMO_DOCTOR = ("doctor1", "123456")
DEMO_MIGRANT = {"unique_id": "MIG-demo-0001", "name": "Ravi Kumar", "phone": "+910000000001",
                "gender": "male", "language": "ml"}
DEMO_RECORDS = [
    ("Initial screening", "BP 130/85, mild fever, advised rest."),
    ("Follow-up", "Fever resolved. BP normal."),
]


class Command(BaseCommand):
    help = "Ensure a demo doctor, migrant and records exist (idempotent)."

    def handle(self, *args, **opts):
        username, password = DEMO_DOCTOR
        doctor, created = User.objects.get_or_create(username=username, defaults={"role": "doctor", "is_active": True})
        doctor.set_password(password)
        doctor.role = "doctor"
        doctor.save()
        self.stdout.write(self.style.SUCCESS(f"ok: {username} (doctor, id={doctor.pk})"))

        migrant, _ = Migrant.objects.get_or_create(
            unique_id=DEMO_MIGRANT["unique_id"],
            defaults={**DEMO_MIGRANT, "is_verified": True},
        )
        self.stdout.write(self.style.SUCCESS(f"ok: {migrant.unique_id} ({migrant.name})"))

        if not HealthRecord.objects.filter(owner_id=migrant.unique_id).exists():
            now = timezone.now()
            for i, (title, content) in enumerate(DEMO_RECORDS):
                HealthRecord.objects.create(
                    owner_id=migrant.unique_id, title=title, content=content,
                    author_id=str(doctor.pk), created_at=now - timedelta(days=len(DEMO_RECORDS) - i),
                )
            self.stdout.write(self.style.SUCCESS(f"ok: {len(DEMO_RECORDS)} records"))
