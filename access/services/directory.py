from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional

from access.errors import NotFound
from access.models import Migrant


@dataclass
class OwnerContact:
    owner_id: str
    name: str
    phone: str


@dataclass
class OwnerProfile:
    """Redacted owner view handed to doctors: no credentials, no OTP state."""
    unique_id: str
    name: str
    phone: str
    dob: Optional[date]
    gender: str
    language: str

    def as_dict(self) -> dict:
        data = asdict(self)
        data['dob'] = self.dob.isoformat() if self.dob else None
        return data


class MigrantDirectory:
    """Resolves a migrant's public id to contact and profile details."""

    def _get(self, owner_id: str) -> Migrant:
        m = Migrant.objects.filter(unique_id=owner_id).first()
        if not m:
            raise NotFound('migrant not found')
        return m

    def resolve(self, owner_id: str) -> OwnerContact:
        m = self._get(owner_id)
        return OwnerContact(owner_id=m.unique_id, name=m.name, phone=m.phone)

    def profile(self, owner_id: str) -> OwnerProfile:
        m = self._get(owner_id)
        return OwnerProfile(
            unique_id=m.unique_id, name=m.name, phone=m.phone,
            dob=m.dob, gender=m.gender, language=m.language,
        )
