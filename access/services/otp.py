import secrets
from datetime import datetime, timedelta
from typing import Callable, Tuple

from django.utils import timezone


class OtpGenerator:
    """Issues 6-digit numeric codes that expire after ``ttl``."""

    def __init__(self, ttl: timedelta = timedelta(minutes=5), *, clock: Callable[[], datetime] = timezone.now):
        self.ttl = ttl
        self.clock = clock

    def generate(self) -> Tuple[str, datetime]:
        code = str(100000 + secrets.randbelow(900000))
        return code, self.clock() + self.ttl
