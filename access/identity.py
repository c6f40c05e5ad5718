from dataclasses import dataclass

from access.errors import InvalidArgument


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as seen by the access services."""
    id: str
    role: str

    @classmethod
    def from_user(cls, user) -> "Identity":
        return cls(id=str(user.pk), role=getattr(user, 'role', '') or '')


def identity_from_request(request) -> Identity:
    user = getattr(request, 'user', None)
    if not (user and getattr(user, 'is_authenticated', False)):
        raise InvalidArgument('missing caller identity')
    return Identity.from_user(user)
