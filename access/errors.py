"""
Domain errors raised by the access services.

Each error carries a ``code`` that the HTTP layer returns verbatim so
callers can tell the kinds apart.  None of them are retried automatically.
"""
from __future__ import annotations


class AccessError(Exception):
    code = 'access_error'
    default_message = 'access error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(AccessError):
    code = 'not_found'
    default_message = 'not found'


class InvalidArgument(AccessError):
    code = 'invalid_argument'
    default_message = 'missing or malformed input'


class InvalidState(AccessError):
    code = 'invalid_state'
    default_message = 'request not pending'


class Expired(AccessError):
    code = 'expired'
    default_message = 'OTP expired'


class Mismatch(AccessError):
    code = 'mismatch'
    default_message = 'OTP mismatch'


class PermissionDenied(AccessError):
    code = 'permission_denied'
    default_message = 'access not granted'


class Unavailable(AccessError):
    """A downstream collaborator (SMS, summarizer) failed."""
    code = 'unavailable'
    default_message = 'service unavailable'
