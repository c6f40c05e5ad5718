"""
The access-grant state machine.

A requester opens an :class:`AccessRequest` for an owner; the owner receives
an OTP out of band; supplying that OTP back moves the request from
``pending`` to ``granted`` (or to ``expired`` once the window has passed).
The latest granted request for an (owner, requester) pair is the only thing
:class:`~access.services.gateway.RecordGateway` consults.

State transitions::

    pending --correct OTP, in window--> granted
    pending --any OTP, window passed--> expired
    pending --wrong OTP, in window----> pending  (Mismatch)
    granted/denied/expired -----------> InvalidState on any verify
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from django.utils import timezone
from django.utils.crypto import constant_time_compare

from access.errors import Expired, InvalidArgument, InvalidState, Mismatch, Unavailable
from access.models import AccessRequest
from access.services.otp import OtpGenerator

logger = logging.getLogger(__name__)

OTP_MESSAGE = "Your Arogya Saathi OTP is {code}"


class AccessGrantService:

    def __init__(self, store, directory, notifier, otp_generator: Optional[OtpGenerator] = None, *,
                 clock: Callable[[], datetime] = timezone.now):
        self.store = store
        self.directory = directory
        self.notifier = notifier
        self.clock = clock
        self.otp_generator = otp_generator or OtpGenerator(clock=clock)

    def request_access(self, owner_id: str, requester_id: str) -> AccessRequest:
        """Open a pending request and send its OTP to the owner.

        The code is only ever delivered through the notifier.  A delivery
        failure is logged and the request stays valid.
        """
        owner_id = (owner_id or '').strip()
        requester_id = str(requester_id or '').strip()
        if not owner_id or not requester_id:
            raise InvalidArgument('missing')

        contact = self.directory.resolve(owner_id)
        code, expires_at = self.otp_generator.generate()
        ar = self.store.add(AccessRequest(
            owner_id=contact.owner_id,
            requester_id=requester_id,
            otp_code=code,
            otp_expires_at=expires_at,
            status=AccessRequest.STATUS_PENDING,
            created_at=self.clock(),
        ))
        logger.info("Access request %s opened for owner=%s by requester=%s", ar.id, ar.owner_id, requester_id)

        try:
            self.notifier.deliver(contact.phone, OTP_MESSAGE.format(code=code))
        except Unavailable as e:
            logger.warning("OTP delivery failed for access request %s: %s", ar.id, e)
        return ar

    def verify_otp(self, request_id, supplied_code: str) -> AccessRequest:
        ar = self.store.get(request_id)
        if not ar.is_pending:
            raise InvalidState('request not pending')

        now = self.clock()
        if now >= ar.otp_expires_at:
            if self.store.transition(ar.id, AccessRequest.STATUS_EXPIRED) is None:
                raise InvalidState('request not pending')
            logger.info("Access request %s expired", ar.id)
            raise Expired('OTP expired')

        if not constant_time_compare(str(supplied_code or ''), ar.otp_code):
            logger.info("OTP mismatch for access request %s", ar.id)
            raise Mismatch('OTP mismatch')

        granted = self.store.transition(ar.id, AccessRequest.STATUS_GRANTED, verified_at=now)
        if granted is None:
            # another verification moved the row first
            raise InvalidState('request not pending')
        logger.info("Access request %s granted", ar.id)
        return granted

    def current_grant(self, owner_id: str, requester_id: str) -> Optional[AccessRequest]:
        return self.store.latest_granted(owner_id, str(requester_id))

    def requests_for(self, requester_id: str, *, owner_id: Optional[str] = None, status: Optional[str] = None):
        return self.store.filter(owner_id=owner_id, requester_id=str(requester_id), status=status)
