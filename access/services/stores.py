"""
Persistence for access requests and health records.

``transition`` is the only way a request's status changes.  It is a
compare-and-set: the write happens only if the row is still ``pending``,
so two racing verifications can never both move the same request.
"""
from __future__ import annotations

import copy
import threading
from datetime import datetime
from typing import Dict, List, Optional

from django.core.exceptions import ValidationError

from access.errors import NotFound
from access.models import AccessRequest, HealthRecord


class DjangoAccessRequestStore:
    """ORM-backed store.  The conditional ``UPDATE`` is the CAS primitive."""

    def add(self, request: AccessRequest) -> AccessRequest:
        request.save(force_insert=True)
        return request

    def get(self, request_id) -> AccessRequest:
        try:
            return AccessRequest.objects.get(pk=request_id)
        except (AccessRequest.DoesNotExist, ValidationError, ValueError):
            raise NotFound('access request not found')

    def transition(self, request_id, status: str, *, verified_at: Optional[datetime] = None) -> Optional[AccessRequest]:
        updated = AccessRequest.objects.filter(
            pk=request_id, status=AccessRequest.STATUS_PENDING,
        ).update(status=status, verified_at=verified_at, otp_code='')
        if not updated:
            return None
        return AccessRequest.objects.get(pk=request_id)

    def filter(self, *, owner_id: Optional[str] = None, requester_id: Optional[str] = None,
               status: Optional[str] = None) -> List[AccessRequest]:
        qs = AccessRequest.objects.all()
        if owner_id is not None:
            qs = qs.filter(owner_id=owner_id)
        if requester_id is not None:
            qs = qs.filter(requester_id=requester_id)
        if status is not None:
            qs = qs.filter(status=status)
        return list(qs.order_by('-created_at'))

    def latest_granted(self, owner_id: str, requester_id: str) -> Optional[AccessRequest]:
        return AccessRequest.objects.filter(
            owner_id=owner_id,
            requester_id=requester_id,
            status=AccessRequest.STATUS_GRANTED,
        ).order_by('-verified_at').first()


class InMemoryAccessRequestStore:
    """Process-local store for tests and single-process use; a single lock
    serializes the check-then-write.  Production wiring uses
    :class:`DjangoAccessRequestStore`.

    Rows are handed out as copies so callers never see a write they did not
    make through ``transition``.
    """

    def __init__(self):
        self._rows: Dict[str, AccessRequest] = {}
        self._lock = threading.Lock()

    def add(self, request: AccessRequest) -> AccessRequest:
        with self._lock:
            self._rows[str(request.id)] = copy.copy(request)
        return request

    def get(self, request_id) -> AccessRequest:
        with self._lock:
            row = self._rows.get(str(request_id))
            if row is None:
                raise NotFound('access request not found')
            return copy.copy(row)

    def transition(self, request_id, status: str, *, verified_at: Optional[datetime] = None) -> Optional[AccessRequest]:
        with self._lock:
            row = self._rows.get(str(request_id))
            if row is None or not row.is_pending:
                return None
            row.status = status
            row.verified_at = verified_at
            row.otp_code = ''
            return copy.copy(row)

    def filter(self, *, owner_id: Optional[str] = None, requester_id: Optional[str] = None,
               status: Optional[str] = None) -> List[AccessRequest]:
        with self._lock:
            rows = [copy.copy(r) for r in self._rows.values()
                    if (owner_id is None or r.owner_id == owner_id)
                    and (requester_id is None or r.requester_id == requester_id)
                    and (status is None or r.status == status)]
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    def latest_granted(self, owner_id: str, requester_id: str) -> Optional[AccessRequest]:
        granted = self.filter(owner_id=owner_id, requester_id=requester_id, status=AccessRequest.STATUS_GRANTED)
        if not granted:
            return None
        return max(granted, key=lambda r: r.verified_at)


class DjangoRecordStore:

    def for_owner(self, owner_id: str, *, limit: Optional[int] = None) -> List[HealthRecord]:
        qs = HealthRecord.objects.filter(owner_id=owner_id).order_by('-created_at', '-id')
        if limit:
            qs = qs[:limit]
        return list(qs)

    def add(self, *, owner_id: str, title: str, content: str, author_id: str, created_at: datetime) -> HealthRecord:
        return HealthRecord.objects.create(
            owner_id=owner_id, title=title, content=content,
            author_id=author_id, created_at=created_at,
        )
