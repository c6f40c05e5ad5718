import html
import logging
from datetime import datetime
from typing import Callable, List

import bleach
from django.utils import timezone

from access.errors import InvalidArgument, PermissionDenied, Unavailable
from access.models import AccessRequest, HealthRecord
from access.services.directory import OwnerProfile

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK = "Failed to generate summary."
SUMMARY_MAX_RECORDS = 10


def _strip_tags(value) -> str:
    # bleach escapes & < > in text; only the tags should go
    return html.unescape(bleach.clean((value or '').strip(), strip=True)).strip()


class RecordGateway:
    """Every record operation goes through here and is checked against the current grant."""

    def __init__(self, grants, records, directory, summarizer, *,
                 clock: Callable[[], datetime] = timezone.now, summary_limit: int = SUMMARY_MAX_RECORDS):
        self.grants = grants
        self.records = records
        self.directory = directory
        self.summarizer = summarizer
        self.clock = clock
        self.summary_limit = max(1, min(summary_limit, SUMMARY_MAX_RECORDS))

    def _require_grant(self, owner_id: str, requester_id: str) -> AccessRequest:
        grant = self.grants.current_grant(owner_id, requester_id)
        if grant is None:
            raise PermissionDenied('access not granted')
        return grant

    def read_records(self, owner_id: str, requester_id: str) -> List[HealthRecord]:
        self._require_grant(owner_id, requester_id)
        return self.records.for_owner(owner_id)

    def write_record(self, owner_id: str, requester_id: str, title: str, content: str) -> HealthRecord:
        title = _strip_tags(title)
        content = _strip_tags(content)
        if not title or not content:
            raise InvalidArgument('missing fields')
        self._require_grant(owner_id, requester_id)
        record = self.records.add(
            owner_id=owner_id, title=title, content=content,
            author_id=str(requester_id), created_at=self.clock(),
        )
        logger.info("Record %s created for owner=%s by %s", record.id, owner_id, requester_id)
        return record

    def read_owner_profile(self, owner_id: str, requester_id: str) -> OwnerProfile:
        self._require_grant(owner_id, requester_id)
        return self.directory.profile(owner_id)

    def summarize(self, owner_id: str, requester_id: str) -> str:
        """Summarize the newest records; a failing summarizer yields a fallback string."""
        self._require_grant(owner_id, requester_id)
        recent = self.records.for_owner(owner_id, limit=self.summary_limit)
        text = "\n\n".join(f"{r.title}: {r.content}" for r in recent)
        try:
            return self.summarizer.summarize(text or "No records")
        except Unavailable as e:
            logger.warning("AI summary failed for owner=%s: %s", owner_id, e)
            return SUMMARY_FALLBACK
