from typing import Optional, Any, Dict

from access.models import AuditEvent


def log_action(*, actor_id: Optional[str], action: str, object_type: Optional[str] = None,
               object_id: Optional[str] = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    return AuditEvent.objects.create(
        actor_id=str(actor_id or ''),
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
