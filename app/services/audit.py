from app.services.base import BaseService
from app.models.audit_log import AuditLog
from app.schemas.auth import Actor
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional


def _sanitize(obj: Any) -> Any:
    """Make nested values JSON-column safe."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        actor: Optional[Actor],
        details: Optional[dict] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ) -> AuditLog:
        """
        Create an audit log entry. Strictly append-only.

        The entry is only added to the session: it is written by the caller's
        commit, together with the change it describes, or not at all.
        """
        db_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=actor.user_id if actor else None,
            user_role=actor.role.value if actor else "system",
            details=_sanitize(details),
            before_state=_sanitize(before_state),
            after_state=_sanitize(after_state)
        )
        self.db.add(db_log)
        return db_log
