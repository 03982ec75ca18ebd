from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from ..models import AuditLog

logger = logging.getLogger(__name__)


def record(
    db: Session,
    *,
    user_id: int | None,
    action: str,
    entity: str,
    entity_id: int | str | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction; the caller commits."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details or {},
        ip_address=ip_address,
    )
    db.add(entry)
    logger.info("audit %s %s id=%s by user=%s", action, entity, entry.entity_id, user_id)
    return entry
