import logging
from typing import Optional, Dict, Any

from flask import request, g, has_request_context

from ..extensions import db
from ..models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def audit_log(
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    actor_wallet: Optional[str] = None,
) -> None:
    """Stage an audit row in the current session; committed with the caller's transaction."""
    ip = ua = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        ua = request.headers.get("User-Agent")
        actor_wallet = actor_wallet or g.get("wallet_address")

    log = AuditLog(
        actor_wallet=actor_wallet,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id else None,
        ip_address=ip[:64] if ip else None,
        user_agent=ua[:255] if ua else None,
        details=details or None,
    )
    db.session.add(log)


def safe_audit(action: str, entity_type: str, entity_id: str | None = None, details: dict | None = None,
               actor_wallet: str | None = None):
    """
    Best-effort audit for rejected attempts.
    Commits on its own and never breaks the calling request.
    """
    try:
        audit_log(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
            actor_wallet=actor_wallet,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Audit logging failed: %s", action)
