"""Audit Writer - Append-only audit log entries"""
from typing import Optional

from ..domain.models import ActorContext, AuditActor, AuditLogEntry
from ..domain.enums import AuditCategory
from ..repositories.audit_repo import AuditRepository
from ..utils.idgen import generate_log_id
from ..utils.time import utc_now
from ..utils.logger import get_logger, get_correlation_id

logger = get_logger(__name__)


class AuditWriter:
    """
    Write audit log entries (append-only)

    Recording never fails the surrounding operation: storage errors are
    logged and the entry is dropped.
    """

    def __init__(self, repo: Optional[AuditRepository] = None):
        self.repo = repo or AuditRepository()

    def record(
        self,
        actor: ActorContext,
        category: AuditCategory,
        description: str,
        origin: Optional[str] = None
    ) -> Optional[AuditLogEntry]:
        """Record an entry; returns None when the write failed"""
        try:
            entry = AuditLogEntry(
                log_id=generate_log_id(),
                timestamp=utc_now(),
                actor=AuditActor(
                    name=actor.name,
                    role=actor.role.label,
                    initials=actor.initials,
                    nrp=actor.nrp
                ),
                category=category,
                description=description,
                origin=origin or "unknown",
                correlation_id=get_correlation_id()
            )
            return self.repo.create_entry(entry)
        except Exception as e:
            logger.error(
                f"Failed to record audit entry: {e}",
                extra={"category": category.value, "actor_nrp": actor.nrp},
                exc_info=True
            )
            return None

    def record_login(self, actor: ActorContext, origin: Optional[str] = None) -> Optional[AuditLogEntry]:
        return self.record(actor, AuditCategory.LOGIN, f"{actor.name} logged in", origin)

    def record_logout(self, actor: ActorContext, origin: Optional[str] = None) -> Optional[AuditLogEntry]:
        return self.record(actor, AuditCategory.SYSTEM, f"{actor.name} logged out", origin)
