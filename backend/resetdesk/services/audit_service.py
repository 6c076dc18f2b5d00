"""Audit Service - Audit log queries"""
from typing import List

from ..domain.models import ActorContext, AuditLogEntry, AuditLogFilters
from ..domain.errors import ValidationError
from ..engine.scope_resolver import ScopeResolver
from ..repositories.audit_repo import AuditRepository


class AuditService:
    """Service for reading the audit log (super admin only)"""

    def __init__(self):
        self.audit_repo = AuditRepository()
        self.scopes = ScopeResolver()

    def query(self, actor: ActorContext, filters: AuditLogFilters) -> List[AuditLogEntry]:
        """Entries matching the filters, newest first"""
        self.scopes.require_global(actor)
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationError("date_from must not be after date_to", details={"field": "date_from"})
        return self.audit_repo.query_entries(filters)
