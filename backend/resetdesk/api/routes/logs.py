"""Audit Log API Routes"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_current_user_dep
from ...domain.models import ActorContext, AuditLogEntry, AuditLogFilters
from ...domain.enums import AuditCategory
from ...services.audit_service import AuditService

router = APIRouter()


@router.get("", response_model=List[AuditLogEntry])
def list_logs(
    search: Optional[str] = Query(None, max_length=200),
    category: Optional[AuditCategory] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(500, ge=1, le=5000),
    actor: ActorContext = Depends(get_current_user_dep)
):
    """
    Query the audit log, newest first

    Free text matches actor name, category and description.
    """
    filters = AuditLogFilters(
        search=search,
        category=category,
        date_from=date_from,
        date_to=date_to,
        limit=limit
    )
    return AuditService().query(actor, filters)
