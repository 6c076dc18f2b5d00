"""Statistics API Routes - Scoped dashboards and reports"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_current_user_dep, get_scope_dep
from ...domain.models import (
    ActorContext, AdminOverview, DashboardStats, ReportSummary, RequestCounts, Scope
)
from ...services.stats_service import StatsService

router = APIRouter()


@router.get("/stats", response_model=RequestCounts)
def get_stats(scope: Scope = Depends(get_scope_dep)):
    """Request and personnel counts within the caller's scope"""
    return StatsService().counts(scope)


@router.get("/dashboard-stats", response_model=DashboardStats)
def get_dashboard_stats(
    days: int = Query(7, ge=1, le=90, description="Activity window in days"),
    scope: Scope = Depends(get_scope_dep)
):
    """Scoped counts with urgent backlog, today's completions and daily activity"""
    return StatsService().dashboard(scope, days)


@router.get("/admin/stats", response_model=AdminOverview)
def get_admin_stats(actor: ActorContext = Depends(get_current_user_dep)):
    """Global counts, 7-day activity series and the 5 latest requests"""
    return StatsService().admin_overview(actor)


@router.get("/reports/summary", response_model=ReportSummary)
def get_report_summary(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    actor: ActorContext = Depends(get_current_user_dep)
):
    """Per-unit totals, weekday distribution and completion ratio"""
    return StatsService().report_summary(actor, date_from, date_to)
