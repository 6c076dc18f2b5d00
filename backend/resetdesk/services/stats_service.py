"""Stats Service - Scoped aggregates computed on demand"""
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from ..domain.models import (
    ActivityPoint, ActorContext, AdminOverview, DashboardStats, ReportSummary,
    RequestCounts, ResetRequest, Scope, UnitSummary
)
from ..domain.enums import RequestPriority, RequestStatus
from ..domain.errors import ValidationError
from ..engine.scope_resolver import ScopeResolver
from ..repositories.personnel_repo import PersonnelRepository
from ..repositories.request_repo import RequestRepository
from ..utils.time import day_range_bounds, end_of_day, start_of_day, trailing_days, utc_today
from ..utils.logger import get_logger

logger = get_logger(__name__)

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
OPEN_STATUSES = [RequestStatus.PENDING.value, RequestStatus.IN_PROGRESS.value]
UNASSIGNED_UNIT = "Unassigned"


def _percent(part: int, total: int) -> int:
    return round(part * 100 / total) if total else 0


class StatsService:
    """Service for dashboard and report statistics"""

    def __init__(self):
        self.request_repo = RequestRepository()
        self.personnel_repo = PersonnelRepository()
        self.scopes = ScopeResolver()

    def counts(self, scope: Scope) -> RequestCounts:
        """Request totals by status plus personnel total"""
        query = ScopeResolver.request_query(scope)

        def by_status(status: RequestStatus) -> int:
            return self.request_repo.count_requests(query, {"status": status.value})

        return RequestCounts(
            total_requests=self.request_repo.count_requests(query),
            pending_requests=by_status(RequestStatus.PENDING),
            in_progress_requests=by_status(RequestStatus.IN_PROGRESS),
            done_requests=by_status(RequestStatus.DONE),
            rejected_requests=by_status(RequestStatus.REJECTED),
            total_personnel=self.personnel_repo.count_personnel(scope)
        )

    def activity_series(
        self,
        scope: Scope,
        range_days: int = 7,
        until: Optional[date] = None
    ) -> List[ActivityPoint]:
        """
        Requests created per day over a rolling window ending today

        Every day of the window is present (zero-filled), oldest first.
        """
        if range_days < 1:
            raise ValidationError("range_days must be at least 1", details={"field": "range_days"})

        days = trailing_days(range_days, until)
        docs = self.request_repo.list_created_between(
            ScopeResolver.request_query(scope), start_of_day(days[0]), end_of_day(days[-1])
        )
        per_day = Counter(doc["created_at"].date() for doc in docs)
        return [ActivityPoint(date=day, count=per_day.get(day, 0)) for day in days]

    def recent(self, scope: Scope, limit: int = 5) -> List[ResetRequest]:
        """Most recently created requests"""
        return self.request_repo.list_requests(ScopeResolver.request_query(scope), limit=limit)

    def dashboard(self, scope: Scope, range_days: int = 7) -> DashboardStats:
        """Counts plus urgent backlog, today's completions and activity"""
        query = ScopeResolver.request_query(scope)
        counts = self.counts(scope)

        urgent_open = self.request_repo.count_requests(query, {
            "priority": RequestPriority.URGENT.value,
            "status": {"$in": OPEN_STATUSES}
        })
        completed_today = self.request_repo.count_requests(query, {
            "status": RequestStatus.DONE.value,
            "resolution.resolved_at": {"$gte": start_of_day(utc_today())}
        })

        return DashboardStats(
            **counts.model_dump(),
            urgent_open=urgent_open,
            completed_today=completed_today,
            activity=self.activity_series(scope, range_days)
        )

    def admin_overview(self, actor: ActorContext) -> AdminOverview:
        """Global counts, 7-day activity and the 5 latest requests"""
        scope = self.scopes.require_global(actor)
        return AdminOverview(
            stats=self.counts(scope),
            activity=self.activity_series(scope, 7),
            latest_requests=self.recent(scope, 5)
        )

    def report_summary(
        self,
        actor: ActorContext,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> ReportSummary:
        """Per-unit and per-weekday breakdown over an inclusive date range"""
        scope = self.scopes.require_admin(actor)
        if date_from and date_to and date_from > date_to:
            raise ValidationError("date_from must not be after date_to", details={"field": "date_from"})

        lower, upper = day_range_bounds(date_from, date_to)
        docs = self.request_repo.list_created_between(ScopeResolver.request_query(scope), lower, upper)

        units: Dict[str, Dict[str, int]] = {}
        weekdays = Counter()
        finished = 0
        for doc in docs:
            unit = (doc.get("requester") or {}).get("unit_name") or UNASSIGNED_UNIT
            row = units.setdefault(unit, {"total": 0, "done": 0, "backlog": 0})
            row["total"] += 1
            if doc["status"] == RequestStatus.DONE.value:
                row["done"] += 1
                finished += 1
            else:
                row["backlog"] += 1
            weekdays[WEEKDAYS[doc["created_at"].weekday()]] += 1

        total = len(docs)
        by_unit = [
            UnitSummary(
                unit=name,
                total=row["total"],
                done=row["done"],
                backlog=row["backlog"],
                ratio=round(row["done"] * 100 / row["total"], 1)
            )
            for name, row in sorted(units.items())
        ]

        filters: Dict[str, Any] = {}
        if date_from:
            filters["date_from"] = date_from.isoformat()
        if date_to:
            filters["date_to"] = date_to.isoformat()

        return ReportSummary(
            total=total,
            finished=finished,
            unfinished=total - finished,
            finished_percent=_percent(finished, total),
            unfinished_percent=_percent(total - finished, total),
            by_unit=by_unit,
            by_weekday={day: weekdays.get(day, 0) for day in WEEKDAYS},
            filters=filters
        )
