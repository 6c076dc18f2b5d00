"""Tests for dashboard counts, activity series and reports"""

import pytest
from datetime import date, datetime, timedelta

from resetdesk.domain.enums import RequestPriority, RequestStatus
from resetdesk.domain.errors import PermissionDeniedError, ValidationError
from resetdesk.engine.scope_resolver import ScopeResolver
from resetdesk.repositories.unit_repo import UnitRepository
from resetdesk.services.stats_service import StatsService
from resetdesk.utils.time import start_of_day, utc_now, utc_today

from tests.conftest import store_request


@pytest.fixture
def stats(seeded) -> StatsService:
    return StatsService()


@pytest.fixture
def units(seeded):
    repo = UnitRepository()
    return {
        "malang": repo.get_unit_by_name("POLRES MALANG"),
        "sidoarjo": repo.get_unit_by_name("POLRES SIDOARJO"),
    }


def _scope(actor):
    return ScopeResolver().scope_for(actor)


def test_counts_on_empty_store(stats, superadmin):
    counts = stats.counts(_scope(superadmin))

    assert counts.total_requests == 0
    assert counts.pending_requests == 0
    assert counts.in_progress_requests == 0
    assert counts.done_requests == 0
    assert counts.rejected_requests == 0
    assert counts.total_personnel == 4


def test_counts_are_scoped(stats, units, superadmin, malang_admin):
    now = utc_now()
    store_request(now, units["malang"], "POLRES MALANG")
    store_request(now, units["malang"], "POLRES MALANG", status=RequestStatus.DONE)
    store_request(now, units["sidoarjo"], "POLRES SIDOARJO", status=RequestStatus.REJECTED)

    everything = stats.counts(_scope(superadmin))
    assert everything.total_requests == 3
    assert everything.done_requests == 1
    assert everything.rejected_requests == 1

    malang = stats.counts(_scope(malang_admin))
    assert malang.total_requests == 2
    assert malang.pending_requests == 1
    assert malang.rejected_requests == 0
    # Malang admin and the testing account
    assert malang.total_personnel == 2


def test_activity_is_zero_filled_and_ascending(stats, units, superadmin):
    today = utc_today()
    store_request(start_of_day(today), units["malang"])
    store_request(start_of_day(today), units["malang"])
    store_request(start_of_day(today - timedelta(days=2)) + timedelta(hours=9), units["malang"])
    store_request(start_of_day(today - timedelta(days=10)), units["malang"])

    series = stats.activity_series(_scope(superadmin), 7)

    assert len(series) == 7
    assert [p.date for p in series] == [today - timedelta(days=6 - i) for i in range(7)]
    assert series[-1].count == 2
    assert series[-3].count == 1
    assert sum(p.count for p in series) == 3


def test_activity_window_must_be_positive(stats, superadmin):
    with pytest.raises(ValidationError):
        stats.activity_series(_scope(superadmin), 0)


def test_dashboard_counts_urgent_backlog(stats, units, superadmin):
    now = utc_now()
    store_request(now, units["malang"], priority=RequestPriority.URGENT)
    store_request(now, units["malang"], priority=RequestPriority.URGENT, status=RequestStatus.DONE)
    store_request(now, units["malang"], priority=RequestPriority.NORMAL)

    dashboard = stats.dashboard(_scope(superadmin))

    assert dashboard.total_requests == 3
    assert dashboard.urgent_open == 1
    assert dashboard.completed_today == 1
    assert len(dashboard.activity) == 7


def test_admin_overview_requires_global_scope(stats, malang_admin):
    with pytest.raises(PermissionDeniedError):
        stats.admin_overview(malang_admin)


def test_admin_overview_latest_requests(stats, units, superadmin):
    now = utc_now()
    for minutes in range(7):
        store_request(now - timedelta(minutes=minutes), units["malang"])

    overview = stats.admin_overview(superadmin)

    assert overview.stats.total_requests == 7
    assert len(overview.latest_requests) == 5
    created = [r.created_at for r in overview.latest_requests]
    assert created == sorted(created, reverse=True)


def test_report_summary(stats, units, superadmin):
    monday = datetime(2024, 1, 1, 8, 0)
    wednesday = datetime(2024, 1, 3, 10, 0)
    store_request(monday, units["malang"], "POLRES MALANG", status=RequestStatus.DONE)
    store_request(monday, units["malang"], "POLRES MALANG", status=RequestStatus.IN_PROGRESS)
    store_request(wednesday, units["sidoarjo"], "POLRES SIDOARJO", status=RequestStatus.REJECTED)
    store_request(datetime(2024, 2, 1), units["sidoarjo"], "POLRES SIDOARJO")

    report = stats.report_summary(superadmin, date(2024, 1, 1), date(2024, 1, 31))

    assert report.total == 3
    assert report.finished == 1
    assert report.unfinished == 2
    assert report.finished_percent == 33
    assert report.unfinished_percent == 67
    assert report.by_weekday["Mon"] == 2
    assert report.by_weekday["Wed"] == 1
    assert report.by_weekday["Sun"] == 0
    assert report.filters == {"date_from": "2024-01-01", "date_to": "2024-01-31"}

    malang, sidoarjo = report.by_unit
    assert (malang.unit, malang.total, malang.done, malang.backlog, malang.ratio) == ("POLRES MALANG", 2, 1, 1, 50.0)
    assert (sidoarjo.unit, sidoarjo.total, sidoarjo.done, sidoarjo.backlog) == ("POLRES SIDOARJO", 1, 0, 1)


def test_report_is_scoped_for_unit_admin(stats, units, malang_admin):
    store_request(utc_now(), units["malang"], "POLRES MALANG")
    store_request(utc_now(), units["sidoarjo"], "POLRES SIDOARJO")

    report = stats.report_summary(malang_admin)

    assert report.total == 1
    assert [u.unit for u in report.by_unit] == ["POLRES MALANG"]


def test_empty_report_has_zero_percentages(stats, superadmin):
    report = stats.report_summary(superadmin)
    assert report.total == 0
    assert report.finished_percent == 0
    assert report.unfinished_percent == 0
    assert report.by_unit == []


def test_report_rejects_inverted_range(stats, superadmin):
    with pytest.raises(ValidationError):
        stats.report_summary(superadmin, date(2024, 2, 1), date(2024, 1, 1))


def test_report_requires_admin(stats, plain_user):
    with pytest.raises(PermissionDeniedError):
        stats.report_summary(plain_user)
