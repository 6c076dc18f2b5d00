"""Tests for the reset request state machine"""

import pytest

from resetdesk.domain.models import RequesterSnapshot, ResetRequest
from resetdesk.domain.enums import RequestAction, RequestStatus
from resetdesk.domain.errors import InvalidTransitionError, RequestNotFoundError
from resetdesk.engine.lifecycle import RequestLifecycle
from resetdesk.repositories.request_repo import RequestRepository
from resetdesk.utils.time import utc_now


PENDING = RequestStatus.PENDING
IN_PROGRESS = RequestStatus.IN_PROGRESS
DONE = RequestStatus.DONE
REJECTED = RequestStatus.REJECTED


def test_allowed_transitions():
    assert RequestLifecycle.is_allowed(PENDING, RequestAction.START_PROCESSING)
    assert RequestLifecycle.is_allowed(PENDING, RequestAction.REJECT)
    assert RequestLifecycle.is_allowed(IN_PROGRESS, RequestAction.REJECT)
    assert RequestLifecycle.is_allowed(IN_PROGRESS, RequestAction.RESOLVE)


def test_resolve_requires_in_progress():
    assert not RequestLifecycle.is_allowed(PENDING, RequestAction.RESOLVE)


@pytest.mark.parametrize("terminal", [DONE, REJECTED])
@pytest.mark.parametrize("action", list(RequestAction))
def test_terminal_statuses_accept_nothing(terminal, action):
    with pytest.raises(InvalidTransitionError) as exc_info:
        RequestLifecycle.check(terminal, action)
    assert exc_info.value.http_status == 409
    assert exc_info.value.details["current_status"] == terminal.value


def test_check_reports_attempted_status():
    with pytest.raises(InvalidTransitionError) as exc_info:
        RequestLifecycle.check(IN_PROGRESS, RequestAction.START_PROCESSING)
    assert exc_info.value.details == {
        "current_status": "IN_PROGRESS",
        "attempted_status": "IN_PROGRESS",
        "action": "START_PROCESSING",
    }


def test_action_for_target():
    assert RequestLifecycle.action_for_target(PENDING, IN_PROGRESS) == RequestAction.START_PROCESSING
    assert RequestLifecycle.action_for_target(PENDING, REJECTED) == RequestAction.REJECT
    assert RequestLifecycle.action_for_target(IN_PROGRESS, DONE) == RequestAction.RESOLVE


def test_nothing_moves_back_to_pending():
    with pytest.raises(InvalidTransitionError):
        RequestLifecycle.action_for_target(IN_PROGRESS, PENDING)


# ============================================================================
# Persistence
# ============================================================================

def _store_request(unit_id="UNT-A", status=PENDING) -> ResetRequest:
    now = utc_now()
    return RequestRepository().create_request(ResetRequest(
        request_id=f"REQ-{unit_id}-{status.value}",
        requester=RequesterSnapshot(name="Budi Santoso", nrp="95120345", unit_name="POLRES MALANG"),
        unit_id=unit_id,
        reason="Forgot password",
        status=status,
        created_at=now,
        updated_at=now
    ))


def test_apply_moves_and_persists(db):
    request = _store_request()
    lifecycle = RequestLifecycle()

    updated = lifecycle.apply(request.request_id, RequestAction.START_PROCESSING)

    assert updated.status == IN_PROGRESS
    assert RequestRepository().get_request(request.request_id).status == IN_PROGRESS


def test_second_start_is_a_conflict(db):
    request = _store_request()
    lifecycle = RequestLifecycle()
    lifecycle.apply(request.request_id, RequestAction.START_PROCESSING)

    with pytest.raises(InvalidTransitionError):
        lifecycle.apply(request.request_id, RequestAction.START_PROCESSING)


def test_apply_outside_scope_is_not_found(db):
    request = _store_request(unit_id="UNT-A")

    with pytest.raises(RequestNotFoundError):
        RequestLifecycle().apply(request.request_id, RequestAction.REJECT, {"unit_id": "UNT-B"})

    assert RequestRepository().get_request(request.request_id).status == PENDING


def test_apply_unknown_request_is_not_found(db):
    with pytest.raises(RequestNotFoundError):
        RequestLifecycle().apply("REQ-missing", RequestAction.START_PROCESSING)


def test_concurrent_writer_is_detected(db, monkeypatch):
    request = _store_request()
    repo = RequestRepository()
    lifecycle = RequestLifecycle(repo)
    original = repo.transition_request

    def racing_transition(request_id, from_statuses, updates, scope_query=None):
        # Another admin starts the request first
        original(request_id, from_statuses, {"status": IN_PROGRESS.value}, scope_query)
        return original(request_id, from_statuses, updates, scope_query)

    monkeypatch.setattr(repo, "transition_request", racing_transition)

    with pytest.raises(InvalidTransitionError):
        lifecycle.apply(request.request_id, RequestAction.START_PROCESSING)

    assert repo.get_request(request.request_id).status == IN_PROGRESS
