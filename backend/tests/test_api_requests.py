"""API tests for reset request submission and triage"""

import pytest
from datetime import datetime

from resetdesk.domain.enums import RequestPriority

from tests.conftest import MALANG_MEMBER_NRP, USER_NRP, store_request


def _submit(client, **payload):
    body = {"nrp": MALANG_MEMBER_NRP, "reason": "Forgot my password"}
    body.update(payload)
    response = client.post("/api/requests", json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def malang_request(client, malang_member):
    return _submit(client)


@pytest.fixture
def sidoarjo_request(client, superadmin_headers):
    response = client.post(
        "/api/requests/manual",
        json={"name": "Siti Aminah", "nrp": "96030111", "unit_name": "POLRES SIDOARJO"},
        headers=superadmin_headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def _ids(response):
    return [r["request_id"] for r in response.json()]


# ============================================================================
# Submission
# ============================================================================

def test_public_form_aliases(client, malang_member):
    response = client.post("/api/requests", json={
        "nrp": MALANG_MEMBER_NRP,
        "alasan": "Lupa password",
        "dokumen_kta": "data:image/png;base64,AAAA",
        "prioritas": "Urgent",
        "kontak_person": "081234567890",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["reason"] == "Lupa password"
    assert data["document"] == "data:image/png;base64,AAAA"
    assert data["priority"] == "Urgent"
    assert data["contact"] == "081234567890"
    assert data["status"] == "PENDING"
    assert data["channel"] == "PUBLIC"
    assert data["requester"]["unit_name"] == "POLRES MALANG"


def test_public_form_unregistered_nrp(client):
    response = client.post("/api/requests", json={"nrp": "99999999", "reason": "Forgot my password"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_REGISTERED"


def test_public_form_requires_nrp(client):
    response = client.post("/api/requests", json={"reason": "Forgot my password"})
    assert response.status_code == 400


def test_public_form_requires_reason(client, malang_member):
    response = client.post("/api/requests", json={"nrp": MALANG_MEMBER_NRP})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_authenticated_submission_is_filed_for_caller(client, user_headers):
    response = client.post("/api/requests", json={"reason": "Expired password"}, headers=user_headers)

    assert response.status_code == 201
    assert response.json()["requester"]["nrp"] == USER_NRP
    assert response.json()["channel"] == "IN_APP"


def test_import(client, superadmin_headers):
    response = client.post(
        "/api/requests/import",
        json={"rows": [
            {"name": "Rudi", "nrp": "97010101", "unit_name": "POLRES MALANG"},
            {"name": "Sari", "nrp": "97010102", "priority": "Important"},
        ]},
        headers=superadmin_headers
    )

    assert response.status_code == 201
    assert response.json() == {"requested": 2, "imported": 2}


# ============================================================================
# Scoped queries
# ============================================================================

def test_empty_store(client, superadmin_headers):
    assert client.get("/api/requests", headers=superadmin_headers).json() == []

    stats = client.get("/api/stats", headers=superadmin_headers).json()
    assert stats["total_requests"] == 0
    assert stats["pending_requests"] == 0


def test_unit_scoping(client, malang_request, sidoarjo_request, malang_headers, sidoarjo_headers, superadmin_headers):
    assert _ids(client.get("/api/requests", headers=malang_headers)) == [malang_request["request_id"]]
    assert _ids(client.get("/api/requests", headers=sidoarjo_headers)) == [sidoarjo_request["request_id"]]
    assert set(_ids(client.get("/api/requests", headers=superadmin_headers))) == {
        malang_request["request_id"], sidoarjo_request["request_id"]
    }


def test_out_of_scope_detail_is_404(client, malang_request, sidoarjo_headers, malang_headers):
    request_id = malang_request["request_id"]

    assert client.get(f"/api/requests/{request_id}", headers=malang_headers).status_code == 200
    assert client.get(f"/api/requests/{request_id}", headers=sidoarjo_headers).status_code == 404


def test_list_filters(client, malang_request, sidoarjo_request, superadmin_headers):
    response = client.get("/api/requests", params={"search": "siti"}, headers=superadmin_headers)
    assert _ids(response) == [sidoarjo_request["request_id"]]

    response = client.get("/api/requests", params={"status": "DONE"}, headers=superadmin_headers)
    assert response.json() == []


def test_list_date_range_priority_and_order(client, superadmin_headers):
    first = store_request(datetime(2024, 1, 1, 0, 0, 0), name="A")
    last = store_request(datetime(2024, 1, 31, 23, 59, 59, 999000), priority=RequestPriority.URGENT, name="B")
    after = store_request(datetime(2024, 2, 1, 0, 0, 0), name="C")
    before = store_request(datetime(2023, 12, 31, 23, 59, 59), name="D")

    january = client.get(
        "/api/requests", params={"date_from": "2024-01-01", "date_to": "2024-01-31"}, headers=superadmin_headers
    )
    assert january.status_code == 200
    assert [r["requester"]["name"] for r in january.json()] == ["B", "A"]

    urgent = client.get("/api/requests", params={"priority": "Urgent"}, headers=superadmin_headers)
    assert _ids(urgent) == [last.request_id]

    everything = client.get("/api/requests", headers=superadmin_headers)
    assert _ids(everything) == [after.request_id, last.request_id, first.request_id, before.request_id]


def test_invalid_status_filter(client, superadmin_headers):
    response = client.get("/api/requests", params={"status": "ARCHIVED"}, headers=superadmin_headers)
    assert response.status_code == 400


# ============================================================================
# Lifecycle
# ============================================================================

def test_double_start_returns_409(client, malang_request, malang_headers):
    url = f"/api/requests/{malang_request['request_id']}"

    first = client.patch(url, json={"status": "IN_PROGRESS"}, headers=malang_headers)
    assert first.status_code == 200
    assert first.json()["status"] == "IN_PROGRESS"

    second = client.patch(url, json={"status": "IN_PROGRESS"}, headers=malang_headers)
    assert second.status_code == 409
    assert second.json()["error"]["details"]["current_status"] == "IN_PROGRESS"


def test_weak_password_confirmation_flow(client, malang_request, superadmin_headers):
    url = f"/api/requests/{malang_request['request_id']}"
    client.patch(url, json={"status": "IN_PROGRESS"}, headers=superadmin_headers)

    weak = client.patch(url, json={"status": "DONE", "password": "abc"}, headers=superadmin_headers)
    assert weak.status_code == 422
    assert weak.json()["error"]["code"] == "WEAK_PASSWORD_CONFIRMATION_REQUIRED"
    assert weak.json()["error"]["details"]["requires_confirmation"] is True

    confirmed = client.patch(
        url, json={"status": "DONE", "password": "abc", "confirm_weak": True}, headers=superadmin_headers
    )
    assert confirmed.status_code == 200
    data = confirmed.json()
    assert data["status"] == "DONE"
    assert data["resolution"]["password"] == "abc"
    assert data["resolution"]["resolved_by"] == "Super Admin Polda"


def test_reject_done_request_returns_409(client, malang_request, superadmin_headers):
    url = f"/api/requests/{malang_request['request_id']}"
    client.patch(url, json={"status": "IN_PROGRESS"}, headers=superadmin_headers)
    done = client.patch(url, json={"status": "DONE", "password": "Str0ng!pass"}, headers=superadmin_headers)

    response = client.patch(url, json={"status": "REJECTED"}, headers=superadmin_headers)
    assert response.status_code == 409

    latest = client.get(url, headers=superadmin_headers).json()
    assert latest["status"] == "DONE"
    assert latest["resolution"] == done.json()["resolution"]


def test_resolve_pending_request_returns_409(client, malang_request, superadmin_headers):
    url = f"/api/requests/{malang_request['request_id']}"

    response = client.patch(url, json={"status": "DONE", "password": "Str0ng!pass"}, headers=superadmin_headers)
    assert response.status_code == 409

    latest = client.get(url, headers=superadmin_headers).json()
    assert latest["status"] == "PENDING"
    assert latest["resolution"] is None


def test_unit_admin_cannot_resolve(client, malang_request, malang_headers):
    url = f"/api/requests/{malang_request['request_id']}"
    client.patch(url, json={"status": "IN_PROGRESS"}, headers=malang_headers)

    response = client.patch(url, json={"status": "DONE", "password": "Str0ng!pass"}, headers=malang_headers)
    assert response.status_code == 403


def test_plain_user_cannot_change_status(client, malang_request, user_headers):
    url = f"/api/requests/{malang_request['request_id']}"
    response = client.patch(url, json={"status": "IN_PROGRESS"}, headers=user_headers)
    assert response.status_code == 403


def test_update_details(client, malang_request, malang_headers):
    url = f"/api/requests/{malang_request['request_id']}"
    response = client.put(url, json={"note": "Verified by phone", "priority": "Important"}, headers=malang_headers)

    assert response.status_code == 200
    assert response.json()["note"] == "Verified by phone"
    assert response.json()["priority"] == "Important"


def test_password_strength(client, superadmin_headers):
    response = client.post(
        "/api/requests/password-strength", json={"password": "Abcdefg1!"}, headers=superadmin_headers
    )

    assert response.status_code == 200
    assert response.json()["strong"] is True
    assert response.json()["score"] == 100


# ============================================================================
# Bulk
# ============================================================================

def test_bulk_process_and_delete(client, malang_request, sidoarjo_request, malang_headers, superadmin_headers):
    ids = [malang_request["request_id"], sidoarjo_request["request_id"]]

    processed = client.post("/api/requests/bulk/process", json={"ids": ids}, headers=malang_headers)
    assert processed.json() == {"requested": 2, "affected": 1}

    deleted = client.post("/api/requests/bulk/delete", json={"ids": ids}, headers=malang_headers)
    assert deleted.json() == {"requested": 2, "affected": 1}

    remaining = client.get("/api/requests", headers=superadmin_headers)
    assert _ids(remaining) == [sidoarjo_request["request_id"]]


def test_bulk_requires_ids(client, superadmin_headers):
    response = client.post("/api/requests/bulk/process", json={"ids": []}, headers=superadmin_headers)
    assert response.status_code == 400
