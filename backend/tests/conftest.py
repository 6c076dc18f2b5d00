"""
Pytest Configuration and Fixtures

This file contains shared fixtures and configuration for all tests.
Every test runs against a fresh in-memory mongomock database.
"""

import pytest
import mongomock
from fastapi.testclient import TestClient
from datetime import datetime
from typing import Dict, Generator, Optional

from resetdesk.repositories import mongo_client
from resetdesk.repositories.personnel_repo import PersonnelRepository
from resetdesk.repositories.request_repo import RequestRepository
from resetdesk.repositories.unit_repo import UnitRepository
from resetdesk.domain.models import (
    ActorContext, Personnel, RequesterSnapshot, ResetRequest, Resolution, Unit
)
from resetdesk.domain.enums import PersonnelStatus, RequestPriority, RequestStatus, Role
from resetdesk.engine.authenticator import actor_from_personnel
from resetdesk.utils.jwt import get_token_service
from resetdesk.utils.idgen import generate_personnel_id, generate_request_id
from resetdesk.utils.passwords import hash_password
from resetdesk.utils.time import utc_now
from scripts.seed_data import seed_database

DEFAULT_PASSWORD = "password123"

SUPERADMIN_NRP = "11111111"
MALANG_ADMIN_NRP = "22222222"
SIDOARJO_ADMIN_NRP = "33333333"
USER_NRP = "44444444"
MALANG_MEMBER_NRP = "95120345"


@pytest.fixture
def db(monkeypatch) -> Generator[mongomock.Database, None, None]:
    """Provide an empty database wired into the repositories."""
    database = mongomock.MongoClient()["resetdesk_test"]
    monkeypatch.setattr(mongo_client, "_database", database)
    mongo_client.create_indexes()
    yield database


@pytest.fixture
def seeded(db) -> mongomock.Database:
    """Database with the default units and four accounts."""
    seed_database(DEFAULT_PASSWORD)
    return db


@pytest.fixture
def malang_member(seeded) -> Personnel:
    """A plain member of POLRES MALANG, as used by the public form."""
    unit = UnitRepository().get_unit_by_name("POLRES MALANG")
    now = utc_now()
    return PersonnelRepository().create_personnel(Personnel(
        personnel_id=generate_personnel_id(),
        nrp=MALANG_MEMBER_NRP,
        name="Budi Santoso",
        rank="BRIPTU",
        position="BANIT",
        email="budi.santoso@polri.go.id",
        unit_id=unit.unit_id,
        unit_name=unit.name,
        role=Role.USER,
        status=PersonnelStatus.ACTIVE,
        password_hash=hash_password(DEFAULT_PASSWORD),
        created_at=now,
        updated_at=now
    ))


def _actor(nrp: str) -> ActorContext:
    return actor_from_personnel(PersonnelRepository().get_by_nrp(nrp))


@pytest.fixture
def superadmin(seeded) -> ActorContext:
    return _actor(SUPERADMIN_NRP)


@pytest.fixture
def malang_admin(seeded) -> ActorContext:
    return _actor(MALANG_ADMIN_NRP)


@pytest.fixture
def sidoarjo_admin(seeded) -> ActorContext:
    return _actor(SIDOARJO_ADMIN_NRP)


@pytest.fixture
def plain_user(seeded) -> ActorContext:
    return _actor(USER_NRP)


@pytest.fixture
def client(seeded) -> TestClient:
    """HTTP client against the application (lifespan not started)."""
    from resetdesk.main import app
    return TestClient(app)


def auth_headers(nrp: str) -> Dict[str, str]:
    """Bearer header for a seeded account."""
    personnel = PersonnelRepository().get_by_nrp(nrp)
    token = get_token_service().issue(personnel)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def superadmin_headers(seeded) -> Dict[str, str]:
    return auth_headers(SUPERADMIN_NRP)


@pytest.fixture
def malang_headers(seeded) -> Dict[str, str]:
    return auth_headers(MALANG_ADMIN_NRP)


@pytest.fixture
def sidoarjo_headers(seeded) -> Dict[str, str]:
    return auth_headers(SIDOARJO_ADMIN_NRP)


@pytest.fixture
def user_headers(seeded) -> Dict[str, str]:
    return auth_headers(USER_NRP)


def store_request(
    created_at: datetime,
    unit: Optional[Unit] = None,
    unit_name: str = "",
    status: RequestStatus = RequestStatus.PENDING,
    priority: RequestPriority = RequestPriority.NORMAL,
    name: str = "Budi Santoso"
) -> ResetRequest:
    """Store a request directly with a fixed creation time."""
    resolution = None
    if status == RequestStatus.DONE:
        resolution = Resolution(resolved_by="Super Admin Polda", resolved_at=utc_now(), password="Str0ng!pass")
    return RequestRepository().create_request(ResetRequest(
        request_id=generate_request_id(),
        requester=RequesterSnapshot(name=name, nrp=MALANG_MEMBER_NRP, unit_name=unit_name),
        unit_id=unit.unit_id if unit else None,
        reason="Forgot password",
        priority=priority,
        status=status,
        created_at=created_at,
        updated_at=created_at,
        resolution=resolution
    ))
