"""Tests for audit entry recording"""

from pymongo.errors import PyMongoError

from resetdesk.domain.models import ActorContext
from resetdesk.domain.enums import AuditCategory, Role
from resetdesk.engine.audit_writer import AuditWriter
from resetdesk.repositories.audit_repo import AuditRepository
from resetdesk.utils.logger import set_correlation_id


ACTOR = ActorContext(personnel_id="PRS-1", nrp="11111111", name="Super Admin Polda", role=Role.SUPERADMIN)


class FailingAuditRepository:
    def create_entry(self, entry):
        raise PyMongoError("disk full")


def test_record_stores_actor_snapshot(db):
    set_correlation_id("COR-test")
    entry = AuditWriter().record(ACTOR, AuditCategory.SYSTEM, "Seeded units", origin="10.0.0.1")

    assert entry.actor.name == "Super Admin Polda"
    assert entry.actor.role == "Super Admin"
    assert entry.actor.initials == "SAP"
    assert entry.origin == "10.0.0.1"
    assert entry.correlation_id == "COR-test"
    assert AuditRepository().count_entries(AuditCategory.SYSTEM.value) == 1


def test_missing_origin_is_unknown(db):
    entry = AuditWriter().record(ACTOR, AuditCategory.OTHER, "Something happened")
    assert entry.origin == "unknown"


def test_login_and_logout_categories(db):
    writer = AuditWriter()
    assert writer.record_login(ACTOR).category == AuditCategory.LOGIN
    assert writer.record_logout(ACTOR).category == AuditCategory.SYSTEM


def test_storage_failure_is_swallowed():
    writer = AuditWriter(repo=FailingAuditRepository())
    assert writer.record(ACTOR, AuditCategory.SYSTEM, "Lost entry") is None
