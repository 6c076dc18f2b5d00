"""Repository modules - Data access layer"""
from .mongo_client import get_database, get_collection, create_indexes
from .unit_repo import UnitRepository
from .personnel_repo import PersonnelRepository
from .request_repo import RequestRepository
from .audit_repo import AuditRepository
from .settings_repo import SettingsRepository

__all__ = [
    "get_database",
    "get_collection",
    "create_indexes",
    "UnitRepository",
    "PersonnelRepository",
    "RequestRepository",
    "AuditRepository",
    "SettingsRepository",
]
