"""Service modules - Business logic layer"""
from .request_service import RequestService
from .personnel_service import PersonnelService
from .stats_service import StatsService
from .audit_service import AuditService
from .settings_service import SettingsService

__all__ = [
    "RequestService",
    "PersonnelService",
    "StatsService",
    "AuditService",
    "SettingsService",
]
