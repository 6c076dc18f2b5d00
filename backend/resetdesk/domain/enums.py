"""Domain Enumerations - All status and type definitions"""
from enum import Enum


class Role(str, Enum):
    """Personnel roles"""
    SUPERADMIN = "SUPERADMIN"    # Top-level admin, global scope
    UNIT_ADMIN = "UNIT_ADMIN"    # Admin of a single unit
    USER = "USER"                # Plain personnel, own requests only

    @property
    def label(self) -> str:
        """Human readable role label (used in audit entries)"""
        return {
            Role.SUPERADMIN: "Super Admin",
            Role.UNIT_ADMIN: "Unit Admin",
            Role.USER: "Personnel",
        }[self]


class PersonnelStatus(str, Enum):
    """Account status"""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class RequestStatus(str, Enum):
    """Reset request lifecycle status"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    REJECTED = "REJECTED"    # Terminal
    DONE = "DONE"            # Terminal, carries a resolution record


class RequestPriority(str, Enum):
    """Reset request priority"""
    NORMAL = "Normal"
    IMPORTANT = "Important"
    URGENT = "Urgent"


class RequestAction(str, Enum):
    """Lifecycle actions applied to an existing request"""
    START_PROCESSING = "START_PROCESSING"
    REJECT = "REJECT"
    RESOLVE = "RESOLVE"


class SubmissionChannel(str, Enum):
    """How a request entered the system"""
    PUBLIC = "PUBLIC"    # Self-service public form
    IN_APP = "IN_APP"    # Authenticated personnel submission
    MANUAL = "MANUAL"    # Manual admin entry
    IMPORT = "IMPORT"    # Admin bulk import


class AuditCategory(str, Enum):
    """Activity categories for audit log entries"""
    LOGIN = "Login"
    RESET_PASSWORD = "Reset-Password"
    SYSTEM = "System"
    UPDATE_DATA = "Update-Data"
    DELETE_DATA = "Delete-Data"
    SETTINGS = "Settings"
    OTHER = "Other"


class ScopeKind(str, Enum):
    """Visibility scope of an authenticated identity"""
    GLOBAL = "GLOBAL"
    UNIT = "UNIT"
    SELF = "SELF"


class ResolutionPolicy(str, Enum):
    """Who may perform the final DONE transition"""
    SUPERADMIN_ONLY = "SUPERADMIN_ONLY"
    ANY_ADMIN = "ANY_ADMIN"


class LoginIdentifier(str, Enum):
    """Which personnel field the login identifier is matched against"""
    NRP = "nrp"
    EMAIL = "email"
    ANY = "any"
