"""Domain Models - Pydantic schemas for all entities"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from .enums import (
    AuditCategory, PersonnelStatus, RequestPriority, RequestStatus, Role,
    ScopeKind, SubmissionChannel
)


def initials_of(name: str) -> str:
    """Initials from a full name, e.g. 'Super Admin Polda' -> 'SAP'"""
    return "".join(part[0] for part in name.split() if part).upper()


# ============================================================================
# Identity
# ============================================================================

class ActorContext(BaseModel):
    """Current actor context decoded from the bearer token"""
    model_config = ConfigDict(extra="forbid")

    personnel_id: str = Field(..., description="Personnel ID (token subject)")
    nrp: str = Field(..., description="Registration number")
    name: str = Field(..., description="Full name")
    role: Role = Field(..., description="Role at token issue time")
    email: Optional[str] = Field(None, description="Email at token issue time")
    unit_id: Optional[str] = Field(None, description="Unit reference, None for global admins")
    unit_name: Optional[str] = Field(None, description="Unit name at token issue time")

    @property
    def initials(self) -> str:
        return initials_of(self.name)


class Scope(BaseModel):
    """Data visibility scope resolved from an identity"""
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ScopeKind
    unit_id: Optional[str] = None
    nrp: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.kind == ScopeKind.GLOBAL


# ============================================================================
# Units & Personnel
# ============================================================================

class Unit(BaseModel):
    """Organizational subdivision (e.g. a regional office)"""
    unit_id: str = Field(..., description="Unique unit ID")
    name: str = Field(..., min_length=1, max_length=100, description="Unique unit name")


class PersonnelView(BaseModel):
    """Personnel record as exposed by the API (never carries the hash)"""
    personnel_id: str
    nrp: str
    name: str
    rank: str = ""
    position: str = ""
    unit_id: Optional[str] = None
    unit_name: Optional[str] = None
    email: EmailStr
    phone: Optional[str] = None
    role: Role = Role.USER
    status: PersonnelStatus = PersonnelStatus.ACTIVE
    created_at: datetime
    updated_at: Optional[datetime] = None


class Personnel(PersonnelView):
    """Stored personnel record with credential hash"""
    password_hash: str = Field(..., description="passlib hash of the login password")

    @model_validator(mode="after")
    def _unit_admin_has_unit(self) -> "Personnel":
        if self.role == Role.UNIT_ADMIN and not self.unit_id:
            raise ValueError("A unit admin must be assigned to a unit")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == PersonnelStatus.ACTIVE

    def to_view(self) -> PersonnelView:
        """Sanitized view without the password hash"""
        return PersonnelView.model_validate(self.model_dump(exclude={"password_hash"}))


class PersonnelCreate(BaseModel):
    """Input for creating a personnel record"""
    model_config = ConfigDict(extra="forbid")

    nrp: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    rank: str = ""
    position: str = ""
    phone: Optional[str] = None
    unit_id: Optional[str] = None
    role: Role = Role.USER
    status: PersonnelStatus = PersonnelStatus.ACTIVE


class PersonnelUpdate(BaseModel):
    """Partial update of a personnel record (admin)"""
    model_config = ConfigDict(extra="forbid")

    nrp: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    rank: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    unit_id: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[PersonnelStatus] = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own record"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    rank: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None


class LoginResult(BaseModel):
    """Successful login response"""
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    identity: PersonnelView


# ============================================================================
# Reset Requests
# ============================================================================

class RequesterSnapshot(BaseModel):
    """Requester identity captured at submission time"""
    name: str = Field(..., min_length=1, max_length=100)
    nrp: str = Field(..., min_length=1, max_length=20)
    rank: str = ""
    position: str = ""
    unit_name: str = ""


class Resolution(BaseModel):
    """Terminal artifact of a completed request"""
    resolved_by: str = Field(..., description="Name of the resolving admin")
    resolved_by_nrp: Optional[str] = None
    resolved_at: datetime
    password: str = Field(..., min_length=1, description="Newly issued password")


class ResetRequest(BaseModel):
    """Password reset request"""
    request_id: str
    personnel_id: Optional[str] = Field(None, description="Linked personnel, if registered")
    requester: RequesterSnapshot
    unit_id: Optional[str] = Field(None, description="Resolved unit used for scoping")
    contact: Optional[str] = None
    reason: str
    note: Optional[str] = None
    document: Optional[str] = Field(None, description="Opaque supporting document payload")
    priority: RequestPriority = RequestPriority.NORMAL
    status: RequestStatus = RequestStatus.PENDING
    channel: SubmissionChannel = SubmissionChannel.PUBLIC
    created_at: datetime
    updated_at: Optional[datetime] = None
    resolution: Optional[Resolution] = None

    @model_validator(mode="after")
    def _resolution_iff_done(self) -> "ResetRequest":
        if self.status == RequestStatus.DONE and self.resolution is None:
            raise ValueError("A DONE request must carry a resolution record")
        if self.status != RequestStatus.DONE and self.resolution is not None:
            raise ValueError("Only DONE requests carry a resolution record")
        return self


class RequestImportRow(BaseModel):
    """One requester row of a bulk import"""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=100)
    nrp: str = Field(..., min_length=1, max_length=20)
    rank: str = ""
    position: str = ""
    unit_name: str = ""
    contact: Optional[str] = None
    reason: Optional[str] = None
    priority: RequestPriority = RequestPriority.NORMAL


class RequestFilters(BaseModel):
    """Filters for listing reset requests"""
    search: Optional[str] = None
    status: Optional[RequestStatus] = None
    priority: Optional[RequestPriority] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


# ============================================================================
# Audit Log
# ============================================================================

class AuditActor(BaseModel):
    """Snapshot of the acting user"""
    name: str
    role: str
    initials: str
    nrp: Optional[str] = None


class AuditLogEntry(BaseModel):
    """Immutable record of a significant action"""
    log_id: str
    timestamp: datetime
    actor: AuditActor
    category: AuditCategory
    description: str
    origin: str = "unknown"
    correlation_id: Optional[str] = None


class AuditLogFilters(BaseModel):
    """Filters for querying the audit log"""
    search: Optional[str] = None
    category: Optional[AuditCategory] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = Field(default=500, ge=1, le=5000)


# ============================================================================
# Site Settings
# ============================================================================

class SiteSettings(BaseModel):
    """Global branding configuration singleton"""
    name: str
    logo: Optional[str] = None
    login_title: Optional[str] = None
    login_subtitle: Optional[str] = None
    dark_mode: bool = False
    updated_at: Optional[datetime] = None


# ============================================================================
# Statistics
# ============================================================================

class RequestCounts(BaseModel):
    """Scoped aggregate counts"""
    total_requests: int = 0
    pending_requests: int = 0
    in_progress_requests: int = 0
    done_requests: int = 0
    rejected_requests: int = 0
    total_personnel: int = 0


class ActivityPoint(BaseModel):
    """Requests created on one calendar day"""
    date: date
    count: int


class DashboardStats(RequestCounts):
    """Counts plus dashboard extras"""
    urgent_open: int = 0
    completed_today: int = 0
    activity: List[ActivityPoint] = Field(default_factory=list)


class AdminOverview(BaseModel):
    """Top-level admin dashboard payload"""
    stats: RequestCounts
    activity: List[ActivityPoint]
    latest_requests: List[ResetRequest]


class UnitSummary(BaseModel):
    """Per-unit report row"""
    unit: str
    total: int
    done: int
    backlog: int
    ratio: float = Field(0.0, description="Done share of total, in percent")


class ReportSummary(BaseModel):
    """Report breakdown over a date range"""
    total: int
    finished: int
    unfinished: int
    finished_percent: int
    unfinished_percent: int
    by_unit: List[UnitSummary]
    by_weekday: Dict[str, int]
    filters: Dict[str, Any] = Field(default_factory=dict)
