"""Reset Request API Routes - Submission, triage and resolution"""
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..deps import get_current_user_dep, get_optional_user_dep, get_origin_dep, get_scope_dep
from ...domain.models import (
    ActorContext, RequesterSnapshot, RequestFilters, RequestImportRow, ResetRequest, Scope
)
from ...domain.enums import RequestPriority, RequestStatus
from ...domain.errors import ValidationError
from ...services.request_service import RequestService
from ...utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class SubmitRequest(BaseModel):
    """Public or in-app reset request submission"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    nrp: Optional[str] = Field(None, min_length=1, max_length=20)
    reason: str = Field(
        ..., min_length=1, max_length=2000,
        validation_alias=AliasChoices("reason", "alasan")
    )
    document: Optional[str] = Field(
        None, validation_alias=AliasChoices("document", "dokumen_kta")
    )
    priority: RequestPriority = Field(
        RequestPriority.NORMAL, validation_alias=AliasChoices("priority", "prioritas")
    )
    contact: Optional[str] = Field(
        None, max_length=100, validation_alias=AliasChoices("contact", "kontak_person")
    )
    # Requester details, used only when unregistered submissions are allowed
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    rank: str = ""
    position: str = ""
    unit_name: str = ""


class ManualEntryRequest(BaseModel):
    """Admin manual entry on behalf of a requester"""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    nrp: str = Field(..., min_length=1, max_length=20)
    rank: str = ""
    position: str = ""
    unit_name: str = ""
    unit_id: Optional[str] = None
    note: Optional[str] = Field(None, max_length=2000)
    priority: RequestPriority = RequestPriority.NORMAL
    contact: Optional[str] = Field(None, max_length=100)


class ImportRequest(BaseModel):
    """Bulk import of requester rows"""
    model_config = ConfigDict(extra="forbid")

    rows: List[RequestImportRow] = Field(..., min_length=1)


class BulkRequest(BaseModel):
    """Ids for a bulk action"""
    model_config = ConfigDict(extra="forbid")

    ids: List[str] = Field(..., min_length=1)


class BulkResponse(BaseModel):
    requested: int
    affected: int


class ImportResponse(BaseModel):
    requested: int
    imported: int


class StatusChangeRequest(BaseModel):
    """Move a request to a new status"""
    model_config = ConfigDict(extra="forbid")

    status: RequestStatus
    password: Optional[str] = None
    confirm_weak: bool = False


class RequestUpdate(BaseModel):
    """Edit non-lifecycle fields"""
    model_config = ConfigDict(extra="forbid")

    note: Optional[str] = Field(None, max_length=2000)
    priority: Optional[RequestPriority] = None
    contact: Optional[str] = Field(None, max_length=100)


class PasswordStrengthRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: str


# ============================================================================
# Submission
# ============================================================================

@router.post("", response_model=ResetRequest, status_code=status.HTTP_201_CREATED)
def submit_request(
    request: SubmitRequest,
    actor: Optional[ActorContext] = Depends(get_optional_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """
    Submit a password reset request

    With a bearer token the request is filed for the caller. Without one
    the NRP must belong to registered personnel.
    """
    service = RequestService()

    if actor is not None:
        return service.submit_for_actor(
            actor,
            reason=request.reason,
            document=request.document,
            priority=request.priority,
            contact=request.contact,
            origin=origin
        )

    if not request.nrp:
        raise ValidationError("NRP is required", details={"field": "nrp"})

    requester = None
    if request.name:
        requester = RequesterSnapshot(
            name=request.name,
            nrp=request.nrp,
            rank=request.rank,
            position=request.position,
            unit_name=request.unit_name
        )

    created = service.submit_public(
        nrp=request.nrp,
        reason=request.reason,
        document=request.document,
        priority=request.priority,
        contact=request.contact,
        requester=requester
    )
    logger.info(
        f"Public reset request submitted: {created.request_id}",
        extra={"request_id": created.request_id, "unit_id": created.unit_id}
    )
    return created


@router.post("/manual", response_model=ResetRequest, status_code=status.HTTP_201_CREATED)
def create_manual_entry(
    request: ManualEntryRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Admin manual entry; unit admins always file into their own unit"""
    return RequestService().create_manual(
        actor,
        requester=RequesterSnapshot(
            name=request.name,
            nrp=request.nrp,
            rank=request.rank,
            position=request.position,
            unit_name=request.unit_name
        ),
        note=request.note,
        priority=request.priority,
        contact=request.contact,
        unit_id=request.unit_id,
        origin=origin
    )


@router.post("/import", response_model=ImportResponse, status_code=status.HTTP_201_CREATED)
def import_requests(
    request: ImportRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Create one PENDING request per row"""
    return RequestService().import_requests(actor, request.rows, origin)


@router.post("/password-strength")
def password_strength(
    request: PasswordStrengthRequest,
    actor: ActorContext = Depends(get_current_user_dep)
) -> Dict[str, Any]:
    """Strength meter for a candidate password (advisory)"""
    return RequestService().password_strength(actor, request.password)


# ============================================================================
# Bulk actions
# ============================================================================

@router.post("/bulk/process", response_model=BulkResponse)
def bulk_process(
    request: BulkRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Start processing all eligible PENDING requests; others are skipped"""
    return RequestService().bulk_process(actor, request.ids, origin)


@router.post("/bulk/delete", response_model=BulkResponse)
def bulk_delete(
    request: BulkRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Delete all in-scope requests; others are skipped"""
    return RequestService().bulk_delete(actor, request.ids, origin)


# ============================================================================
# Queries
# ============================================================================

@router.get("", response_model=List[ResetRequest])
def list_requests(
    search: Optional[str] = Query(None, max_length=200),
    status: Optional[RequestStatus] = Query(None),
    priority: Optional[RequestPriority] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    scope: Scope = Depends(get_scope_dep)
):
    """
    List requests visible to the caller, newest first

    Super admins see every request, unit admins their unit's, and
    personnel their own.
    """
    filters = RequestFilters(
        search=search,
        status=status,
        priority=priority,
        date_from=date_from,
        date_to=date_to
    )
    return RequestService().list_for_scope(scope, filters)


@router.get("/{request_id}", response_model=ResetRequest)
def get_request(
    request_id: str,
    scope: Scope = Depends(get_scope_dep)
):
    return RequestService().get_for_scope(scope, request_id)


# ============================================================================
# Lifecycle
# ============================================================================

@router.patch("/{request_id}", response_model=ResetRequest)
def change_status(
    request_id: str,
    request: StatusChangeRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """
    Transition a request

    IN_PROGRESS starts processing, REJECTED rejects, DONE completes with
    ``password``. A weak password returns 422 until ``confirm_weak`` is set.
    """
    return RequestService().change_status(
        actor,
        request_id,
        request.status,
        password=request.password,
        confirm_weak=request.confirm_weak,
        origin=origin
    )


@router.put("/{request_id}", response_model=ResetRequest)
def update_request(
    request_id: str,
    request: RequestUpdate,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Edit note, priority or contact"""
    return RequestService().update_details(
        actor,
        request_id,
        note=request.note,
        priority=request.priority,
        contact=request.contact,
        origin=origin
    )
