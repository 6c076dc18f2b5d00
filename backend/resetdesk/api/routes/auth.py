"""Auth API Routes - Login, logout and own profile"""
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..deps import get_current_user_dep, get_origin_dep
from ...domain.models import ActorContext, LoginResult, PersonnelView, ProfileUpdate
from ...engine.authenticator import Authenticator
from ...services.personnel_service import PersonnelService
from ...utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class LoginRequest(BaseModel):
    """Login with an NRP or email plus password"""
    model_config = ConfigDict(extra="forbid")

    identifier: Optional[str] = Field(None, min_length=1, max_length=254)
    nrp: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[str] = Field(None, min_length=3, max_length=254)
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _has_identifier(self) -> "LoginRequest":
        if not (self.identifier or self.nrp or self.email):
            raise ValueError("identifier, nrp or email is required")
        return self

    @property
    def login_identifier(self) -> str:
        return self.identifier or self.nrp or self.email


class ChangePasswordRequest(BaseModel):
    """Change own password"""
    model_config = ConfigDict(extra="forbid")

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# Routes
# ============================================================================

@router.post("/login", response_model=LoginResult)
def login(
    request: LoginRequest,
    origin: str = Depends(get_origin_dep)
):
    """
    Authenticate with NRP or email

    Unknown identifier returns 404, wrong password 401, inactive account 403.
    """
    return Authenticator().login(request.login_identifier, request.password, origin)


@router.post("/logout", response_model=MessageResponse)
def logout(
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Record a logout (tokens are stateless and expire on their own)"""
    Authenticator().logout(actor, origin)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=PersonnelView)
def get_me(actor: ActorContext = Depends(get_current_user_dep)):
    """Current user's personnel record"""
    return PersonnelService().get_profile(actor)


@router.put("/me", response_model=PersonnelView)
def update_me(
    request: ProfileUpdate,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Edit own name, rank, position, email or phone"""
    return PersonnelService().update_profile(actor, request, origin)


@router.post("/me/password", response_model=MessageResponse)
def change_password(
    request: ChangePasswordRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    Authenticator().change_password(actor, request.current_password, request.new_password, origin)
    return MessageResponse(message="Password changed")
