"""Site Settings and Units API Routes"""
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from ..deps import get_current_user_dep, get_origin_dep
from ...domain.models import ActorContext, SiteSettings, Unit
from ...services.settings_service import SettingsService

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class SiteSettingsUpdate(BaseModel):
    """Partial update of site branding"""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    logo: Optional[str] = None
    login_title: Optional[str] = Field(None, max_length=200)
    login_subtitle: Optional[str] = Field(None, max_length=200)
    dark_mode: Optional[bool] = None


class CreateUnitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)


# ============================================================================
# Routes
# ============================================================================

@router.get("/settings", response_model=SiteSettings)
def get_site_settings():
    """Public branding used by the login page"""
    return SettingsService().get_site_settings()


@router.put("/settings", response_model=SiteSettings)
def update_site_settings(
    request: SiteSettingsUpdate,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    return SettingsService().update_site_settings(
        actor, request.model_dump(exclude_unset=True), origin
    )


@router.get("/units", response_model=List[Unit])
def list_units():
    """Units for the submission and personnel forms"""
    return SettingsService().list_units()


@router.post("/units", response_model=Unit, status_code=status.HTTP_201_CREATED)
def create_unit(
    request: CreateUnitRequest,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    return SettingsService().create_unit(actor, request.name, origin)
