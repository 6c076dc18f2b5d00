"""Personnel API Routes - Super admin personnel management"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from ..deps import get_current_user_dep, get_origin_dep
from ...domain.models import ActorContext, PersonnelCreate, PersonnelUpdate, PersonnelView
from ...domain.enums import PersonnelStatus
from ...services.personnel_service import PersonnelService

router = APIRouter()


@router.get("", response_model=List[PersonnelView])
def list_personnel(
    search: Optional[str] = Query(None, max_length=200),
    status_filter: Optional[PersonnelStatus] = Query(None, alias="status"),
    unit_id: Optional[str] = Query(None),
    actor: ActorContext = Depends(get_current_user_dep)
):
    """List personnel, ordered by name"""
    return PersonnelService().list_personnel(actor, search=search, status=status_filter, unit_id=unit_id)


@router.post("", response_model=PersonnelView, status_code=status.HTTP_201_CREATED)
def create_personnel(
    request: PersonnelCreate,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Register personnel; NRP and email must be unique (409 otherwise)"""
    return PersonnelService().create_personnel(actor, request, origin)


@router.get("/{personnel_id}", response_model=PersonnelView)
def get_personnel(
    personnel_id: str,
    actor: ActorContext = Depends(get_current_user_dep)
):
    return PersonnelService().get_personnel(actor, personnel_id)


@router.put("/{personnel_id}", response_model=PersonnelView)
def update_personnel(
    personnel_id: str,
    request: PersonnelUpdate,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    return PersonnelService().update_personnel(actor, personnel_id, request, origin)


@router.delete("/{personnel_id}", response_model=PersonnelView)
def delete_personnel(
    personnel_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    origin: str = Depends(get_origin_dep)
):
    """Deactivate personnel; the record is kept with status Inactive"""
    return PersonnelService().delete_personnel(actor, personnel_id, origin)
