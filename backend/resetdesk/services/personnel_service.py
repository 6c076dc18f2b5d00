"""Personnel Service - Personnel management and own-profile operations"""
from typing import Any, Dict, List, Optional

from ..domain.models import (
    ActorContext, Personnel, PersonnelCreate, PersonnelUpdate, PersonnelView, ProfileUpdate
)
from ..domain.enums import AuditCategory, PersonnelStatus, Role
from ..domain.errors import ValidationError
from ..engine.audit_writer import AuditWriter
from ..engine.scope_resolver import ScopeResolver
from ..repositories.personnel_repo import PersonnelRepository
from ..repositories.unit_repo import UnitRepository
from ..utils.idgen import generate_personnel_id
from ..utils.passwords import hash_password
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Fields an update may explicitly clear
NULLABLE_FIELDS = ("unit_id", "phone")


class PersonnelService:
    """Service for personnel operations"""

    def __init__(self):
        self.personnel_repo = PersonnelRepository()
        self.unit_repo = UnitRepository()
        self.scopes = ScopeResolver()
        self.audit = AuditWriter()

    # =========================================================================
    # Administration (global scope)
    # =========================================================================

    def list_personnel(
        self,
        actor: ActorContext,
        search: Optional[str] = None,
        status: Optional[PersonnelStatus] = None,
        unit_id: Optional[str] = None
    ) -> List[PersonnelView]:
        scope = self.scopes.require_global(actor)
        records = self.personnel_repo.list_personnel(scope, search=search, status=status, unit_id=unit_id)
        return [p.to_view() for p in records]

    def get_personnel(self, actor: ActorContext, personnel_id: str) -> PersonnelView:
        self.scopes.require_global(actor)
        return self.personnel_repo.get_personnel_or_raise(personnel_id).to_view()

    def create_personnel(
        self,
        actor: ActorContext,
        data: PersonnelCreate,
        origin: Optional[str] = None
    ) -> PersonnelView:
        """
        Register a new personnel record

        Raises:
            AlreadyExistsError: NRP or email already registered
            UnitNotFoundError: Unknown unit_id
            ValidationError: Unit admin without a unit
        """
        self.scopes.require_global(actor)

        unit_name = None
        if data.unit_id:
            unit_name = self.unit_repo.get_unit_or_raise(data.unit_id).name
        if data.role == Role.UNIT_ADMIN and not data.unit_id:
            raise ValidationError("A unit admin must be assigned to a unit", details={"field": "unit_id"})

        now = utc_now()
        personnel = Personnel(
            personnel_id=generate_personnel_id(),
            nrp=data.nrp.strip(),
            name=data.name.strip(),
            rank=data.rank,
            position=data.position,
            unit_id=data.unit_id,
            unit_name=unit_name,
            email=data.email,
            phone=data.phone,
            role=data.role,
            status=data.status,
            password_hash=hash_password(data.password),
            created_at=now,
            updated_at=now
        )
        self.personnel_repo.create_personnel(personnel)

        self.audit.record(
            actor, AuditCategory.UPDATE_DATA,
            f"Added personnel {personnel.name} ({personnel.nrp})", origin
        )
        return personnel.to_view()

    def update_personnel(
        self,
        actor: ActorContext,
        personnel_id: str,
        data: PersonnelUpdate,
        origin: Optional[str] = None
    ) -> PersonnelView:
        """Apply a partial update; a supplied password replaces the login hash"""
        self.scopes.require_global(actor)
        current = self.personnel_repo.get_personnel_or_raise(personnel_id)

        updates: Dict[str, Any] = {
            key: value for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if not updates:
            raise ValidationError("No changes supplied")

        password = updates.pop("password", None)
        if password:
            updates["password_hash"] = hash_password(password)

        if "unit_id" in updates:
            unit_id = updates["unit_id"]
            updates["unit_name"] = self.unit_repo.get_unit_or_raise(unit_id).name if unit_id else None

        role = updates.get("role", current.role)
        unit_id = updates.get("unit_id", current.unit_id)
        if role == Role.UNIT_ADMIN and not unit_id:
            raise ValidationError("A unit admin must be assigned to a unit", details={"field": "unit_id"})

        for key in ("role", "status"):
            if key in updates:
                updates[key] = updates[key].value
        for key in ("nrp", "name"):
            if key in updates:
                updates[key] = updates[key].strip()

        updated = self.personnel_repo.update_personnel(personnel_id, updates)
        self.audit.record(
            actor, AuditCategory.UPDATE_DATA,
            f"Updated personnel {updated.name} ({updated.nrp})", origin
        )
        return updated.to_view()

    def delete_personnel(
        self,
        actor: ActorContext,
        personnel_id: str,
        origin: Optional[str] = None
    ) -> PersonnelView:
        """Soft delete: the record stays, marked Inactive"""
        self.scopes.require_global(actor)
        if personnel_id == actor.personnel_id:
            raise ValidationError("You cannot deactivate your own account")

        updated = self.personnel_repo.deactivate_personnel(personnel_id)
        self.audit.record(
            actor, AuditCategory.DELETE_DATA,
            f"Deactivated personnel {updated.name} ({updated.nrp})", origin
        )
        return updated.to_view()

    # =========================================================================
    # Own profile
    # =========================================================================

    def get_profile(self, actor: ActorContext) -> PersonnelView:
        return self.personnel_repo.get_personnel_or_raise(actor.personnel_id).to_view()

    def update_profile(
        self,
        actor: ActorContext,
        data: ProfileUpdate,
        origin: Optional[str] = None
    ) -> PersonnelView:
        """Edit the caller's own descriptive fields"""
        updates = {
            key: value for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key == "phone"
        }
        if not updates:
            raise ValidationError("No changes supplied")

        updated = self.personnel_repo.update_personnel(actor.personnel_id, updates)
        self.audit.record(actor, AuditCategory.UPDATE_DATA, f"{actor.name} updated their profile", origin)
        return updated.to_view()
