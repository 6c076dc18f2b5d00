"""Scope Resolver - Role-based data visibility and route guards"""
from typing import Any, Dict, Optional

from ..config.settings import settings
from ..domain.models import ActorContext, Scope
from ..domain.enums import ResolutionPolicy, Role, ScopeKind
from ..domain.errors import PermissionDeniedError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ScopeResolver:
    """
    Resolve what an identity may see and do

    Rules:
    - SUPERADMIN sees everything (GLOBAL)
    - UNIT_ADMIN sees requests and personnel of their own unit (UNIT)
    - USER sees only requests filed under their own NRP (SELF)
    - Personnel management, site settings and the audit log need GLOBAL
    - The DONE transition follows the configured resolution policy
    """

    def __init__(self, resolution_policy: Optional[str] = None):
        self._resolution_policy = ResolutionPolicy(resolution_policy or settings.resolution_policy)

    @property
    def resolution_policy(self) -> ResolutionPolicy:
        return self._resolution_policy

    def scope_for(self, actor: ActorContext) -> Scope:
        """Resolve the visibility scope of an identity"""
        if actor.role == Role.SUPERADMIN:
            return Scope(kind=ScopeKind.GLOBAL)

        if actor.role == Role.UNIT_ADMIN:
            if not actor.unit_id:
                logger.warning(
                    f"Unit admin {actor.nrp} has no unit assigned",
                    extra={"actor_nrp": actor.nrp}
                )
                raise PermissionDeniedError("Unit admin is not assigned to a unit")
            return Scope(kind=ScopeKind.UNIT, unit_id=actor.unit_id)

        return Scope(kind=ScopeKind.SELF, nrp=actor.nrp)

    # =========================================================================
    # Query preconditions
    # =========================================================================

    @staticmethod
    def request_query(scope: Scope) -> Dict[str, Any]:
        """Filter restricting reset requests to a scope"""
        if scope.is_global:
            return {}
        if scope.kind == ScopeKind.UNIT:
            return {"unit_id": scope.unit_id}
        return {"requester.nrp": scope.nrp}

    @staticmethod
    def personnel_query(scope: Scope) -> Dict[str, Any]:
        """Filter restricting personnel records to a scope"""
        if scope.is_global:
            return {}
        if scope.kind == ScopeKind.UNIT:
            return {"unit_id": scope.unit_id}
        return {"nrp": scope.nrp}

    # =========================================================================
    # Route guards
    # =========================================================================

    def require_global(self, actor: ActorContext) -> Scope:
        """Allow only identities with GLOBAL scope"""
        scope = self.scope_for(actor)
        if not scope.is_global:
            raise PermissionDeniedError(
                "This action requires the super admin role",
                details={"role": actor.role.value}
            )
        return scope

    def require_admin(self, actor: ActorContext) -> Scope:
        """Allow GLOBAL or UNIT scope (any administrator)"""
        scope = self.scope_for(actor)
        if scope.kind == ScopeKind.SELF:
            raise PermissionDeniedError(
                "This action requires an administrator role",
                details={"role": actor.role.value}
            )
        return scope

    def can_resolve(self, actor: ActorContext) -> bool:
        """Check whether an identity may complete a request with a new password"""
        if actor.role == Role.SUPERADMIN:
            return True
        if self._resolution_policy == ResolutionPolicy.ANY_ADMIN:
            return actor.role == Role.UNIT_ADMIN
        return False

    def require_resolver(self, actor: ActorContext) -> Scope:
        """Allow only identities holding the resolution privilege"""
        scope = self.require_admin(actor)
        if not self.can_resolve(actor):
            raise PermissionDeniedError(
                "Only the super admin may complete a reset request",
                details={"role": actor.role.value, "policy": self._resolution_policy.value}
            )
        return scope
