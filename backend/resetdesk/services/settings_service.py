"""Settings Service - Site branding and unit catalogue"""
from typing import Any, Dict, List, Optional

from ..config.settings import settings
from ..domain.models import ActorContext, SiteSettings, Unit
from ..domain.enums import AuditCategory
from ..domain.errors import ValidationError
from ..engine.audit_writer import AuditWriter
from ..engine.scope_resolver import ScopeResolver
from ..repositories.settings_repo import SettingsRepository
from ..repositories.unit_repo import UnitRepository
from ..utils.idgen import generate_unit_id
from ..utils.logger import get_logger

logger = get_logger(__name__)


def default_site_settings() -> SiteSettings:
    """Site settings from configuration, used until an admin saves their own"""
    return SiteSettings(
        name=settings.site_name,
        logo=settings.site_logo,
        login_title=settings.login_title,
        login_subtitle=settings.login_subtitle,
        dark_mode=False
    )


class SettingsService:
    """Service for site settings and units"""

    def __init__(self):
        self.settings_repo = SettingsRepository()
        self.unit_repo = UnitRepository()
        self.scopes = ScopeResolver()
        self.audit = AuditWriter()

    # =========================================================================
    # Site settings
    # =========================================================================

    def get_site_settings(self) -> SiteSettings:
        return self.settings_repo.get_settings() or default_site_settings()

    def update_site_settings(
        self,
        actor: ActorContext,
        changes: Dict[str, Any],
        origin: Optional[str] = None
    ) -> SiteSettings:
        """Merge changes over the current settings and persist them"""
        self.scopes.require_global(actor)
        if not changes:
            raise ValidationError("No changes supplied")
        required = sorted(key for key in ("name", "dark_mode") if key in changes and changes[key] is None)
        if required:
            raise ValidationError("These settings cannot be cleared", details={"fields": required})

        merged = self.get_site_settings().model_dump(exclude={"updated_at"})
        merged.update(changes)
        saved = self.settings_repo.save_settings(SiteSettings.model_validate(merged).model_dump(exclude={"updated_at"}))

        self.audit.record(
            actor, AuditCategory.SETTINGS,
            f"Updated site settings: {', '.join(sorted(changes))}", origin
        )
        return saved

    # =========================================================================
    # Units
    # =========================================================================

    def list_units(self) -> List[Unit]:
        return self.unit_repo.list_units()

    def create_unit(self, actor: ActorContext, name: str, origin: Optional[str] = None) -> Unit:
        self.scopes.require_global(actor)
        if not name or not name.strip():
            raise ValidationError("Unit name is required", details={"field": "name"})

        unit = self.unit_repo.create_unit(Unit(unit_id=generate_unit_id(), name=name.strip()))
        self.audit.record(actor, AuditCategory.SYSTEM, f"Added unit {unit.name}", origin)
        return unit
