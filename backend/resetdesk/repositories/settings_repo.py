"""Settings Repository - Site settings singleton"""
from typing import Any, Dict, Optional
from pymongo.collection import Collection

from .mongo_client import get_collection
from ..domain.models import SiteSettings
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)

SETTINGS_ID = "site"


class SettingsRepository:
    """Repository for the site settings document"""

    def __init__(self):
        self._settings: Collection = get_collection("site_settings")

    def get_settings(self) -> Optional[SiteSettings]:
        """Get stored site settings, None until first saved"""
        doc = self._settings.find_one({"settings_id": SETTINGS_ID})
        if doc:
            doc.pop("_id", None)
            doc.pop("settings_id", None)
            return SiteSettings.model_validate(doc)
        return None

    def save_settings(self, values: Dict[str, Any]) -> SiteSettings:
        """Upsert the site settings document"""
        values["updated_at"] = utc_now()
        result = self._settings.find_one_and_update(
            {"settings_id": SETTINGS_ID},
            {"$set": values},
            upsert=True,
            return_document=True
        )
        result.pop("_id", None)
        result.pop("settings_id", None)
        logger.info("Site settings saved")
        return SiteSettings.model_validate(result)
