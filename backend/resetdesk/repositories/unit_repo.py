"""Unit Repository - Data access for organizational units"""
import re
from typing import List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection
from ..domain.models import Unit
from ..domain.errors import AlreadyExistsError, UnitNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class UnitRepository:
    """Repository for unit operations"""

    def __init__(self):
        self._units: Collection = get_collection("units")

    def create_unit(self, unit: Unit) -> Unit:
        """Create a unit; names are unique (case-insensitive)"""
        if self.get_unit_by_name(unit.name):
            raise AlreadyExistsError(f"Unit '{unit.name}' already exists", details={"field": "name"})

        doc = unit.model_dump()
        doc["_id"] = unit.unit_id
        try:
            self._units.insert_one(doc)
        except DuplicateKeyError:
            raise AlreadyExistsError(f"Unit '{unit.name}' already exists", details={"field": "name"})

        logger.info(f"Created unit: {unit.name}", extra={"unit_id": unit.unit_id})
        return unit

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        """Get unit by ID"""
        doc = self._units.find_one({"unit_id": unit_id})
        if doc:
            doc.pop("_id", None)
            return Unit.model_validate(doc)
        return None

    def get_unit_or_raise(self, unit_id: str) -> Unit:
        """Get unit by ID or raise error"""
        unit = self.get_unit(unit_id)
        if not unit:
            raise UnitNotFoundError(f"Unit {unit_id} not found")
        return unit

    def get_unit_by_name(self, name: str) -> Optional[Unit]:
        """Get unit by exact name (case-insensitive)"""
        doc = self._units.find_one(
            {"name": {"$regex": f"^{re.escape(name.strip())}$", "$options": "i"}}
        )
        if doc:
            doc.pop("_id", None)
            return Unit.model_validate(doc)
        return None

    def list_units(self) -> List[Unit]:
        """List all units ordered by name"""
        units = []
        for doc in self._units.find({}).sort("name", ASCENDING):
            doc.pop("_id", None)
            units.append(Unit.model_validate(doc))
        return units

    def count_units(self) -> int:
        return self._units.count_documents({})
