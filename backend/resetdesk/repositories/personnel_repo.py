"""Personnel Repository - Data access for personnel records"""
import re
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection
from ..domain.models import Personnel, Scope
from ..domain.enums import PersonnelStatus, ScopeKind
from ..domain.errors import AlreadyExistsError, PersonnelNotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


def _exact_ci(value: str) -> Dict[str, Any]:
    """Case-insensitive exact match"""
    return {"$regex": f"^{re.escape(value.strip())}$", "$options": "i"}


class PersonnelRepository:
    """Repository for personnel operations"""

    def __init__(self):
        self._personnel: Collection = get_collection("personnel")

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_personnel(self, personnel_id: str) -> Optional[Personnel]:
        """Get personnel by ID"""
        return self._find_one({"personnel_id": personnel_id})

    def get_personnel_or_raise(self, personnel_id: str) -> Personnel:
        """Get personnel by ID or raise error"""
        personnel = self.get_personnel(personnel_id)
        if not personnel:
            raise PersonnelNotFoundError(f"Personnel {personnel_id} not found")
        return personnel

    def get_by_nrp(self, nrp: str) -> Optional[Personnel]:
        """Get personnel by registration number"""
        return self._find_one({"nrp": nrp.strip()})

    def get_by_email(self, email: str) -> Optional[Personnel]:
        """Get personnel by email (case-insensitive)"""
        return self._find_one({"email": _exact_ci(email)})

    def _find_one(self, query: Dict[str, Any]) -> Optional[Personnel]:
        doc = self._personnel.find_one(query)
        if doc:
            doc.pop("_id", None)
            return Personnel.model_validate(doc)
        return None

    # =========================================================================
    # Writes
    # =========================================================================

    def create_personnel(self, personnel: Personnel) -> Personnel:
        """Create a personnel record; NRP and email must be unique"""
        self._ensure_unique(personnel.nrp, personnel.email)

        doc = personnel.model_dump()
        doc["_id"] = personnel.personnel_id
        try:
            self._personnel.insert_one(doc)
        except DuplicateKeyError as e:
            raise AlreadyExistsError(
                "NRP or email is already registered",
                details={"key": str(e.details.get("keyValue")) if e.details else None}
            )

        logger.info(
            f"Created personnel: {personnel.nrp}",
            extra={"personnel_id": personnel.personnel_id, "unit_id": personnel.unit_id}
        )
        return personnel

    def update_personnel(self, personnel_id: str, updates: Dict[str, Any]) -> Personnel:
        """Update personnel fields; uniqueness of NRP and email is re-checked"""
        current = self.get_personnel_or_raise(personnel_id)

        if "nrp" in updates or "email" in updates:
            self._ensure_unique(
                updates.get("nrp", current.nrp),
                updates.get("email", current.email),
                exclude_id=personnel_id
            )

        updates["updated_at"] = utc_now()
        try:
            result = self._personnel.find_one_and_update(
                {"personnel_id": personnel_id},
                {"$set": updates},
                return_document=True
            )
        except DuplicateKeyError:
            raise AlreadyExistsError("NRP or email is already registered")

        if not result:
            raise PersonnelNotFoundError(f"Personnel {personnel_id} not found")

        result.pop("_id", None)
        return Personnel.model_validate(result)

    def deactivate_personnel(self, personnel_id: str) -> Personnel:
        """Soft delete: mark the record Inactive"""
        return self.update_personnel(personnel_id, {"status": PersonnelStatus.INACTIVE.value})

    def set_password_hash(self, personnel_id: str, password_hash: str) -> None:
        """Replace the stored login password hash"""
        result = self._personnel.update_one(
            {"personnel_id": personnel_id},
            {"$set": {"password_hash": password_hash, "updated_at": utc_now()}}
        )
        if result.matched_count == 0:
            raise PersonnelNotFoundError(f"Personnel {personnel_id} not found")

    def _ensure_unique(self, nrp: str, email: str, exclude_id: Optional[str] = None) -> None:
        query: Dict[str, Any] = {"$or": [{"nrp": nrp.strip()}, {"email": _exact_ci(email)}]}
        if exclude_id:
            query["personnel_id"] = {"$ne": exclude_id}

        existing = self._personnel.find_one(query)
        if existing:
            field = "nrp" if existing.get("nrp") == nrp.strip() else "email"
            raise AlreadyExistsError(
                f"Personnel with this {field} is already registered",
                details={"field": field}
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def list_personnel(
        self,
        scope: Optional[Scope] = None,
        search: Optional[str] = None,
        status: Optional[PersonnelStatus] = None,
        unit_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 500
    ) -> List[Personnel]:
        """List personnel matching filters, ordered by name"""
        query = self._build_query(scope, search, status, unit_id)
        cursor = self._personnel.find(query).sort("name", ASCENDING).skip(skip).limit(limit)

        records = []
        for doc in cursor:
            doc.pop("_id", None)
            records.append(Personnel.model_validate(doc))
        return records

    def count_personnel(
        self,
        scope: Optional[Scope] = None,
        status: Optional[PersonnelStatus] = None
    ) -> int:
        """Count personnel visible in a scope"""
        return self._personnel.count_documents(self._build_query(scope, None, status, None))

    def _build_query(
        self,
        scope: Optional[Scope],
        search: Optional[str],
        status: Optional[PersonnelStatus],
        unit_id: Optional[str]
    ) -> Dict[str, Any]:
        conditions: List[Dict[str, Any]] = []

        if scope is not None and scope.kind == ScopeKind.UNIT:
            conditions.append({"unit_id": scope.unit_id})
        elif scope is not None and scope.kind == ScopeKind.SELF:
            conditions.append({"nrp": scope.nrp})

        if status:
            conditions.append({"status": status.value})
        if unit_id:
            conditions.append({"unit_id": unit_id})

        if search:
            search_regex = {"$regex": re.escape(search.strip()), "$options": "i"}
            conditions.append({"$or": [
                {"name": search_regex},
                {"nrp": search_regex},
                {"email": search_regex},
                {"unit_name": search_regex},
                {"position": search_regex},
            ]})

        if not conditions:
            return {}
        if len(conditions) == 1:
            return conditions[0]
        return {"$and": conditions}
