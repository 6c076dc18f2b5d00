"""Audit Repository - Data access for the audit log"""
import re
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import DESCENDING

from .mongo_client import get_collection
from ..domain.models import AuditLogEntry, AuditLogFilters
from ..utils.logger import get_logger
from ..utils.time import day_range_bounds

logger = get_logger(__name__)


class AuditRepository:
    """Repository for audit log operations (append-only)"""

    def __init__(self):
        self._audit_log: Collection = get_collection("audit_log")

    def create_entry(self, entry: AuditLogEntry) -> AuditLogEntry:
        """Append an audit log entry"""
        doc = entry.model_dump()
        doc["_id"] = entry.log_id

        self._audit_log.insert_one(doc)
        logger.info(
            f"Created audit entry: {entry.category.value}",
            extra={"category": entry.category.value, "actor_nrp": entry.actor.nrp}
        )
        return entry

    def query_entries(self, filters: AuditLogFilters) -> List[AuditLogEntry]:
        """Query audit entries newest first"""
        conditions: List[Dict[str, Any]] = []

        if filters.category:
            conditions.append({"category": filters.category.value})

        lower, upper = day_range_bounds(filters.date_from, filters.date_to)
        if lower or upper:
            timestamp: Dict[str, Any] = {}
            if lower:
                timestamp["$gte"] = lower
            if upper:
                timestamp["$lte"] = upper
            conditions.append({"timestamp": timestamp})

        if filters.search and filters.search.strip():
            search_regex = {"$regex": re.escape(filters.search.strip()), "$options": "i"}
            conditions.append({"$or": [
                {"actor.name": search_regex},
                {"category": search_regex},
                {"description": search_regex},
            ]})

        query: Dict[str, Any] = {"$and": conditions} if conditions else {}
        cursor = self._audit_log.find(query).sort("timestamp", DESCENDING).limit(filters.limit)

        entries = []
        for doc in cursor:
            doc.pop("_id", None)
            entries.append(AuditLogEntry.model_validate(doc))
        return entries

    def count_entries(self, category: Optional[str] = None) -> int:
        """Count audit entries, optionally for one category"""
        return self._audit_log.count_documents({"category": category} if category else {})
