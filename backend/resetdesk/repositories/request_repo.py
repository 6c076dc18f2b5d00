"""Reset Request Repository - Data access for password reset requests"""
import re
from typing import Any, Dict, List, Optional, Sequence
from datetime import datetime
from pymongo.collection import Collection
from pymongo import DESCENDING

from .mongo_client import get_collection
from ..domain.models import ResetRequest, RequestFilters
from ..domain.enums import RequestStatus
from ..domain.errors import RequestNotFoundError
from ..utils.logger import get_logger
from ..utils.time import day_range_bounds, utc_now

logger = get_logger(__name__)


def _and(*conditions: Dict[str, Any]) -> Dict[str, Any]:
    """Combine query fragments, dropping empty ones"""
    parts = [c for c in conditions if c]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}


class RequestRepository:
    """Repository for reset request operations"""

    def __init__(self):
        self._requests: Collection = get_collection("reset_requests")

    # =========================================================================
    # CRUD
    # =========================================================================

    def create_request(self, request: ResetRequest) -> ResetRequest:
        """Create a new reset request"""
        # Keep datetimes native so created_at sorts and ranges work in MongoDB
        doc = request.model_dump()
        doc["_id"] = request.request_id

        self._requests.insert_one(doc)
        logger.info(
            f"Created reset request: {request.request_id}",
            extra={"request_id": request.request_id, "unit_id": request.unit_id}
        )
        return request

    def create_requests_bulk(self, requests: List[ResetRequest]) -> List[ResetRequest]:
        """Create multiple reset requests"""
        if not requests:
            return []

        docs = []
        for request in requests:
            doc = request.model_dump()
            doc["_id"] = request.request_id
            docs.append(doc)

        self._requests.insert_many(docs)
        logger.info(f"Created {len(requests)} reset requests")
        return requests

    def get_request(
        self,
        request_id: str,
        scope_query: Optional[Dict[str, Any]] = None
    ) -> Optional[ResetRequest]:
        """Get request by ID, optionally restricted to a scope filter"""
        doc = self._requests.find_one(_and({"request_id": request_id}, scope_query or {}))
        if doc:
            doc.pop("_id", None)
            return ResetRequest.model_validate(doc)
        return None

    def get_request_or_raise(
        self,
        request_id: str,
        scope_query: Optional[Dict[str, Any]] = None
    ) -> ResetRequest:
        """Get request by ID or raise error (absent and out-of-scope look the same)"""
        request = self.get_request(request_id, scope_query)
        if not request:
            raise RequestNotFoundError(f"Request {request_id} not found")
        return request

    def update_request(
        self,
        request_id: str,
        updates: Dict[str, Any],
        scope_query: Optional[Dict[str, Any]] = None
    ) -> ResetRequest:
        """Update non-lifecycle fields of a request"""
        updates["updated_at"] = utc_now()

        result = self._requests.find_one_and_update(
            _and({"request_id": request_id}, scope_query or {}),
            {"$set": updates},
            return_document=True
        )
        if not result:
            raise RequestNotFoundError(f"Request {request_id} not found")

        result.pop("_id", None)
        return ResetRequest.model_validate(result)

    def transition_request(
        self,
        request_id: str,
        from_statuses: Sequence[RequestStatus],
        updates: Dict[str, Any],
        scope_query: Optional[Dict[str, Any]] = None
    ) -> Optional[ResetRequest]:
        """
        Apply a status change only while the request is still in one of
        ``from_statuses``.

        Returns:
            Updated request, or None when nothing matched (absent, out of
            scope, or already moved on by another writer)
        """
        updates["updated_at"] = utc_now()

        result = self._requests.find_one_and_update(
            _and(
                {"request_id": request_id},
                {"status": {"$in": [s.value for s in from_statuses]}},
                scope_query or {}
            ),
            {"$set": updates},
            return_document=True
        )
        if not result:
            return None

        result.pop("_id", None)
        return ResetRequest.model_validate(result)

    # =========================================================================
    # Bulk operations
    # =========================================================================

    def bulk_transition(
        self,
        request_ids: List[str],
        from_statuses: Sequence[RequestStatus],
        updates: Dict[str, Any],
        scope_query: Optional[Dict[str, Any]] = None
    ) -> int:
        """Transition every eligible request in ``request_ids``; returns modified count"""
        if not request_ids:
            return 0

        updates["updated_at"] = utc_now()
        result = self._requests.update_many(
            _and(
                {"request_id": {"$in": request_ids}},
                {"status": {"$in": [s.value for s in from_statuses]}},
                scope_query or {}
            ),
            {"$set": updates}
        )
        return result.modified_count

    def delete_requests(
        self,
        request_ids: List[str],
        scope_query: Optional[Dict[str, Any]] = None
    ) -> int:
        """Hard delete requests in scope; returns deleted count"""
        if not request_ids:
            return 0

        result = self._requests.delete_many(
            _and({"request_id": {"$in": request_ids}}, scope_query or {})
        )
        logger.info(f"Deleted {result.deleted_count} reset requests")
        return result.deleted_count

    # =========================================================================
    # Queries
    # =========================================================================

    def list_requests(
        self,
        scope_query: Optional[Dict[str, Any]] = None,
        filters: Optional[RequestFilters] = None,
        skip: int = 0,
        limit: int = 0
    ) -> List[ResetRequest]:
        """List requests newest first; limit 0 means no limit"""
        query = _and(scope_query or {}, self._filter_query(filters))

        cursor = self._requests.find(query).sort("created_at", DESCENDING).skip(skip)
        if limit:
            cursor = cursor.limit(limit)

        requests = []
        for doc in cursor:
            doc.pop("_id", None)
            requests.append(ResetRequest.model_validate(doc))
        return requests

    def count_requests(
        self,
        scope_query: Optional[Dict[str, Any]] = None,
        extra_query: Optional[Dict[str, Any]] = None
    ) -> int:
        """Count requests matching a scope and an optional extra condition"""
        return self._requests.count_documents(_and(scope_query or {}, extra_query or {}))

    def list_created_between(
        self,
        scope_query: Optional[Dict[str, Any]],
        start: Optional[datetime],
        end: Optional[datetime]
    ) -> List[Dict[str, Any]]:
        """Raw projection of requests created in [start, end] for aggregation"""
        created: Dict[str, Any] = {}
        if start:
            created["$gte"] = start
        if end:
            created["$lte"] = end

        query = _and(scope_query or {}, {"created_at": created} if created else {})
        projection = {"_id": 0, "created_at": 1, "status": 1, "unit_id": 1, "requester.unit_name": 1}
        return list(self._requests.find(query, projection))

    def _filter_query(self, filters: Optional[RequestFilters]) -> Dict[str, Any]:
        if filters is None:
            return {}

        conditions: List[Dict[str, Any]] = []

        if filters.status:
            conditions.append({"status": filters.status.value})
        if filters.priority:
            conditions.append({"priority": filters.priority.value})

        lower, upper = day_range_bounds(filters.date_from, filters.date_to)
        if lower or upper:
            created: Dict[str, Any] = {}
            if lower:
                created["$gte"] = lower
            if upper:
                created["$lte"] = upper
            conditions.append({"created_at": created})

        if filters.search and filters.search.strip():
            search_regex = {"$regex": re.escape(filters.search.strip()), "$options": "i"}
            conditions.append({"$or": [
                {"requester.name": search_regex},
                {"requester.nrp": search_regex},
                {"requester.unit_name": search_regex},
                {"requester.position": search_regex},
                {"request_id": search_regex},
            ]})

        return _and(*conditions)
