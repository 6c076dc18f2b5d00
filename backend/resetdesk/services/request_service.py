"""Request Service - Reset request business logic"""
from typing import Any, Dict, List, Optional, Tuple

from ..config.settings import settings
from ..domain.models import (
    ActorContext, RequesterSnapshot, RequestFilters, RequestImportRow,
    ResetRequest, Resolution, Scope
)
from ..domain.enums import (
    AuditCategory, RequestAction, RequestPriority, RequestStatus, ScopeKind,
    SubmissionChannel
)
from ..domain.errors import NotRegisteredError, ValidationError, WeakPasswordError
from ..engine.audit_writer import AuditWriter
from ..engine.lifecycle import RequestLifecycle
from ..engine.scope_resolver import ScopeResolver
from ..engine import password_policy
from ..repositories.personnel_repo import PersonnelRepository
from ..repositories.request_repo import RequestRepository
from ..repositories.unit_repo import UnitRepository
from ..utils.idgen import generate_request_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

MANUAL_ENTRY_REASON = "Manual admin entry"
IMPORT_REASON = "Imported request"


class RequestService:
    """Service for reset request operations"""

    def __init__(self):
        self.request_repo = RequestRepository()
        self.personnel_repo = PersonnelRepository()
        self.unit_repo = UnitRepository()
        self.scopes = ScopeResolver()
        self.lifecycle = RequestLifecycle(self.request_repo)
        self.audit = AuditWriter()
        self.requires_registration = settings.public_requires_registration

    # =========================================================================
    # Submission
    # =========================================================================

    def submit_public(
        self,
        nrp: str,
        reason: str,
        document: Optional[str] = None,
        priority: RequestPriority = RequestPriority.NORMAL,
        contact: Optional[str] = None,
        requester: Optional[RequesterSnapshot] = None
    ) -> ResetRequest:
        """
        Submit a request from the public form

        The NRP is matched against registered personnel; the snapshot and
        unit come from the matching record.

        Raises:
            NotRegisteredError: NRP has no active personnel and registration is required
            ValidationError: Unregistered submission without requester details
        """
        self._require_reason(reason)
        nrp = nrp.strip()

        personnel = self.personnel_repo.get_by_nrp(nrp)
        if personnel and personnel.is_active:
            snapshot = RequesterSnapshot(
                name=personnel.name,
                nrp=personnel.nrp,
                rank=personnel.rank,
                position=personnel.position,
                unit_name=personnel.unit_name or ""
            )
            request = self._build_request(
                snapshot=snapshot,
                unit_id=personnel.unit_id,
                personnel_id=personnel.personnel_id,
                reason=reason,
                document=document,
                priority=priority,
                contact=contact,
                channel=SubmissionChannel.PUBLIC
            )
        elif self.requires_registration:
            logger.warning(f"Public submission for unregistered NRP {nrp}")
            raise NotRegisteredError("NRP is not registered", details={"nrp": nrp})
        else:
            if requester is None:
                raise ValidationError(
                    "Requester details are required for an unregistered NRP",
                    details={"field": "requester"}
                )
            unit_id, unit_name = self._resolve_unit_by_name(requester.unit_name)
            snapshot = requester.model_copy(update={"nrp": nrp, "unit_name": unit_name})
            request = self._build_request(
                snapshot=snapshot,
                unit_id=unit_id,
                personnel_id=None,
                reason=reason,
                document=document,
                priority=priority,
                contact=contact,
                channel=SubmissionChannel.PUBLIC
            )

        return self.request_repo.create_request(request)

    def submit_for_actor(
        self,
        actor: ActorContext,
        reason: str,
        document: Optional[str] = None,
        priority: RequestPriority = RequestPriority.NORMAL,
        contact: Optional[str] = None,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """Submit a request on behalf of the authenticated caller"""
        self._require_reason(reason)
        personnel = self.personnel_repo.get_personnel_or_raise(actor.personnel_id)

        request = self._build_request(
            snapshot=RequesterSnapshot(
                name=personnel.name,
                nrp=personnel.nrp,
                rank=personnel.rank,
                position=personnel.position,
                unit_name=personnel.unit_name or ""
            ),
            unit_id=personnel.unit_id,
            personnel_id=personnel.personnel_id,
            reason=reason,
            document=document,
            priority=priority,
            contact=contact,
            channel=SubmissionChannel.IN_APP
        )
        created = self.request_repo.create_request(request)

        self.audit.record(
            actor, AuditCategory.OTHER,
            f"{actor.name} submitted reset request {created.request_id}", origin
        )
        return created

    def create_manual(
        self,
        actor: ActorContext,
        requester: RequesterSnapshot,
        note: Optional[str] = None,
        priority: RequestPriority = RequestPriority.NORMAL,
        contact: Optional[str] = None,
        unit_id: Optional[str] = None,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """Admin manual entry; unit admins always file into their own unit"""
        scope = self.scopes.require_admin(actor)

        resolved_unit_id, unit_name = self._unit_for_entry(scope, actor, unit_id, requester.unit_name)
        personnel = self.personnel_repo.get_by_nrp(requester.nrp)

        request = self._build_request(
            snapshot=requester.model_copy(update={"unit_name": unit_name}),
            unit_id=resolved_unit_id,
            personnel_id=personnel.personnel_id if personnel else None,
            reason=MANUAL_ENTRY_REASON,
            note=note,
            priority=priority,
            contact=contact,
            channel=SubmissionChannel.MANUAL
        )
        created = self.request_repo.create_request(request)

        self.audit.record(
            actor, AuditCategory.SYSTEM,
            f"Manual entry {created.request_id} for {requester.name} ({requester.nrp})", origin
        )
        return created

    def import_requests(
        self,
        actor: ActorContext,
        rows: List[RequestImportRow],
        origin: Optional[str] = None
    ) -> Dict[str, int]:
        """Create one PENDING request per imported row"""
        scope = self.scopes.require_admin(actor)
        if not rows:
            raise ValidationError("No rows to import", details={"field": "rows"})

        requests = []
        for row in rows:
            unit_id, unit_name = self._unit_for_entry(scope, actor, None, row.unit_name)
            personnel = self.personnel_repo.get_by_nrp(row.nrp)
            requests.append(self._build_request(
                snapshot=RequesterSnapshot(
                    name=row.name,
                    nrp=row.nrp.strip(),
                    rank=row.rank,
                    position=row.position,
                    unit_name=unit_name
                ),
                unit_id=unit_id,
                personnel_id=personnel.personnel_id if personnel else None,
                reason=row.reason or IMPORT_REASON,
                priority=row.priority,
                contact=row.contact,
                channel=SubmissionChannel.IMPORT
            ))

        self.request_repo.create_requests_bulk(requests)
        self.audit.record(
            actor, AuditCategory.SYSTEM, f"Imported {len(requests)} reset requests", origin
        )
        return {"requested": len(rows), "imported": len(requests)}

    # =========================================================================
    # Queries
    # =========================================================================

    def list_for_scope(self, scope: Scope, filters: Optional[RequestFilters] = None) -> List[ResetRequest]:
        """Scoped list, newest first"""
        return self.request_repo.list_requests(ScopeResolver.request_query(scope), filters)

    def get_for_scope(self, scope: Scope, request_id: str) -> ResetRequest:
        """Scoped detail; out-of-scope requests are reported as not found"""
        return self.request_repo.get_request_or_raise(request_id, ScopeResolver.request_query(scope))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_processing(
        self,
        actor: ActorContext,
        request_id: str,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """PENDING -> IN_PROGRESS"""
        scope = self.scopes.require_admin(actor)
        updated = self.lifecycle.apply(
            request_id, RequestAction.START_PROCESSING, ScopeResolver.request_query(scope)
        )
        self.audit.record(
            actor, AuditCategory.RESET_PASSWORD,
            f"Started processing {request_id} for {updated.requester.name} ({updated.requester.nrp})",
            origin
        )
        return updated

    def reject(
        self,
        actor: ActorContext,
        request_id: str,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """PENDING or IN_PROGRESS -> REJECTED"""
        scope = self.scopes.require_admin(actor)
        updated = self.lifecycle.apply(
            request_id, RequestAction.REJECT, ScopeResolver.request_query(scope)
        )
        self.audit.record(
            actor, AuditCategory.UPDATE_DATA,
            f"Rejected {request_id} for {updated.requester.name} ({updated.requester.nrp})",
            origin
        )
        return updated

    def resolve(
        self,
        actor: ActorContext,
        request_id: str,
        password: Optional[str],
        confirm_weak: bool = False,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """
        IN_PROGRESS -> DONE, issuing a new password

        A weak password is flagged with WeakPasswordError until the caller
        confirms it; a confirmed weak password is stored as given.
        """
        scope = self.scopes.require_resolver(actor)
        scope_query = ScopeResolver.request_query(scope)

        if not password or not password.strip():
            raise ValidationError("New password is required", details={"field": "password"})

        current = self.request_repo.get_request_or_raise(request_id, scope_query)
        self.lifecycle.check(current.status, RequestAction.RESOLVE)

        if not password_policy.is_strong(password) and not confirm_weak:
            report = password_policy.evaluate(password)
            raise WeakPasswordError(
                "Password is weak; confirm to issue it anyway",
                details={
                    "requires_confirmation": True,
                    "score": report["score"],
                    "checks": report["checks"],
                }
            )

        resolution = Resolution(
            resolved_by=actor.name,
            resolved_by_nrp=actor.nrp,
            resolved_at=utc_now(),
            password=password
        )
        updated = self.lifecycle.apply(
            request_id, RequestAction.RESOLVE, scope_query,
            updates={"resolution": resolution.model_dump()}
        )
        self.audit.record(
            actor, AuditCategory.RESET_PASSWORD,
            f"Completed password reset {request_id} for {updated.requester.name} ({updated.requester.nrp})",
            origin
        )
        return updated

    def change_status(
        self,
        actor: ActorContext,
        request_id: str,
        target_status: RequestStatus,
        password: Optional[str] = None,
        confirm_weak: bool = False,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """Move a request to ``target_status`` through the matching action"""
        scope = self.scopes.require_admin(actor)
        current = self.request_repo.get_request_or_raise(request_id, ScopeResolver.request_query(scope))
        action = self.lifecycle.action_for_target(current.status, target_status)

        if action == RequestAction.START_PROCESSING:
            return self.start_processing(actor, request_id, origin)
        if action == RequestAction.REJECT:
            return self.reject(actor, request_id, origin)
        return self.resolve(actor, request_id, password, confirm_weak, origin)

    def update_details(
        self,
        actor: ActorContext,
        request_id: str,
        note: Optional[str] = None,
        priority: Optional[RequestPriority] = None,
        contact: Optional[str] = None,
        origin: Optional[str] = None
    ) -> ResetRequest:
        """Edit note, priority or contact"""
        scope = self.scopes.require_admin(actor)

        updates: Dict[str, Any] = {}
        if note is not None:
            updates["note"] = note
        if priority is not None:
            updates["priority"] = priority.value
        if contact is not None:
            updates["contact"] = contact
        if not updates:
            raise ValidationError("No changes supplied")

        changed = ", ".join(sorted(updates))
        updated = self.request_repo.update_request(
            request_id, updates, ScopeResolver.request_query(scope)
        )
        self.audit.record(
            actor, AuditCategory.UPDATE_DATA,
            f"Updated {request_id}: {changed}",
            origin
        )
        return updated

    # =========================================================================
    # Bulk
    # =========================================================================

    def bulk_process(
        self,
        actor: ActorContext,
        request_ids: List[str],
        origin: Optional[str] = None
    ) -> Dict[str, int]:
        """Start processing every eligible PENDING request; others are skipped"""
        scope = self.scopes.require_admin(actor)
        ids = self._dedupe(request_ids)

        affected = self.request_repo.bulk_transition(
            ids,
            RequestLifecycle.sources(RequestAction.START_PROCESSING),
            {"status": RequestLifecycle.target(RequestAction.START_PROCESSING).value},
            ScopeResolver.request_query(scope)
        )
        if affected:
            self.audit.record(
                actor, AuditCategory.UPDATE_DATA,
                f"Bulk processed {affected} of {len(ids)} reset requests", origin
            )
        logger.info(f"Bulk process: {affected}/{len(ids)}", extra={"action": "bulk_process"})
        return {"requested": len(ids), "affected": affected}

    def bulk_delete(
        self,
        actor: ActorContext,
        request_ids: List[str],
        origin: Optional[str] = None
    ) -> Dict[str, int]:
        """Delete every in-scope request; others are skipped"""
        scope = self.scopes.require_admin(actor)
        ids = self._dedupe(request_ids)

        affected = self.request_repo.delete_requests(ids, ScopeResolver.request_query(scope))
        if affected:
            self.audit.record(
                actor, AuditCategory.DELETE_DATA,
                f"Deleted {affected} of {len(ids)} reset requests", origin
            )
        return {"requested": len(ids), "affected": affected}

    def password_strength(self, actor: ActorContext, password: str) -> Dict[str, Any]:
        """Strength report for a candidate password"""
        self.scopes.require_admin(actor)
        return password_policy.evaluate(password)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _build_request(
        self,
        snapshot: RequesterSnapshot,
        unit_id: Optional[str],
        personnel_id: Optional[str],
        reason: str,
        channel: SubmissionChannel,
        document: Optional[str] = None,
        note: Optional[str] = None,
        priority: RequestPriority = RequestPriority.NORMAL,
        contact: Optional[str] = None
    ) -> ResetRequest:
        now = utc_now()
        return ResetRequest(
            request_id=generate_request_id(),
            personnel_id=personnel_id,
            requester=snapshot,
            unit_id=unit_id,
            contact=contact,
            reason=reason.strip(),
            note=note,
            document=document,
            priority=priority,
            status=RequestStatus.PENDING,
            channel=channel,
            created_at=now,
            updated_at=now
        )

    def _unit_for_entry(
        self,
        scope: Scope,
        actor: ActorContext,
        unit_id: Optional[str],
        unit_name: str
    ) -> Tuple[Optional[str], str]:
        """Resolve the unit of an admin-created request"""
        if scope.kind == ScopeKind.UNIT:
            return scope.unit_id, actor.unit_name or unit_name
        if unit_id:
            unit = self.unit_repo.get_unit_or_raise(unit_id)
            return unit.unit_id, unit.name
        return self._resolve_unit_by_name(unit_name)

    def _resolve_unit_by_name(self, unit_name: str) -> Tuple[Optional[str], str]:
        if not unit_name or not unit_name.strip():
            return None, ""
        unit = self.unit_repo.get_unit_by_name(unit_name)
        if unit:
            return unit.unit_id, unit.name
        return None, unit_name.strip()

    @staticmethod
    def _require_reason(reason: str) -> None:
        if not reason or not reason.strip():
            raise ValidationError("Reason is required", details={"field": "reason"})

    @staticmethod
    def _dedupe(request_ids: List[str]) -> List[str]:
        if not request_ids:
            raise ValidationError("No request ids supplied", details={"field": "ids"})
        return list(dict.fromkeys(request_ids))
