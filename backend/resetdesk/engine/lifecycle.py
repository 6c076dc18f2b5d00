"""Request Lifecycle - Reset request state machine"""
from typing import Any, Dict, Optional, Tuple

from ..domain.models import ResetRequest
from ..domain.enums import RequestAction, RequestStatus
from ..domain.errors import InvalidTransitionError, RequestNotFoundError
from ..repositories.request_repo import RequestRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


# action -> (allowed source statuses, target status)
TRANSITIONS: Dict[RequestAction, Tuple[Tuple[RequestStatus, ...], RequestStatus]] = {
    RequestAction.START_PROCESSING: ((RequestStatus.PENDING,), RequestStatus.IN_PROGRESS),
    RequestAction.REJECT: ((RequestStatus.PENDING, RequestStatus.IN_PROGRESS), RequestStatus.REJECTED),
    RequestAction.RESOLVE: ((RequestStatus.IN_PROGRESS,), RequestStatus.DONE),
}

TARGET_ACTIONS: Dict[RequestStatus, RequestAction] = {
    target: action for action, (_, target) in TRANSITIONS.items()
}


class RequestLifecycle:
    """
    Apply lifecycle actions to reset requests

    PENDING -> IN_PROGRESS -> DONE, with REJECTED reachable from either
    open status. DONE and REJECTED are terminal. Writes are conditioned on
    the source status so a request never moves twice for one action.
    """

    def __init__(self, repo: Optional[RequestRepository] = None):
        self.repo = repo or RequestRepository()

    @staticmethod
    def sources(action: RequestAction) -> Tuple[RequestStatus, ...]:
        return TRANSITIONS[action][0]

    @staticmethod
    def target(action: RequestAction) -> RequestStatus:
        return TRANSITIONS[action][1]

    @staticmethod
    def is_allowed(current: RequestStatus, action: RequestAction) -> bool:
        return current in TRANSITIONS[action][0]

    @classmethod
    def check(cls, current: RequestStatus, action: RequestAction) -> None:
        """
        Validate a transition

        Raises:
            InvalidTransitionError: If ``action`` is not allowed from ``current``
        """
        if not cls.is_allowed(current, action):
            attempted = cls.target(action)
            raise InvalidTransitionError(
                f"Cannot move request from {current.value} to {attempted.value}",
                details={
                    "current_status": current.value,
                    "attempted_status": attempted.value,
                    "action": action.value
                }
            )

    @staticmethod
    def action_for_target(current: RequestStatus, target: RequestStatus) -> RequestAction:
        """Map a requested target status onto the action reaching it"""
        action = TARGET_ACTIONS.get(target)
        if action is None:
            raise InvalidTransitionError(
                f"Cannot move request from {current.value} to {target.value}",
                details={"current_status": current.value, "attempted_status": target.value}
            )
        return action

    def apply(
        self,
        request_id: str,
        action: RequestAction,
        scope_query: Optional[Dict[str, Any]] = None,
        updates: Optional[Dict[str, Any]] = None
    ) -> ResetRequest:
        """
        Apply an action to a request inside a scope

        Args:
            request_id: Request to move
            action: Lifecycle action
            scope_query: Scope precondition filter
            updates: Extra fields written with the status change

        Returns:
            Updated request

        Raises:
            RequestNotFoundError: If absent or outside the scope
            InvalidTransitionError: If the current status does not allow the action
        """
        current = self.repo.get_request_or_raise(request_id, scope_query)
        self.check(current.status, action)

        fields = dict(updates or {})
        fields["status"] = self.target(action).value

        updated = self.repo.transition_request(request_id, self.sources(action), fields, scope_query)
        if updated is None:
            # Another writer moved the request between the read and the write
            latest = self.repo.get_request(request_id, scope_query)
            if latest is None:
                raise RequestNotFoundError(f"Request {request_id} not found")
            self.check(latest.status, action)
            raise InvalidTransitionError(
                f"Request {request_id} changed while being updated",
                details={"current_status": latest.status.value, "action": action.value}
            )

        logger.info(
            f"Request {request_id}: {current.status.value} -> {updated.status.value}",
            extra={"request_id": request_id, "action": action.value, "status": updated.status.value}
        )
        return updated
