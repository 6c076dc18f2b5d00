"""API Dependencies - Common dependencies for routes"""
from typing import Optional
from fastapi import Depends, Header, Request

from ..domain.models import ActorContext, Scope
from ..domain.errors import AuthenticationError
from ..engine.scope_resolver import ScopeResolver
from ..utils.jwt import get_token_service


def get_current_user_dep(
    authorization: Optional[str] = Header(None)
) -> ActorContext:
    """
    Dependency to get current user from Authorization header

    Raises:
        AuthenticationError: 401 if the header is missing
        InvalidTokenError: 403 if the token is malformed, tampered or expired
    """
    if not authorization:
        raise AuthenticationError("Authorization header is missing")
    return get_token_service().get_actor_context(authorization)


def get_optional_user_dep(
    authorization: Optional[str] = Header(None)
) -> Optional[ActorContext]:
    """
    Dependency to optionally get current user

    Returns None if no token provided.
    Raises error if token is provided but invalid.
    """
    if not authorization:
        return None
    return get_token_service().get_actor_context(authorization)


def get_scope_dep(actor: ActorContext = Depends(get_current_user_dep)) -> Scope:
    """Visibility scope of the current user"""
    return ScopeResolver().scope_for(actor)


def get_origin_dep(
    request: Request,
    x_forwarded_for: Optional[str] = Header(None, alias="X-Forwarded-For")
) -> str:
    """Client address recorded in audit entries"""
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"
