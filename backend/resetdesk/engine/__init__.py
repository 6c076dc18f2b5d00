"""Request Engine - Identity, scope and lifecycle rules"""
from .authenticator import Authenticator, actor_from_personnel
from .scope_resolver import ScopeResolver
from .lifecycle import RequestLifecycle
from .audit_writer import AuditWriter
from . import password_policy

__all__ = [
    "Authenticator",
    "actor_from_personnel",
    "ScopeResolver",
    "RequestLifecycle",
    "AuditWriter",
    "password_policy",
]
