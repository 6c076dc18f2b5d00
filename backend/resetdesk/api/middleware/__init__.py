"""
API Middleware

    - correlation: per-request correlation ID and access log line
    - error_handlers: DomainError, validation and storage failures mapped to JSON errors
"""

from .correlation import CorrelationIdMiddleware
from .error_handlers import register_error_handlers

__all__ = ["CorrelationIdMiddleware", "register_error_handlers"]
