"""Utility modules"""
from .logger import get_logger, setup_logging
from .jwt import TokenService, get_token_service
from .idgen import generate_id, generate_correlation_id
from .passwords import hash_password, verify_password
from .time import utc_now, format_iso

__all__ = [
    "get_logger",
    "setup_logging",
    "TokenService",
    "get_token_service",
    "generate_id",
    "generate_correlation_id",
    "hash_password",
    "verify_password",
    "utc_now",
    "format_iso",
]
