"""Utility modules for the MediaVault application."""

from mediavault.utils.http import get_client_ip, get_origin, is_api_path, served_by
from mediavault.utils.logging import LogContext, setup_logging

__all__ = [
    # Logging
    "LogContext",
    "setup_logging",
    # Requests
    "get_client_ip",
    "get_origin",
    "is_api_path",
    "served_by",
]
