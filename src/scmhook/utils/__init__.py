"""
Utilities module for scmhook.
"""

from .logger import setup_logging, setup_logging_from_settings, get_logger
from .exceptions import (
    ScmHookError,
    ConfigurationError,
    PayloadIOError,
    WebhookParsingError,
    UnknownEventError,
    SignatureInvalidError,
    SecretResolutionError,
)

__all__ = [
    "setup_logging",
    "setup_logging_from_settings",
    "get_logger",
    "ScmHookError",
    "ConfigurationError",
    "PayloadIOError",
    "WebhookParsingError",
    "UnknownEventError",
    "SignatureInvalidError",
    "SecretResolutionError",
]
