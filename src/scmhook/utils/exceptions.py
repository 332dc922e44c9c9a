"""
Custom exception classes for scmhook.

Provides specific exception types for the webhook parsing pipeline
with machine-readable error codes and structured details.
"""

from typing import Any, Dict, Optional


class ScmHookError(Exception):
    """
    Base exception for scmhook.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(ScmHookError):
    """
    Raised when there's a configuration error.

    This includes invalid environment variables and
    out-of-range configuration values.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None
    ):
        """Initialize configuration error."""
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = config_value

        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            details=details
        )


class PayloadIOError(ScmHookError):
    """
    Raised when the request body cannot be read.

    Covers stream read failures and bodies larger than the
    configured payload limit.
    """

    def __init__(
        self,
        message: str,
        limit: Optional[int] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize payload I/O error."""
        details: Dict[str, Any] = {}
        if limit:
            details["limit"] = limit
        if cause:
            details["cause"] = str(cause)

        super().__init__(
            message=message,
            error_code="PAYLOAD_IO_ERROR",
            details=details
        )


class WebhookParsingError(ScmHookError):
    """
    Raised when webhook payload parsing fails.

    This includes JSON parsing errors, encoding errors and
    schema validation failures.
    """

    def __init__(
        self,
        message: str,
        event: Optional[str] = None,
        payload_excerpt: Optional[str] = None,
        validation_errors: Optional[list] = None
    ):
        """Initialize webhook parsing error."""
        details: Dict[str, Any] = {}
        if event:
            details["event"] = event
        if payload_excerpt:
            details["payload_excerpt"] = payload_excerpt
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=message,
            error_code="WEBHOOK_PARSING_ERROR",
            details=details
        )


class UnknownEventError(ScmHookError):
    """Raised when the event-type header names an event we do not handle."""

    def __init__(self, event: Optional[str] = None):
        """Initialize unknown event error."""
        super().__init__(
            message=f"Unknown webhook event: {event!r}",
            error_code="UNKNOWN_EVENT",
            details={"event": event} if event else {}
        )
        self.event = event


class SignatureInvalidError(ScmHookError):
    """
    Raised when the delivery token does not match the resolved secret.

    The parsed event is still attached as ``hook`` so callers can
    log or audit the rejected delivery.
    """

    def __init__(self, hook: Any, message: str = "Invalid webhook token"):
        """Initialize signature error."""
        super().__init__(
            message=message,
            error_code="SIGNATURE_INVALID",
            details={"kind": getattr(hook, "kind", None)}
        )
        self.hook = hook


class SecretResolutionError(ScmHookError):
    """
    Raised when the caller-supplied secret resolver fails.

    Carries the parsed event as ``hook``; the resolver's exception
    is chained as ``__cause__``.
    """

    def __init__(self, hook: Any, cause: Exception):
        """Initialize secret resolution error."""
        super().__init__(
            message=f"Secret resolution failed: {cause}",
            error_code="SECRET_RESOLUTION_ERROR",
            details={
                "kind": getattr(hook, "kind", None),
                "cause_type": type(cause).__name__,
            }
        )
        self.hook = hook
        self.cause = cause
