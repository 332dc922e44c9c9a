"""
Gitee webhook parsing.

This package decodes Gitee webhook deliveries, maps them onto the
normalized event model and verifies the shared token.

Main exports:
    - WebhookService: dispatcher for one delivery
    - WebhookConfig: payload limit, schema layout and header names
    - parse: module-level shortcut using the SCMHOOK_* settings
    - parse_request: FastAPI request adapter
    - verify_token: constant-time token comparison
"""

from .models import (
    WebhookEventType,
    SchemaVariant,
    PushHookPayload,
    LegacyPushHookPayload,
    PullRequestHookPayload,
    LegacyPullRequestHookPayload,
    detect_variant,
)
from .validators import verify_token
from .handlers import (
    EVENT_HEADER,
    TOKEN_HEADER,
    SecretFunc,
    WebhookConfig,
    WebhookService,
    get_default_service,
    parse,
)
from .asgi import parse_request

__all__ = [
    # Enums
    "WebhookEventType",
    "SchemaVariant",
    # Decoders
    "PushHookPayload",
    "LegacyPushHookPayload",
    "PullRequestHookPayload",
    "LegacyPullRequestHookPayload",
    "detect_variant",
    # Verification
    "verify_token",
    # Dispatch
    "EVENT_HEADER",
    "TOKEN_HEADER",
    "SecretFunc",
    "WebhookConfig",
    "WebhookService",
    "get_default_service",
    "parse",
    "parse_request",
]
