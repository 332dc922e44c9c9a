"""
scmhook: normalize source-control webhook deliveries.

Example:
    >>> from scmhook import WebhookService, static_secret
    >>> service = WebhookService()
    >>> hook = service.parse(body, headers, static_secret("topsecret"))
    >>> if hook is not None and hook.kind == "push":
    ...     print(hook.ref, hook.after)
"""

from .config import Settings, get_settings, static_secret
from .scm import (
    Action,
    BranchHook,
    PullRequestHook,
    PushHook,
    TagHook,
    Webhook,
    WebhookKind,
)
from .utils.exceptions import (
    PayloadIOError,
    ScmHookError,
    SecretResolutionError,
    SignatureInvalidError,
    UnknownEventError,
    WebhookParsingError,
)
from .webhook import WebhookConfig, WebhookService, parse, parse_request

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "static_secret",
    "Action",
    "WebhookKind",
    "Webhook",
    "PushHook",
    "BranchHook",
    "TagHook",
    "PullRequestHook",
    "ScmHookError",
    "PayloadIOError",
    "WebhookParsingError",
    "UnknownEventError",
    "SignatureInvalidError",
    "SecretResolutionError",
    "WebhookConfig",
    "WebhookService",
    "parse",
    "parse_request",
]
