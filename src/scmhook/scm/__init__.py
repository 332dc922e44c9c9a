"""
Provider-agnostic webhook event model.

Main exports:
    - Webhook: discriminated union of the four normalized events
    - PushHook, BranchHook, TagHook, PullRequestHook: event variants
    - Action: normalized action enum with a lenient string lookup
"""

from .models import (
    ZERO_TIME,
    Action,
    BranchHook,
    Commit,
    PullRequest,
    PullRequestHook,
    PushHook,
    Reference,
    Repository,
    Signature,
    TagHook,
    User,
    Webhook,
    WebhookKind,
    webhook_adapter,
)
from .refs import expand_ref, is_branch, is_tag, trim_ref

__all__ = [
    "ZERO_TIME",
    "Action",
    "WebhookKind",
    "Webhook",
    "webhook_adapter",
    "Repository",
    "User",
    "Signature",
    "Commit",
    "Reference",
    "PullRequest",
    "PushHook",
    "BranchHook",
    "TagHook",
    "PullRequestHook",
    "is_tag",
    "is_branch",
    "trim_ref",
    "expand_ref",
]
