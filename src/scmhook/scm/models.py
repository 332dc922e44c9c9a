"""
Normalized, provider-agnostic webhook event model.

Every provider decoder maps its native payload onto these types. All
models are frozen: an event is built once per delivery and never
mutated afterwards.

``Webhook`` is a discriminated union keyed on ``kind``; callers match on
``hook.kind`` (or ``isinstance``) to find out which event they got.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# Stand-in for timestamps the provider omitted or sent unparsable
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class WebhookKind(str, Enum):
    """Discriminator values for the ``Webhook`` union."""

    PUSH = "push"
    BRANCH = "branch"
    TAG = "tag"
    PULL_REQUEST = "pull_request"


class Action(str, Enum):
    """
    Normalized webhook action.

    ``UNKNOWN`` is the zero value for anything the lookup table does not
    recognize.
    """

    UNKNOWN = "unknown"
    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"
    OPEN = "open"
    REOPEN = "reopen"
    CLOSE = "close"
    LABEL = "label"
    UNLABEL = "unlabel"
    MERGE = "merge"
    SYNC = "sync"

    @classmethod
    def lookup(cls, text: str | None) -> "Action":
        """Map a provider action string onto an Action, never raising."""
        if not text:
            return cls.UNKNOWN
        return _ACTION_TABLE.get(text, cls.UNKNOWN)


_ACTION_TABLE = {
    "create": Action.CREATE,
    "created": Action.CREATE,
    "delete": Action.DELETE,
    "deleted": Action.DELETE,
    "update": Action.UPDATE,
    "updated": Action.UPDATE,
    "edit": Action.UPDATE,
    "edited": Action.UPDATE,
    "open": Action.OPEN,
    "opened": Action.OPEN,
    "reopen": Action.REOPEN,
    "reopened": Action.REOPEN,
    "close": Action.CLOSE,
    "closed": Action.CLOSE,
    "label": Action.LABEL,
    "labeled": Action.LABEL,
    "unlabel": Action.UNLABEL,
    "unlabeled": Action.UNLABEL,
    "merge": Action.MERGE,
    "merged": Action.MERGE,
    "synchronize": Action.SYNC,
    "synchronized": Action.SYNC,
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Repository(_Frozen):
    """A source repository as seen by the webhook consumer."""

    id: str = Field(..., description="Stable repository identifier, always a string")
    namespace: str = Field("", description="Owner or organization login")
    name: str = Field("", description="Repository name")
    branch: str = Field("", description="Default branch")
    private: bool = Field(False, description="Whether the repository is private")
    clone: str = Field("", description="HTTPS clone URL")
    clone_ssh: str = Field("", description="SSH clone URL")
    link: str = Field("", description="Web URL")

    @property
    def full_name(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name


class User(_Frozen):
    """A provider account (webhook sender, pull request author)."""

    id: str = ""
    login: str = ""
    name: str = ""
    email: str = ""
    avatar: str = ""


class Signature(_Frozen):
    """Commit author or committer identity."""

    login: str = ""
    name: str = ""
    email: str = ""
    date: datetime = ZERO_TIME


class Commit(_Frozen):
    sha: str = ""
    message: str = ""
    link: str = ""
    author: Signature = Field(default_factory=Signature)
    committer: Signature = Field(default_factory=Signature)


class Reference(_Frozen):
    """A branch or tag. ``name`` never carries the ``refs/...`` prefix."""

    name: str
    path: str = ""
    sha: str = ""


class PullRequest(_Frozen):
    number: int = 0
    title: str = ""
    body: str = ""
    sha: str = Field("", description="Head commit SHA")
    ref: str = Field("", description="Pull request ref, e.g. refs/pull/1/head")
    source: str = Field("", description="Source (head) branch")
    target: str = Field("", description="Target (base) branch")
    fork: str = Field("", description="Full name of the source repository")
    link: str = ""
    diff: str = ""
    closed: bool = False
    merged: bool = False
    author: User = Field(default_factory=User)
    created: datetime = ZERO_TIME
    updated: datetime = ZERO_TIME


class _Hook(_Frozen):
    def repository(self) -> Repository:
        """Repository the event belongs to, whatever the kind."""
        return self.repo  # type: ignore[attr-defined]


class PushHook(_Hook):
    """Commits pushed to a branch or tag. ``ref`` keeps its ``refs/`` prefix."""

    kind: Literal["push"] = "push"
    ref: str
    base_ref: str = ""
    before: str = ""
    after: str = ""
    commit: Commit = Field(default_factory=Commit)
    commits: tuple[Commit, ...] = ()
    repo: Repository
    sender: User = Field(default_factory=User)


class BranchHook(_Hook):
    """A branch was created or deleted."""

    kind: Literal["branch"] = "branch"
    action: Action = Action.UNKNOWN
    ref: Reference
    repo: Repository
    sender: User = Field(default_factory=User)


class TagHook(_Hook):
    """A tag was created or deleted."""

    kind: Literal["tag"] = "tag"
    action: Action = Action.UNKNOWN
    ref: Reference
    repo: Repository
    sender: User = Field(default_factory=User)


class PullRequestHook(_Hook):
    kind: Literal["pull_request"] = "pull_request"
    action: Action = Action.UNKNOWN
    repo: Repository
    pull_request: PullRequest
    sender: User = Field(default_factory=User)


Webhook = Annotated[
    Union[PushHook, BranchHook, TagHook, PullRequestHook],
    Field(discriminator="kind"),
]

# Rebuilds a Webhook from its JSON/dict form (e.g. a queued event)
webhook_adapter: TypeAdapter = TypeAdapter(Webhook)
