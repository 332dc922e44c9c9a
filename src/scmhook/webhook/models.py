"""
Pydantic models for Gitee webhook payloads.

These mirror the provider's wire schema; field names are the JSON keys
Gitee sends and are matched exactly. Unknown fields are ignored.

Gitee has shipped two layouts for the same events:

* ``standard``: commit identities carry a ``username`` login handle and
  pull requests expose a ``merged`` flag.
* ``legacy``: commit identities are keyed by display name only and pull
  requests have no ``merged`` flag.

Each layout gets its own decoder class so every decoder stays total;
:func:`detect_variant` picks one per payload.

Gitee webhook documentation:
https://gitee.com/help/articles/4186
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator


class WebhookEventType(str, Enum):
    """
    Gitee webhook event types.

    These correspond to the X-Gitee-Event header values we handle.
    """

    PUSH = "Push Hook"
    TAG_PUSH = "Tag Push Hook"
    MERGE_REQUEST = "Merge Request Hook"


class SchemaVariant(str, Enum):
    """Payload layout selector."""

    AUTO = "auto"
    STANDARD = "standard"
    LEGACY = "legacy"


_datetime_adapter = TypeAdapter(datetime)


def parse_nullable_time(value: Any) -> datetime | None:
    """Parse a provider timestamp, returning None when absent or malformed."""
    if value is None or value == "":
        return None
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        return None


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def null_as_default(cls, data: Any) -> Any:
        """Gitee sends null for absent values; optional fields fall back to their default."""
        if not isinstance(data, dict):
            return data
        fields = cls.model_fields
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in fields or fields[key].is_required()
        }


class GiteeUser(_WireModel):
    """
    Gitee user object.

    Used for repository owners, pushers, senders and pull request authors.
    """

    id: int | str | None = Field(None, description="User ID")
    login: str = Field("", description="Login handle")
    name: str = Field("", description="Display name")
    username: str = Field("", description="Login handle (some payloads)")
    email: str | None = Field(None, description="Email address")
    avatar_url: str | None = Field(None, description="Avatar URL")


class GiteeRepository(_WireModel):
    """Gitee repository (project) object."""

    id: int | str = Field(..., description="Repository ID")
    owner: GiteeUser = Field(default_factory=GiteeUser, description="Repository owner")
    name: str = Field("", description="Repository name")
    full_name: str = Field("", description="owner/name")
    private: bool = Field(False, description="Whether the repository is private")
    fork: bool = Field(False, description="Whether the repository is a fork")
    html_url: str = Field("", description="Web URL")
    ssh_url: str = Field("", description="SSH clone URL")
    clone_url: str = Field("", description="HTTPS clone URL")
    default_branch: str | None = Field(None, description="Default branch name")


# ----------------------------------------------------------------------------
# Push / tag push
# ----------------------------------------------------------------------------

class CommitIdentity(_WireModel):
    """Commit author/committer in the standard layout."""

    name: str = ""
    email: str = ""
    username: str | None = None

    @property
    def login(self) -> str:
        return self.username or self.name


class LegacyCommitIdentity(_WireModel):
    """Commit author/committer in the legacy layout: display name only."""

    name: str = ""
    email: str = ""

    @property
    def login(self) -> str:
        return self.name


class PushCommitBase(_WireModel):
    id: str = Field("", description="Commit SHA")
    tree_id: str | None = Field(None, description="Tree SHA")
    distinct: bool = Field(True, description="Whether the commit is new to the repository")
    message: str = Field("", description="Commit message")
    timestamp: datetime | None = Field(None, description="Commit timestamp")
    url: str = Field("", description="Commit web URL")
    added: list[str] | None = Field(None, description="Added files")
    removed: list[str] | None = Field(None, description="Removed files")
    modified: list[str] | None = Field(None, description="Modified files")

    @field_validator("timestamp", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> datetime | None:
        """Absent or unparsable timestamps become None instead of failing."""
        return parse_nullable_time(v)


class PushCommit(PushCommitBase):
    author: CommitIdentity = Field(default_factory=CommitIdentity)
    committer: CommitIdentity = Field(default_factory=CommitIdentity)


class LegacyPushCommit(PushCommitBase):
    author: LegacyCommitIdentity = Field(default_factory=LegacyCommitIdentity)
    committer: LegacyCommitIdentity = Field(default_factory=LegacyCommitIdentity)


class PushHookPayloadBase(_WireModel):
    ref: str = Field(..., description="Full ref name (refs/heads/x or refs/tags/x)")
    ref_type: str | None = Field(None, description="'branch' or 'tag' when sent instead of a prefixed ref")
    base_ref: str | None = Field(None, description="Base ref for tag pushes")
    before: str = Field("", description="SHA before push")
    after: str = Field("", description="SHA after push")
    created: bool = Field(False, description="Ref was created")
    deleted: bool = Field(False, description="Ref was deleted")
    compare: str = Field("", description="Compare URL")
    repository: GiteeRepository = Field(..., description="Repository details")
    pusher: GiteeUser = Field(default_factory=GiteeUser, description="User who pushed")
    sender: GiteeUser = Field(default_factory=GiteeUser, description="User who triggered the hook")


class PushHookPayload(PushHookPayloadBase):
    """Gitee push / tag push payload, standard layout."""

    head_commit: PushCommit | None = Field(None, description="Head commit")
    commits: list[PushCommit] = Field(default_factory=list, description="Pushed commits")


class LegacyPushHookPayload(PushHookPayloadBase):
    """Gitee push / tag push payload, legacy layout."""

    head_commit: LegacyPushCommit | None = Field(None, description="Head commit")
    commits: list[LegacyPushCommit] = Field(default_factory=list, description="Pushed commits")


# ----------------------------------------------------------------------------
# Merge request
# ----------------------------------------------------------------------------

class GiteeBranch(_WireModel):
    """Head or base side of a pull request."""

    label: str = ""
    ref: str = ""
    sha: str = ""
    user: GiteeUser | None = None
    repo: GiteeRepository | None = None


class PullRequestBase(_WireModel):
    id: int | None = Field(None, description="Pull request database ID")
    number: int = Field(0, description="Pull request number")
    state: str = Field("", description="open, closed or merged")
    title: str = Field("", description="Title")
    body: str | None = Field(None, description="Description")
    html_url: str = Field("", description="Web URL")
    diff_url: str = Field("", description="Diff URL")
    patch_url: str = Field("", description="Patch URL")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")
    head: GiteeBranch = Field(default_factory=GiteeBranch, description="Source side")
    base: GiteeBranch = Field(default_factory=GiteeBranch, description="Target side")
    user: GiteeUser = Field(default_factory=GiteeUser, description="Author")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> datetime | None:
        return parse_nullable_time(v)


class GiteePullRequest(PullRequestBase):
    """Pull request detail, standard layout."""

    merged: bool = Field(False, description="Whether the pull request was merged")


class LegacyGiteePullRequest(PullRequestBase):
    """Pull request detail, legacy layout. There is no merged flag."""


class PullRequestHookPayloadBase(_WireModel):
    action: str = Field("", description="Merge request action")
    number: int = Field(0, description="Pull request number")
    repository: GiteeRepository = Field(..., description="Target repository")
    sender: GiteeUser = Field(default_factory=GiteeUser, description="User who triggered the hook")


class PullRequestHookPayload(PullRequestHookPayloadBase):
    """Gitee merge request payload, standard layout."""

    pull_request: GiteePullRequest = Field(..., description="Pull request details")


class LegacyPullRequestHookPayload(PullRequestHookPayloadBase):
    """Gitee merge request payload, legacy layout."""

    pull_request: LegacyGiteePullRequest = Field(..., description="Pull request details")


PUSH_DECODERS: dict[SchemaVariant, type[PushHookPayloadBase]] = {
    SchemaVariant.STANDARD: PushHookPayload,
    SchemaVariant.LEGACY: LegacyPushHookPayload,
}

PULL_REQUEST_DECODERS: dict[SchemaVariant, type[PullRequestHookPayloadBase]] = {
    SchemaVariant.STANDARD: PullRequestHookPayload,
    SchemaVariant.LEGACY: LegacyPullRequestHookPayload,
}


def _commit_identities(data: dict[str, Any]) -> list[Any]:
    commits = list(data.get("commits") or [])
    if data.get("head_commit"):
        commits.append(data["head_commit"])
    identities = []
    for commit in commits:
        if isinstance(commit, dict):
            identities.extend([commit.get("author"), commit.get("committer")])
    return identities


def detect_variant(event: WebhookEventType, data: dict[str, Any]) -> SchemaVariant:
    """
    Probe a decoded JSON object for the layout it was sent in.

    Push payloads are ``standard`` when any commit identity carries a
    ``username`` key. Merge request payloads are ``standard`` when the
    pull request carries a ``merged`` key.
    """
    if event == WebhookEventType.MERGE_REQUEST:
        pull_request = data.get("pull_request")
        if isinstance(pull_request, dict) and "merged" in pull_request:
            return SchemaVariant.STANDARD
        return SchemaVariant.LEGACY

    for identity in _commit_identities(data):
        if isinstance(identity, dict) and "username" in identity:
            return SchemaVariant.STANDARD
    return SchemaVariant.LEGACY


AnyPushCommit = PushCommit | LegacyPushCommit
AnyPushHookPayload = PushHookPayload | LegacyPushHookPayload
AnyPullRequest = GiteePullRequest | LegacyGiteePullRequest
AnyPullRequestHookPayload = PullRequestHookPayload | LegacyPullRequestHookPayload
