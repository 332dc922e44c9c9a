"""
Conversion of decoded Gitee payloads into the normalized event model.

All functions here are pure: they take a decoded wire model and return
a new frozen normalized model. Both schema layouts go through the same
converter for their event family.
"""

from datetime import datetime, timezone

from ..scm.models import (
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
)
from ..scm.refs import BRANCH_PREFIX, TAG_PREFIX, expand_ref, is_branch, is_empty_sha, is_tag, trim_ref
from .models import (
    AnyPullRequest,
    AnyPullRequestHookPayload,
    AnyPushCommit,
    AnyPushHookPayload,
    GiteePullRequest,
    GiteeRepository,
    GiteeUser,
)

# Merge request actions that carry no actionable state change:
# assignment, test-run and approval markers, and Gitee's synthetic
# "merge via push" notification sent alongside the real push event.
NOOP_PULL_REQUEST_ACTIONS = frozenset({
    "assign",
    "unassign",
    "test",
    "tested",
    "approved",
    "unapproved",
    "merge via push",
    "merge_via_push",
})


def time_or_zero(value: datetime | None) -> datetime:
    """Normalize a nullable timestamp; naive values are taken as UTC."""
    if value is None:
        return ZERO_TIME
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def convert_repository(src: GiteeRepository) -> Repository:
    return Repository(
        id=str(src.id),
        namespace=src.owner.login,
        name=src.name,
        branch=src.default_branch or "",
        private=src.private,
        clone=src.clone_url,
        clone_ssh=src.ssh_url,
        link=src.html_url,
    )


def convert_user(src: GiteeUser | None) -> User:
    if src is None:
        return User()
    return User(
        id="" if src.id is None else str(src.id),
        login=src.login or src.username,
        name=src.name,
        email=src.email or "",
        avatar=src.avatar_url or "",
    )


def convert_commit(src: AnyPushCommit, sha: str | None = None, link: str | None = None) -> Commit:
    """
    Convert a pushed commit.

    Author and committer share the commit timestamp; ``login`` comes from
    the identity's username when the layout has one, else its name.
    """
    date = time_or_zero(src.timestamp)
    return Commit(
        sha=src.id if sha is None else sha,
        message=src.message,
        link=src.url if link is None else link,
        author=Signature(
            login=src.author.login,
            name=src.author.name,
            email=src.author.email,
            date=date,
        ),
        committer=Signature(
            login=src.committer.login,
            name=src.committer.name,
            email=src.committer.email,
            date=date,
        ),
    )


def _head_sha(src: AnyPushHookPayload) -> str:
    """
    SHA the push points at.

    Tag pushes report the tag object's SHA in ``after`` but the tagged
    commit in ``head_commit``; consumers want the commit.
    """
    head = src.head_commit
    if is_tag(src.ref) and head is not None and head.id and head.id != src.after:
        return head.id
    return src.after


def convert_push_hook(src: AnyPushHookPayload) -> PushHook:
    sha = _head_sha(src)
    head = src.head_commit
    if head is not None:
        commit = convert_commit(head, sha=sha, link=src.compare)
    else:
        commit = Commit(sha=sha, link=src.compare)

    return PushHook(
        ref=src.ref,
        base_ref=src.base_ref or "",
        before=src.before,
        after=sha,
        commit=commit,
        commits=tuple(convert_commit(c) for c in src.commits),
        repo=convert_repository(src.repository),
        sender=convert_user(src.sender),
    )


def ref_is_tag(src: AnyPushHookPayload, default_tag: bool) -> bool:
    """
    Decide whether a created/deleted ref is a tag.

    An explicit ``ref_type`` wins, then the ref prefix; a bare ref falls
    back to ``default_tag``.
    """
    if src.ref_type:
        return src.ref_type.lower() == "tag"
    if is_tag(src.ref):
        return True
    if is_branch(src.ref):
        return False
    return default_tag


def ref_action(src: AnyPushHookPayload, infer_from_sha: bool = False) -> Action:
    """
    Action for a created/deleted ref.

    With ``infer_from_sha`` an all-zero ``before`` or ``after`` SHA stands
    in for a missing created/deleted flag.
    """
    if src.created:
        return Action.CREATE
    if src.deleted:
        return Action.DELETE
    if infer_from_sha:
        if is_empty_sha(src.before):
            return Action.CREATE
        if is_empty_sha(src.after):
            return Action.DELETE
    return Action.UNKNOWN


def convert_branch_hook(src: AnyPushHookPayload, action: Action) -> BranchHook:
    return BranchHook(
        action=action,
        ref=Reference(
            name=trim_ref(src.ref),
            path=expand_ref(src.ref, BRANCH_PREFIX),
            sha=src.after,
        ),
        repo=convert_repository(src.repository),
        sender=convert_user(src.sender),
    )


def convert_tag_hook(src: AnyPushHookPayload, action: Action) -> TagHook:
    path = expand_ref(src.ref, TAG_PREFIX)
    head = src.head_commit
    sha = src.after
    if head is not None and head.id and head.id != src.after:
        sha = head.id
    return TagHook(
        action=action,
        ref=Reference(
            name=trim_ref(src.ref),
            path=path,
            sha=sha,
        ),
        repo=convert_repository(src.repository),
        sender=convert_user(src.sender),
    )


def convert_ref_hook(
    src: AnyPushHookPayload, default_tag: bool, infer_from_sha: bool = False
) -> BranchHook | TagHook:
    """Build the branch or tag hook for a created/deleted ref."""
    action = ref_action(src, infer_from_sha=infer_from_sha)
    if ref_is_tag(src, default_tag):
        return convert_tag_hook(src, action)
    return convert_branch_hook(src, action)


def convert_pull_request(src: AnyPullRequest) -> PullRequest:
    state = (src.state or "").lower()
    if isinstance(src, GiteePullRequest):
        merged = src.merged
    else:
        merged = state == "merged"

    fork = ""
    if src.head.repo is not None:
        fork = src.head.repo.full_name

    return PullRequest(
        number=src.number,
        title=src.title,
        body=src.body or "",
        sha=src.head.sha,
        ref=f"refs/pull/{src.number}/head",
        source=src.head.ref,
        target=src.base.ref,
        fork=fork,
        link=src.html_url,
        diff=src.diff_url,
        closed=state in ("closed", "merged"),
        merged=merged,
        author=convert_user(src.user),
        created=time_or_zero(src.created_at),
        updated=time_or_zero(src.updated_at),
    )


def convert_pull_request_action(src: AnyPullRequestHookPayload) -> Action:
    """
    Normalize the merge request action.

    A close on the standard layout becomes a merge when the pull request
    reports ``merged``. The legacy layout has no such flag, so its closes
    always stay closes.
    """
    action = Action.lookup(src.action)
    pull_request = src.pull_request
    if action == Action.CLOSE and isinstance(pull_request, GiteePullRequest) and pull_request.merged:
        return Action.MERGE
    return action


def is_noop_pull_request_action(action: str) -> bool:
    return action in NOOP_PULL_REQUEST_ACTIONS


def convert_pull_request_hook(src: AnyPullRequestHookPayload) -> PullRequestHook:
    return PullRequestHook(
        action=convert_pull_request_action(src),
        repo=convert_repository(src.repository),
        pull_request=convert_pull_request(src.pull_request),
        sender=convert_user(src.sender),
    )
