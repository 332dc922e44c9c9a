"""Helpers for git reference names."""

BRANCH_PREFIX = "refs/heads/"
TAG_PREFIX = "refs/tags/"

# git reports a missing object (branch creation/deletion) with this SHA
EMPTY_COMMIT = "0" * 40


def is_tag(ref: str) -> bool:
    """Return True if ``ref`` is a fully qualified tag reference."""
    return ref.startswith(TAG_PREFIX)


def is_branch(ref: str) -> bool:
    """Return True if ``ref`` is a fully qualified branch reference."""
    return ref.startswith(BRANCH_PREFIX)


def trim_ref(ref: str) -> str:
    """Strip a single leading ``refs/heads/`` or ``refs/tags/``."""
    for prefix in (BRANCH_PREFIX, TAG_PREFIX):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return ref


def expand_ref(name: str, prefix: str) -> str:
    """
    Qualify a bare branch or tag name with ``prefix``.

    Names that already start with ``refs/`` are returned unchanged.
    """
    if name.startswith("refs/"):
        return name
    return prefix.rstrip("/") + "/" + name


def is_empty_sha(sha: str) -> bool:
    """True for the all-zero SHA git uses for a missing object."""
    return bool(sha) and set(sha) == {"0"}
