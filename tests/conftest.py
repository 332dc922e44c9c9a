"""
Configuration and shared fixtures for the pytest suite
"""
import copy
import json
import os
import sys
from pathlib import Path

import pytest

# Add src to path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables BEFORE importing anything from scmhook
os.environ.update({
    "SCMHOOK_LOG_LEVEL": "DEBUG",
    "SCMHOOK_LOG_FORMAT": "text",
})


REPOSITORY = {
    "id": 14836026,
    "name": "drone-yml-test",
    "path": "drone-yml-test",
    "full_name": "kit101/drone-yml-test",
    "owner": {
        "id": 511681,
        "login": "kit101",
        "name": "kit101",
        "email": "kit101@gitee.com",
        "username": "kit101",
        "avatar_url": "https://gitee.com/assets/no_portrait.png",
    },
    "private": False,
    "fork": False,
    "html_url": "https://gitee.com/kit101/drone-yml-test",
    "ssh_url": "git@gitee.com:kit101/drone-yml-test.git",
    "clone_url": "https://gitee.com/kit101/drone-yml-test.git",
    "default_branch": "master",
}

SENDER = {
    "id": 511681,
    "login": "kit101",
    "name": "kit101",
    "email": "kit101@gitee.com",
    "username": "kit101",
    "avatar_url": "https://gitee.com/assets/no_portrait.png",
}

COMMIT = {
    "id": "a4ec3b1f3d8bd2b4c2a3b5d6d9d9a8c0e5f1d2c3",
    "tree_id": "7e2d3c1b0a9f8e7d6c5b4a3f2e1d0c9b8a7f6e5d",
    "distinct": True,
    "message": "update README.md.\n",
    "timestamp": "2021-07-26T16:50:58+08:00",
    "url": "https://gitee.com/kit101/drone-yml-test/commit/a4ec3b1f3d8bd2b4c2a3b5d6d9d9a8c0e5f1d2c3",
    "author": {
        "time": "2021-07-26T16:50:58+08:00",
        "name": "Kit Li",
        "email": "kit101@gitee.com",
        "username": "kit101",
        "user_name": "kit101",
    },
    "committer": {
        "name": "Gitee",
        "email": "noreply@gitee.com",
        "username": "gitee",
        "user_name": "gitee",
    },
    "added": None,
    "removed": None,
    "modified": ["README.md"],
}


def _push(**overrides):
    payload = {
        "ref": "refs/heads/master",
        "before": "2b1a4d7c3e9f0a8b6c5d4e3f2a1b0c9d8e7f6a5b",
        "after": COMMIT["id"],
        "created": False,
        "deleted": False,
        "compare": "https://gitee.com/kit101/drone-yml-test/compare/2b1a4d7c3e9f...a4ec3b1f3d8b",
        "commits": [copy.deepcopy(COMMIT)],
        "head_commit": copy.deepcopy(COMMIT),
        "total_commits_count": 1,
        "repository": copy.deepcopy(REPOSITORY),
        "project": copy.deepcopy(REPOSITORY),
        "user_id": 511681,
        "user_name": "kit101",
        "user": copy.deepcopy(SENDER),
        "pusher": copy.deepcopy(SENDER),
        "sender": copy.deepcopy(SENDER),
        "enterprise": None,
        "hook_name": "push_hooks",
        "password": "",
    }
    payload.update(overrides)
    return payload


def _strip_usernames(payload):
    """Turn a standard push payload into the legacy (name-only) layout."""
    commits = list(payload.get("commits") or [])
    if payload.get("head_commit"):
        commits.append(payload["head_commit"])
    for commit in commits:
        for role in ("author", "committer"):
            commit[role].pop("username", None)
            commit[role].pop("user_name", None)
    return payload


def _pull_request(action="open", **pr_overrides):
    pull_request = {
        "id": 4150621,
        "number": 7,
        "state": "open",
        "title": "Add drone pipeline",
        "body": "Adds .drone.yml",
        "html_url": "https://gitee.com/kit101/drone-yml-test/pulls/7",
        "diff_url": "https://gitee.com/kit101/drone-yml-test/pulls/7.diff",
        "patch_url": "https://gitee.com/kit101/drone-yml-test/pulls/7.patch",
        "created_at": "2021-07-26T17:10:02+08:00",
        "updated_at": "2021-07-26T17:12:45+08:00",
        "merged": False,
        "mergeable": True,
        "head": {
            "label": "feature",
            "ref": "feature",
            "sha": "f0e1d2c3b4a5968778695a4b3c2d1e0f9a8b7c6d",
            "user": copy.deepcopy(SENDER),
            "repo": copy.deepcopy(REPOSITORY),
        },
        "base": {
            "label": "master",
            "ref": "master",
            "sha": "2b1a4d7c3e9f0a8b6c5d4e3f2a1b0c9d8e7f6a5b",
            "user": copy.deepcopy(SENDER),
            "repo": copy.deepcopy(REPOSITORY),
        },
        "user": copy.deepcopy(SENDER),
    }
    pull_request.update(pr_overrides)
    return {
        "action": action,
        "action_desc": "",
        "number": pull_request["number"],
        "pull_request": pull_request,
        "repository": copy.deepcopy(REPOSITORY),
        "sender": copy.deepcopy(SENDER),
        "hook_name": "merge_request_hooks",
    }


@pytest.fixture
def push_payload():
    """Plain branch push, standard layout"""
    return _push()


@pytest.fixture
def legacy_push_payload():
    """Plain branch push, legacy layout without username keys"""
    return _strip_usernames(_push())


@pytest.fixture
def branch_create_payload():
    return _push(
        ref="refs/heads/feature-x",
        before="0000000000000000000000000000000000000000",
        created=True,
        commits=[],
        head_commit=None,
    )


@pytest.fixture
def branch_delete_payload():
    return _push(
        ref="refs/heads/feature-x",
        after="0000000000000000000000000000000000000000",
        deleted=True,
        commits=[],
        head_commit=None,
    )


@pytest.fixture
def tag_create_payload():
    """Tag push where ``after`` is the tag object and head_commit the tagged commit"""
    return _push(
        ref="refs/tags/v1.0.0",
        before="0000000000000000000000000000000000000000",
        after="9c8b7a6f5e4d3c2b1a0f9e8d7c6b5a4f3e2d1c0b",
        created=True,
        commits=[],
    )


@pytest.fixture
def tag_delete_payload():
    return _push(
        ref="refs/tags/v1.0.0",
        after="0000000000000000000000000000000000000000",
        deleted=True,
        commits=[],
        head_commit=None,
    )


@pytest.fixture
def tag_push_payload():
    """Push to a tag ref without created/deleted flags"""
    return _push(
        ref="refs/tags/v1.0.0",
        after="9c8b7a6f5e4d3c2b1a0f9e8d7c6b5a4f3e2d1c0b",
        commits=[],
    )


@pytest.fixture
def pull_request_payload():
    """Factory for merge request payloads: ``pull_request_payload(action, **pr_fields)``"""
    return _pull_request


@pytest.fixture
def legacy_pull_request_payload():
    """Factory for legacy-layout merge request payloads (no ``merged`` key)"""
    def factory(action="open", **pr_overrides):
        payload = _pull_request(action, **pr_overrides)
        payload["pull_request"].pop("merged", None)
        return payload
    return factory


@pytest.fixture
def encode():
    """Serialize a payload dict to request body bytes"""
    def _encode(payload):
        return json.dumps(payload).encode("utf-8")
    return _encode
