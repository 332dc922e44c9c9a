"""
Tests for the Gitee wire decoders and the schema variant probe.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from scmhook.webhook.models import (
    LegacyPullRequestHookPayload,
    LegacyPushHookPayload,
    PullRequestHookPayload,
    PushHookPayload,
    SchemaVariant,
    WebhookEventType,
    detect_variant,
    parse_nullable_time,
)


class TestParseNullableTime:
    def test_parses_offset_timestamp(self):
        value = parse_nullable_time("2021-07-26T16:50:58+08:00")
        assert isinstance(value, datetime)
        assert value.utcoffset().total_seconds() == 8 * 3600

    @pytest.mark.parametrize("raw", [None, "", "not a date", "2021-13-45T99:00:00"])
    def test_absent_or_malformed_is_none(self, raw):
        assert parse_nullable_time(raw) is None


class TestPushDecoders:
    def test_standard_layout(self, push_payload):
        src = PushHookPayload.model_validate(push_payload)

        assert src.ref == "refs/heads/master"
        assert src.head_commit.author.login == "kit101"
        assert src.head_commit.author.name == "Kit Li"
        assert src.commits[0].committer.login == "gitee"
        assert src.repository.id == 14836026

    def test_legacy_layout_uses_display_name(self, legacy_push_payload):
        src = LegacyPushHookPayload.model_validate(legacy_push_payload)

        assert src.head_commit.author.login == "Kit Li"
        assert src.commits[0].committer.login == "Gitee"

    def test_standard_layout_falls_back_to_name(self, push_payload):
        push_payload["head_commit"]["author"]["username"] = None
        src = PushHookPayload.model_validate(push_payload)

        assert src.head_commit.author.login == "Kit Li"

    def test_unparsable_timestamp_does_not_fail(self, push_payload):
        push_payload["head_commit"]["timestamp"] = "yesterday"
        src = PushHookPayload.model_validate(push_payload)

        assert src.head_commit.timestamp is None

    def test_null_commits_and_flags(self, push_payload):
        push_payload.update(commits=None, created=None, deleted=None)
        src = PushHookPayload.model_validate(push_payload)

        assert src.commits == []
        assert src.created is False
        assert src.deleted is False

    def test_null_optional_fields_take_defaults(self, push_payload):
        push_payload["compare"] = None
        push_payload["head_commit"]["message"] = None
        push_payload["sender"]["name"] = None
        push_payload["repository"]["html_url"] = None
        push_payload["pusher"] = None
        src = PushHookPayload.model_validate(push_payload)

        assert src.compare == ""
        assert src.head_commit.message == ""
        assert src.sender.name == ""
        assert src.sender.login == "kit101"
        assert src.repository.html_url == ""
        assert src.pusher.login == ""

    def test_missing_repository_is_rejected(self, push_payload):
        del push_payload["repository"]
        with pytest.raises(ValidationError):
            PushHookPayload.model_validate(push_payload)

    def test_null_repository_is_rejected(self, push_payload):
        push_payload["repository"] = None
        with pytest.raises(ValidationError):
            PushHookPayload.model_validate(push_payload)

    def test_string_repository_id(self, push_payload):
        push_payload["repository"]["id"] = "abc123"
        src = PushHookPayload.model_validate(push_payload)

        assert src.repository.id == "abc123"


class TestPullRequestDecoders:
    def test_standard_layout_has_merged(self, pull_request_payload):
        src = PullRequestHookPayload.model_validate(pull_request_payload("close", merged=True))

        assert src.pull_request.merged is True
        assert src.pull_request.head.ref == "feature"

    def test_legacy_layout_ignores_merged(self, legacy_pull_request_payload):
        payload = legacy_pull_request_payload("close")
        payload["pull_request"]["merged"] = True
        src = LegacyPullRequestHookPayload.model_validate(payload)

        assert not hasattr(src.pull_request, "merged")

    def test_null_pull_request_fields_take_defaults(self, pull_request_payload):
        payload = pull_request_payload("open", title=None, number=None, merged=None, head=None)
        src = PullRequestHookPayload.model_validate(payload)

        assert src.pull_request.title == ""
        assert src.pull_request.number == 0
        assert src.pull_request.merged is False
        assert src.pull_request.head.ref == ""


class TestDetectVariant:
    def test_push_with_username_is_standard(self, push_payload):
        assert detect_variant(WebhookEventType.PUSH, push_payload) == SchemaVariant.STANDARD

    def test_push_without_username_is_legacy(self, legacy_push_payload):
        assert detect_variant(WebhookEventType.PUSH, legacy_push_payload) == SchemaVariant.LEGACY

    def test_push_without_commits_is_legacy(self, branch_create_payload):
        assert detect_variant(WebhookEventType.PUSH, branch_create_payload) == SchemaVariant.LEGACY

    def test_tag_push_probes_head_commit(self, tag_create_payload):
        assert detect_variant(WebhookEventType.TAG_PUSH, tag_create_payload) == SchemaVariant.STANDARD

    def test_merge_request_with_merged_is_standard(self, pull_request_payload):
        payload = pull_request_payload("open")
        assert detect_variant(WebhookEventType.MERGE_REQUEST, payload) == SchemaVariant.STANDARD

    def test_merge_request_without_merged_is_legacy(self, legacy_pull_request_payload):
        payload = legacy_pull_request_payload("open")
        assert detect_variant(WebhookEventType.MERGE_REQUEST, payload) == SchemaVariant.LEGACY
