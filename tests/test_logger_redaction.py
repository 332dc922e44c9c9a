"""
Tests for logging setup and sensitive data redaction.

Webhook tokens and resolved secrets must never reach log output.
"""

import json
import logging

import pytest

from scmhook.utils.logger import (
    JSONFormatter,
    SensitiveDataFilter,
    SensitiveDataRedactor,
    TextFormatter,
    get_logger,
    setup_logging,
    validate_log_format,
    validate_log_level,
)


def make_record(msg, **extra):
    record = logging.LogRecord(
        name="scmhook.test", level=logging.INFO, pathname=__file__, lineno=10,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSensitiveDataRedactor:
    def test_value_redaction_by_key(self):
        redactor = SensitiveDataRedactor()

        assert redactor.redact_value("X-Gitee-Token", "topsecret") == "***REDACTED***"
        assert redactor.redact_value("webhook_secret", "topsecret") == "***REDACTED***"
        assert redactor.redact_value("repo", "kit101/demo") == "kit101/demo"

    def test_nested_dict_redaction(self):
        redactor = SensitiveDataRedactor()
        data = {"headers": {"X-Gitee-Event": "Push Hook", "X-Gitee-Token": "topsecret"}}

        redacted = redactor.redact_dict(data)

        assert redacted["headers"]["X-Gitee-Event"] == "Push Hook"
        assert redacted["headers"]["X-Gitee-Token"] == "***REDACTED***"

    @pytest.mark.parametrize("text", [
        "token=topsecret",
        "X-Gitee-Token: topsecret",
        "secret: topsecret",
        "Authorization: Bearer abcdefgh12345678",
        "https://gitee.com/api/v5/repos?access_token=topsecret",
    ])
    def test_string_redaction(self, text):
        redacted = SensitiveDataRedactor().redact_string(text)

        assert "topsecret" not in redacted
        assert "abcdefgh12345678" not in redacted
        assert "***REDACTED***" in redacted

    def test_plain_text_untouched(self):
        text = "Webhook parsed for kit101/drone-yml-test"
        assert SensitiveDataRedactor().redact_string(text) == text


class TestSensitiveDataFilter:
    def test_filter_redacts_message_and_extra(self):
        log_filter = SensitiveDataFilter()
        record = make_record("received token=topsecret", webhook_token="topsecret", repo="kit101/demo")

        assert log_filter.filter(record) is True
        assert "topsecret" not in record.msg
        assert record.webhook_token == "***REDACTED***"
        assert record.repo == "kit101/demo"
        assert log_filter.get_stats()["records_processed"] == 1


class TestFormatters:
    def test_json_formatter(self):
        record = make_record("Webhook parsed", kind="push", token="topsecret")
        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "Webhook parsed"
        assert entry["level"] == "INFO"
        assert entry["kind"] == "push"
        assert entry["token"] == "***REDACTED***"
        assert entry["timestamp"].endswith("Z")

    def test_text_formatter(self):
        line = TextFormatter(use_colors=False).format(make_record("Webhook parsed"))

        assert "INFO" in line
        assert "scmhook.test:10 - Webhook parsed" in line


class TestSetup:
    def test_validate_level_and_format(self):
        assert validate_log_level("debug") == "DEBUG"
        assert validate_log_format("JSON") == "json"
        with pytest.raises(ValueError):
            validate_log_level("verbose")
        with pytest.raises(ValueError):
            validate_log_format("xml")

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "scmhook.log"
        root = setup_logging(level="DEBUG", format_type="text", log_file=str(log_file))
        try:
            get_logger("scmhook.test").info("received token=topsecret")
            for handler in root.handlers:
                handler.flush()

            content = log_file.read_text(encoding="utf-8")
            assert "topsecret" not in content
            assert json.loads(content.splitlines()[-1])["logger"] == "scmhook.test"
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers.clear()
