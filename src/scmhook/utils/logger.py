"""
Logging infrastructure for scmhook.

Provides structured logging with configurable formats and levels.

This module offers:
- JSON and text formatters
- Sensitive data redaction so webhook tokens and secrets never
  reach log output

Example:
    >>> from scmhook.utils.logger import get_logger, setup_logging
    >>> setup_logging(level="DEBUG", format_type="json")
    >>> logger = get_logger(__name__)
    >>> logger.info("Webhook parsed", extra={"kind": "push"})
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Union


class LogLevel(Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Supported log formats."""
    JSON = "json"
    TEXT = "text"


class Colors:
    """ANSI color codes for console output."""
    CYAN = '\033[36m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    MAGENTA = '\033[35m'
    RESET = '\033[0m'

    LEVEL_COLORS = {
        LogLevel.DEBUG.value: CYAN,
        LogLevel.INFO.value: GREEN,
        LogLevel.WARNING.value: YELLOW,
        LogLevel.ERROR.value: RED,
        LogLevel.CRITICAL.value: MAGENTA,
    }


# Keys whose values are always redacted, matched case-insensitively
SENSITIVE_FIELDS = {
    'authorization', 'token', 'password', 'secret', 'key',
    'access_token', 'private_token', 'webhook_secret', 'webhook_token',
    'x-gitee-token', 'x_gitee_token', 'credential', 'credentials',
}

DEFAULT_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

STANDARD_LOG_FIELDS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName'
}

REDACTION_PLACEHOLDER = "***REDACTED***"


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return lowered in SENSITIVE_FIELDS or any(field in lowered for field in SENSITIVE_FIELDS)


class SensitiveDataRedactor:
    """
    Redacts secrets from log messages and structured extra fields.

    Values stored under sensitive keys are replaced outright; free text
    is scanned for ``token=...`` style assignments and bearer tokens.
    """

    def __init__(self) -> None:
        self.patterns: List[Pattern] = [
            re.compile(r'(?i)((?:x-gitee-)?token["\s]*[:=]["\s]*)([^\s",}]+)'),
            re.compile(r'(?i)(secret["\s]*[:=]["\s]*)([^\s",}]+)'),
            re.compile(r'(?i)(bearer\s+)([a-zA-Z0-9_\-\.]{8,})'),
            re.compile(r'(?i)([?&](?:access_token|private_token|token)=)([^&\s]+)'),
        ]

    def redact_string(self, text: str) -> str:
        """Replace token-looking substrings in ``text``."""
        if not isinstance(text, str):
            return text
        for pattern in self.patterns:
            text = pattern.sub(lambda m: f"{m.group(1)}{REDACTION_PLACEHOLDER}", text)
        return text

    def redact_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively redact sensitive values in a dictionary."""
        return {key: self.redact_value(key, value) for key, value in data.items()}

    def redact_value(self, key: str, value: Any) -> Any:
        """
        Redact a value based on its key and content.

        Args:
            key: The field key
            value: The value to potentially redact

        Returns:
            Original value or redacted version
        """
        if value is None:
            return value
        if isinstance(value, dict):
            return self.redact_dict(value)
        if isinstance(value, (list, tuple)):
            return type(value)(self.redact_value(key, item) for item in value)
        if _is_sensitive_key(key):
            return REDACTION_PLACEHOLDER
        if isinstance(value, str):
            return self.redact_string(value)
        return value


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {
            "level": "INFO",
            "logger": "scmhook.webhook.handlers",
            "message": "Webhook parsed",
            "kind": "push",
            "timestamp": "2024-06-01T10:30:45.123456Z"
        }
    """

    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = True):
        super().__init__()
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys
        self._redactor = SensitiveDataRedactor()

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in STANDARD_LOG_FIELDS:
                log_entry[key] = self._redactor.redact_value(key, value)

        if record.exc_info:
            log_entry["exception"] = self._redactor.redact_string(
                self.formatException(record.exc_info)
            )

        return json.dumps(
            log_entry,
            default=str,
            ensure_ascii=self.ensure_ascii,
            sort_keys=self.sort_keys
        )


class TextFormatter(logging.Formatter):
    """
    Text formatter for human-readable logging with optional colors.

    Example output:
        [2024-06-01 10:30:45] INFO     scmhook.webhook.handlers:88 - Webhook parsed
    """

    def __init__(self, use_colors: bool = True, timestamp_format: Optional[str] = None):
        super().__init__()
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.timestamp_format = timestamp_format or DEFAULT_TIMESTAMP_FORMAT

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(self.timestamp_format)
        message = (
            f"[{timestamp}] {record.levelname:8} "
            f"{record.name}:{record.lineno} - {record.getMessage()}"
        )

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        if self.use_colors:
            color = Colors.LEVEL_COLORS.get(record.levelname, '')
            message = f"{color}{message}{Colors.RESET}"

        return message


class SensitiveDataFilter(logging.Filter):
    """
    Filter that sanitizes sensitive data in log records.

    Redacts the message text and any extra field whose name looks
    sensitive. Keeps simple counters for diagnostics.
    """

    def __init__(self) -> None:
        super().__init__()
        self.redactor = SensitiveDataRedactor()
        self.redaction_stats = {"records_processed": 0, "fields_redacted": 0}

    def filter(self, record: logging.LogRecord) -> bool:
        self.redaction_stats["records_processed"] += 1

        if isinstance(record.msg, str):
            original = record.msg
            record.msg = self.redactor.redact_string(record.msg)
            if original != record.msg:
                self.redaction_stats["fields_redacted"] += 1

        for key in list(record.__dict__.keys()):
            if key in STANDARD_LOG_FIELDS or not _is_sensitive_key(key):
                continue
            original_value = getattr(record, key)
            redacted_value = self.redactor.redact_value(key, original_value)
            setattr(record, key, redacted_value)
            if original_value != redacted_value:
                self.redaction_stats["fields_redacted"] += 1

        return True

    def get_stats(self) -> Dict[str, Any]:
        """Get redaction statistics."""
        return dict(self.redaction_stats)


def validate_log_level(level: str) -> str:
    """
    Validate and normalize log level string.

    Raises:
        ValueError: If the log level is not supported
    """
    if not level:
        raise ValueError("Log level cannot be empty")

    level_upper = level.upper()
    valid_levels = {log_level.value for log_level in LogLevel}

    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level: {level}. Valid levels: {', '.join(sorted(valid_levels))}")

    return level_upper


def validate_log_format(format_type: str) -> str:
    """
    Validate and normalize log format string.

    Raises:
        ValueError: If the log format is not supported
    """
    if not format_type:
        raise ValueError("Log format cannot be empty")

    format_lower = format_type.lower()
    valid_formats = {log_format.value for log_format in LogFormat}

    if format_lower not in valid_formats:
        raise ValueError(f"Invalid log format: {format_type}. Valid formats: {', '.join(sorted(valid_formats))}")

    return format_lower


def setup_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    format_type: Union[str, LogFormat] = LogFormat.JSON,
    log_file: Optional[str] = None,
    use_colors: bool = True,
    sanitize_sensitive_data: bool = True,
) -> logging.Logger:
    """
    Configure the root logger.

    Console output uses the requested format; file output is always
    JSON. Sensitive data filtering is attached to every handler.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('json' or 'text')
        log_file: Optional log file path
        use_colors: Whether to use colors in text output
        sanitize_sensitive_data: Whether to redact tokens and secrets

    Returns:
        Configured root logger

    Raises:
        ValueError: If level or format is not supported
    """
    level_str = level.value if isinstance(level, LogLevel) else level
    format_str = format_type.value if isinstance(format_type, LogFormat) else format_type

    validated_level = validate_log_level(level_str)
    validated_format = validate_log_format(format_str)
    numeric_level = getattr(logging, validated_level)

    logger = logging.getLogger()
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    filters: List[logging.Filter] = []
    if sanitize_sensitive_data:
        filters.append(SensitiveDataFilter())

    if validated_format == LogFormat.JSON.value:
        console_formatter: logging.Formatter = JSONFormatter()
    else:
        console_formatter = TextFormatter(use_colors=use_colors)

    logger.addHandler(_create_handler(logging.StreamHandler(sys.stdout), numeric_level, console_formatter, filters))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        logger.addHandler(_create_handler(file_handler, numeric_level, JSONFormatter(), filters))

    return logger


def setup_logging_from_settings(settings: Any) -> logging.Logger:
    """Configure logging from a :class:`scmhook.config.settings.Settings`."""
    return setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        log_file=settings.log_file,
    )


def _create_handler(
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
    filters: List[logging.Filter]
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for filter_obj in filters:
        handler.addFilter(filter_obj)
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


__all__ = [
    "LogLevel",
    "LogFormat",
    "SensitiveDataRedactor",
    "SensitiveDataFilter",
    "JSONFormatter",
    "TextFormatter",
    "validate_log_level",
    "validate_log_format",
    "setup_logging",
    "setup_logging_from_settings",
    "get_logger",
]
