"""
Configuration management for scmhook.

Settings are read from environment variables (and a ``.env`` file when
present) into a validated dataclass.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Optional

from dotenv import load_dotenv

from ..utils.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

DEFAULT_MAX_PAYLOAD_BYTES = 10_000_000

SCHEMA_VARIANTS = ("auto", "standard", "legacy")


@dataclass
class Settings:
    """
    Application settings loaded from environment variables.

    All settings have defaults and are validated on instantiation.
    """

    # Webhook parsing
    max_payload_bytes: int = field(default=DEFAULT_MAX_PAYLOAD_BYTES)
    schema_variant: str = field(default="auto")
    webhook_secret: str = field(default="")

    # Logging Configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="json")
    log_file: Optional[str] = field(default=None)

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.max_payload_bytes <= 0:
            raise ConfigurationError(
                "max_payload_bytes must be positive",
                config_key="max_payload_bytes",
                config_value=str(self.max_payload_bytes),
            )

        self.schema_variant = self.schema_variant.lower()
        if self.schema_variant not in SCHEMA_VARIANTS:
            raise ConfigurationError(
                f"schema_variant must be one of: {', '.join(SCHEMA_VARIANTS)}",
                config_key="schema_variant",
                config_value=self.schema_variant,
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ConfigurationError(
                "log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL",
                config_key="log_level",
                config_value=self.log_level,
            )

        self.log_format = self.log_format.lower()
        if self.log_format not in ["json", "text"]:
            raise ConfigurationError(
                "log_format must be one of: json, text",
                config_key="log_format",
                config_value=self.log_format,
            )

    @classmethod
    def from_env(cls, **kwargs) -> "Settings":
        """Create Settings instance from environment variables with optional overrides."""
        env_vars = {}

        env_mapping = {
            "SCMHOOK_MAX_PAYLOAD_BYTES": "max_payload_bytes",
            "SCMHOOK_SCHEMA_VARIANT": "schema_variant",
            "SCMHOOK_WEBHOOK_SECRET": "webhook_secret",
            "SCMHOOK_LOG_LEVEL": "log_level",
            "SCMHOOK_LOG_FORMAT": "log_format",
            "SCMHOOK_LOG_FILE": "log_file",
        }

        for env_var, field_name in env_mapping.items():
            if env_var in os.environ:
                env_vars[field_name] = os.environ[env_var]

        if "max_payload_bytes" in env_vars:
            try:
                env_vars["max_payload_bytes"] = int(env_vars["max_payload_bytes"])
            except ValueError:
                raise ConfigurationError(
                    "SCMHOOK_MAX_PAYLOAD_BYTES must be an integer",
                    config_key="max_payload_bytes",
                    config_value=env_vars["max_payload_bytes"],
                )

        env_vars.update(kwargs)

        return cls(**env_vars)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once from the environment."""
    return Settings.from_env()


def static_secret(secret: Optional[str] = None) -> Callable[[object], str]:
    """
    Build a secret resolver that returns the same secret for every event.

    Without an argument the configured SCMHOOK_WEBHOOK_SECRET is used.
    An empty secret disables token verification.
    """
    if secret is None:
        secret = get_settings().webhook_secret

    def resolve(hook: object) -> str:
        return secret

    return resolve
