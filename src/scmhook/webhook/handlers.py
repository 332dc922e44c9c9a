"""
Gitee webhook dispatcher.

Turns one inbound delivery (body + headers) into a normalized event:

1. Read the body, bounded by the payload limit
2. Select a decoder from the X-Gitee-Event header
3. Decode the JSON payload and map it to the normalized model
4. Resolve the secret for the event and check the X-Gitee-Token header
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, BinaryIO, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from ..config.settings import DEFAULT_MAX_PAYLOAD_BYTES, Settings, get_settings
from ..scm.models import Webhook
from ..utils.exceptions import (
    PayloadIOError,
    SecretResolutionError,
    SignatureInvalidError,
    UnknownEventError,
    WebhookParsingError,
)
from ..utils.logger import get_logger
from .converters import (
    convert_pull_request_hook,
    convert_push_hook,
    convert_ref_hook,
    is_noop_pull_request_action,
)
from .models import (
    PULL_REQUEST_DECODERS,
    PUSH_DECODERS,
    SchemaVariant,
    WebhookEventType,
    detect_variant,
)
from .validators import verify_token

EVENT_HEADER = "X-Gitee-Event"
TOKEN_HEADER = "X-Gitee-Token"

SecretFunc = Callable[[Webhook], Optional[str]]
Body = Union[bytes, bytearray, BinaryIO]


@dataclass
class WebhookConfig:
    """
    Configuration for webhook parsing.

    Controls the payload limit, the schema layout and header names.
    """

    max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    schema_variant: SchemaVariant = SchemaVariant.AUTO
    event_header: str = EVENT_HEADER
    token_header: str = TOKEN_HEADER

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookConfig":
        return cls(
            max_payload_bytes=settings.max_payload_bytes,
            schema_variant=SchemaVariant(settings.schema_variant),
        )


class WebhookService:
    """
    Parses Gitee webhook deliveries into normalized events.

    Instances hold only configuration; ``parse`` keeps no state between
    calls and can be shared across concurrent requests.
    """

    def __init__(self, config: Optional[WebhookConfig] = None):
        self.config = config or WebhookConfig()
        self._logger = get_logger(f"{__name__}.WebhookService")

    def parse(
        self,
        body: Body,
        headers: Mapping[str, str],
        secret_func: SecretFunc,
    ) -> Optional[Webhook]:
        """
        Parse one delivery.

        Args:
            body: Raw request body, as bytes or a binary stream
            headers: Request headers (matched case-insensitively)
            secret_func: Returns the expected secret for a parsed event;
                an empty result disables verification

        Returns:
            The normalized event, or None for merge request actions that
            carry nothing actionable

        Raises:
            PayloadIOError: Body unreadable or over the size limit
            UnknownEventError: Event header missing or not handled
            WebhookParsingError: Body is not a valid payload for the event
            SecretResolutionError: ``secret_func`` raised; carries ``hook``
            SignatureInvalidError: Token mismatch; carries ``hook``
        """
        data = self._read_body(body)
        normalized_headers = {k.lower(): v for k, v in headers.items()}

        event_header = normalized_headers.get(self.config.event_header.lower())
        try:
            event = WebhookEventType(event_header)
        except ValueError:
            self._logger.warning(
                "Unknown webhook event",
                extra={"event_header": event_header},
            )
            raise UnknownEventError(event_header)

        if event == WebhookEventType.PUSH:
            hook = self._parse_push_hook(event, data)
        elif event == WebhookEventType.TAG_PUSH:
            hook = self._parse_tag_hook(event, data)
        else:
            hook = self._parse_pull_request_hook(event, data)

        if hook is None:
            return None

        self._logger.info(
            "Webhook parsed",
            extra={"event": event.value, "kind": hook.kind, "repo": hook.repository().full_name},
        )

        # Resolve the secret only now: the resolver may pick it per repository.
        try:
            secret = secret_func(hook)
        except Exception as e:
            self._logger.error(
                f"Secret resolution failed: {e}",
                extra={"kind": hook.kind, "repo": hook.repository().full_name},
            )
            raise SecretResolutionError(hook, e) from e

        if not secret:
            self._logger.debug("No secret resolved, skipping token verification")
            return hook

        if not verify_token(secret, normalized_headers.get(self.config.token_header.lower())):
            self._logger.warning(
                "Invalid webhook token",
                extra={"kind": hook.kind, "repo": hook.repository().full_name},
            )
            raise SignatureInvalidError(hook)

        self._logger.debug("Webhook token verified")
        return hook

    def _read_body(self, body: Body) -> bytes:
        if isinstance(body, (bytes, bytearray)):
            self.check_size(len(body))
            return bytes(body)

        # One byte past the limit tells "exactly at limit" from "over"
        wanted = self.config.max_payload_bytes + 1
        data = bytearray()
        try:
            while len(data) < wanted:
                chunk = body.read(wanted - len(data))
                if not chunk:
                    break
                data.extend(chunk)
        except (OSError, ValueError) as e:
            raise PayloadIOError(f"Failed to read webhook body: {e}", cause=e) from e

        self.check_size(len(data))
        return bytes(data)

    def check_size(self, size: int) -> None:
        """Raise PayloadIOError when ``size`` bytes exceed the payload limit."""
        limit = self.config.max_payload_bytes
        if size > limit:
            self._logger.warning(
                "Webhook body exceeds payload limit",
                extra={"limit": limit},
            )
            raise PayloadIOError(f"Webhook body exceeds {limit} bytes", limit=limit)

    def _decode_json(self, event: WebhookEventType, data: bytes) -> dict[str, Any]:
        try:
            payload = json.loads(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            self._logger.error(
                f"Failed to decode payload as UTF-8: {e}",
                extra={"event": event.value},
            )
            raise WebhookParsingError(f"Invalid UTF-8 encoding: {e}", event=event.value) from e
        except json.JSONDecodeError as e:
            excerpt = data[:200].decode("utf-8", errors="replace")
            self._logger.error(
                f"Failed to parse JSON payload: {e}",
                extra={"event": event.value, "excerpt": excerpt},
            )
            raise WebhookParsingError(
                f"Invalid JSON payload: {e}", event=event.value, payload_excerpt=excerpt
            ) from e

        if not isinstance(payload, dict):
            raise WebhookParsingError(
                f"Expected a JSON object, got {type(payload).__name__}", event=event.value
            )
        return payload

    def _variant(self, event: WebhookEventType, payload: dict[str, Any]) -> SchemaVariant:
        if self.config.schema_variant != SchemaVariant.AUTO:
            return self.config.schema_variant
        return detect_variant(event, payload)

    def _validate(self, event: WebhookEventType, decoder: Any, payload: dict[str, Any]) -> Any:
        try:
            return decoder.model_validate(payload)
        except ValidationError as e:
            validation_errors = [
                {"field": err["loc"], "message": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            self._logger.error(
                f"Payload validation failed for {event.value}",
                extra={"error_count": len(validation_errors), "errors": validation_errors},
            )
            raise WebhookParsingError(
                f"Invalid {event.value} payload schema",
                event=event.value,
                validation_errors=validation_errors,
            ) from e

    def _parse_push_hook(self, event: WebhookEventType, data: bytes) -> Webhook:
        payload = self._decode_json(event, data)
        decoder = PUSH_DECODERS[self._variant(event, payload)]
        src = self._validate(event, decoder, payload)
        if src.created or src.deleted:
            return convert_ref_hook(src, default_tag=False)
        return convert_push_hook(src)

    def _parse_tag_hook(self, event: WebhookEventType, data: bytes) -> Webhook:
        payload = self._decode_json(event, data)
        decoder = PUSH_DECODERS[self._variant(event, payload)]
        src = self._validate(event, decoder, payload)
        return convert_ref_hook(src, default_tag=True, infer_from_sha=True)

    def _parse_pull_request_hook(self, event: WebhookEventType, data: bytes) -> Optional[Webhook]:
        payload = self._decode_json(event, data)
        decoder = PULL_REQUEST_DECODERS[self._variant(event, payload)]
        src = self._validate(event, decoder, payload)
        if is_noop_pull_request_action(src.action):
            self._logger.info(
                "Ignoring merge request action",
                extra={"action": src.action, "number": src.number},
            )
            return None
        return convert_pull_request_hook(src)


@lru_cache(maxsize=1)
def get_default_service() -> WebhookService:
    """Return the process-wide service, configured from SCMHOOK_* settings."""
    return WebhookService(WebhookConfig.from_settings(get_settings()))


def parse(body: Body, headers: Mapping[str, str], secret_func: SecretFunc) -> Optional[Webhook]:
    """Parse a delivery with the environment-driven default configuration."""
    return get_default_service().parse(body, headers, secret_func)
