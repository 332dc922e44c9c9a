"""
FastAPI/Starlette adapter for the webhook dispatcher.

Lets an application hand its incoming ``Request`` straight to the
parser:

    @app.post("/hooks/gitee")
    async def gitee_hook(request: Request):
        hook = await parse_request(request, resolve_secret)
        ...

The body is streamed and rejected as soon as it passes the payload
limit, so oversized deliveries are never buffered in full.
"""

from typing import Optional

from fastapi import Request
from starlette.requests import ClientDisconnect

from ..scm.models import Webhook
from ..utils.exceptions import PayloadIOError
from .handlers import SecretFunc, WebhookService, get_default_service


async def read_body(request: Request, service: WebhookService) -> bytes:
    """Read the request body, stopping once it exceeds the service's limit."""
    body = bytearray()
    try:
        async for chunk in request.stream():
            body.extend(chunk)
            service.check_size(len(body))
    except (ClientDisconnect, OSError) as e:
        raise PayloadIOError(f"Failed to read webhook body: {e}", cause=e) from e
    return bytes(body)


async def parse_request(
    request: Request,
    secret_func: SecretFunc,
    service: Optional[WebhookService] = None,
) -> Optional[Webhook]:
    """
    Read the request body and headers and parse them as a Gitee delivery.

    Raises the same errors as :meth:`WebhookService.parse`.
    """
    service = service or get_default_service()
    body = await read_body(request, service)
    return service.parse(body, request.headers, secret_func)
