"""Request ID middleware — generates or propagates X-Request-Id."""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Give every request an id and a fresh structlog context.

    The context starts with ``request_id``, ``method`` and ``path``; routers add
    ``user_id`` once the player is resolved (see :func:`bind_user`), so badge
    and drill events logged further down carry all four.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def bind_user(user_id: int) -> None:
    """Attach the player to the current request's log context."""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def current_request_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("request_id")
