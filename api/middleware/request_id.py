from __future__ import annotations

import re
import uuid
from collections.abc import Awaitable, Callable

from starlette.types import Message, Receive, Scope, Send

# Local alias to avoid linter/editor false positives on starlette.types.ASGIApp
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

_ACCEPTABLE_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestIDMiddleware:
    """
    ASGI middleware that assigns a per-request trace_id and exposes it via:
      - scope["trace_id"]
      - response header "X-Trace-Id"

    A well-formed inbound ``X-Request-ID`` is reused so callers can correlate
    their own logs; anything else gets a fresh UUID.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        trace_id = _inbound_request_id(scope) or str(uuid.uuid4())
        scope["trace_id"] = trace_id

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers = message.setdefault("headers", [])
                headers.append((b"x-trace-id", trace_id.encode("utf-8")))
            await send(message)

        await self.app(scope, receive, send_wrapper)


def _inbound_request_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers") or []:
        if name.lower() == b"x-request-id":
            candidate = value.decode("latin-1").strip()
            return candidate if _ACCEPTABLE_ID.match(candidate) else None
    return None
