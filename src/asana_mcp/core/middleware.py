# ============================================================================
# ASANA MCP - HTTP MIDDLEWARE
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Pure ASGI middleware (safe with streaming responses):
#   - RequestLogMiddleware       one log line per request
#   - SecurityHeadersMiddleware  static hardening headers on every response
# ============================================================================

import logging

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

__all__ = [
    "RequestLogMiddleware",
    "SecurityHeadersMiddleware",
    "SECURITY_HEADERS",
]

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "style-src 'self' 'unsafe-inline'",
    "script-src 'self'",
    "img-src 'self' data: https:",
])

SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Cross-Origin-Resource-Policy": "cross-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


class RequestLogMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            client = scope.get("client")
            client_host = client[0] if client else "-"
            logger.info(f"{scope['method']} {scope['path']} - {client_host}")
        await self.app(scope, receive, send)


class SecurityHeadersMiddleware:
    def __init__(self, app: ASGIApp, headers: dict[str, str] | None = None) -> None:
        self.app = app
        self.headers = headers if headers is not None else SECURITY_HEADERS

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for key, value in self.headers.items():
                    response_headers.setdefault(key, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)
