# ============================================================================
# ASANA MCP - TRANSPORT LAYER
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# DUAL TRANSPORT ARCHITECTURE:
# - STDIO:  Standard MCP transport (Claude Desktop, Cursor, VS Code).
#           One process-wide token, resolved at startup.
# - HTTP:   Streaming façade for automation platforms (n8n, Render).
#           Token per request (x-asana-token), env default as fallback.
#
# HTTP ROUTES:
#   GET  /health                → {status, version, timestamp}
#   POST /mcp                   → SSE frames for {method, params}
#   GET  /tools                 → tool descriptors
#   POST /tools/execute         → SSE frames for {toolName, arguments}
#   POST /tools/{tool_name}     → single JSON result
#   GET  /prompts               → prompts/list result
#   GET  /prompts/{prompt_name} → prompts/get result
# ============================================================================

import asyncio
import json
import logging
import os
import sys
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from mcp.server import Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse

from .auth import extract_token_from_request
from .catalog import CapabilityCatalog
from .errors import GatewayError
from .framing import StreamFramer, error_message, stream_operation
from .router import McpMethod, MethodRouter, serialize_result

logger = logging.getLogger(__name__)

__all__ = [
    "ClientFactory",
    "MAX_BODY_BYTES",
    "run_stdio",
    "run_http",
    "create_http_app",
]

# Builds a delegate client for one token; used as ``async with factory(token)``
ClientFactory = Callable[[str], AbstractAsyncContextManager[Any]]

MAX_BODY_BYTES = 10 * 1024 * 1024

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

CORS_ALLOW_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5678",  # n8n local development
]
CORS_ALLOW_ORIGIN_REGEX = r"https://.*\.(render\.com|n8n\.cloud|n8n\.io)"


# ============================================================================
# STDIO TRANSPORT - Local IDE Integration
# ============================================================================

def run_stdio(
    server: Server,
    init_options: InitializationOptions,
) -> None:
    """Run MCP server in STDIO mode for local IDEs."""
    asyncio.run(_stdio_async(server, init_options))


async def _stdio_async(
    server: Server,
    init_options: InitializationOptions,
) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, init_options)


# ============================================================================
# HTTP TRANSPORT - Streaming façade
# ============================================================================

def run_http(
    catalog: CapabilityCatalog,
    client_factory: ClientFactory,
    name: str,
    version: str,
    default_token: str | None = None,
) -> None:
    """Run the HTTP façade under uvicorn."""
    import uvicorn

    app = create_http_app(
        catalog,
        client_factory=client_factory,
        name=name,
        version=version,
        default_token=default_token,
    )

    port = int(os.environ.get("PORT", 3000))
    host = os.environ.get("HOST", "0.0.0.0")

    print(f"[asana-mcp] HTTP server starting on {host}:{port}", file=sys.stderr)
    print(f"[asana-mcp]   Health check: http://{host}:{port}/health", file=sys.stderr)
    print(f"[asana-mcp]   MCP stream:   POST http://{host}:{port}/mcp", file=sys.stderr)
    print(f"[asana-mcp]   Tools list:   http://{host}:{port}/tools", file=sys.stderr)
    print(f"[asana-mcp]   Execute tool: POST http://{host}:{port}/tools/execute", file=sys.stderr)
    if not default_token:
        print("[asana-mcp] No default token; requests must send x-asana-token", file=sys.stderr)

    uvicorn.run(app, host=host, port=port, log_level=os.environ.get("LOG_LEVEL", "info").lower())


class InvalidBody(Exception):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


async def read_json_object(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object. An empty body is ``{}``."""
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > MAX_BODY_BYTES:
        raise InvalidBody("Request body too large", status_code=413)

    body = await request.body()
    if len(body) > MAX_BODY_BYTES:
        raise InvalidBody("Request body too large", status_code=413)
    if not body.strip():
        return {}

    try:
        data = json.loads(body)
    except ValueError:
        raise InvalidBody("Request body must be a JSON object") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidBody("Request body must be a JSON object")
    return data


def create_http_app(
    catalog: CapabilityCatalog,
    *,
    client_factory: ClientFactory,
    name: str,
    version: str,
    default_token: str | None = None,
) -> Any:
    """Create the Starlette ASGI application for the HTTP façade.

    ``default_token`` is the process-wide fallback credential; a non-empty
    ``x-asana-token`` header overrides it on every request.
    """
    from starlette.applications import Starlette
    from starlette.middleware.cors import CORSMiddleware
    from starlette.routing import Route

    from .middleware import RequestLogMiddleware, SecurityHeadersMiddleware

    router = MethodRouter(catalog)

    def make_operation(
        request: Request,
        method: str | None,
        params: dict[str, Any] | None,
    ) -> Callable[[], Awaitable[Any]]:
        # Credential is checked before validation, validation before the client exists.
        async def operation() -> Any:
            token = extract_token_from_request(request, default_token)
            mcp_request = router.parse(method, params)
            async with client_factory(token) as client:
                result = await router.execute(mcp_request, client)
            return serialize_result(result)
        return operation

    def event_stream(
        announcement: dict[str, Any],
        operation: Callable[[], Awaitable[Any]],
        completion: dict[str, Any],
    ) -> StreamingResponse:
        framer = StreamFramer()
        return StreamingResponse(
            stream_operation(framer, announcement, operation, completion),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    async def json_call(
        request: Request,
        method: McpMethod,
        params: dict[str, Any] | None,
    ) -> JSONResponse:
        try:
            result = await make_operation(request, method.value, params)()
            return JSONResponse(result)
        except GatewayError as e:
            logger.warning(f"{method.value} failed: {type(e).__name__}: {e.message}")
            return JSONResponse({"error": e.message}, status_code=e.status_code)
        except Exception as e:
            logger.exception(f"Error executing {method.value}")
            return JSONResponse({"error": error_message(e)}, status_code=500)

    # ====================================================================
    # ROUTES
    # ====================================================================

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "ok",
            "version": version,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        })

    async def mcp_stream(request: Request) -> Any:
        try:
            body = await read_json_object(request)
        except InvalidBody as e:
            return JSONResponse({"error": str(e)}, status_code=e.status_code)

        method = body.get("method")
        params = body.get("params")
        return event_stream(
            {
                "message": f"Starting MCP operation: {method}",
                "method": method,
                "params": params,
            },
            make_operation(request, method, params),
            {"message": "MCP operation completed"},
        )

    async def list_tools(request: Request) -> JSONResponse:
        tools = [serialize_result(tool) for tool in catalog.list_tools()]
        return JSONResponse(tools)

    async def execute_tool_stream(request: Request) -> Any:
        try:
            body = await read_json_object(request)
        except InvalidBody as e:
            return JSONResponse({"error": str(e)}, status_code=e.status_code)

        tool_name = body.get("toolName")
        arguments = body.get("arguments")
        return event_stream(
            {
                "message": f"Starting execution of tool: {tool_name}",
                "tool": tool_name,
                "arguments": arguments,
            },
            make_operation(
                request,
                McpMethod.TOOLS_CALL.value,
                {"name": tool_name, "arguments": arguments or {}},
            ),
            {"message": "Tool execution completed"},
        )

    async def execute_tool(request: Request) -> JSONResponse:
        try:
            arguments = await read_json_object(request)
        except InvalidBody as e:
            return JSONResponse({"error": str(e)}, status_code=e.status_code)

        tool_name = request.path_params["tool_name"]
        return await json_call(
            request,
            McpMethod.TOOLS_CALL,
            {"name": tool_name, "arguments": arguments},
        )

    async def list_prompts(request: Request) -> JSONResponse:
        return await json_call(request, McpMethod.PROMPTS_LIST, None)

    async def get_prompt(request: Request) -> JSONResponse:
        prompt_name = request.path_params["prompt_name"]
        params: dict[str, Any] = {"name": prompt_name}
        if request.query_params:
            params["arguments"] = dict(request.query_params)
        return await json_call(request, McpMethod.PROMPTS_GET, params)

    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc!r}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    app = Starlette(
        debug=False,
        routes=[
            Route("/health", endpoint=health, methods=["GET"]),
            Route("/mcp", endpoint=mcp_stream, methods=["POST"]),
            Route("/tools", endpoint=list_tools, methods=["GET"]),
            Route("/tools/execute", endpoint=execute_tool_stream, methods=["POST"]),
            Route("/tools/{tool_name}", endpoint=execute_tool, methods=["POST"]),
            Route("/prompts", endpoint=list_prompts, methods=["GET"]),
            Route("/prompts/{prompt_name}", endpoint=get_prompt, methods=["GET"]),
        ],
        exception_handlers={Exception: internal_error},
    )

    app = CORSMiddleware(
        app,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_origin_regex=CORS_ALLOW_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-asana-token"],
    )
    app = SecurityHeadersMiddleware(app)
    app = RequestLogMiddleware(app)

    return app
