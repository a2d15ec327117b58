# ============================================================================
# ASANA MCP - BASE SERVER
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Standard MCP protocol adapter. Registers one handler per method family on
# the SDK's low-level Server; the SDK owns request decoding and response
# encoding. Every handler goes through the shared MethodRouter with a fresh
# delegate client.
#
# CREDENTIALS:
#   STDIO mode: one process-wide token, resolved at startup. No per-request
#               override (there are no request headers on stdio).
#   HTTP mode:  the façade resolves tokens per request; the stored token is
#               only the fallback default and may be None.
# ============================================================================

import logging
from collections.abc import Iterable
from typing import Any

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.lowlevel.server import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.types import (
    GetPromptResult,
    Prompt,
    Resource,
    ResourceTemplate,
    TextContent,
    Tool,
)

from .auth import resolve_access_token
from .catalog import CapabilityCatalog
from .router import McpMethod, MethodRouter
from .transport import ClientFactory, run_http, run_stdio

logger = logging.getLogger(__name__)

__all__ = [
    "BaseMCPServer",
    "create_mcp_server",
]


def create_mcp_server(
    name: str,
    version: str,
    instructions: str,
) -> Server:
    """Create a configured MCP Server instance."""
    return Server(
        name=name,
        version=version,
        instructions=instructions,
    )


class BaseMCPServer:
    """Base MCP server with shared infrastructure.
    Provides: Server initialization, protocol handlers, transport layer, auth.
    Subclasses add: the catalog content and the delegate client factory.
    Protocol handlers are only needed for stdio; HTTP mode serves the
    Starlette façade and leaves the low-level Server bare.
    """

    def __init__(
        self,
        name: str,
        version: str,
        instructions: str,
        catalog: CapabilityCatalog,
        client_factory: ClientFactory,
        access_token: str | None = None,
        http_mode: bool = False,
    ) -> None:
        self.name = name
        self.version = version
        self.instructions = instructions
        self.http_mode = http_mode
        self.catalog = catalog
        self.client_factory = client_factory
        self.router = MethodRouter(catalog)

        # STDIO needs its single token up front; raises AuthenticationRequired
        if not http_mode:
            self.access_token: str | None = resolve_access_token(None, access_token)
        else:
            self.access_token = access_token or None

        self.server = create_mcp_server(name, version, instructions)

    def setup_handlers(self) -> None:
        """Set up all MCP protocol handlers."""
        self._setup_tool_handlers()
        self._setup_prompt_handlers()
        self._setup_resource_handlers()

    async def _dispatch(self, method: McpMethod, params: dict[str, Any] | None = None) -> Any:
        token = resolve_access_token(None, self.access_token)
        mcp_request = self.router.parse(method.value, params)
        async with self.client_factory(token) as client:
            return await self.router.execute(mcp_request, client)

    def _setup_tool_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            logger.debug("Received ListToolsRequest")
            result = await self._dispatch(McpMethod.TOOLS_LIST)
            return result.tools

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict) -> list[TextContent]:
            result = await self._dispatch(
                McpMethod.TOOLS_CALL, {"name": name, "arguments": arguments},
            )
            return result.content

    def _setup_prompt_handlers(self) -> None:
        @self.server.list_prompts()
        async def list_prompts() -> list[Prompt]:
            result = await self._dispatch(McpMethod.PROMPTS_LIST)
            return result.prompts

        @self.server.get_prompt()
        async def get_prompt(name: str, arguments: dict[str, str] | None = None) -> GetPromptResult:
            return await self._dispatch(
                McpMethod.PROMPTS_GET, {"name": name, "arguments": arguments},
            )

    def _setup_resource_handlers(self) -> None:
        @self.server.list_resources()
        async def list_resources() -> list[Resource]:
            result = await self._dispatch(McpMethod.RESOURCES_LIST)
            return result.resources

        # Templates are static catalog data; they need neither a token nor a client.
        @self.server.list_resource_templates()
        async def list_resource_templates() -> list[ResourceTemplate]:
            return self.catalog.list_resource_templates()

        @self.server.read_resource()
        async def read_resource(uri) -> Iterable[ReadResourceContents]:
            result = await self._dispatch(McpMethod.RESOURCES_READ, {"uri": str(uri)})
            return [
                ReadResourceContents(content=c.text, mime_type=c.mimeType)
                for c in result.contents
            ]

    def get_init_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=self.name,
            server_version=self.version,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
            instructions=self.instructions,
        )

    def run(self, transport: str = "stdio") -> None:
        """Run the MCP server with specified transport."""
        if transport == "http":
            run_http(
                catalog=self.catalog,
                client_factory=self.client_factory,
                name=self.name,
                version=self.version,
                default_token=self.access_token,
            )
        else:
            run_stdio(
                server=self.server,
                init_options=self.get_init_options(),
            )
