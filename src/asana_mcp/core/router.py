# ============================================================================
# ASANA MCP - METHOD ROUTER
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Maps an MCP method name + params onto one catalog operation.
#
# VALIDATION ORDER (each step short-circuits, nothing touches Asana until
# all three pass):
#   1. method present and recognized
#   2. required params present, arguments (when given) an object
#   3. tools/call: tool name exists in the catalog (exact match)
#
# The method set is closed: McpMethod has one member per supported method
# and MethodRouter keeps exactly one handler per member.
# ============================================================================

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mcp.types import (
    CallToolResult,
    GetPromptResult,
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    ReadResourceResult,
)
from pydantic import BaseModel

from .catalog import CapabilityCatalog
from .errors import MissingParameter, NotFound, UnsupportedMethod

__all__ = [
    "McpMethod",
    "McpRequest",
    "MethodRouter",
    "serialize_result",
]


class McpMethod(str, Enum):
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"
    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"


# method → ((param, message if missing), ...)
REQUIRED_PARAMS: dict[McpMethod, tuple[tuple[str, str], ...]] = {
    McpMethod.TOOLS_CALL: (("name", "Tool name is required for tools/call"),),
    McpMethod.PROMPTS_GET: (("name", "Prompt name is required for prompts/get"),),
    McpMethod.RESOURCES_READ: (("uri", "Resource URI is required for resources/read"),),
}

# methods whose optional "arguments" param must be an object when given
ARGUMENT_PARAMS: dict[McpMethod, str] = {
    McpMethod.TOOLS_CALL: "Tool arguments must be an object",
    McpMethod.PROMPTS_GET: "Prompt arguments must be an object",
}


@dataclass(frozen=True)
class McpRequest:
    """A validated request, ready to execute."""

    method: McpMethod
    params: dict[str, Any] = field(default_factory=dict)


class MethodRouter:
    def __init__(self, catalog: CapabilityCatalog) -> None:
        self.catalog = catalog
        self._handlers = {
            McpMethod.TOOLS_LIST: self._tools_list,
            McpMethod.TOOLS_CALL: self._tools_call,
            McpMethod.PROMPTS_LIST: self._prompts_list,
            McpMethod.PROMPTS_GET: self._prompts_get,
            McpMethod.RESOURCES_LIST: self._resources_list,
            McpMethod.RESOURCES_READ: self._resources_read,
        }
        missing = set(McpMethod) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for: {sorted(m.value for m in missing)}")

    def parse(self, method: str | None, params: Mapping[str, Any] | None = None) -> McpRequest:
        if not method:
            raise MissingParameter("MCP method is required")
        try:
            mcp_method = McpMethod(method)
        except ValueError:
            raise UnsupportedMethod(f"Unsupported MCP method: {method}") from None

        clean_params = dict(params) if isinstance(params, Mapping) else {}

        for key, message in REQUIRED_PARAMS.get(mcp_method, ()):
            if not clean_params.get(key):
                raise MissingParameter(message)

        if mcp_method in ARGUMENT_PARAMS:
            arguments = clean_params.get("arguments")
            if arguments is not None and not isinstance(arguments, Mapping):
                raise MissingParameter(ARGUMENT_PARAMS[mcp_method])

        if mcp_method is McpMethod.TOOLS_CALL:
            name = clean_params["name"]
            if not self.catalog.has_tool(name):
                raise NotFound(f"Tool '{name}' not found")

        return McpRequest(method=mcp_method, params=clean_params)

    async def execute(self, request: McpRequest, client: Any) -> BaseModel:
        handler = self._handlers[request.method]
        return await handler(request.params, client)

    async def dispatch(
        self,
        method: str | None,
        params: Mapping[str, Any] | None,
        client: Any,
    ) -> BaseModel:
        return await self.execute(self.parse(method, params), client)

    # ====================================================================
    # HANDLERS
    # ====================================================================

    async def _tools_list(self, params: dict, client: Any) -> ListToolsResult:
        return ListToolsResult(tools=self.catalog.list_tools())

    async def _tools_call(self, params: dict, client: Any) -> CallToolResult:
        arguments = params.get("arguments") or {}
        content = await self.catalog.call_tool(client, params["name"], arguments)
        return CallToolResult(content=content)

    async def _prompts_list(self, params: dict, client: Any) -> ListPromptsResult:
        return ListPromptsResult(prompts=self.catalog.list_prompts())

    async def _prompts_get(self, params: dict, client: Any) -> GetPromptResult:
        return self.catalog.get_prompt(params["name"], params.get("arguments"))

    async def _resources_list(self, params: dict, client: Any) -> ListResourcesResult:
        return ListResourcesResult(resources=await self.catalog.list_resources(client))

    async def _resources_read(self, params: dict, client: Any) -> ReadResourceResult:
        contents = await self.catalog.read_resource(client, str(params["uri"]))
        return ReadResourceResult(contents=contents)


def serialize_result(result: BaseModel) -> dict[str, Any]:
    """Dump a result model to JSON-ready data as MCP clients expect it."""
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)
