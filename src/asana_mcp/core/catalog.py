# ============================================================================
# ASANA MCP - CAPABILITY CATALOG
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Registry of tools, prompts and resources. Transport-agnostic: both the
# stdio server and the HTTP façade read from the same catalog through the
# MethodRouter.
#
# Handlers receive the per-request delegate client as their first argument;
# the catalog itself never holds a client or a credential.
# ============================================================================

import json
import logging
from typing import Any, Awaitable, Callable

from mcp.types import (
    GetPromptResult,
    Prompt,
    Resource,
    ResourceTemplate,
    TextContent,
    TextResourceContents,
    Tool,
    ToolAnnotations,
)

from .errors import NotFound

logger = logging.getLogger(__name__)

__all__ = [
    "CapabilityCatalog",
    "ToolHandler",
    "PromptHandler",
    "ResourceLister",
    "ResourceReader",
]

ToolHandler = Callable[[Any, str, dict], Awaitable[Any]]
PromptHandler = Callable[[str, dict[str, str] | None], GetPromptResult]
ResourceLister = Callable[[Any], Awaitable[list[Resource]]]
ResourceReader = Callable[[Any, str], Awaitable[Any]]


class CapabilityCatalog:
    """Static set of capabilities, populated once at import time."""

    def __init__(self) -> None:
        self._tools: list[dict] = []
        self._tool_handlers: dict[str, ToolHandler] = {}
        self._prompts: list[Prompt] = []
        self._prompt_handlers: dict[str, PromptHandler] = {}
        self._resource_listers: list[ResourceLister] = []
        self._resource_templates: list[ResourceTemplate] = []
        # uri prefix → reader, matched longest prefix first
        self._resource_readers: dict[str, ResourceReader] = {}

    # ====================================================================
    # REGISTRATION
    # ====================================================================

    def register_tools(self, tools: list[dict]) -> None:
        known = {t["name"] for t in self._tools}
        for tool in tools:
            if tool["name"] in known:
                raise ValueError(f"Duplicate tool name: {tool['name']}")
            known.add(tool["name"])
            self._tools.append(tool)

    def register_tool_handler(self, name: str, handler: ToolHandler) -> None:
        self._tool_handlers[name] = handler

    def register_prompts(self, prompts: list[Prompt]) -> None:
        self._prompts.extend(prompts)

    def register_prompt_handler(self, name: str, handler: PromptHandler) -> None:
        self._prompt_handlers[name] = handler

    def register_resource_lister(self, lister: ResourceLister) -> None:
        self._resource_listers.append(lister)

    def register_resource_templates(self, templates: list[ResourceTemplate]) -> None:
        self._resource_templates.extend(templates)

    def register_resource_reader(self, uri_prefix: str, reader: ResourceReader) -> None:
        self._resource_readers[uri_prefix] = reader

    # ====================================================================
    # TOOLS
    # ====================================================================

    @property
    def tool_names(self) -> list[str]:
        return [t["name"] for t in self._tools]

    def has_tool(self, name: str) -> bool:
        return any(t["name"] == name for t in self._tools)

    def list_tools(self) -> list[Tool]:
        tools_list = []
        for tool in self._tools:
            annotations = None
            if "annotations" in tool:
                ann = tool["annotations"]
                annotations = ToolAnnotations(
                    readOnlyHint=ann.get("readOnlyHint"),
                    destructiveHint=ann.get("destructiveHint"),
                    idempotentHint=ann.get("idempotentHint"),
                    openWorldHint=ann.get("openWorldHint"),
                )
            tools_list.append(Tool(
                name=tool["name"],
                title=tool.get("title"),
                description=tool["description"],
                inputSchema=tool["inputSchema"],
                annotations=annotations,
            ))
        return tools_list

    async def call_tool(self, client: Any, name: str, arguments: dict) -> list[TextContent]:
        """Invoke a tool and wrap its result as JSON text content.

        Failures propagate; the transport decides how to report them.
        """
        if not self.has_tool(name):
            raise NotFound(f"Tool '{name}' not found")

        handler = self._tool_handlers.get(name) or self._tool_handlers.get("*")
        if handler is None:
            raise NotFound(f"No handler registered for tool: {name}")

        logger.debug("Calling tool %s", name)
        result = await handler(client, name, arguments)
        formatted = json.dumps(result, indent=2, default=str)
        return [TextContent(type="text", text=formatted)]

    # ====================================================================
    # PROMPTS
    # ====================================================================

    def list_prompts(self) -> list[Prompt]:
        return list(self._prompts)

    def get_prompt(self, name: str, arguments: dict[str, str] | None = None) -> GetPromptResult:
        handler = self._prompt_handlers.get(name)
        if handler is None:
            raise NotFound(f"Prompt '{name}' not found")
        return handler(name, arguments)

    # ====================================================================
    # RESOURCES
    # ====================================================================

    async def list_resources(self, client: Any) -> list[Resource]:
        resources: list[Resource] = []
        for lister in self._resource_listers:
            resources.extend(await lister(client))
        return resources

    def list_resource_templates(self) -> list[ResourceTemplate]:
        return list(self._resource_templates)

    async def read_resource(self, client: Any, uri: str) -> list[TextResourceContents]:
        for prefix in sorted(self._resource_readers, key=len, reverse=True):
            if uri.startswith(prefix) and len(uri) > len(prefix):
                reader = self._resource_readers[prefix]
                data = await reader(client, uri[len(prefix):])
                return [TextResourceContents(
                    uri=uri,
                    mimeType="application/json",
                    text=json.dumps(data, indent=2, default=str),
                )]
        raise NotFound(f"Resource '{uri}' not found")
