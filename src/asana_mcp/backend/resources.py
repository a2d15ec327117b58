# ============================================================================
# ASANA MCP - RESOURCES
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# URI SCHEME:
#   asana://workspace/<gid>   workspace record + its tags
#   asana://project/<gid>     project record + its sections
#
# Workspaces are listed as concrete resources; both shapes are also
# published as templates.
# ============================================================================

from typing import Any

from mcp.types import Resource, ResourceTemplate

from .asana_client import AsanaClient

__all__ = [
    "WORKSPACE_URI_PREFIX",
    "PROJECT_URI_PREFIX",
    "ASANA_RESOURCE_TEMPLATES",
    "list_workspace_resources",
    "read_workspace_resource",
    "read_project_resource",
]

WORKSPACE_URI_PREFIX = "asana://workspace/"
PROJECT_URI_PREFIX = "asana://project/"

ASANA_RESOURCE_TEMPLATES: list[ResourceTemplate] = [
    ResourceTemplate(
        uriTemplate=WORKSPACE_URI_PREFIX + "{workspace_gid}",
        name="Asana Workspace",
        description="An Asana workspace with its tags",
        mimeType="application/json",
    ),
    ResourceTemplate(
        uriTemplate=PROJECT_URI_PREFIX + "{project_gid}",
        name="Asana Project",
        description="An Asana project with its sections",
        mimeType="application/json",
    ),
]


async def list_workspace_resources(client: AsanaClient) -> list[Resource]:
    workspaces = await client.list_workspaces()
    return [
        Resource(
            uri=f"{WORKSPACE_URI_PREFIX}{ws['gid']}",
            name=ws.get("name") or ws["gid"],
            description=f"Asana workspace: {ws.get('name', ws['gid'])}",
            mimeType="application/json",
        )
        for ws in workspaces
    ]


async def read_workspace_resource(client: AsanaClient, gid: str) -> dict[str, Any]:
    workspace = await client.get_workspace(gid)
    tags = await client.get_tags_for_workspace(gid)
    return {**workspace, "tags": tags}


async def read_project_resource(client: AsanaClient, gid: str) -> dict[str, Any]:
    project = await client.get_project(gid)
    sections = await client.get_project_sections(gid)
    return {**project, "sections": sections}
