# ============================================================================
# ASANA MCP - ASANA TOOLS
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# 14 Asana tools:
#
# WORKSPACES (2):
#   asana_list_workspaces            List workspaces visible to the token
#   asana_get_tags_for_workspace     List tags in a workspace
#
# PROJECTS (4):
#   asana_search_projects            Find projects by name regex
#   asana_get_project                Project details
#   asana_get_project_task_counts    Task/milestone counts
#   asana_get_project_sections       Sections of a project
#
# TASKS (6):
#   asana_search_tasks               Search tasks in a workspace
#   asana_get_task                   Task details
#   asana_create_task                Create a task in a project
#   asana_update_task                Update a task
#   asana_create_subtask             Create a subtask
#   asana_add_task_dependencies      Mark tasks as blocking a task
#
# STORIES (2):
#   asana_get_task_stories           Comments and activity on a task
#   asana_create_task_story          Comment on a task
# ============================================================================

from typing import Any

from .. import __version__
from ..core import BaseMCPServer, CapabilityCatalog
from ..core.errors import MissingParameter
from .asana_client import AsanaClient
from .prompts import ASANA_PROMPTS, PROMPT_HANDLERS
from .resources import (
    ASANA_RESOURCE_TEMPLATES,
    PROJECT_URI_PREFIX,
    WORKSPACE_URI_PREFIX,
    list_workspace_resources,
    read_project_resource,
    read_workspace_resource,
)

__all__ = [
    "ASANA_TOOLS",
    "AsanaMCPServer",
    "create_asana_catalog",
    "create_asana_server",
    "handle_tool",
]


_OPT_FIELDS = {
    "type": "string",
    "description": "Comma-separated list of optional fields to include",
}

_READ_ONLY = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}

_WRITE = {
    "readOnlyHint": False,
    "destructiveHint": False,
    "idempotentHint": False,
    "openWorldHint": True,
}


# ============================================================================
# TOOL DEFINITIONS
# ============================================================================

ASANA_TOOLS: list[dict[str, Any]] = [
    # ================================================================
    # WORKSPACES (2 tools)
    # ================================================================
    {
        "name": "asana_list_workspaces",
        "title": "List Workspaces",
        "description": "List all workspaces the access token can see. Start here to find workspace IDs.",
        "inputSchema": {
            "type": "object",
            "properties": {"opt_fields": _OPT_FIELDS},
            "required": [],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_get_tags_for_workspace",
        "title": "Get Workspace Tags",
        "description": "List the tags defined in a workspace.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "workspace_gid": {
                    "type": "string",
                    "description": "Globally unique identifier for the workspace",
                },
                "limit": {
                    "type": "integer",
                    "description": "Results per page (1-100)",
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["workspace_gid"],
        },
        "annotations": _READ_ONLY,
    },

    # ================================================================
    # PROJECTS (4 tools)
    # ================================================================
    {
        "name": "asana_search_projects",
        "title": "Search Projects",
        "description": "Search for projects in a workspace whose name matches a regular expression.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "workspace": {
                    "type": "string",
                    "description": "The workspace to search in",
                },
                "name_pattern": {
                    "type": "string",
                    "description": "Regular expression matched against project names (case-insensitive)",
                },
                "archived": {
                    "type": "boolean",
                    "description": "Only return archived projects",
                    "default": False,
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["workspace", "name_pattern"],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_get_project",
        "title": "Get Project",
        "description": "Get detailed information about a project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_id": {
                    "type": "string",
                    "description": "The project ID to retrieve",
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["project_id"],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_get_project_task_counts",
        "title": "Get Project Task Counts",
        "description": "Get the number of tasks and milestones in a project, split by completion.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_id": {
                    "type": "string",
                    "description": "The project ID to count tasks for",
                },
            },
            "required": ["project_id"],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_get_project_sections",
        "title": "Get Project Sections",
        "description": "List the sections of a project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_id": {
                    "type": "string",
                    "description": "The project ID to get sections for",
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["project_id"],
        },
        "annotations": _READ_ONLY,
    },

    # ================================================================
    # TASKS (6 tools)
    # ================================================================
    {
        "name": "asana_search_tasks",
        "title": "Search Tasks",
        "description": (
            "Search tasks in a workspace. Supports free text plus Asana's advanced "
            "search filters (assignee, projects, completion, due dates). "
            "Requires a premium workspace."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "workspace": {
                    "type": "string",
                    "description": "The workspace to search in",
                },
                "text": {
                    "type": "string",
                    "description": "Text to search for in task names and descriptions",
                },
                "completed": {
                    "type": "boolean",
                    "description": "Filter on completion status",
                },
                "assignee_any": {
                    "type": "string",
                    "description": "Comma-separated user IDs (or 'me')",
                },
                "projects_any": {
                    "type": "string",
                    "description": "Comma-separated project IDs",
                },
                "due_on_before": {
                    "type": "string",
                    "description": "ISO 8601 date; tasks due before this day",
                },
                "due_on_after": {
                    "type": "string",
                    "description": "ISO 8601 date; tasks due after this day",
                },
                "sort_by": {
                    "type": "string",
                    "enum": ["due_date", "created_at", "completed_at", "likes", "modified_at"],
                    "default": "modified_at",
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["workspace"],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_get_task",
        "title": "Get Task",
        "description": "Get detailed information about a task.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "task_id": {
                    "type": "string",
                    "description": "The task ID to retrieve",
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["task_id"],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_create_task",
        "title": "Create Task",
        "description": "Create a new task in a project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_id": {
                    "type": "string",
                    "description": "The project to create the task in",
                },
                "name": {
                    "type": "string",
                    "description": "Name of the task",
                },
                "notes": {
                    "type": "string",
                    "description": "Description of the task",
                },
                "html_notes": {
                    "type": "string",
                    "description": "HTML-like formatted description of the task",
                },
                "due_on": {
                    "type": "string",
                    "description": "Due date in YYYY-MM-DD format",
                },
                "assignee": {
                    "type": "string",
                    "description": "Assignee (user ID, email or 'me')",
                },
            },
            "required": ["project_id", "name"],
        },
        "annotations": _WRITE,
    },
    {
        "name": "asana_update_task",
        "title": "Update Task",
        "description": "Update an existing task's details.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "task_id": {
                    "type": "string",
                    "description": "The task ID to update",
                },
                "name": {"type": "string", "description": "New name for the task"},
                "notes": {"type": "string", "description": "New description for the task"},
                "due_on": {"type": "string", "description": "New due date in YYYY-MM-DD format"},
                "assignee": {"type": "string", "description": "New assignee (user ID, email or 'me')"},
                "completed": {"type": "boolean", "description": "Mark task as completed or not"},
            },
            "required": ["task_id"],
        },
        "annotations": {**_WRITE, "idempotentHint": True},
    },
    {
        "name": "asana_create_subtask",
        "title": "Create Subtask",
        "description": "Create a subtask under an existing task.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "parent_task_id": {
                    "type": "string",
                    "description": "The parent task ID",
                },
                "name": {"type": "string", "description": "Name of the subtask"},
                "notes": {"type": "string", "description": "Description of the subtask"},
                "due_on": {"type": "string", "description": "Due date in YYYY-MM-DD format"},
                "assignee": {"type": "string", "description": "Assignee (user ID, email or 'me')"},
            },
            "required": ["parent_task_id", "name"],
        },
        "annotations": _WRITE,
    },
    {
        "name": "asana_add_task_dependencies",
        "title": "Add Task Dependencies",
        "description": "Mark a set of tasks as dependencies (blockers) of a task.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "task_id": {
                    "type": "string",
                    "description": "The task to add dependencies to",
                },
                "dependencies": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Task IDs this task depends on",
                },
            },
            "required": ["task_id", "dependencies"],
        },
        "annotations": {**_WRITE, "idempotentHint": True},
    },

    # ================================================================
    # STORIES (2 tools)
    # ================================================================
    {
        "name": "asana_get_task_stories",
        "title": "Get Task Stories",
        "description": "Get comments and activity history for a task.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "task_id": {
                    "type": "string",
                    "description": "The task ID to get stories for",
                },
                "opt_fields": _OPT_FIELDS,
            },
            "required": ["task_id"],
        },
        "annotations": _READ_ONLY,
    },
    {
        "name": "asana_create_task_story",
        "title": "Comment on Task",
        "description": "Add a comment to a task.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "task_id": {
                    "type": "string",
                    "description": "The task ID to comment on",
                },
                "text": {
                    "type": "string",
                    "description": "The comment text",
                },
            },
            "required": ["task_id", "text"],
        },
        "annotations": _WRITE,
    },
]

SEARCH_FILTER_KEYS = (
    "text",
    "completed",
    "assignee_any",
    "projects_any",
    "due_on_before",
    "due_on_after",
    "sort_by",
    "opt_fields",
)

TASK_FIELD_KEYS = ("name", "notes", "html_notes", "due_on", "assignee", "completed")

REQUIRED_ARGUMENTS: dict[str, tuple[str, ...]] = {
    tool["name"]: tuple(tool["inputSchema"].get("required", ())) for tool in ASANA_TOOLS
}


def _pick(arguments: dict, keys: tuple[str, ...]) -> dict[str, Any]:
    return {k: arguments[k] for k in keys if arguments.get(k) is not None}


# ============================================================================
# TOOL HANDLER: routes all 14 tools
# ============================================================================

async def handle_tool(client: AsanaClient, name: str, arguments: dict) -> Any:
    """Route a tool call to the matching AsanaClient operation."""
    for key in REQUIRED_ARGUMENTS.get(name, ()):
        if arguments.get(key) is None:
            raise MissingParameter(f"Missing required argument: {key}")

    # ============================================================
    # WORKSPACES
    # ============================================================

    if name == "asana_list_workspaces":
        return await client.list_workspaces(opt_fields=arguments.get("opt_fields"))

    if name == "asana_get_tags_for_workspace":
        return await client.get_tags_for_workspace(
            arguments["workspace_gid"],
            limit=arguments.get("limit"),
            opt_fields=arguments.get("opt_fields"),
        )

    # ============================================================
    # PROJECTS
    # ============================================================

    if name == "asana_search_projects":
        return await client.search_projects(
            workspace=arguments["workspace"],
            name_pattern=arguments["name_pattern"],
            archived=arguments.get("archived", False),
            opt_fields=arguments.get("opt_fields"),
        )

    if name == "asana_get_project":
        return await client.get_project(
            arguments["project_id"], opt_fields=arguments.get("opt_fields"),
        )

    if name == "asana_get_project_task_counts":
        return await client.get_project_task_counts(arguments["project_id"])

    if name == "asana_get_project_sections":
        return await client.get_project_sections(
            arguments["project_id"], opt_fields=arguments.get("opt_fields"),
        )

    # ============================================================
    # TASKS
    # ============================================================

    if name == "asana_search_tasks":
        return await client.search_tasks(
            arguments["workspace"], _pick(arguments, SEARCH_FILTER_KEYS),
        )

    if name == "asana_get_task":
        return await client.get_task(
            arguments["task_id"], opt_fields=arguments.get("opt_fields"),
        )

    if name == "asana_create_task":
        return await client.create_task(
            arguments["project_id"], _pick(arguments, TASK_FIELD_KEYS),
        )

    if name == "asana_update_task":
        fields = _pick(arguments, TASK_FIELD_KEYS)
        if not fields:
            raise ValueError("Nothing to update; pass at least one task field")
        return await client.update_task(arguments["task_id"], fields)

    if name == "asana_create_subtask":
        return await client.create_subtask(
            arguments["parent_task_id"], _pick(arguments, TASK_FIELD_KEYS),
        )

    if name == "asana_add_task_dependencies":
        return await client.add_task_dependencies(
            arguments["task_id"], list(arguments["dependencies"]),
        )

    # ============================================================
    # STORIES
    # ============================================================

    if name == "asana_get_task_stories":
        return await client.get_task_stories(
            arguments["task_id"], opt_fields=arguments.get("opt_fields"),
        )

    if name == "asana_create_task_story":
        return await client.create_task_story(arguments["task_id"], arguments["text"])

    raise ValueError(f"Unknown tool: {name}")


# ============================================================================
# CATALOG
# ============================================================================

def create_asana_catalog() -> CapabilityCatalog:
    """Assemble the tool, prompt and resource catalog."""
    catalog = CapabilityCatalog()
    catalog.register_tools(ASANA_TOOLS)
    catalog.register_tool_handler("*", handle_tool)

    catalog.register_prompts(ASANA_PROMPTS)
    for prompt_name, handler in PROMPT_HANDLERS.items():
        catalog.register_prompt_handler(prompt_name, handler)

    catalog.register_resource_lister(list_workspace_resources)
    catalog.register_resource_templates(ASANA_RESOURCE_TEMPLATES)
    catalog.register_resource_reader(WORKSPACE_URI_PREFIX, read_workspace_resource)
    catalog.register_resource_reader(PROJECT_URI_PREFIX, read_project_resource)
    return catalog


# ============================================================================
# ASANA MCP SERVER
# ============================================================================

class AsanaMCPServer(BaseMCPServer):
    """Asana MCP server with 14 tools, 3 prompts and workspace/project resources."""

    INSTRUCTIONS = """Asana MCP Server: Asana project management tools

START HERE:
- asana_list_workspaces → find the workspace ID everything else needs

PROJECTS:
- asana_search_projects → find a project by name
- asana_get_project / asana_get_project_sections / asana_get_project_task_counts

TASKS:
- asana_search_tasks → find tasks (premium workspaces)
- asana_get_task → details, asana_get_task_stories → comments and history
- asana_create_task / asana_create_subtask / asana_update_task
- asana_add_task_dependencies, asana_create_task_story

14 tools: 2 workspace + 4 project + 6 task + 2 story"""

    def __init__(
        self,
        access_token: str | None = None,
        http_mode: bool = False,
    ) -> None:
        super().__init__(
            name="asana",
            version=__version__,
            instructions=self.INSTRUCTIONS,
            catalog=create_asana_catalog(),
            client_factory=AsanaClient,
            access_token=access_token,
            http_mode=http_mode,
        )

        # The HTTP façade routes through the catalog directly
        if not http_mode:
            self.setup_handlers()


# ============================================================================
# FACTORY FUNCTION
# ============================================================================

def create_asana_server(
    access_token: str | None = None,
    http_mode: bool = False,
) -> AsanaMCPServer:
    """Factory function to create an Asana MCP server."""
    return AsanaMCPServer(access_token=access_token, http_mode=http_mode)
