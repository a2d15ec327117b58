# ============================================================================
# ASANA MCP - PROMPTS
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
#   task-summary       Summarize a task's status, comments and blockers
#   task-completeness  Check a task has everything needed to be worked on
#   create-task        Draft and create a well-formed task in a project
# ============================================================================

from collections.abc import Callable

from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    TextContent,
)

__all__ = [
    "ASANA_PROMPTS",
    "PROMPT_HANDLERS",
]


ASANA_PROMPTS: list[Prompt] = [
    Prompt(
        name="task-summary",
        description="Get a summary and status update for a task based on its notes, custom fields and comments",
        arguments=[
            PromptArgument(
                name="task_id",
                description="The task ID to summarize",
                required=True,
            ),
        ],
    ),
    Prompt(
        name="task-completeness",
        description="Analyze whether a task description contains everything needed to complete it",
        arguments=[
            PromptArgument(
                name="task_id",
                description="The task ID to analyze",
                required=True,
            ),
        ],
    ),
    Prompt(
        name="create-task",
        description="Create a new task with a clear name, description and due date",
        arguments=[
            PromptArgument(
                name="project_name",
                description="Name of the project to create the task in",
                required=True,
            ),
            PromptArgument(
                name="title",
                description="Title of the task",
                required=True,
            ),
            PromptArgument(
                name="notes",
                description="Notes or description for the task",
                required=False,
            ),
            PromptArgument(
                name="due_date",
                description="Due date (YYYY-MM-DD)",
                required=False,
            ),
        ],
    ),
]


def _user_message(description: str, text: str) -> GetPromptResult:
    return GetPromptResult(
        description=description,
        messages=[
            PromptMessage(
                role="user",
                content=TextContent(type="text", text=text),
            )
        ],
    )


def _task_summary(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    task_id = arguments.get("task_id", "") if arguments else ""
    return _user_message(
        "Summarize an Asana task",
        f"Please give me a summary and status update for Asana task {task_id}.\n\n"
        f"1. Call asana_get_task with opt_fields "
        f"name,notes,custom_fields,assignee.name,due_on,completed,dependencies\n"
        f"2. Call asana_get_task_stories to read the comments and activity\n"
        f"3. Summarize: current status, who owns it, what happened recently, "
        f"open questions and anything blocking it",
    )


def _task_completeness(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    task_id = arguments.get("task_id", "") if arguments else ""
    return _user_message(
        "Check an Asana task for completeness",
        f"Analyze Asana task {task_id} and tell me whether its description "
        f"contains everything needed to complete it.\n\n"
        f"1. Call asana_get_task for its name, notes and custom fields\n"
        f"2. Call asana_get_task_stories for context from the comments\n"
        f"3. List what is present, what is missing (acceptance criteria, owner, "
        f"due date, dependencies) and the questions to ask before starting",
    )


def _create_task(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    args = arguments or {}
    project_name = args.get("project_name", "")
    title = args.get("title", "")
    lines = [
        f"Create a new Asana task titled '{title}' in the project '{project_name}'.",
        "",
        "1. Call asana_list_workspaces, then asana_search_projects to find the project ID",
        "2. Call asana_create_task with a clear name and description",
    ]
    if args.get("notes"):
        lines.append(f"\nUse these notes for the description:\n{args['notes']}")
    if args.get("due_date"):
        lines.append(f"\nSet the due date (due_on) to {args['due_date']}.")
    return _user_message("Create an Asana task", "\n".join(lines))


PROMPT_HANDLERS: dict[str, Callable[[str, dict[str, str] | None], GetPromptResult]] = {
    "task-summary": _task_summary,
    "task-completeness": _task_completeness,
    "create-task": _create_task,
}
