# ============================================================================
# ASANA MCP - ASANA API CLIENT
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Async HTTP client for the Asana REST API (https://app.asana.com/api/1.0).
#
# LIFETIME:
#   One instance per request, owning exactly one access token. Never pooled
#   or shared; use as an async context manager so the connection pool is
#   closed when the request ends.
#
# ENVELOPE:
#   Asana wraps payloads as {"data": ...} in both directions. This client
#   unwraps responses and wraps request bodies.
# ============================================================================

import logging
import os
import re
from typing import Any

import httpx

from ..core.errors import DelegateFailure

logger = logging.getLogger(__name__)

ASANA_API_URL = os.environ.get("ASANA_API_URL", "https://app.asana.com/api/1.0")

DEFAULT_TIMEOUT = 30.0

__all__ = ["AsanaClient", "ASANA_API_URL"]


class AsanaClient:
    """Async client for one Asana access token."""

    def __init__(
        self,
        access_token: str,
        base_url: str = ASANA_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("AsanaClient requires an access token")
        self._access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def __repr__(self) -> str:
        return f"AsanaClient(base_url={self.base_url!r})"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "AsanaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the unwrapped ``data`` member."""
        client = await self._get_client()
        if params:
            params = {k: _encode_param(v) for k, v in params.items() if v is not None}
        body = {"data": data} if data is not None else None

        try:
            resp = await client.request(method, path, params=params or None, json=body)
        except httpx.HTTPError as e:
            raise DelegateFailure(f"Asana API request failed: {e}") from e

        if resp.status_code >= 400:
            raise DelegateFailure(
                f"Asana API error ({resp.status_code}): {_error_detail(resp)}",
                remote_status=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise DelegateFailure("Asana API returned a non-JSON response") from e
        if not isinstance(payload, dict) or "data" not in payload:
            raise DelegateFailure("Asana API response is missing 'data'")
        return payload["data"]

    # ====================================================================
    # WORKSPACES
    # ====================================================================

    async def list_workspaces(self, opt_fields: str | None = None) -> list[dict[str, Any]]:
        return await self._request("GET", "/workspaces", params={"opt_fields": opt_fields})

    async def get_workspace(self, workspace_gid: str) -> dict[str, Any]:
        return await self._request("GET", f"/workspaces/{workspace_gid}")

    async def get_tags_for_workspace(
        self, workspace_gid: str, limit: int | None = None, opt_fields: str | None = None,
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET",
            f"/workspaces/{workspace_gid}/tags",
            params={"limit": limit, "opt_fields": opt_fields},
        )

    # ====================================================================
    # PROJECTS
    # ====================================================================

    async def search_projects(
        self,
        workspace: str,
        name_pattern: str,
        archived: bool = False,
        opt_fields: str | None = None,
    ) -> list[dict[str, Any]]:
        """List workspace projects whose name matches a regex (case-insensitive)."""
        projects = await self._request(
            "GET",
            "/projects",
            params={"workspace": workspace, "archived": archived, "opt_fields": opt_fields},
        )
        try:
            pattern = re.compile(name_pattern, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Invalid name_pattern: {e}") from e
        return [p for p in projects if pattern.search(p.get("name", ""))]

    async def get_project(self, project_id: str, opt_fields: str | None = None) -> dict[str, Any]:
        return await self._request("GET", f"/projects/{project_id}", params={"opt_fields": opt_fields})

    async def get_project_task_counts(self, project_id: str) -> dict[str, Any]:
        # task_counts returns nothing unless fields are requested explicitly
        return await self._request(
            "GET",
            f"/projects/{project_id}/task_counts",
            params={
                "opt_fields": (
                    "num_tasks,num_incomplete_tasks,num_completed_tasks,"
                    "num_milestones,num_incomplete_milestones,num_completed_milestones"
                ),
            },
        )

    async def get_project_sections(
        self, project_id: str, opt_fields: str | None = None,
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET", f"/projects/{project_id}/sections", params={"opt_fields": opt_fields},
        )

    # ====================================================================
    # TASKS
    # ====================================================================

    async def search_tasks(
        self, workspace: str, filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Search tasks in a workspace. ``filters`` map straight onto query params."""
        return await self._request(
            "GET", f"/workspaces/{workspace}/tasks/search", params=dict(filters),
        )

    async def get_task(self, task_id: str, opt_fields: str | None = None) -> dict[str, Any]:
        return await self._request("GET", f"/tasks/{task_id}", params={"opt_fields": opt_fields})

    async def create_task(self, project_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        data = {"projects": [project_id], **fields}
        task = await self._request("POST", "/tasks", data=data)
        logger.info(f"Created task {task.get('gid')} in project {project_id}")
        return task

    async def update_task(self, task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/tasks/{task_id}", data=dict(fields))

    async def create_subtask(self, parent_task_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/tasks/{parent_task_id}/subtasks", data=dict(fields))

    async def add_task_dependencies(
        self, task_id: str, dependencies: list[str],
    ) -> dict[str, Any]:
        return await self._request(
            "POST", f"/tasks/{task_id}/addDependencies", data={"dependencies": dependencies},
        )

    # ====================================================================
    # STORIES (comments + activity)
    # ====================================================================

    async def get_task_stories(
        self, task_id: str, opt_fields: str | None = None,
    ) -> list[dict[str, Any]]:
        return await self._request(
            "GET", f"/tasks/{task_id}/stories", params={"opt_fields": opt_fields},
        )

    async def create_task_story(self, task_id: str, text: str) -> dict[str, Any]:
        return await self._request("POST", f"/tasks/{task_id}/stories", data={"text": text})


# ============================================================================
# HELPERS
# ============================================================================

def _encode_param(value: Any) -> Any:
    """Asana expects lowercase booleans and comma-joined lists in query strings."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return value


def _error_detail(resp: httpx.Response) -> str:
    try:
        errors = resp.json().get("errors") or []
    except (ValueError, AttributeError):
        errors = []
    messages = [e.get("message", "") for e in errors if isinstance(e, dict)]
    detail = "; ".join(m for m in messages if m)
    return detail or resp.text[:200] or resp.reason_phrase
