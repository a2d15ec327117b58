"""Tests for the HTTP/SSE façade."""

import json

from asana_mcp.core.auth import TOKEN_HEADER
from asana_mcp.core.errors import DelegateFailure

from tests.factories import TEST_VERSION, parse_frames


class TestHealth:
    def test_health_without_credentials(self, http_client) -> None:
        response = http_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["version"] == TEST_VERSION
        assert body["timestamp"].endswith("Z")

    def test_security_headers(self, http_client) -> None:
        response = http_client.get("/health")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert "default-src 'self'" in response.headers["content-security-policy"]


class TestMcpStream:
    def test_tools_list_without_token(self, http_client, recorder) -> None:
        response = http_client.post("/mcp", json={"method": "tools/list"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        frames = parse_frames(response.text)
        assert [f["type"] for f in frames] == ["data", "error"]
        assert frames[0]["data"]["method"] == "tools/list"
        assert frames[1]["error"] == "Asana access token required"
        assert recorder.clients == []

    def test_tools_list_with_header(self, http_client, recorder) -> None:
        response = http_client.post(
            "/mcp", json={"method": "tools/list"}, headers={TOKEN_HEADER: "VALID"},
        )
        frames = parse_frames(response.text)
        assert [f["type"] for f in frames] == ["data", "data", "complete"]
        assert len({f["id"] for f in frames}) == 1
        assert any(t["name"] == "asana_list_workspaces" for t in frames[1]["data"]["tools"])
        assert frames[2]["data"] == {"message": "MCP operation completed"}
        assert recorder.tokens == ["VALID"]
        assert recorder.clients[0].closed

    def test_default_token_used_when_header_missing(self, make_http_client, recorder) -> None:
        client = make_http_client("env-token")
        frames = parse_frames(client.post(
            "/mcp",
            json={"method": "tools/call", "params": {"name": "asana_list_workspaces"}},
        ).text)
        assert frames[-1]["type"] == "complete"
        assert recorder.tokens == ["env-token"]
        assert recorder.calls == ["list_workspaces"]

    def test_header_overrides_default(self, make_http_client, recorder) -> None:
        client = make_http_client("env-token")
        client.post("/mcp", json={"method": "prompts/list"}, headers={TOKEN_HEADER: "mine"})
        assert recorder.tokens == ["mine"]

    def test_unknown_tool(self, http_client, recorder) -> None:
        frames = parse_frames(http_client.post(
            "/mcp",
            json={"method": "tools/call", "params": {"name": "asana_nope"}},
            headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert [f["type"] for f in frames] == ["data", "error"]
        assert frames[-1]["error"] == "Tool 'asana_nope' not found"
        assert recorder.calls == []

    def test_unsupported_method(self, http_client, recorder) -> None:
        frames = parse_frames(http_client.post(
            "/mcp", json={"method": "tools/destroy"}, headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert frames[-1] == {
            "id": frames[0]["id"],
            "type": "error",
            "error": "Unsupported MCP method: tools/destroy",
        }
        assert recorder.calls == []

    def test_missing_method(self, http_client) -> None:
        frames = parse_frames(http_client.post(
            "/mcp", json={}, headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert frames[-1]["error"] == "MCP method is required"

    def test_delegate_failure_is_error_frame(self, http_client, recorder) -> None:
        recorder.error = DelegateFailure("Asana API error (403): Forbidden", remote_status=403)
        frames = parse_frames(http_client.post(
            "/mcp",
            json={"method": "tools/call", "params": {"name": "asana_list_workspaces"}},
            headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert [f["type"] for f in frames] == ["data", "error"]
        assert frames[-1]["error"] == "Asana API error (403): Forbidden"
        assert recorder.clients[0].closed

    def test_resources_read(self, http_client) -> None:
        frames = parse_frames(http_client.post(
            "/mcp",
            json={"method": "resources/read", "params": {"uri": "asana://workspace/1"}},
            headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert frames[-1]["type"] == "complete"
        assert frames[1]["data"]["contents"][0]["uri"] == "asana://workspace/1"

    def test_invalid_body(self, http_client) -> None:
        response = http_client.post(
            "/mcp", content=b"[1, 2]", headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Request body must be a JSON object"}


class TestLegacyTools:
    def test_list_tools(self, http_client) -> None:
        response = http_client.get("/tools")
        assert response.status_code == 200
        tools = response.json()
        assert isinstance(tools, list)
        names = [t["name"] for t in tools]
        assert len(names) == len(set(names))
        assert "asana_create_task" in names

    def test_execute_stream(self, http_client, recorder) -> None:
        frames = parse_frames(http_client.post(
            "/tools/execute",
            json={"toolName": "asana_get_task", "arguments": {"task_id": "7"}},
            headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert [f["type"] for f in frames] == ["data", "data", "complete"]
        assert frames[0]["data"]["tool"] == "asana_get_task"
        assert frames[2]["data"] == {"message": "Tool execution completed"}
        assert recorder.calls == ["get_task"]

    def test_execute_stream_missing_tool_name(self, http_client) -> None:
        frames = parse_frames(http_client.post(
            "/tools/execute", json={}, headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert [f["type"] for f in frames] == ["data", "error"]

    def test_execute_single(self, http_client, recorder) -> None:
        response = http_client.post(
            "/tools/asana_list_workspaces", json={}, headers={TOKEN_HEADER: "VALID"},
        )
        assert response.status_code == 200
        body = response.json()
        workspaces = json.loads(body["content"][0]["text"])
        assert [w["gid"] for w in workspaces] == ["1", "2"]

    def test_execute_single_empty_body(self, http_client) -> None:
        response = http_client.post(
            "/tools/asana_list_workspaces", headers={TOKEN_HEADER: "VALID"},
        )
        assert response.status_code == 200

    def test_execute_single_empty_header(self, http_client, recorder) -> None:
        response = http_client.post(
            "/tools/asana_list_workspaces", json={}, headers={TOKEN_HEADER: ""},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Asana access token required"}
        assert recorder.clients == []

    def test_execute_single_unknown_tool(self, http_client, recorder) -> None:
        response = http_client.post(
            "/tools/asana_nope", json={}, headers={TOKEN_HEADER: "VALID"},
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Tool 'asana_nope' not found"}
        assert recorder.clients == []

    def test_execute_single_delegate_failure(self, http_client, recorder) -> None:
        recorder.error = RuntimeError("socket closed")
        response = http_client.post(
            "/tools/asana_list_workspaces", json={}, headers={TOKEN_HEADER: "VALID"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "socket closed"}


class TestLegacyPrompts:
    def test_list_requires_token(self, http_client) -> None:
        response = http_client.get("/prompts")
        assert response.status_code == 401

    def test_list(self, http_client) -> None:
        response = http_client.get("/prompts", headers={TOKEN_HEADER: "VALID"})
        assert response.status_code == 200
        assert len(response.json()["prompts"]) == 3

    def test_get(self, http_client) -> None:
        response = http_client.get(
            "/prompts/task-summary?task_id=555", headers={TOKEN_HEADER: "VALID"},
        )
        assert response.status_code == 200
        assert "555" in response.json()["messages"][0]["content"]["text"]

    def test_get_unknown(self, http_client) -> None:
        response = http_client.get("/prompts/nope", headers={TOKEN_HEADER: "VALID"})
        assert response.status_code == 404
        assert response.json() == {"error": "Prompt 'nope' not found"}


class TestArgumentValidation:
    def test_missing_required_argument(self, http_client, recorder) -> None:
        response = http_client.post(
            "/tools/asana_get_task", json={}, headers={TOKEN_HEADER: "VALID"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Missing required argument: task_id"}
        assert recorder.calls == []

    def test_tool_arguments_not_an_object(self, http_client, recorder) -> None:
        frames = parse_frames(http_client.post(
            "/tools/execute",
            json={"toolName": "asana_get_task", "arguments": "abc"},
            headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert [f["type"] for f in frames] == ["data", "error"]
        assert frames[-1]["error"] == "Tool arguments must be an object"
        assert recorder.clients == []

    def test_prompt_arguments_not_an_object(self, http_client, recorder) -> None:
        frames = parse_frames(http_client.post(
            "/mcp",
            json={
                "method": "prompts/get",
                "params": {"name": "task-summary", "arguments": ["x"]},
            },
            headers={TOKEN_HEADER: "VALID"},
        ).text)
        assert [f["type"] for f in frames] == ["data", "error"]
        assert frames[-1]["error"] == "Prompt arguments must be an object"
        assert recorder.clients == []
