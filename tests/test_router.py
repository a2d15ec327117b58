"""Tests for method parsing and dispatch."""

import json

import pytest

from asana_mcp.core.errors import MissingParameter, NotFound, UnsupportedMethod
from asana_mcp.core.router import McpMethod, McpRequest, MethodRouter, serialize_result


@pytest.fixture
def router(catalog) -> MethodRouter:
    return MethodRouter(catalog)


class TestParse:
    def test_every_method_has_a_handler(self, router: MethodRouter) -> None:
        assert set(router._handlers) == set(McpMethod)

    def test_recognized_method(self, router: MethodRouter) -> None:
        request = router.parse("tools/list", None)
        assert request == McpRequest(method=McpMethod.TOOLS_LIST, params={})

    def test_missing_method(self, router: MethodRouter) -> None:
        with pytest.raises(MissingParameter, match="MCP method is required"):
            router.parse(None, {})

    def test_unsupported_method(self, router: MethodRouter) -> None:
        with pytest.raises(UnsupportedMethod, match="Unsupported MCP method: tools/delete"):
            router.parse("tools/delete", {})

    def test_method_checked_before_params(self, router: MethodRouter) -> None:
        with pytest.raises(UnsupportedMethod):
            router.parse("nope", None)

    @pytest.mark.parametrize(
        ("method", "message"),
        [
            ("tools/call", "Tool name is required for tools/call"),
            ("prompts/get", "Prompt name is required for prompts/get"),
            ("resources/read", "Resource URI is required for resources/read"),
        ],
    )
    def test_required_params(self, router: MethodRouter, method: str, message: str) -> None:
        with pytest.raises(MissingParameter, match=message):
            router.parse(method, {})
        with pytest.raises(MissingParameter, match=message):
            router.parse(method, None)

    def test_unknown_tool(self, router: MethodRouter) -> None:
        with pytest.raises(NotFound, match="Tool 'asana_nope' not found"):
            router.parse("tools/call", {"name": "asana_nope"})

    def test_tool_lookup_is_exact(self, router: MethodRouter) -> None:
        with pytest.raises(NotFound):
            router.parse("tools/call", {"name": "asana_list_workspace"})
        with pytest.raises(NotFound):
            router.parse("tools/call", {"name": "ASANA_LIST_WORKSPACES"})

    def test_non_mapping_params_treated_as_empty(self, router: MethodRouter) -> None:
        assert router.parse("tools/list", ["x"]).params == {}

    @pytest.mark.parametrize(
        ("method", "name", "message"),
        [
            ("tools/call", "asana_get_task", "Tool arguments must be an object"),
            ("prompts/get", "task-summary", "Prompt arguments must be an object"),
        ],
    )
    def test_arguments_must_be_an_object(
        self, router: MethodRouter, method: str, name: str, message: str,
    ) -> None:
        with pytest.raises(MissingParameter, match=message):
            router.parse(method, {"name": name, "arguments": ["x"]})


class TestDispatch:
    @pytest.mark.asyncio
    async def test_tools_list(self, router: MethodRouter, fake_client) -> None:
        result = serialize_result(await router.dispatch("tools/list", None, fake_client))
        names = [t["name"] for t in result["tools"]]
        assert "asana_list_workspaces" in names
        assert all("inputSchema" in t for t in result["tools"])
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_tools_list_is_idempotent(self, router: MethodRouter, fake_client) -> None:
        first = serialize_result(await router.dispatch("tools/list", None, fake_client))
        second = serialize_result(await router.dispatch("tools/list", None, fake_client))
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)

    @pytest.mark.asyncio
    async def test_prompts_list_is_idempotent(self, router: MethodRouter, fake_client) -> None:
        first = serialize_result(await router.dispatch("prompts/list", {}, fake_client))
        second = serialize_result(await router.dispatch("prompts/list", {}, fake_client))
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)
        assert {p["name"] for p in first["prompts"]} == {
            "task-summary", "task-completeness", "create-task",
        }

    @pytest.mark.asyncio
    async def test_tools_call_defaults_arguments(self, router: MethodRouter, fake_client) -> None:
        result = await router.dispatch(
            "tools/call", {"name": "asana_list_workspaces"}, fake_client,
        )
        payload = serialize_result(result)
        assert payload["content"][0]["type"] == "text"
        assert json.loads(payload["content"][0]["text"]) == [{"gid": "1", "name": "Acme"}]
        assert fake_client.call_names == ["list_workspaces"]

    @pytest.mark.asyncio
    async def test_tools_call_passes_arguments(self, router: MethodRouter, fake_client) -> None:
        await router.dispatch(
            "tools/call",
            {"name": "asana_get_task", "arguments": {"task_id": "42"}},
            fake_client,
        )
        name, args, kwargs = fake_client.calls[0]
        assert name == "get_task"
        assert args == ("42",)

    @pytest.mark.asyncio
    async def test_unknown_tool_makes_no_delegate_call(self, router: MethodRouter, fake_client) -> None:
        with pytest.raises(NotFound):
            await router.dispatch("tools/call", {"name": "missing"}, fake_client)
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_method_makes_no_delegate_call(self, router: MethodRouter, fake_client) -> None:
        with pytest.raises(UnsupportedMethod):
            await router.dispatch("sampling/createMessage", {}, fake_client)
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_prompts_get(self, router: MethodRouter, fake_client) -> None:
        result = serialize_result(await router.dispatch(
            "prompts/get",
            {"name": "task-summary", "arguments": {"task_id": "987"}},
            fake_client,
        ))
        assert "987" in result["messages"][0]["content"]["text"]

    @pytest.mark.asyncio
    async def test_prompts_get_unknown(self, router: MethodRouter, fake_client) -> None:
        with pytest.raises(NotFound, match="Prompt 'nope' not found"):
            await router.dispatch("prompts/get", {"name": "nope"}, fake_client)

    @pytest.mark.asyncio
    async def test_resources_list(self, router: MethodRouter, fake_client) -> None:
        result = serialize_result(await router.dispatch("resources/list", None, fake_client))
        assert [r["uri"] for r in result["resources"]] == ["asana://workspace/1"]

    @pytest.mark.asyncio
    async def test_resources_read(self, router: MethodRouter, fake_client) -> None:
        result = serialize_result(await router.dispatch(
            "resources/read", {"uri": "asana://project/55"}, fake_client,
        ))
        content = result["contents"][0]
        assert content["uri"] == "asana://project/55"
        assert content["mimeType"] == "application/json"
        assert "sections" in json.loads(content["text"])
        assert fake_client.call_names == ["get_project", "get_project_sections"]

    @pytest.mark.asyncio
    async def test_resources_read_unknown_scheme(self, router: MethodRouter, fake_client) -> None:
        with pytest.raises(NotFound):
            await router.dispatch("resources/read", {"uri": "asana://portfolio/1"}, fake_client)
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_delegate_errors_propagate(self, router: MethodRouter, fake_client) -> None:
        fake_client.error = RuntimeError("boom")
        with pytest.raises(RuntimeError, match="boom"):
            await router.dispatch("tools/call", {"name": "asana_list_workspaces"}, fake_client)
