"""Tests for the tool registry and the schema description helpers."""

import pytest

from shopagent import tools as tools_package
from shopagent.core.exceptions import DuplicateToolError, ToolExecutionError, ToolNotFoundError, ToolValidationError
from shopagent.core.tool_registry import ToolMetadata, ToolRegistry
from shopagent.core.tool_schema import ToolParameter, ToolSchema, to_json_schema
from shopagent.tools.base_tool import ToolContext


async def _echo(**kwargs):
    return {"success": True, "data": kwargs}


def _echo_tool(name: str = "echo", **overrides) -> ToolMetadata:
    params = dict(
        name=name,
        description="Echo the arguments back",
        execute=_echo,
        parameters=ToolSchema.of(
            text=ToolParameter(kind="string", description="Text to echo"),
            times=ToolParameter(kind="integer", required=False, description="Repeat count"),
        ),
    )
    params.update(overrides)
    return ToolMetadata(**params)


class TestRegistration:
    """Registration and lookup."""

    def setup_method(self):
        self.registry = ToolRegistry()

    def test_register_and_lookup(self):
        self.registry.register(_echo_tool())

        assert "echo" in self.registry
        assert self.registry.get_tool("echo").description == "Echo the arguments back"
        assert self.registry.list_tool_names() == ["echo"]

    def test_duplicate_registration_fails_and_keeps_count(self):
        self.registry.register(_echo_tool())

        with pytest.raises(DuplicateToolError):
            self.registry.register(_echo_tool(description="another echo"))

        assert len(self.registry) == 1
        assert self.registry.get_tool("echo").description == "Echo the arguments back"

    def test_register_batch_and_categories(self):
        self.registry.register_batch([
            _echo_tool("a", category="system"),
            _echo_tool("b", category="dangerous", requires_confirmation=True),
        ])

        assert [tool.name for tool in self.registry.get_tools_by_category("dangerous")] == ["b"]
        assert self.registry.requires_confirmation("b") is True
        assert self.registry.requires_confirmation("a") is False
        assert self.registry.requires_confirmation("missing") is False


class TestProviderSpecs:
    """Export to the OpenAI function-calling format."""

    def test_required_and_optional_parameters(self):
        registry = ToolRegistry()
        registry.register(_echo_tool())

        spec = registry.to_provider_tool_specs()[0]

        assert spec["type"] == "function"
        assert spec["function"]["name"] == "echo"
        parameters = spec["function"]["parameters"]
        assert parameters["type"] == "object"
        assert parameters["required"] == ["text"]
        assert parameters["properties"]["times"] == {"type": "integer", "description": "Repeat count"}

    def test_tool_without_parameters(self):
        assert to_json_schema(None) == {"type": "object", "properties": {}}

    def test_optional_only_schema_has_no_required_key(self):
        schema = ToolSchema.of(unit=ToolParameter(kind="string", required=False, enum=["c", "f"]))

        result = to_json_schema(schema)

        assert "required" not in result
        assert result["properties"]["unit"]["enum"] == ["c", "f"]

    def test_array_parameter_items(self):
        schema = ToolSchema.of(tags=ToolParameter(kind="array", items="string"))

        assert to_json_schema(schema)["properties"]["tags"]["items"] == {"type": "string"}


class TestExecute:
    """Validation and error conversion at the registry boundary."""

    def setup_method(self):
        self.registry = ToolRegistry()
        self.registry.register(_echo_tool())

    @pytest.mark.asyncio
    async def test_valid_arguments_reach_the_tool(self):
        result = await self.registry.execute("echo", {"text": "hi", "times": 2})

        assert result == {"success": True, "data": {"text": "hi", "times": 2}}

    @pytest.mark.asyncio
    async def test_optional_argument_can_be_omitted(self):
        result = await self.registry.execute("echo", {"text": "hi"})

        assert result["data"] == {"text": "hi"}

    @pytest.mark.asyncio
    async def test_unknown_tool_raises(self):
        with pytest.raises(ToolNotFoundError):
            await self.registry.execute("nope", {})

    @pytest.mark.asyncio
    async def test_missing_argument_is_reported_not_raised(self):
        result = await self.registry.execute("echo", {})

        assert result["success"] is False
        assert "text" in result["message"]

    @pytest.mark.asyncio
    async def test_wrong_type_is_reported(self):
        result = await self.registry.execute("echo", {"text": "hi", "times": "many"})

        assert result["success"] is False
        assert "times" in result["message"]

    def test_validate_arguments(self):
        assert self.registry.validate_arguments("echo", {"text": "hi"}) == {"text": "hi"}

    def test_validate_arguments_raises_with_detail(self):
        with pytest.raises(ToolValidationError) as info:
            self.registry.validate_arguments("echo", {"times": "many"})

        assert info.value.tool_name == "echo"
        assert "text" in info.value.detail
        assert "times" in info.value.detail

    @pytest.mark.asyncio
    async def test_exception_in_tool_body_becomes_failure(self):
        async def boom():
            raise RuntimeError("disk on fire")

        self.registry.register(ToolMetadata(name="boom", description="fails", execute=boom))

        result = await self.registry.execute("boom", {})

        assert result["success"] is False
        assert "disk on fire" in result["message"]

    @pytest.mark.asyncio
    async def test_tool_execution_error_message_is_kept(self):
        async def refuse():
            raise ToolExecutionError("Quota exceeded", "refuse")

        self.registry.register(ToolMetadata(name="refuse", description="fails", execute=refuse))

        assert await self.registry.execute("refuse", {}) == {"success": False, "message": "Quota exceeded"}


class TestDiscovery:
    """Built-in tools are found in the tools package."""

    def test_builtin_tools_registered(self, settings):
        registry = ToolRegistry()
        retrieval = object()

        registry.discover(tools_package, ToolContext(settings=settings, retrieval=retrieval))

        names = set(registry.list_tool_names())
        assert {"ping", "get_current_time", "calculate", "delete_file", "search_docs"} <= names
        assert registry.requires_confirmation("delete_file") is True

    def test_unconfigured_tools_are_skipped(self, settings):
        registry = ToolRegistry()

        registry.discover(tools_package, ToolContext(settings=settings, retrieval=None))

        names = set(registry.list_tool_names())
        assert "get_weather" not in names
        assert "search_web" not in names
        assert "search_docs" not in names
        assert "ping" in names
