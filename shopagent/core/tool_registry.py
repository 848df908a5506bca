# Registers tools and executes them with argument validation.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 2.0.0

import pkgutil
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Type, TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from shopagent.core.exceptions import (
    DuplicateToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from shopagent.core.tool_schema import ToolSchema, build_validator, format_validation_errors, to_json_schema
from shopagent.utils.logger import console

if TYPE_CHECKING:
    from shopagent.tools.base_tool import ToolContext

ToolCategory = Literal["system", "knowledge", "external", "dangerous"]
ToolResult = Dict[str, Any]


@dataclass
class ToolMetadata:
    """
    Everything the registry knows about a tool.
    Attributes:
        name (str): Unique tool name, as the model will call it.
        description (str): Short description shown to the model.
        execute (Callable): Coroutine receiving the validated arguments as keywords.
        parameters (Optional[ToolSchema]): Argument description; None means no arguments.
        requires_confirmation (bool): Whether a human must approve each call.
        category (ToolCategory): Grouping used for filtering.
    """
    name: str
    description: str
    execute: Callable[..., Awaitable[ToolResult]]
    parameters: Optional[ToolSchema] = None
    requires_confirmation: bool = False
    category: ToolCategory = "system"
    validator: Type[BaseModel] = field(init=False, repr=False)

    def __post_init__(self):
        self.validator = build_validator(self.name, self.parameters)


class ToolRegistry:
    """
    A name-keyed collection of tools. Registration is append-only: registering
    a name twice raises ``DuplicateToolError`` and leaves the registry untouched.
    """
    def __init__(self):
        self._tools: Dict[str, ToolMetadata] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def register(self, tool: ToolMetadata):
        if tool.name in self._tools:
            raise DuplicateToolError(tool.name)
        self._tools[tool.name] = tool

    def register_batch(self, tools: List[ToolMetadata]):
        for tool in tools:
            self.register(tool)

    def get_tool(self, name: str) -> Optional[ToolMetadata]:
        return self._tools.get(name)

    def list_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def get_tools_by_category(self, category: str) -> List[ToolMetadata]:
        return [tool for tool in self._tools.values() if tool.category == category]

    def requires_confirmation(self, name: str) -> bool:
        tool = self._tools.get(name)
        return bool(tool and tool.requires_confirmation)

    def to_provider_tool_specs(self) -> List[Dict[str, Any]]:
        """Returns all tool definitions in OpenAI's function-calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": to_json_schema(tool.parameters),
                },
            }
            for tool in self._tools.values()
        ]

    def validate_arguments(self, name: str, args: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Checks ``args`` against the tool's schema and returns the keyword
        arguments for ``execute``. Raises ``ToolValidationError`` when they do not match.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        try:
            validated = tool.validator.model_validate(args or {})
        except ValidationError as e:
            raise ToolValidationError(name, format_validation_errors(e.errors())) from e
        return validated.model_dump(exclude_none=True)

    async def execute(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Validates ``args`` and runs the tool.

        Raises ``ToolNotFoundError`` for an unknown name. Invalid arguments and
        exceptions raised by the tool body are returned as
        ``{"success": False, "message": ...}``.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        try:
            kwargs = self.validate_arguments(name, args)
        except ToolValidationError as e:
            console.warning(f"Rejected arguments for tool '{name}'", detail=e.detail)
            return {"success": False, "message": str(e)}

        try:
            return await tool.execute(**kwargs)
        except ToolExecutionError as e:
            console.error(f"Tool '{name}' reported a failure: {e}")
            return {"success": False, "message": str(e)}
        except Exception as e:
            console.exception(f"Tool '{name}' raised an unexpected error")
            return {"success": False, "message": f"Tool '{name}' failed: {e}"}

    def discover(self, package, context: "ToolContext") -> List[str]:
        """
        Scans ``package``, imports all modules, finds classes that inherit from
        BaseTool, and registers an instance of each. A tool whose constructor
        raises (usually missing configuration) is logged and skipped.
        """
        from shopagent.tools.base_tool import BaseTool

        registered = []
        for _, modname, _ in pkgutil.iter_modules(package.__path__, f"{package.__name__}."):
            if modname.endswith(".base_tool"):
                continue
            try:
                module = __import__(modname, fromlist="dummy")
            except Exception as e:
                console.error(f"Failed to import tool module {modname}: {e}")
                continue
            for _, obj in inspect.getmembers(module, inspect.isclass):
                if not issubclass(obj, BaseTool) or obj is BaseTool or inspect.isabstract(obj):
                    continue
                if obj.__module__ != module.__name__:
                    continue
                try:
                    self.register(obj(context).metadata())
                    registered.append(obj.name)
                    console.info(f"Successfully registered tool: '{obj.name}'")
                except DuplicateToolError:
                    raise
                except Exception as e:
                    console.warning(f"Skipping tool '{getattr(obj, 'name', obj.__name__)}': {e}")
        console.success(f"Tool discovery complete. Found {len(registered)} tools: {registered}")
        return registered
