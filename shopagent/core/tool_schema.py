# Explicit argument schema descriptions for tools.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

"""
Tool authors describe their arguments with ``ToolSchema`` / ``ToolParameter``
instead of handing over an arbitrary model class. Two pure functions consume
the description: ``to_json_schema`` produces the OpenAI ``parameters`` object
and ``build_validator`` produces a pydantic model used to check the
arguments a model generated.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, StrictBool, create_model

ParameterKind = Literal["string", "number", "integer", "boolean", "array"]

_PYTHON_TYPES: Dict[str, Any] = {
    "string": str,
    "number": float,
    "integer": int,
    "boolean": StrictBool,
}


class ToolParameter(BaseModel):
    """
    Describes one argument of a tool.
    Attributes:
        kind (ParameterKind): JSON type of the argument.
        description (str): Text shown to the model and in the system prompt.
        required (bool): Whether the model must supply the argument.
        enum (Optional[List[str]]): Allowed values for string arguments.
        items (Optional[ParameterKind]): Element kind for array arguments.
    """
    kind: ParameterKind
    description: str = ""
    required: bool = True
    enum: Optional[List[str]] = None
    items: Optional[ParameterKind] = None


class ToolSchema(BaseModel):
    """Field name -> parameter description, in declaration order."""
    parameters: Dict[str, ToolParameter] = Field(default_factory=dict)

    @classmethod
    def of(cls, **fields: ToolParameter) -> "ToolSchema":
        return cls(parameters=fields)

    @property
    def required_fields(self) -> List[str]:
        return [name for name, param in self.parameters.items() if param.required]


def _parameter_json(param: ToolParameter) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": param.kind}
    if param.description:
        schema["description"] = param.description
    if param.enum:
        schema["enum"] = list(param.enum)
    if param.kind == "array":
        schema["items"] = {"type": param.items or "string"}
    return schema


def to_json_schema(schema: Optional[ToolSchema]) -> Dict[str, Any]:
    """Maps a schema description to the OpenAI function ``parameters`` object."""
    if schema is None or not schema.parameters:
        return {"type": "object", "properties": {}}
    result: Dict[str, Any] = {
        "type": "object",
        "properties": {name: _parameter_json(param) for name, param in schema.parameters.items()},
    }
    required = schema.required_fields
    if required:
        result["required"] = required
    return result


def _python_type(param: ToolParameter) -> Any:
    if param.enum:
        return Literal[tuple(param.enum)]
    if param.kind == "array":
        return List[_PYTHON_TYPES[param.items or "string"]]
    return _PYTHON_TYPES[param.kind]


def build_validator(tool_name: str, schema: Optional[ToolSchema]) -> Type[BaseModel]:
    """Builds a pydantic model that accepts exactly the described arguments."""
    definitions: Dict[str, Tuple[Any, Any]] = {}
    for name, param in (schema.parameters.items() if schema else []):
        annotation = _python_type(param)
        if param.required:
            definitions[name] = (annotation, ...)
        else:
            definitions[name] = (Optional[annotation], None)
    return create_model(
        f"{tool_name.title().replace('_', '')}Args",
        __config__=ConfigDict(extra="ignore"),
        **definitions,
    )


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Joins pydantic error entries into ``field: message, field: message``."""
    parts = []
    for error in errors:
        location = ".".join(str(item) for item in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return ", ".join(parts)
