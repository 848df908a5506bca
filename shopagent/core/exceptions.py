# Exception types raised by the tool layer and the LLM connector.
# Author: Shibo Li
# Date: 2025-07-02
# Version: 0.1.0

from typing import Optional


class ToolError(Exception):
    """Base class for errors tied to a single tool."""

    def __init__(self, message: str, tool_name: str):
        super().__init__(message)
        self.tool_name = tool_name


class DuplicateToolError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(f"Tool '{tool_name}' is already registered.", tool_name)


class ToolNotFoundError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(f"Tool '{tool_name}' not found.", tool_name)


class ToolValidationError(ToolError):
    def __init__(self, tool_name: str, detail: str):
        super().__init__(f"Invalid arguments for tool '{tool_name}': {detail}", tool_name)
        self.detail = detail


class ToolExecutionError(ToolError):
    """Tools may raise this to report a failure with a message meant for the model."""


class LLMConnectorError(Exception):
    """The completion or embedding endpoint failed (network, provider error, timeout)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
