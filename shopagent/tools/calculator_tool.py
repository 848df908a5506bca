# The module is to define a tool for evaluating arithmetic expressions.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

from shopagent.core.exceptions import ToolExecutionError
from shopagent.core.tool_schema import ToolParameter, ToolSchema
from shopagent.utils.arithmetic import ExpressionError, evaluate
from shopagent.utils.logger import console
from .base_tool import BaseTool


class CalculatorTool(BaseTool):
    """
    Evaluates an arithmetic expression with the restricted parser in
    ``shopagent.utils.arithmetic``; names, calls and attribute access are rejected.
    """
    name: str = "calculate"
    description: str = "Evaluates a math expression. Supports +, -, *, /, %, ^ and parentheses."
    category = "system"
    parameters = ToolSchema.of(
        expression=ToolParameter(kind="string", description='The math expression, e.g. "123 * 456"'),
    )

    async def execute(self, expression: str) -> dict:
        console.info(f"Executing tool '{self.name}'", expression=expression)
        try:
            result = evaluate(expression)
        except ExpressionError as e:
            raise ToolExecutionError(f"Calculation error: {e}", self.name) from e
        return {
            "success": True,
            "data": {
                "expression": expression,
                "result": result,
            },
        }
