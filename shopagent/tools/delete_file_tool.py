# A demonstration of a dangerous tool that is gated behind user confirmation.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

from shopagent.core.tool_schema import ToolParameter, ToolSchema
from shopagent.utils.logger import console
from .base_tool import BaseTool


class DeleteFileTool(BaseTool):
    """
    Pretends to delete a file. Nothing on disk is touched; the tool exists so
    the confirmation flow has a realistic destructive operation to guard.
    """
    name: str = "delete_file"
    description: str = "Deletes the file at the given path (dangerous, requires user confirmation)."
    category = "dangerous"
    requires_confirmation = True
    parameters = ToolSchema.of(
        path=ToolParameter(kind="string", description="Path of the file to delete"),
    )

    async def execute(self, path: str) -> dict:
        console.warning(f"Executing tool '{self.name}' (simulated)", path=path)
        return {
            "success": True,
            "message": f"File {path} deleted (simulated).",
        }
