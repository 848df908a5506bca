# A connectivity check tool.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

from datetime import datetime, timezone
from .base_tool import BaseTool


class PingTool(BaseTool):
    """Answers with pong and the current timestamp."""
    name: str = "ping"
    description: str = "Tests the tool connection. Returns pong and the current timestamp."
    category = "system"

    async def execute(self) -> dict:
        return {
            "success": True,
            "message": "pong",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
