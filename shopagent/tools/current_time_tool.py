# A tool returning the current system time.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

from datetime import datetime
from .base_tool import BaseTool


class CurrentTimeTool(BaseTool):
    """Reports the local system time as an ISO timestamp, a date and a time of day."""
    name: str = "get_current_time"
    description: str = "Gets the current system time, including the ISO timestamp, the date and the time of day."
    category = "system"

    async def execute(self) -> dict:
        now = datetime.now().astimezone()
        return {
            "success": True,
            "data": {
                "timestamp": now.isoformat(),
                "date": now.strftime("%Y-%m-%d"),
                "time": now.strftime("%H:%M:%S"),
            },
        }
