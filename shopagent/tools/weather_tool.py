# The module is to define a tool for looking up the weather through an HTTP weather service.
# Author: Shibo Li
# Date: 2025-07-04
# Version: 0.1.0

import httpx
from typing import Optional
from shopagent.core.exceptions import ToolExecutionError
from shopagent.core.tool_schema import ToolParameter, ToolSchema
from shopagent.utils.logger import console
from .base_tool import BaseTool, ToolContext


class WeatherTool(BaseTool):
    """
    Queries the weather service configured by WEATHER_API_BASE_URL
    (``GET <base>/weather?city=...&unit=...``) and returns its JSON payload.
    """
    name: str = "get_weather"
    description: str = "Looks up the current weather for the given city."
    category = "external"
    parameters = ToolSchema.of(
        city=ToolParameter(kind="string", description="City name, e.g. Beijing"),
        unit=ToolParameter(kind="string", required=False, enum=["celsius", "fahrenheit"],
                           description="Temperature unit, celsius by default"),
    )

    _service_url: str

    def __init__(self, context: ToolContext):
        """Reads the weather service URL from the settings; the tool is skipped without one."""
        super().__init__(context)
        base_url = context.settings.WEATHER_API_BASE_URL
        if not base_url:
            raise ValueError("WEATHER_API_BASE_URL is not set in the environment file (.env).")
        self._service_url = f"{base_url.rstrip('/')}/weather"
        self._timeout = context.settings.LLM_REQUEST_TIMEOUT_SECONDS

    async def execute(self, city: str, unit: Optional[str] = None) -> dict:
        unit = unit or "celsius"
        console.info(f"Executing tool '{self.name}'", city=city, unit=unit)
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self._service_url, params={"city": city, "unit": unit},
                                            timeout=self._timeout)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ToolExecutionError(
                f"Weather service returned HTTP {e.response.status_code} for '{city}'.", self.name
            ) from e
        except httpx.HTTPError as e:
            raise ToolExecutionError(f"Weather service is unreachable: {e}", self.name) from e

        console.success(f"Tool '{self.name}' executed successfully.")
        return {"success": True, "data": {"city": city, "unit": unit, **payload}}
