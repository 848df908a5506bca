# The module is to define the SearchWebTool that uses the Tavily AI Search API.
# Author: Shibo Li
# Date: 2025-07-04
# Version: 0.2.0

from typing import Dict, List, Optional
from shopagent.core.exceptions import ToolExecutionError
from shopagent.core.tool_schema import ToolParameter, ToolSchema
from shopagent.utils.logger import console
from .base_tool import BaseTool, ToolContext
from tavily import AsyncTavilyClient


class SearchWebTool(BaseTool):
    """
    A tool that uses the Tavily AI Search API to perform web searches,
    find up-to-date information, and get concise answers.
    """
    name: str = "search_web"
    description: str = "Searches the web for a given query using the Tavily AI search engine. " \
    "Good for finding real-time or specific information."
    category = "external"
    parameters = ToolSchema.of(
        query=ToolParameter(kind="string", description="The search query. Be specific and descriptive."),
        max_results=ToolParameter(kind="integer", required=False, description="Number of results, 5 by default"),
    )

    _tavily_client: AsyncTavilyClient

    def __init__(self, context: ToolContext):
        """
        Initializes the Tavily client when the tool is created.
        """
        super().__init__(context)
        if not context.settings.TAVILY_API_KEY:
            raise ValueError("TAVILY_API_KEY is not set in the environment.")
        self._tavily_client = AsyncTavilyClient(api_key=context.settings.TAVILY_API_KEY)

    async def execute(self, query: str, max_results: Optional[int] = None) -> dict:
        console.info(f"Executing tool '{self.name}' with query: '{query}'")
        try:
            response = await self._tavily_client.search(
                query=query,
                search_depth="advanced",
                max_results=max_results or 5,
            )
        except Exception as e:
            raise ToolExecutionError(f"Web search failed: {e}", self.name) from e

        results = self._format_results(response)
        console.success(f"Tool '{self.name}' executed successfully.", hits=len(results))
        return {"success": True, "data": results}

    def _format_results(self, response: Dict) -> List[Dict[str, str]]:
        """
        Keeps the title, url and content snippet of every Tavily result.
        """
        return [
            {
                "title": result.get("title", "N/A"),
                "url": result.get("url", "N/A"),
                "content": result.get("content", "N/A"),
            }
            for result in response.get("results", [])
        ]
