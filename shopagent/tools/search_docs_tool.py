# The module is to define a tool that searches the knowledge base.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.1.0

from typing import Optional
from shopagent.core.tool_schema import ToolParameter, ToolSchema
from shopagent.utils.logger import console
from .base_tool import BaseTool, ToolContext


class SearchDocsTool(BaseTool):
    """Semantic search over the knowledge base maintained by the retrieval engine."""
    name: str = "search_docs"
    description: str = "Runs a semantic search over the knowledge base and returns the most relevant document chunks."
    category = "knowledge"
    parameters = ToolSchema.of(
        query=ToolParameter(kind="string", description="The search query text"),
        topK=ToolParameter(kind="integer", required=False,
                           description="Number of results to return, defaults to the configured value"),
    )

    def __init__(self, context: ToolContext):
        super().__init__(context)
        if context.retrieval is None:
            raise ValueError("No retrieval engine is configured.")
        self._retrieval = context.retrieval

    async def execute(self, query: str, topK: Optional[int] = None) -> dict:
        console.info(f"Executing tool '{self.name}'", query=query[:50], top_k=topK)
        results = await self._retrieval.search(query=query, top_k=topK)
        return {
            "success": True,
            "data": [hit.model_dump() for hit in results],
        }
