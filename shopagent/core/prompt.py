# Builds the system prompt for each agent turn.
# Author: Shibo Li
# Date: 2025-07-04
# Version: 0.1.0

from typing import List, Optional

from shopagent.core.tool_registry import ToolRegistry
from shopagent.models.common import ScoredChunk

PERSONA = """You are an enterprise AI assistant for an online store.
Call tools when you need facts or actions; never make facts up.
When a tool result is available, base your answer on it."""


def describe_tools(registry: ToolRegistry) -> str:
    blocks = []
    for spec in registry.to_provider_tool_specs():
        function = spec["function"]
        parameters = function["parameters"]
        required = set(parameters.get("required", []))
        lines = [
            f"  - {name} ({'required' if name in required else 'optional'}): "
            f"{prop.get('description') or prop.get('type')}"
            for name, prop in parameters.get("properties", {}).items()
        ]
        params_text = "\nParameters:\n" + "\n".join(lines) if lines else "\nNo parameters"
        blocks.append(f"\n[{function['name']}]\n{function['description']}{params_text}")
    return "\n".join(blocks)


def format_chunks(chunks: List[ScoredChunk]) -> str:
    return "\n\n".join(
        f"[{idx}] relevance: {chunk.score:.3f} | {chunk.title or 'Untitled'}\n{chunk.content}"
        for idx, chunk in enumerate(chunks, start=1)
    )


def build_system_prompt(registry: ToolRegistry, summary: str = "",
                        rag_chunks: Optional[List[ScoredChunk]] = None) -> str:
    parts = [PERSONA]

    if len(registry):
        parts.append("Available tools:")
        parts.append(describe_tools(registry))

    if summary:
        parts.append(f"\nConversation memory:\n{summary}")

    if rag_chunks:
        ranked = sorted(rag_chunks, key=lambda chunk: chunk.score, reverse=True)
        parts.append(f"\nKnowledge base results (most relevant first):\n{format_chunks(ranked)}")

    return "\n".join(parts)
