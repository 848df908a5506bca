# The module is to define the common models for the agent service.
# Author: Shibo Li
# Date: 2025-07-02
# Version: 0.2.0


from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Literal

Role = Literal["system", "user",
               "assistant", "tool"]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class FunctionCall(BaseModel):
    """
    The function part of a tool call.
    Attributes:
        name (str): The name of the tool the model wants to invoke.
        arguments (str): The raw JSON text of the arguments, as produced by the model.
    """
    name: str = Field(default="", description="The name of the tool to call.")
    arguments: str = Field(default="", description="The JSON-encoded arguments.")


class ToolCall(BaseModel):
    """
    Represents a tool call made by the assistant, including the function name and arguments.
    Attributes:
        id (str): The unique ID for the tool call.
        function (FunctionCall): The function name and arguments.
        type (str): The type of the tool call, always 'function'.
    """
    id: str = Field(default="", description="The unique ID for the tool call.")
    type: Literal["function"] = Field(default="function", description="The type of the tool call.")
    function: FunctionCall = Field(default_factory=FunctionCall, description="The function name and arguments.")


class Message(BaseModel):
    """
    Represents a message in the conversation, which can be from the system, user, assistant, or tool.
    Attributes:
        role (Role): The role of the message sender (system, user, assistant, or tool).
        content (Optional[str]): The content of the message.
        tool_calls (Optional[List[ToolCall]]): A list of tool calls requested by the assistant.
        tool_call_id (Optional[str]): The ID of the tool call this message is a result of.
    """
    model_config = {"frozen": True}

    role: Role = Field(..., description="The role of the message sender.")
    content: Optional[str] = Field(default=None, description="The content of the message.")
    tool_calls: Optional[List[ToolCall]] = Field(default=None, description="A list of tool calls requested by the assistant.")
    tool_call_id: Optional[str] = Field(default=None, description="The ID of the tool call this message is a result of.")

    def to_provider(self) -> Dict[str, Any]:
        """Returns the message in the shape the chat-completion endpoint expects."""
        return self.model_dump(exclude_none=True)


class PendingToolCall(BaseModel):
    """A tool call waiting for the user's approval. At most one exists per conversation."""
    id: str
    tool_name: str
    args: Dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=_utcnow)


class RagChunk(BaseModel):
    """
    A fixed-size slice of a knowledge base document together with its embedding.
    Attributes:
        id (str): Chunk id, unique across the knowledge base.
        source_id (str): The id of the document the chunk was cut from.
        checksum (str): sha256 of the chunk content.
    """
    id: str
    source_id: str
    title: Optional[str] = None
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    embedding: List[float] = Field(default_factory=list)
    checksum: str
    created_at: str = Field(default_factory=_utcnow)


class ScoredChunk(BaseModel):
    """A search hit: the chunk without its embedding, plus the similarity score."""
    id: str
    source_id: str
    title: Optional[str] = None
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: float
