# Run protocol events emitted while an agent turn streams.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.1.0

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Run protocol event types"""
    RUN_STARTED = "RUN_STARTED"
    RUN_FINISHED = "RUN_FINISHED"
    RUN_ERROR = "RUN_ERROR"
    TEXT_MESSAGE_CONTENT = "TEXT_MESSAGE_CONTENT"
    TOOL_CALL_START = "TOOL_CALL_START"
    TOOL_CALL_ARGS = "TOOL_CALL_ARGS"
    TOOL_CALL_RESULT = "TOOL_CALL_RESULT"


class AgentEvent(BaseModel):
    """One event of an agent run. Serialised with camelCase keys and without empty fields."""
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    type: EventType
    delta: Optional[str] = None
    tool_call_name: Optional[str] = Field(default=None, alias="toolCallName")
    content: Optional[str] = None
    raw_event: Optional[Dict[str, Any]] = Field(default=None, alias="rawEvent")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def run_started(conversation_id: str) -> AgentEvent:
    return AgentEvent(type=EventType.RUN_STARTED, raw_event={"conversation_id": conversation_id})


def run_finished(conversation_id: str) -> AgentEvent:
    return AgentEvent(type=EventType.RUN_FINISHED, raw_event={"conversation_id": conversation_id})


def run_error(conversation_id: str, message: str) -> AgentEvent:
    return AgentEvent(type=EventType.RUN_ERROR, raw_event={"conversation_id": conversation_id}, delta=message)


def text_delta(text: str) -> AgentEvent:
    return AgentEvent(type=EventType.TEXT_MESSAGE_CONTENT, delta=text)


def tool_call_start(name: str) -> AgentEvent:
    return AgentEvent(type=EventType.TOOL_CALL_START, tool_call_name=name)


def tool_call_args(name: str, delta: str) -> AgentEvent:
    return AgentEvent(type=EventType.TOOL_CALL_ARGS, tool_call_name=name, delta=delta)


def tool_call_result(name: str, content: str) -> AgentEvent:
    return AgentEvent(type=EventType.TOOL_CALL_RESULT, tool_call_name=name, content=content)
