"""Shared fixtures: an in-memory Redis, a scripted chat model and wired services."""

import copy
import string
from typing import Any, Dict, List, Optional

import fakeredis
import pytest
import pytest_asyncio

from shopagent.core.config import Settings
from shopagent.core.container import build_services
from shopagent.services.kv_store import RedisStore
from shopagent.services.llm_connector import TextDelta, ToolCallDelta


def letter_embedding(text: str) -> List[float]:
    """A 26-dim bag-of-letters vector: texts sharing letters are similar."""
    lowered = text.lower()
    return [float(lowered.count(ch)) for ch in string.ascii_lowercase]


class ScriptedLLM:
    """
    Stand-in for LLMConnector. Each ``stream_chat`` call replays the next
    scripted round; when the script runs out, the last round repeats if
    ``repeat_last`` is set, otherwise an empty round is returned.
    """

    def __init__(self, rounds: Optional[List[List[Any]]] = None, repeat_last: bool = False,
                 summary: str = "summary", fail_stream: Optional[Exception] = None):
        self.rounds = list(rounds or [])
        self.repeat_last = repeat_last
        self.summary = summary
        self.fail_stream = fail_stream
        self.chat_calls: List[Dict[str, Any]] = []
        self.complete_calls: List[List[Dict[str, Any]]] = []
        self.embed_calls: List[str] = []
        self._next = 0
        self.closed = False

    def _next_round(self) -> List[Any]:
        if self._next < len(self.rounds):
            round_ = self.rounds[self._next]
            self._next += 1
            return round_
        if self.repeat_last and self.rounds:
            return self.rounds[-1]
        return []

    async def stream_chat(self, messages, tools=None, tool_choice="auto"):
        self.chat_calls.append({
            "messages": copy.deepcopy(messages),
            "tools": tools,
            "tool_choice": tool_choice,
        })
        if self.fail_stream is not None:
            raise self.fail_stream
        for delta in self._next_round():
            yield delta

    async def complete(self, messages, temperature=None):
        self.complete_calls.append(messages)
        if isinstance(self.summary, Exception):
            raise self.summary
        return self.summary

    async def embed(self, text: str) -> List[float]:
        self.embed_calls.append(text)
        return letter_embedding(text)

    async def close(self):
        self.closed = True


def tool_call(name: str, arguments: str, index: int = 0, call_id: Optional[str] = None) -> List[ToolCallDelta]:
    """Splits a tool call into a name fragment followed by two argument fragments."""
    half = len(arguments) // 2
    return [
        ToolCallDelta(index=index, id=call_id or f"call_{name}_{index}", name=name),
        ToolCallDelta(index=index, arguments=arguments[:half]),
        ToolCallDelta(index=index, arguments=arguments[half:]),
    ]


def text(*parts: str) -> List[TextDelta]:
    return [TextDelta(text=part) for part in parts]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        LLM_API_KEY="test-key",
        RAG_ENABLED=True,
        RAG_SCORE_THRESHOLD=0.1,
        SSE_HEARTBEAT_SECONDS=30,
        TAVILY_API_KEY=None,
        WEATHER_API_BASE_URL=None,
    )


@pytest_asyncio.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def store(redis_client) -> RedisStore:
    return RedisStore(redis_client, key_prefix="test")


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def services(settings, store, llm):
    return build_services(settings, store=store, llm=llm)
