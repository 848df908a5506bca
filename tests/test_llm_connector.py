"""Tests for the chat-completion connector against a fake OpenAI client."""

from types import SimpleNamespace

import httpx
import openai
import pytest
from openai.types.chat import ChatCompletionChunk

from shopagent.core.exceptions import LLMConnectorError
from shopagent.services.llm_connector import LLMConnector, TextDelta, ToolCallDelta, decode_chunk

REQUEST = httpx.Request("POST", "https://llm.test/v1/chat/completions")


def _chunk(delta: dict) -> ChatCompletionChunk:
    return ChatCompletionChunk.model_validate({
        "id": "chunk-1",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "test-model",
        "choices": [{"index": 0, "delta": delta, "finish_reason": None}],
    })


class FakeOpenAI:
    """Replays canned chunks, completions and embeddings; records request kwargs."""

    def __init__(self, chunks=None, error=None, content="done", embedding=None):
        self.requests = []
        self._chunks = chunks or []
        self._error = error
        self._content = content
        self._embedding = embedding or [0.1, 0.2]
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        self.embeddings = SimpleNamespace(create=self._embed)

    async def _stream(self):
        for chunk in self._chunks:
            yield chunk

    async def _create(self, **kwargs):
        self.requests.append(kwargs)
        if self._error is not None:
            raise self._error
        if kwargs.get("stream"):
            return self._stream()
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    async def _embed(self, **kwargs):
        self.requests.append(kwargs)
        if self._error is not None:
            raise self._error
        return SimpleNamespace(data=[SimpleNamespace(embedding=self._embedding)])


def _connector(client: FakeOpenAI) -> LLMConnector:
    return LLMConnector(client, model="test-model", embedding_model="test-embed")


class TestDecodeChunk:

    def test_text_delta(self):
        assert decode_chunk(_chunk({"content": "Hel"})) == [TextDelta(text="Hel")]

    def test_tool_call_fragments(self):
        first = _chunk({"tool_calls": [{
            "index": 0, "id": "call_1", "type": "function",
            "function": {"name": "calculate", "arguments": ""},
        }]})
        later = _chunk({"tool_calls": [{"index": 0, "function": {"arguments": '{"expr'}}]})

        assert decode_chunk(first) == [ToolCallDelta(index=0, id="call_1", name="calculate", arguments="")]
        assert decode_chunk(later) == [ToolCallDelta(index=0, arguments='{"expr')]

    def test_empty_chunk(self):
        empty = ChatCompletionChunk.model_validate({
            "id": "c", "object": "chat.completion.chunk", "created": 0, "model": "m", "choices": [],
        })

        assert decode_chunk(empty) == []


class TestLLMConnector:

    @pytest.mark.asyncio
    async def test_stream_chat_yields_typed_deltas(self):
        client = FakeOpenAI(chunks=[_chunk({"content": "Hi"}), _chunk({"content": " there"})])
        tools = [{"type": "function", "function": {"name": "ping", "parameters": {}}}]

        deltas = [delta async for delta in _connector(client).stream_chat([{"role": "user", "content": "hi"}],
                                                                           tools=tools)]

        assert deltas == [TextDelta(text="Hi"), TextDelta(text=" there")]
        assert client.requests[0]["stream"] is True
        assert client.requests[0]["tool_choice"] == "auto"
        assert client.requests[0]["temperature"] == 0.6

    @pytest.mark.asyncio
    async def test_stream_chat_without_tools_omits_tool_choice(self):
        client = FakeOpenAI(chunks=[])

        _ = [delta async for delta in _connector(client).stream_chat([], tools=[])]

        assert "tools" not in client.requests[0]
        assert "tool_choice" not in client.requests[0]

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self):
        client = FakeOpenAI(error=openai.APITimeoutError(request=REQUEST))

        with pytest.raises(LLMConnectorError):
            _ = [delta async for delta in _connector(client).stream_chat([])]

    @pytest.mark.asyncio
    async def test_provider_error_keeps_status(self):
        error = openai.InternalServerError(
            "overloaded",
            response=httpx.Response(503, request=REQUEST),
            body={"message": "model overloaded"},
        )
        client = FakeOpenAI(error=error)

        with pytest.raises(LLMConnectorError) as info:
            _ = [delta async for delta in _connector(client).stream_chat([])]

        assert info.value.status_code == 503
        assert "model overloaded" in str(info.value)

    @pytest.mark.asyncio
    async def test_complete_uses_summary_temperature(self):
        client = FakeOpenAI(content="short summary")

        result = await _connector(client).complete([{"role": "user", "content": "summarize"}])

        assert result == "short summary"
        assert client.requests[0]["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_embed(self):
        client = FakeOpenAI(embedding=[1.0, 0.5])

        assert await _connector(client).embed("text") == [1.0, 0.5]
        assert client.requests[0] == {"model": "test-embed", "input": "text"}
