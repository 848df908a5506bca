# shopagent/services/llm_connector.py
# Author: Shibo Li
# Date: 2025-07-04
# Version: 0.2.0

from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from openai import AsyncOpenAI, APIError, APIStatusError, APITimeoutError

from shopagent.core.config import Settings
from shopagent.core.exceptions import LLMConnectorError
from shopagent.utils.logger import console

ToolChoice = Union[str, Dict[str, Any]]


@dataclass(frozen=True)
class TextDelta:
    """A fragment of the assistant's visible text."""
    text: str


@dataclass(frozen=True)
class ToolCallDelta:
    """
    A fragment of a tool call. ``index`` identifies the call within the
    response; ``id`` and ``name`` usually arrive only on the first fragment and
    ``arguments`` carries a piece of the JSON argument text.
    """
    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""


StreamDelta = Union[TextDelta, ToolCallDelta]


def decode_chunk(chunk: Any) -> List[StreamDelta]:
    """
    Turns one ``ChatCompletionChunk`` into typed deltas. This is the only place
    that inspects the provider's optional fields.
    """
    deltas: List[StreamDelta] = []
    if not getattr(chunk, "choices", None):
        return deltas
    delta = chunk.choices[0].delta
    if delta is None:
        return deltas
    if delta.content:
        deltas.append(TextDelta(text=delta.content))
    for call in delta.tool_calls or []:
        function = call.function
        deltas.append(ToolCallDelta(
            index=call.index if call.index is not None else 0,
            id=call.id or None,
            name=(function.name or None) if function else None,
            arguments=(function.arguments or "") if function else "",
        ))
    return deltas


def _error_message(e: APIError) -> str:
    message = str(e.body) if e.body is not None else (e.message or "Unknown API Error")
    if isinstance(e.body, dict):
        message = e.body.get("message", "Unknown API Error")
    return message


class LLMConnector:
    """
    Thin async wrapper over an OpenAI-compatible endpoint: streamed chat with
    tools, plain completion for summaries, and text embeddings.

    Provider errors are logged and re-raised as ``LLMConnectorError``.
    """

    def __init__(self, client: AsyncOpenAI, model: str, embedding_model: str,
                 temperature: float = 0.6, summary_temperature: float = 0.2):
        self._client = client
        self.model = model
        self.embedding_model = embedding_model
        self.temperature = temperature
        self.summary_temperature = summary_temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMConnector":
        if not settings.LLM_API_KEY:
            console.warning("LLM_API_KEY is not configured; completion calls will fail.")
        client = AsyncOpenAI(
            api_key=settings.LLM_API_KEY or "missing",
            base_url=settings.LLM_BASE_URL,
            timeout=settings.LLM_REQUEST_TIMEOUT_SECONDS,
        )
        return cls(
            client,
            model=settings.LLM_MODEL,
            embedding_model=settings.EMBEDDING_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            summary_temperature=settings.SUMMARY_TEMPERATURE,
        )

    async def close(self):
        await self._client.close()

    async def stream_chat(self, messages: List[Dict[str, Any]],
                          tools: Optional[List[Dict[str, Any]]] = None,
                          tool_choice: ToolChoice = "auto") -> AsyncIterator[StreamDelta]:
        """Yields text and tool-call deltas as the model produces them."""
        request_params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "stream": True,
        }
        if tools:
            request_params["tools"] = tools
            request_params["tool_choice"] = tool_choice

        try:
            stream = await self._client.chat.completions.create(**request_params)
            async for chunk in stream:
                for delta in decode_chunk(chunk):
                    yield delta
        except APITimeoutError as e:
            console.error("The LLM request timed out.")
            raise LLMConnectorError("The language model did not answer in time.") from e
        except APIError as e:
            message = _error_message(e)
            console.error(f"An API error occurred: {message}")
            status = e.status_code if isinstance(e, APIStatusError) else None
            raise LLMConnectorError(f"Error from LLM provider: {message}", status) from e

    async def complete(self, messages: List[Dict[str, Any]], temperature: Optional[float] = None) -> str:
        """Non-streaming completion returning the assistant's text."""
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.summary_temperature if temperature is None else temperature,
            )
        except APIError as e:
            message = _error_message(e)
            console.error(f"An API error occurred: {message}")
            raise LLMConnectorError(f"Error from LLM provider: {message}") from e
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def embed(self, text: str) -> List[float]:
        try:
            response = await self._client.embeddings.create(model=self.embedding_model, input=text)
        except APIError as e:
            message = _error_message(e)
            console.error(f"An embedding API error occurred: {message}")
            raise LLMConnectorError(f"Error generating embedding: {message}") from e
        if not response.data:
            return []
        return list(response.data[0].embedding)
