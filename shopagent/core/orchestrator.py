# shopagent/core/orchestrator.py
# The bounded think/act loop: model streaming, tool dispatch, confirmation gating and memory.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 4.0.0

import json
import re
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from shopagent.core.config import Settings
from shopagent.core.confirmation import ConfirmationGate, format_confirm_tag, parse_confirm_response
from shopagent.core.prompt import build_system_prompt
from shopagent.core.tool_registry import ToolRegistry
from shopagent.models.common import FunctionCall, Message, ToolCall
from shopagent.services.llm_connector import TextDelta, ToolCallDelta
from shopagent.services.memory_manager import MemoryManager
from shopagent.services.rag import RetrievalEngine
from shopagent.streaming import events
from shopagent.streaming.sse import Emit, stream_run
from shopagent.utils.ids import create_id
from shopagent.utils.logger import console

# Messages that explicitly ask for a tool force a tool call on the first round.
FORCE_TOOL_RE = re.compile(
    r"\buse (?:a |the )?tools?\b|\bcall (?:a |the )?tools?\b|\bsearch\b|\blook up\b|使用工具|调用工具|搜索|检索",
    re.IGNORECASE,
)

NOTHING_TO_CONFIRM = "There is no tool call waiting for confirmation."
CALL_REJECTED = "Tool call rejected."
MAX_ITERATIONS_NOTICE = "\n\n[System notice: maximum number of tool calls reached, please simplify your request]"
RUN_ERROR_MESSAGE = "Service error, please retry later."


def parse_tool_arguments(arguments: Optional[str]) -> Dict[str, Any]:
    """Model-generated argument text to a dict; anything that is not a JSON object becomes ``{}``."""
    if not arguments:
        return {}
    try:
        parsed = json.loads(arguments)
    except ValueError:
        console.warning("Tool call arguments are not valid JSON, using empty arguments.", arguments=arguments[:200])
        return {}
    return parsed if isinstance(parsed, dict) else {}


def serialize_tool_result(tool_name: str, result: Any) -> str:
    """JSON text of a tool result; a result that cannot be encoded becomes a failure result."""
    try:
        return json.dumps(result, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        console.error(f"Result of tool '{tool_name}' could not be serialized: {e}")
        return json.dumps({"success": False, "message": f"Tool '{tool_name}' returned a result that cannot be serialized."})


class ToolCallAccumulator:
    """
    Collects streamed tool-call fragments by call index. A call's name is taken
    from the first fragment that carries one; argument fragments are concatenated.
    """

    def __init__(self):
        self._calls: Dict[int, ToolCall] = {}

    def __len__(self) -> int:
        return len(self._calls)

    def add(self, delta: ToolCallDelta) -> bool:
        """Merges ``delta``; returns True when it opened a new call."""
        call = self._calls.get(delta.index)
        is_new = call is None
        if is_new:
            call = ToolCall(id=delta.id or "", function=FunctionCall(name=delta.name or ""))
            self._calls[delta.index] = call
        else:
            if delta.id and not call.id:
                call.id = delta.id
            if delta.name and not call.function.name:
                call.function.name = delta.name
        if delta.arguments:
            call.function.arguments += delta.arguments
        return is_new

    def get(self, index: int) -> ToolCall:
        return self._calls[index]

    def calls(self) -> List[ToolCall]:
        """Calls in the index order the model emitted them, each with an id."""
        ordered = [self._calls[index] for index in sorted(self._calls)]
        for call in ordered:
            if not call.id:
                call.id = create_id("call")
        return ordered


class AgentOrchestrator:
    """
    Runs one user turn: confirmation check, context build, then up to
    AGENT_MAX_ITERATIONS completion rounds, emitting run events as it goes.
    """

    def __init__(self, registry: ToolRegistry, memory: MemoryManager, retrieval: RetrievalEngine,
                 gate: ConfirmationGate, llm, settings: Settings):
        self.registry = registry
        self.memory = memory
        self.retrieval = retrieval
        self.gate = gate
        self.llm = llm
        self.settings = settings

    def tool_choice(self, user_message: Optional[str]) -> Union[str, Dict[str, Any]]:
        if not user_message or not len(self.registry) or not FORCE_TOOL_RE.search(user_message):
            return "auto"
        name = self.settings.AGENT_FORCED_TOOL
        if name not in self.registry:
            name = self.registry.list_tool_names()[0]
        return {"type": "function", "function": {"name": name}}

    async def build_messages(self, conversation_id: str, user_message: str,
                             top_k: Optional[int] = None) -> List[Dict[str, Any]]:
        summary = await self.memory.get_summary(conversation_id)
        history = await self.memory.get_messages(conversation_id)
        rag_chunks = []
        if self.settings.RAG_ENABLED:
            rag_chunks = await self.retrieval.search(query=user_message, top_k=top_k)

        system_prompt = build_system_prompt(self.registry, summary=summary, rag_chunks=rag_chunks)
        messages = [Message(role="system", content=system_prompt).to_provider()]
        messages.extend(msg.to_provider() for msg in history[-self.settings.MEMORY_MAX_MESSAGES:])
        messages.append(Message(role="user", content=user_message).to_provider())
        return messages

    async def stream_completion(self, emit: Emit, messages: List[Dict[str, Any]],
                                conversation_id: str, user_message: Optional[str] = None):
        max_iterations = self.settings.AGENT_MAX_ITERATIONS
        tool_specs = self.registry.to_provider_tool_specs()

        for iteration in range(1, max_iterations + 1):
            console.rule(f"Completion round {iteration}")
            assistant_text = ""
            accumulator = ToolCallAccumulator()
            # only the first round may be forced, later rounds must be free to answer
            tool_choice = self.tool_choice(user_message) if iteration == 1 else "auto"

            async for delta in self.llm.stream_chat(messages, tools=tool_specs, tool_choice=tool_choice):
                if isinstance(delta, TextDelta):
                    assistant_text += delta.text
                    emit(events.text_delta(delta.text))
                elif isinstance(delta, ToolCallDelta):
                    if accumulator.add(delta):
                        emit(events.tool_call_start(accumulator.get(delta.index).function.name))
                    if delta.arguments:
                        emit(events.tool_call_args(accumulator.get(delta.index).function.name, delta.arguments))

            if not len(accumulator):
                if assistant_text:
                    await self.memory.append_and_maybe_summarize(
                        conversation_id, Message(role="assistant", content=assistant_text))
                return

            tool_calls = accumulator.calls()
            messages.append(Message(role="assistant", content=assistant_text or None,
                                    tool_calls=tool_calls).to_provider())

            needs_continue = False
            for call in tool_calls:
                tool_name = call.function.name
                args = parse_tool_arguments(call.function.arguments)
                console.info("Tool call", tool=tool_name, args=args)

                outcome = await self.gate.request_tool_call(conversation_id, tool_name, args)
                if outcome.confirm_required:
                    confirm_tag = format_confirm_tag([tool_name])
                    emit(events.text_delta(confirm_tag))
                    await self.memory.append_and_maybe_summarize(
                        conversation_id, Message(role="assistant", content=f"{assistant_text}{confirm_tag}"))
                    return

                result_text = serialize_tool_result(tool_name, outcome.result)
                emit(events.tool_call_result(tool_name, result_text))
                messages.append(Message(role="tool", tool_call_id=call.id, content=result_text).to_provider())
                needs_continue = True

            if not needs_continue:
                return
            if iteration >= max_iterations:
                console.warning("Maximum completion rounds reached, stopping.", rounds=iteration)
                emit(events.text_delta(MAX_ITERATIONS_NOTICE))
                return

    async def handle_confirmation(self, emit: Emit, conversation_id: str, approved: bool,
                                  top_k: Optional[int] = None):
        pending = await self.gate.get_pending_call(conversation_id)
        if pending is None:
            emit(events.text_delta(NOTHING_TO_CONFIRM))
            return

        if not approved:
            await self.gate.clear_pending_call(conversation_id)
            console.info("Tool call rejected by user", conversation_id=conversation_id, tool=pending.tool_name)
            emit(events.text_delta(CALL_REJECTED))
            return

        emit(events.tool_call_start(pending.tool_name))
        emit(events.tool_call_args(pending.tool_name, json.dumps(pending.args, ensure_ascii=False)))
        result = await self.gate.execute_tool(pending.tool_name, pending.args)
        await self.gate.clear_pending_call(conversation_id)

        result_text = serialize_tool_result(pending.tool_name, result)
        emit(events.tool_call_result(pending.tool_name, result_text))

        follow_up = f"Tool {pending.tool_name} executed, result: {result_text}"
        messages = await self.build_messages(conversation_id, follow_up, top_k)
        await self.stream_completion(emit, messages, conversation_id)

    async def run_turn(self, emit: Emit, conversation_id: str, message: str, top_k: Optional[int] = None):
        """
        One full turn, framed by RUN_STARTED and RUN_FINISHED. Any exception is
        logged and reported as RUN_ERROR with a generic message.
        """
        emit(events.run_started(conversation_id))
        try:
            approved = parse_confirm_response(message)
            if approved is not None:
                await self.memory.append_and_maybe_summarize(conversation_id, Message(role="user", content=message))
                await self.handle_confirmation(emit, conversation_id, approved, top_k)
            else:
                messages = await self.build_messages(conversation_id, message, top_k)
                await self.memory.append_and_maybe_summarize(conversation_id, Message(role="user", content=message))
                await self.stream_completion(emit, messages, conversation_id, user_message=message)
            emit(events.run_finished(conversation_id))
        except Exception:
            console.exception("Agent run failed", conversation_id=conversation_id)
            emit(events.run_error(conversation_id, RUN_ERROR_MESSAGE))

    def stream_turn(self, message: str, conversation_id: Optional[str] = None,
                    top_k: Optional[int] = None) -> AsyncIterator[str]:
        """SSE frames for one turn; a conversation id is generated when none is given."""
        conversation_id = conversation_id or create_id("conv")

        async def run(emit: Emit):
            await self.run_turn(emit, conversation_id, message, top_k)

        return stream_run(run, self.settings.SSE_HEARTBEAT_SECONDS)
