# This module keeps the conversation log and its rolling summary in Redis.
# Author: Shibo Li
# Date: 2025-07-04
# Version: 0.2.0

import math
import re
from typing import List

from shopagent.core.config import Settings
from shopagent.models.common import Message
from shopagent.services.kv_store import RedisStore
from shopagent.utils.logger import console

_CJK_RE = re.compile(r"[一-龥]")

CJK_TOKEN_WEIGHT = 1.5
WORD_TOKEN_WEIGHT = 1.3


def memory_key(conversation_id: str) -> str:
    return f"memory:{conversation_id}:messages"


def summary_key(conversation_id: str) -> str:
    return f"memory:{conversation_id}:summary"


def summary_history_key(conversation_id: str) -> str:
    return f"memory:{conversation_id}:summary-history"


def estimate_tokens(message: Message) -> int:
    """Rough token estimate: CJK characters weigh 1.5, whitespace-delimited words 1.3."""
    content = message.content or ""
    cjk_chars = len(_CJK_RE.findall(content))
    words = len(content.split())
    return math.ceil(cjk_chars * CJK_TOKEN_WEIGHT + words * WORD_TOKEN_WEIGHT)


def total_tokens(messages: List[Message]) -> int:
    return sum(estimate_tokens(message) for message in messages)


def _transcript(messages: List[Message]) -> str:
    return "\n".join(f"{message.role}: {message.content or ''}" for message in messages)


class MemoryManager:
    """
    Append-only conversation log with progressive summarisation.

    The log is capped at MEMORY_MAX_MESSAGES. Once it holds at least
    MEMORY_SUMMARY_EVERY messages whose estimated size exceeds
    MEMORY_SUMMARY_MAX_TOKENS, the messages are folded into the summary and the
    log is cut down to the last MEMORY_KEEP_RECENT_COUNT entries.
    """

    def __init__(self, store: RedisStore, llm, settings: Settings):
        self._store = store
        self._llm = llm
        self._settings = settings

    async def get_messages(self, conversation_id: str) -> List[Message]:
        raw = await self._store.lrange(memory_key(conversation_id), 0, -1)
        return [Message.model_validate_json(item) for item in raw]

    async def add_message(self, conversation_id: str, message: Message):
        key = memory_key(conversation_id)
        await self._store.rpush(key, message.model_dump_json(exclude_none=True))
        await self._store.ltrim(key, -self._settings.MEMORY_MAX_MESSAGES, -1)

    def should_summarize(self, messages: List[Message]) -> bool:
        if len(messages) < self._settings.MEMORY_SUMMARY_EVERY:
            return False
        return total_tokens(messages) > self._settings.MEMORY_SUMMARY_MAX_TOKENS

    async def append_and_maybe_summarize(self, conversation_id: str, message: Message) -> List[Message]:
        await self.add_message(conversation_id, message)
        messages = await self.get_messages(conversation_id)
        if self.should_summarize(messages):
            await self.summarize(conversation_id, messages)
        return messages

    async def get_summary(self, conversation_id: str) -> str:
        """Current summary, preceded by the superseded ones (oldest first) when there are any."""
        current = await self._store.get(summary_key(conversation_id))
        if not current:
            return ""
        history = await self.get_summary_history(conversation_id)
        if not history:
            return current
        return "[Earlier summaries]\n" + "\n\n".join(history) + "\n\n[Latest summary]\n" + current

    async def get_summary_history(self, conversation_id: str) -> List[str]:
        return await self._store.lrange(summary_history_key(conversation_id), 0, -1)

    async def summarize(self, conversation_id: str, messages: List[Message]) -> str:
        if not messages:
            return ""

        previous = await self._store.get(summary_key(conversation_id))
        if previous:
            prompt = (
                f"Existing summary: {previous}\n\n"
                "Merge it with the new conversation below into an updated summary "
                f"(200 characters at most):\n{_transcript(messages)}"
            )
        else:
            prompt = (
                "Summarize the conversation below in 200 characters at most, keeping key "
                f"decisions, constraints and context:\n{_transcript(messages)}"
            )

        summary = await self._llm.complete([{"role": "user", "content": prompt}])

        if previous:
            history_key = summary_history_key(conversation_id)
            await self._store.rpush(history_key, previous)
            await self._store.ltrim(history_key, -self._settings.MEMORY_SUMMARY_HISTORY_LIMIT, -1)

        await self._store.set(summary_key(conversation_id), summary)
        await self._store.ltrim(memory_key(conversation_id), -self._settings.MEMORY_KEEP_RECENT_COUNT, -1)

        console.info(
            "Conversation summarized",
            conversation_id=conversation_id,
            message_count=len(messages),
            total_tokens=total_tokens(messages),
        )
        return summary
