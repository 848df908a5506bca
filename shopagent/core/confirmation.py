# Routes tool calls through a human confirmation checkpoint when required.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.1.0

import json
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from shopagent.core.exceptions import ToolNotFoundError
from shopagent.core.tool_registry import ToolRegistry, ToolResult
from shopagent.models.common import PendingToolCall
from shopagent.services.kv_store import RedisStore
from shopagent.utils.ids import create_id
from shopagent.utils.logger import console

CONFIRM_RESPONSE_RE = re.compile(r"<mcp_call_confirm_resp>(true|false)</mcp_call_confirm_resp>", re.IGNORECASE)
CONFIRM_GROUP_NAME = "built-in tools"


def format_confirm_tag(tool_names: List[str], group: str = CONFIRM_GROUP_NAME) -> str:
    """The tag a client renders as an approve/reject prompt."""
    payload = json.dumps({"mcpName": group, "mcpTools": tool_names}, ensure_ascii=False)
    return f"<mcp_call_confirm>{payload}</mcp_call_confirm>"


def parse_confirm_response(text: str) -> Optional[bool]:
    """True/False when ``text`` carries a confirmation answer, None otherwise."""
    match = CONFIRM_RESPONSE_RE.search(text or "")
    if not match:
        return None
    return match.group(1).lower() == "true"


def pending_key(conversation_id: str) -> str:
    return f"mcp:{conversation_id}:pending"


class ToolCallOutcome(BaseModel):
    """Result of ``request_tool_call``: either a tool result or a pending confirmation."""
    confirm_required: bool
    result: Optional[Dict[str, Any]] = None
    pending: Optional[PendingToolCall] = None


class ConfirmationGate:
    """
    Executes safe tools immediately and parks confirmation-required ones as a
    ``PendingToolCall``. One pending call per conversation; a new one overwrites
    the previous (last write wins, no locking).
    """

    def __init__(self, registry: ToolRegistry, store: RedisStore, confirm_required: bool = True):
        self._registry = registry
        self._store = store
        self._confirm_required = confirm_required

    async def get_pending_call(self, conversation_id: str) -> Optional[PendingToolCall]:
        raw = await self._store.get(pending_key(conversation_id))
        return PendingToolCall.model_validate_json(raw) if raw else None

    async def clear_pending_call(self, conversation_id: str):
        await self._store.delete(pending_key(conversation_id))

    async def _create_pending_call(self, conversation_id: str, tool_name: str,
                                   args: Dict[str, Any]) -> PendingToolCall:
        pending = PendingToolCall(id=create_id("mcp"), tool_name=tool_name, args=args)
        await self._store.set(pending_key(conversation_id), pending.model_dump_json())
        console.info("Tool call awaiting confirmation", conversation_id=conversation_id, tool=tool_name)
        return pending

    async def execute_tool(self, tool_name: str, args: Optional[Dict[str, Any]]) -> ToolResult:
        try:
            return await self._registry.execute(tool_name, args or {})
        except ToolNotFoundError as e:
            return {"success": False, "message": str(e)}

    async def request_tool_call(self, conversation_id: str, tool_name: str,
                                args: Optional[Dict[str, Any]]) -> ToolCallOutcome:
        if self._registry.get_tool(tool_name) is None:
            console.warning(f"Model requested an unknown tool: '{tool_name}'")
            return ToolCallOutcome(
                confirm_required=False,
                result={"success": False, "message": f"Unknown tool: {tool_name}"},
            )

        if self._confirm_required and self._registry.requires_confirmation(tool_name):
            pending = await self._create_pending_call(conversation_id, tool_name, args or {})
            return ToolCallOutcome(confirm_required=True, pending=pending)

        result = await self.execute_tool(tool_name, args)
        return ToolCallOutcome(confirm_required=False, result=result)
