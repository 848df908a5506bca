# The module is to define the API endpoints for agent runs.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.2.0

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from shopagent.api.deps import get_services
from shopagent.core.container import AgentServices
from shopagent.models.api_models import AgentInput, ApiResponse
from shopagent.utils.logger import console

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("", response_model=ApiResponse[List[str]])
def list_tools(services: AgentServices = Depends(get_services)):
    """Returns the names of all registered tools."""
    return ApiResponse(success=True, data=services.registry.list_tool_names())


@router.post("")
async def run_agent(request: Request,
                    services: AgentServices = Depends(get_services)):
    """
    Runs one agent turn and streams its events as Server-Sent Events. The body
    is either the input itself or ``{"input": {...}}``.
    """
    try:
        body: Any = await request.json()
    except ValueError:
        body = {}
    payload = body.get("input", body) if isinstance(body, dict) else {}
    try:
        agent_input = AgentInput.model_validate(payload or {})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    console.info("Received agent request", conversation_id=agent_input.conversation_id)
    return StreamingResponse(
        services.orchestrator.stream_turn(
            message=agent_input.message,
            conversation_id=agent_input.conversation_id,
            top_k=agent_input.top_k,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
