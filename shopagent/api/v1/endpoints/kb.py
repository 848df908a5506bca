# The module is to define the API endpoints for the knowledge base.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.1.0

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shopagent.api.deps import get_services
from shopagent.core.container import AgentServices
from shopagent.models.api_models import ApiResponse, DeleteSourceRequest, SearchRequest, UpsertDocumentRequest
from shopagent.models.common import ScoredChunk

router = APIRouter()


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@router.post("/upsert", response_model=ApiResponse[Dict[str, Any]])
async def upsert_document(request: UpsertDocumentRequest, services: AgentServices = Depends(get_services)):
    """Splits, embeds and stores a document."""
    if not request.source_id or not request.content:
        return _bad_request("sourceId and content are required")
    result = await services.retrieval.upsert_document(
        source_id=request.source_id,
        title=request.title,
        content=request.content,
        metadata=request.metadata,
    )
    return ApiResponse(success=True, data=result)


@router.post("/search", response_model=ApiResponse[List[ScoredChunk]])
async def search(request: SearchRequest, services: AgentServices = Depends(get_services)):
    results = await services.retrieval.search(
        query=request.query,
        top_k=request.top_k,
        score_threshold=request.score_threshold,
    )
    return ApiResponse(success=True, data=results)


@router.post("/delete", response_model=ApiResponse[Dict[str, int]])
async def delete_source(request: DeleteSourceRequest, services: AgentServices = Depends(get_services)):
    """Removes every chunk of a source document."""
    if not request.source_id:
        return _bad_request("sourceId is required")
    result = await services.retrieval.remove_by_source(request.source_id)
    return ApiResponse(success=True, data=result)


@router.get("/chunks")
async def list_chunks(services: AgentServices = Depends(get_services)):
    chunks = await services.retrieval.list_chunks()
    return {"success": True, "data": [chunk.model_dump() for chunk in chunks]}
