# The module is to define the API models for the application.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.2.0

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class AgentInput(BaseModel):
    """
    Defines the request body for the /v1/agent endpoint.
    Attributes:
        conversation_id (Optional[str]): The conversation to continue; a new id is generated when absent.
        message (str): The user's text input.
        top_k (Optional[int]): Number of knowledge base chunks to put into the prompt.
    """
    conversation_id: Optional[str] = Field(default=None, description="The conversation to continue.")
    message: str = Field(default="", description="The user's text input.")
    top_k: Optional[int] = Field(default=None, gt=0, description="Number of knowledge base chunks to retrieve.")


class UpsertDocumentRequest(BaseModel):
    """Request body of /v1/kb/upsert. ``sourceId`` and ``content`` are checked by the endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    source_id: Optional[str] = Field(default=None, alias="sourceId")
    title: Optional[str] = None
    content: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    top_k: Optional[int] = Field(default=None, gt=0, alias="topK")
    score_threshold: Optional[float] = Field(default=None, ge=0, le=1, alias="scoreThreshold")


class DeleteSourceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_id: Optional[str] = Field(default=None, alias="sourceId")


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope returned by the JSON endpoints.
    Attributes:
        success (bool): Whether the request succeeded.
        data (Optional[T]): The payload on success.
        message (Optional[str]): The error description on failure.
    """
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
