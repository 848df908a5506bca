# The module is to define the API router for the application.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.2.0

from fastapi import APIRouter
from shopagent.api.v1.endpoints import agent, kb

api_router = APIRouter()

# Include the agent router with an '/agent' prefix
api_router.include_router(agent.router, prefix="/agent", tags=["Agent"])

# Include the knowledge base router with a '/kb' prefix
api_router.include_router(kb.router, prefix="/kb", tags=["Knowledge Base"])
