# The module provides the FastAPI application that serves the agent.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.2.0

from contextlib import asynccontextmanager
from fastapi import FastAPI
from shopagent.api.v1.api import api_router
from shopagent.core.config import get_settings
from shopagent.core.container import build_services
from shopagent.utils.logger import console


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Builds the shared services on startup and closes them on shutdown."""
    if getattr(app.state, "services", None) is None:
        settings = get_settings()
        console.set_level(settings.LOG_LEVEL)
        if settings.ENV == "development":
            console.display_data_as_table({
                "LLM_BASE_URL": settings.LLM_BASE_URL,
                "LLM_API_KEY": settings.LLM_API_KEY,
                "LLM_MODEL": settings.LLM_MODEL,
                "EMBEDDING_MODEL": settings.EMBEDDING_MODEL,
                "RAG_ENABLED": settings.RAG_ENABLED,
                "MEMORY_MAX_MESSAGES": settings.MEMORY_MAX_MESSAGES,
                "REDIS_KEY_PREFIX": settings.REDIS_KEY_PREFIX,
            }, title="Agent Config")
        app.state.services = build_services(settings)
    try:
        yield
    finally:
        await app.state.services.aclose()
        app.state.services = None


app = FastAPI(
    title="Shop Agent",
    version="1.0.0",
    description="A tool-calling conversational agent with memory and retrieval.",
    lifespan=lifespan,
)
app.state.services = None


@app.get("/", summary="Health Check", tags=["Status"])
def read_root():
    """Root endpoint to check if the service is alive."""
    console.info("Health check endpoint was hit.")
    return {"message": "Shop Agent is alive and running!"}

# Include the v1 router with a global '/v1' prefix
app.include_router(api_router, prefix="/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("shopagent.main:app", host="0.0.0.0", port=8000)
