# The module is to define the configuration settings for the agent service.
# Author: Shibo Li
# Date: 2025-07-02
# Version: 0.2.0

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    """
    The Settings class is used to define the configuration settings for the agent.
    It inherits from BaseSettings, which allows it to load environment variables
    and provides type validation for the settings.
    Attributes:
        LOG_LEVEL (str): Threshold of the console logger.
        LLM_API_KEY (str): API key for the OpenAI-compatible completion endpoint.
        LLM_BASE_URL (str): Base URL of the completion endpoint.
        LLM_MODEL (str): Chat model used for the agent and for summaries.
        EMBEDDING_MODEL (str): Model used to embed knowledge base chunks and queries.
        LLM_REQUEST_TIMEOUT_SECONDS (float): Request timeout applied by the client.
        REDIS_URL (str): Connection URL of the durable key-value store.
        REDIS_KEY_PREFIX (str): Prefix prepended to every key the agent writes.
        RAG_ENABLED (bool): Whether the knowledge base is searched before each turn.
        MEMORY_MAX_MESSAGES (int): Upper bound of the retained message log.
        MCP_CONFIRM_REQUIRED (bool): Global switch for confirmation gating.
        SSE_HEARTBEAT_SECONDS (float): Interval of keep-alive frames on the stream.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # LLM
    LLM_API_KEY: str = ""
    LLM_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_MODEL: str = "gpt-4o-mini"
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    LLM_REQUEST_TIMEOUT_SECONDS: float = 30.0
    LLM_TEMPERATURE: float = 0.6
    SUMMARY_TEMPERATURE: float = 0.2

    # REDIS
    REDIS_URL: str = "redis://localhost:6379"
    REDIS_KEY_PREFIX: str = "ai-agent"

    # RAG
    RAG_ENABLED: bool = True
    RAG_TOP_K: int = 4
    RAG_SCORE_THRESHOLD: float = 0.1
    RAG_CACHE_TTL_SECONDS: float = 60.0
    RAG_EMBEDDING_CACHE_TTL_SECONDS: int = 3600
    RAG_CHUNK_SIZE: int = 800
    RAG_CHUNK_OVERLAP: int = 120

    # MEMORY
    MEMORY_MAX_MESSAGES: int = 30
    MEMORY_SUMMARY_EVERY: int = 12
    MEMORY_SUMMARY_MAX_TOKENS: int = 3000
    MEMORY_KEEP_RECENT_COUNT: int = 5
    MEMORY_SUMMARY_HISTORY_LIMIT: int = 3

    # AGENT LOOP
    MCP_CONFIRM_REQUIRED: bool = True
    AGENT_MAX_ITERATIONS: int = 5
    AGENT_FORCED_TOOL: str = "search_docs"
    SSE_HEARTBEAT_SECONDS: float = 15.0

    # TAVILY_SEARCH
    TAVILY_API_KEY: Optional[str] = None

    # WEATHER_SERVICE
    WEATHER_API_BASE_URL: Optional[str] = None


# lru_cache to cache the settings instance.
@lru_cache
def get_settings() -> Settings:
    return Settings()


if __name__ == "__main__":
    settings = get_settings()
    print(settings.model_dump_json(indent=4))
