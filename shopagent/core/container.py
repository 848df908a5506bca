# Wires the agent's components together.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.1.0

from dataclasses import dataclass
from typing import Optional

from shopagent import tools as tools_package
from shopagent.core.config import Settings
from shopagent.core.confirmation import ConfirmationGate
from shopagent.core.orchestrator import AgentOrchestrator
from shopagent.core.tool_registry import ToolRegistry
from shopagent.services.kv_store import RedisStore
from shopagent.services.llm_connector import LLMConnector
from shopagent.services.memory_manager import MemoryManager
from shopagent.services.rag import RetrievalEngine
from shopagent.tools.base_tool import ToolContext
from shopagent.utils.logger import console


@dataclass
class AgentServices:
    """
    The explicitly constructed clients and engines shared by all requests.
    Built once by the hosting process and closed on shutdown.
    """
    settings: Settings
    store: RedisStore
    llm: LLMConnector
    registry: ToolRegistry
    retrieval: RetrievalEngine
    memory: MemoryManager
    gate: ConfirmationGate
    orchestrator: AgentOrchestrator

    async def aclose(self):
        await self.llm.close()
        await self.store.close()
        console.info("Agent services closed.")


def build_services(settings: Settings, store: Optional[RedisStore] = None, llm=None,
                   registry: Optional[ToolRegistry] = None) -> AgentServices:
    """
    Creates every component from ``settings``. ``store``, ``llm`` and
    ``registry`` may be supplied to replace the defaults; when no registry is
    given, the tools in ``shopagent.tools`` are discovered and registered.
    """
    store = store or RedisStore.from_url(settings.REDIS_URL, settings.REDIS_KEY_PREFIX)
    llm = llm or LLMConnector.from_settings(settings)
    retrieval = RetrievalEngine(store, llm, settings)
    memory = MemoryManager(store, llm, settings)

    if registry is None:
        registry = ToolRegistry()
        registry.discover(tools_package, ToolContext(settings=settings, retrieval=retrieval))

    gate = ConfirmationGate(registry, store, confirm_required=settings.MCP_CONFIRM_REQUIRED)
    orchestrator = AgentOrchestrator(registry, memory, retrieval, gate, llm, settings)
    return AgentServices(
        settings=settings,
        store=store,
        llm=llm,
        registry=registry,
        retrieval=retrieval,
        memory=memory,
        gate=gate,
        orchestrator=orchestrator,
    )
