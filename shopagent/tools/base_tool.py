# The module is to define the base class for all tools in the application.
# Author: Shibo Li
# Date: 2025-07-03
# Version: 0.2.0

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

from shopagent.core.config import Settings
from shopagent.core.tool_registry import ToolCategory, ToolMetadata
from shopagent.core.tool_schema import ToolSchema

if TYPE_CHECKING:
    from shopagent.services.rag import RetrievalEngine


@dataclass
class ToolContext:
    """Dependencies handed to every tool at construction time."""
    settings: Settings
    retrieval: Optional["RetrievalEngine"] = None


class BaseTool(ABC):
    """
    Abstract Base Class for all tools.

    This class defines a standard interface that all tools must implement.
    Attributes:
        name (str): The name of the tool, used for identification.
        description (str): A brief description of what the tool does.
        parameters (Optional[ToolSchema]): Description of the arguments the
            tool accepts; they are validated before ``execute`` is called.
        requires_confirmation (bool): Whether the user must approve each call.
        category (str): One of system, knowledge, external, dangerous.
    """
    name: str
    description: str
    parameters: Optional[ToolSchema] = None
    requires_confirmation: bool = False
    category: ToolCategory = "system"

    def __init__(self, context: ToolContext):
        self.context = context

    @abstractmethod
    async def execute(self, **kwargs) -> Dict[str, Any]:
        """
        The core logic of the tool. Receives the validated arguments and returns
        a JSON-serialisable dict with at least a ``success`` key.
        """
        pass

    def metadata(self) -> ToolMetadata:
        return ToolMetadata(
            name=self.name,
            description=self.description,
            execute=self.execute,
            parameters=self.parameters,
            requires_confirmation=self.requires_confirmation,
            category=self.category,
        )
