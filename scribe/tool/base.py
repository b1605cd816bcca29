"""Base tool interface"""

from abc import ABC, abstractmethod

from scribe.session.message import ToolResult
from .context import ToolContext


class Tool(ABC):
    name: str
    description: str

    @abstractmethod
    def get_parameters_schema(self) -> dict:
        """Return JSON schema for parameters"""
        pass

    @abstractmethod
    async def execute(self, args: dict, context: ToolContext) -> ToolResult:
        """Execute the tool and return a structured result"""
        pass
