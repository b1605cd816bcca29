"""Tool registry - the single execution entry point for tools"""

import logging

from scribe.session.message import ToolResult
from .base import Tool
from .context import ToolContext

logger = logging.getLogger(__name__)


class ToolRegistry:
    def __init__(self):
        self._tools: dict[str, Tool] = {}
        self._register_defaults()

    def _register_defaults(self):
        """Register built-in tools"""
        from .papers import SearchPapersTool, DownloadPaperTool, ReadPdfContentTool
        from .view_file import ViewFileTool
        from .edit_file import EditFileTool
        from .search_in_file import SearchInFileTool
        from .resources import ListResourcesTool, AddResourceTool, InsertResourceTool

        for tool_class in [
            SearchPapersTool, DownloadPaperTool, ReadPdfContentTool,
            ViewFileTool, EditFileTool, SearchInFileTool,
            ListResourcesTool, AddResourceTool, InsertResourceTool,
        ]:
            tool = tool_class()
            self._tools[tool.name] = tool

    def register(self, tool: Tool):
        """Register a tool"""
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        """Get a tool by name"""
        return self._tools.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get_schemas(self) -> list[dict]:
        """Get all tool schemas for the prompt catalog"""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.get_parameters_schema(),
            }
            for tool in self._tools.values()
        ]

    async def execute(self, name: str, args: dict, context: ToolContext) -> ToolResult:
        """Execute a tool by name; failures come back as results"""
        tool = self._tools.get(name)
        if not tool:
            return ToolResult.fail(f"Unknown tool: {name}")

        if not isinstance(args, dict):
            return ToolResult.fail(f"Parameters for {name} must be an object")

        try:
            return await tool.execute(args, context)
        except Exception as e:
            logger.exception(f"Tool {name} raised")
            return ToolResult.fail(f"Error executing {name}: {e}")
