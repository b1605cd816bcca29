from .base import Tool
from .context import ToolContext
from .parser import ToolCallParser, visible_prefix
from .registry import ToolRegistry

__all__ = ["Tool", "ToolContext", "ToolCallParser", "ToolRegistry", "visible_prefix"]
