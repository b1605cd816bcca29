from .message import Message, ToolCall, ToolResult

__all__ = ["Message", "ToolCall", "ToolResult"]
