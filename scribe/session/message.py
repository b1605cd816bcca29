"""Message models for agent turns"""

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model"""
    name: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "tool_name": self.name,
            "parameters": self.parameters,
        }


@dataclass
class ToolResult:
    """Outcome of a tool execution; data shape is tool-specific"""
    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "ToolResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, **extra) -> "ToolResult":
        extra = {k: v for k, v in extra.items() if v is not None}
        return cls(success=False, error=error, data=extra or None)

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class Message:
    """A single conversation entry"""
    role: Literal["user", "agent"]
    content: str
    reasoning: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_results: list[ToolResult] | None = None
    streaming: bool = False

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "role": self.role,
            "content": self.content,
        }
        if self.reasoning:
            result["reasoning"] = self.reasoning
        if self.tool_calls:
            result["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_results:
            result["tool_results"] = [tr.to_dict() for tr in self.tool_results]
        if self.streaming:
            result["streaming"] = True
        return result
