"""Observable events of an agent turn and their wire encoding"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from scribe.session.message import Message, ToolCall, ToolResult


@dataclass
class AgentOutcome:
    """Result of one user turn after the loop reaches Done"""
    content: str
    reasoning: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    editor_content: str | None = None
    search_results: list[dict[str, Any]] = field(default_factory=list)
    iterations: int = 0
    cache_miss: bool = False

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "response": self.content,
            "messages": [m.to_dict() for m in self.messages],
        }
        if self.reasoning:
            data["reasoning"] = self.reasoning
        if self.tool_calls:
            data["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
            data["tool_results"] = [tr.to_dict() for tr in self.tool_results]
        if self.editor_content is not None:
            data["editor_content"] = self.editor_content
        if self.cache_miss:
            data["cache_miss"] = True
        return data


@dataclass
class StartEvent:
    model: str
    cache_miss: bool = False
    type: ClassVar[str] = "start"

    def to_wire(self) -> dict:
        data: dict[str, Any] = {"type": self.type, "model": self.model}
        if self.cache_miss:
            data["cache_miss"] = True
        return data


@dataclass
class ChunkEvent:
    content_delta: str
    reasoning_delta: str
    cumulative_content: str
    cumulative_reasoning: str
    iteration: int = 1
    type: ClassVar[str] = "chunk"

    def to_wire(self) -> dict:
        data: dict[str, Any] = {
            "type": self.type,
            "content": self.content_delta,
            "full_response": self.cumulative_content,
            "iteration": self.iteration,
        }
        if self.reasoning_delta:
            data["reasoning_content"] = self.reasoning_delta
            data["full_reasoning"] = self.cumulative_reasoning
        return data


@dataclass
class CompleteEvent:
    outcome: AgentOutcome
    type: ClassVar[str] = "complete"

    @property
    def final_content(self) -> str:
        return self.outcome.content

    @property
    def final_reasoning(self) -> str:
        return self.outcome.reasoning

    @property
    def tool_calls(self) -> list[ToolCall]:
        return self.outcome.tool_calls

    def to_wire(self) -> dict:
        data: dict[str, Any] = {
            "type": self.type,
            "full_response": self.outcome.content,
            "messages": [m.to_dict() for m in self.outcome.messages],
        }
        if self.outcome.reasoning:
            data["full_reasoning"] = self.outcome.reasoning
        if self.outcome.tool_calls:
            data["tool_calls"] = [tc.to_dict() for tc in self.outcome.tool_calls]
            data["tool_results"] = [tr.to_dict() for tr in self.outcome.tool_results]
        if self.outcome.editor_content is not None:
            data["editor_content"] = self.outcome.editor_content
        return data


@dataclass
class ErrorEvent:
    message: str
    kind: str = "internal"
    hint: str = ""
    type: ClassVar[str] = "error"

    def to_wire(self) -> dict:
        data: dict[str, Any] = {
            "type": self.type,
            "error": self.message,
            "error_type": self.kind,
        }
        if self.hint:
            data["hint"] = self.hint
        return data


StreamEvent = Union[StartEvent, ChunkEvent, CompleteEvent, ErrorEvent]
