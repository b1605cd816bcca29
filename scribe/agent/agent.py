"""Main agent - resolves the document, runs the loop, reports the turn"""

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from functools import partial
from typing import Any, AsyncIterator

from scribe.cache.content_cache import ContentCache
from scribe.config.config import AgentConfig
from scribe.provider.base import Provider, ModelInvocationError
from scribe.resource.library import ResourceLibrary
from scribe.session.message import Message
from scribe.tool.context import ToolContext
from scribe.tool.parser import ToolCallParser
from scribe.tool.registry import ToolRegistry
from .errors import AgentError
from .events import AgentOutcome, CompleteEvent, ErrorEvent, StartEvent, StreamEvent
from .loop import AgentLoop
from .prompt import build_prompt

logger = logging.getLogger(__name__)


@dataclass
class AgentRequest:
    """One user turn as received at the orchestration boundary"""
    user_input: str
    content: str | None = None
    content_id: str | None = None
    mode: str = "discuss"
    history: list[Message] = field(default_factory=list)
    editor_content: str | None = None
    search_results: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class Agent:
    """Academic writing agent bound to one model backend"""

    provider: Provider
    tools: ToolRegistry = field(default_factory=ToolRegistry)
    cache: ContentCache | None = None
    config: AgentConfig = field(default_factory=AgentConfig)
    library: ResourceLibrary = field(default_factory=ResourceLibrary)
    model_label: str | None = None

    def __post_init__(self):
        self.parser = ToolCallParser(self.tools.names)
        self.loop = AgentLoop(
            max_iterations=self.config.max_iterations,
            tool_timeout=self.config.tool_timeout,
            max_tool_text_length=self.config.max_tool_text_length,
            strip_dangling_markers=self.config.strip_dangling_markers,
        )

    def resolve_content(self, request: AgentRequest) -> tuple[str, bool]:
        """Document body for the turn, preferring the cached copy.

        Returns (content, cache_miss). On a miss the raw content sent with
        the request is used; the caller is expected to re-store it.
        """
        if request.content_id:
            if self.cache is not None:
                cached = self.cache.get(request.content_id)
                if cached is not None:
                    logger.info(f"Using cached content {request.content_id} ({len(cached) / 1024:.1f} KB)")
                    return cached, False
            logger.info(f"Cached content {request.content_id} not found, using request content")
            return request.content or "", True
        return request.content or "", False

    def _context(self, request: AgentRequest, content: str) -> ToolContext:
        editor = request.editor_content if request.editor_content is not None else content
        return ToolContext(
            editor_content=editor,
            search_results=list(request.search_results),
            library=self.library,
        )

    async def _turn(self, request: AgentRequest, streaming: bool, content: str, cache_miss: bool):
        builder = partial(self._build_prompt, content, request.mode)
        context = self._context(request, content)
        events = self.loop.execute(
            provider=self.provider,
            build_prompt=builder,
            tools=self.tools,
            parser=self.parser,
            history=request.history,
            user_input=request.user_input,
            context=context,
            streaming=streaming,
        )
        async with aclosing(events):
            async for event in events:
                if isinstance(event, CompleteEvent):
                    event.outcome.cache_miss = cache_miss
                yield event

    def _build_prompt(self, content: str, mode: str, history: list[Message], user_input: str, follow_up: bool) -> str:
        return build_prompt(
            content=content,
            user_input=user_input,
            mode=mode,
            tools=self.tools.get_schemas(),
            history=history,
            follow_up=follow_up,
        )

    async def run(self, request: AgentRequest) -> AgentOutcome:
        """Blocking turn: returns the outcome or raises"""
        content, cache_miss = self.resolve_content(request)
        async with aclosing(self._turn(request, False, content, cache_miss)) as turn:
            async for event in turn:
                if isinstance(event, CompleteEvent):
                    return event.outcome
        raise AgentError("Agent turn ended without a reply")

    async def stream(self, request: AgentRequest) -> AsyncIterator[StreamEvent]:
        """Streaming turn: exactly one start, chunks, then complete or error"""
        content, cache_miss = self.resolve_content(request)
        yield StartEvent(model=self.model_label or self.provider.model, cache_miss=cache_miss)

        try:
            async with aclosing(self._turn(request, True, content, cache_miss)) as turn:
                async for event in turn:
                    yield event
                    if isinstance(event, CompleteEvent):
                        return
        except ModelInvocationError as e:
            logger.error(f"Model invocation failed ({e.kind}): {e.message}")
            yield ErrorEvent(message=e.message, kind=e.kind, hint=e.hint)
            return
        except AgentError as e:
            logger.warning(f"Agent turn aborted: {e}")
            yield ErrorEvent(message=str(e), kind=e.kind)
            return
        except Exception as e:
            logger.exception("Agent turn failed")
            yield ErrorEvent(message=str(e) or type(e).__name__, kind="internal")
            return

        yield ErrorEvent(message="Agent turn ended without a reply", kind="internal")
