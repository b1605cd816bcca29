"""HTTP API server"""

import logging
from collections import OrderedDict
from contextlib import aclosing
from functools import lru_cache
from typing import Any, AsyncIterator, Literal

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from scribe.agent.agent import Agent, AgentRequest
from scribe.agent.errors import AgentError
from scribe.agent.events import CompleteEvent, ErrorEvent, StartEvent, StreamEvent
from scribe.cache.content_cache import ContentCache
from scribe.config.config import Config
from scribe.provider.base import ModelInvocationError
from scribe.provider.router import ModelRouter
from scribe.session.message import Message, ToolCall, ToolResult
from scribe.tool.context import ToolContext
from scribe.tool.registry import ToolRegistry
from .stream import SSE_HEADERS, sse_events

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "auth": 401,
    "rate_limit": 429,
    "server": 502,
    "transport": 503,
    "iteration_limit": 508,
    "bad_request": 400,
    "internal": 500,
}

app = FastAPI(title="scribe", version="0.1.0")


class ToolCallBody(BaseModel):
    tool_name: str
    parameters: dict[str, Any] = {}


class ToolResultBody(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None


class MessageBody(BaseModel):
    """A history entry sent by the client"""

    # assistant is accepted from clients that use the OpenAI naming
    role: Literal["user", "agent", "assistant"] = "user"
    content: str = ""
    reasoning: str | None = None
    tool_calls: list[ToolCallBody] = []
    tool_results: list[ToolResultBody] = []
    streaming: bool = False

    def to_message(self) -> Message:
        return Message(
            role="agent" if self.role == "assistant" else self.role,
            content=self.content,
            reasoning=self.reasoning,
            tool_calls=[ToolCall(name=tc.tool_name, parameters=tc.parameters) for tc in self.tool_calls] or None,
            tool_results=[ToolResult(success=tr.success, data=tr.data, error=tr.error) for tr in self.tool_results] or None,
            streaming=self.streaming,
        )


class AgentBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input: str = Field(min_length=1)
    content: str | None = None
    content_id: str | None = Field(default=None, alias="contentId")
    mode: str = "discuss"
    model: str | None = None
    api_key: str | None = Field(default=None, alias="apiKey")
    messages: list[MessageBody] = []
    editor_content: str | None = None
    session_id: str | None = None


class StoreBody(BaseModel):
    content: str = ""


class ToolExecuteBody(BaseModel):
    tool_name: str
    parameters: dict[str, Any] = {}
    editor_content: str = ""


class SessionStore:
    """Per-session tool memory (latest search results), bounded by LRU"""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, list[dict]] = OrderedDict()

    def get(self, session_id: str | None) -> list[dict]:
        if not session_id or session_id not in self._sessions:
            return []
        self._sessions.move_to_end(session_id)
        return list(self._sessions[session_id])

    def save(self, session_id: str | None, search_results: list[dict]):
        if not session_id:
            return
        self._sessions[session_id] = list(search_results)
        self._sessions.move_to_end(session_id)
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)


@lru_cache
def get_config() -> Config:
    config = Config.load()
    if config.data_dir:
        from scribe.storage.storage import Storage
        Storage.BASE_DIR = config.data_dir
    return config


@lru_cache
def get_cache() -> ContentCache:
    config = get_config()
    return ContentCache(max_entries=config.cache.max_entries, ttl_seconds=config.cache.ttl_seconds)


@lru_cache
def get_registry() -> ToolRegistry:
    return ToolRegistry()


@lru_cache
def get_router() -> ModelRouter:
    return ModelRouter(get_config())


@lru_cache
def get_sessions() -> SessionStore:
    return SessionStore(get_config().server.max_sessions)


def error_response(message: str, kind: str, hint: str = "") -> JSONResponse:
    body = {"success": False, "error": message, "error_type": kind}
    if hint:
        body["hint"] = hint
    return JSONResponse(status_code=ERROR_STATUS.get(kind, 500), content=body)


def _agent_request(body: AgentBody, sessions: SessionStore) -> AgentRequest:
    return AgentRequest(
        user_input=body.input,
        content=body.content,
        content_id=body.content_id,
        mode=body.mode,
        history=[m.to_message() for m in body.messages],
        editor_content=body.editor_content,
        search_results=sessions.get(body.session_id),
    )


def _build_agent(body: AgentBody, config: Config, router: ModelRouter, cache: ContentCache, registry: ToolRegistry) -> Agent:
    selector = body.model or config.default_model
    provider = router.get_provider(selector, body.api_key)
    return Agent(
        provider=provider,
        tools=registry,
        cache=cache,
        config=config.agent,
        model_label=selector,
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Invalid request: {location}: {first.get('msg', 'validation failed')}"
    logger.warning(f"Rejected request to {request.url.path}: {message}")
    return error_response(message, "bad_request")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/agent")
async def agent_blocking(
    body: AgentBody,
    config: Config = Depends(get_config),
    router: ModelRouter = Depends(get_router),
    cache: ContentCache = Depends(get_cache),
    registry: ToolRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    try:
        agent = _build_agent(body, config, router, cache, registry)
        agent_request = _agent_request(body, sessions)
    except ValueError as e:
        return error_response(str(e), "bad_request")
    except ModelInvocationError as e:
        return error_response(e.message, e.kind, e.hint)

    try:
        outcome = await agent.run(agent_request)
    except ModelInvocationError as e:
        logger.error(f"Model invocation failed ({e.kind}): {e.message}")
        return error_response(e.message, e.kind, e.hint)
    except AgentError as e:
        logger.warning(f"Agent turn aborted: {e}")
        return error_response(str(e), e.kind)

    sessions.save(body.session_id, outcome.search_results)
    return {"success": True, "data": outcome.to_dict()}


@app.post("/api/agent/stream")
async def agent_stream(
    body: AgentBody,
    request: Request,
    config: Config = Depends(get_config),
    router: ModelRouter = Depends(get_router),
    cache: ContentCache = Depends(get_cache),
    registry: ToolRegistry = Depends(get_registry),
    sessions: SessionStore = Depends(get_sessions),
):
    async def events() -> AsyncIterator[StreamEvent]:
        selector = body.model or config.default_model
        try:
            agent = _build_agent(body, config, router, cache, registry)
            agent_request = _agent_request(body, sessions)
        except ValueError as e:
            yield StartEvent(model=selector)
            yield ErrorEvent(message=str(e), kind="bad_request")
            return
        except ModelInvocationError as e:
            yield StartEvent(model=selector)
            yield ErrorEvent(message=e.message, kind=e.kind, hint=e.hint)
            return

        async with aclosing(agent.stream(agent_request)) as stream:
            async for event in stream:
                if isinstance(event, CompleteEvent):
                    sessions.save(body.session_id, event.outcome.search_results)
                yield event

    return StreamingResponse(
        sse_events(events(), request),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@app.post("/api/content/store")
async def store_content(body: StoreBody, cache: ContentCache = Depends(get_cache)):
    if not body.content:
        return error_response("Content must not be empty", "bad_request")
    result = cache.store(body.content)
    return {"success": True, "data": result.to_dict()}


@app.get("/api/content/stats")
async def content_stats(cache: ContentCache = Depends(get_cache)):
    return {"success": True, "data": cache.stats()}


@app.get("/api/content/{content_id}")
async def get_content(content_id: str, cache: ContentCache = Depends(get_cache)):
    content = cache.get(content_id)
    if content is None:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "Content not found or expired", "error_type": "cache_miss"},
        )
    return {"success": True, "data": {"contentId": content_id, "content": content, "size": len(content)}}


@app.delete("/api/content")
async def clear_content(cache: ContentCache = Depends(get_cache)):
    cache.clear()
    return {"success": True, "message": "Cache cleared"}


@app.get("/api/tools")
async def list_tools(registry: ToolRegistry = Depends(get_registry)):
    return {"success": True, "data": {"tools": registry.get_schemas()}}


@app.post("/api/tools/execute")
async def execute_tool(body: ToolExecuteBody, registry: ToolRegistry = Depends(get_registry)):
    logger.info(f"Executing tool {body.tool_name}")
    context = ToolContext(editor_content=body.editor_content)
    result = await registry.execute(body.tool_name, body.parameters, context)
    return result.to_dict()


def start_server(host: str = "127.0.0.1", port: int = 3001):
    import uvicorn
    uvicorn.run(app, host=host, port=port)
