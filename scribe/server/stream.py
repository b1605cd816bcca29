"""Server-sent event framing for agent turns"""

import json
import logging
from typing import AsyncIterator

from fastapi import Request

from scribe.agent.events import StreamEvent

logger = logging.getLogger(__name__)

DONE = "data: [DONE]\n\n"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(data: dict) -> str:
    """Format a payload as one SSE data frame"""
    return f"data: {json.dumps(data, ensure_ascii=False, default=str)}\n\n"


async def sse_events(events: AsyncIterator[StreamEvent], request: Request | None = None) -> AsyncIterator[str]:
    """Relay agent events as SSE frames, ending with the DONE sentinel.

    The client connection is checked before each frame. When it is gone the
    event generator is closed, which also closes any in-flight model stream.
    """
    try:
        async for event in events:
            if request is not None and await request.is_disconnected():
                logger.info("Client disconnected, cancelling agent turn")
                return
            yield format_sse(event.to_wire())
            if event.type in ("complete", "error"):
                break
        yield DONE
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            await aclose()
