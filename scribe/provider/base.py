"""Provider abstraction for LLM APIs"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Literal

ErrorKind = Literal["auth", "rate_limit", "server", "transport"]

USER_HINTS: dict[str, str] = {
    "auth": "Check that the API key is valid and has not expired.",
    "rate_limit": "The provider is rate limiting requests; wait a moment and retry.",
    "server": "The model provider reported an error; try again later.",
    "transport": "Could not reach the model provider; check the network connection.",
}


class ModelInvocationError(Exception):
    """A classified failure talking to the model backend"""

    def __init__(self, message: str, kind: ErrorKind = "server", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code

    @property
    def hint(self) -> str:
        return USER_HINTS.get(self.kind, "")


def classify_status(status_code: int) -> ErrorKind:
    if status_code in (401, 403):
        return "auth"
    if status_code == 429:
        return "rate_limit"
    return "server"


@dataclass
class StreamChunk:
    """An incremental fragment of a streamed reply"""
    type: Literal["text", "reasoning"]
    content: str = ""


@dataclass
class Completion:
    """A complete reply from a blocking call"""
    text: str
    reasoning: str = ""


class Provider(ABC):
    """Base class for LLM providers.

    Every backend can ``complete``. Backends that deliver incremental output
    set ``supports_streaming`` and implement ``stream``; callers pick the mode
    from that flag instead of special-casing backends.
    """

    name: str = ""
    supports_streaming: bool = False

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def complete(self, prompt: str) -> Completion:
        """Return the whole reply for a prompt"""
        pass

    async def stream(self, prompt: str) -> AsyncIterator[StreamChunk]:
        """Stream a reply as text and reasoning fragments, in arrival order"""
        raise NotImplementedError(f"{self.name or type(self).__name__} does not support streaming")
        yield  # pragma: no cover
