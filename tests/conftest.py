"""Pytest configuration and shared fixtures"""

import pytest
import tempfile
import os
from pathlib import Path

# Set test storage directory to avoid polluting user data
os.environ["SCRIBE_DATA_DIR"] = tempfile.mkdtemp()

from scribe.provider.base import Provider, Completion, StreamChunk, ModelInvocationError


@pytest.fixture(autouse=True)
def clean_storage():
    """Clean storage before each test"""
    from scribe.storage.storage import Storage

    # Use a fresh temp dir for each test
    Storage.BASE_DIR = Path(tempfile.mkdtemp())
    yield


class ScriptedProvider(Provider):
    """Provider that replays canned replies and records prompts"""

    name = "scripted"

    def __init__(self, replies, streaming: bool = True, reasoning: str = "", fail_with=None):
        super().__init__("scripted-model")
        self.replies = list(replies)
        self.supports_streaming = streaming
        self.reasoning = reasoning
        self.fail_with = fail_with
        self.prompts: list[str] = []

    def _next(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail_with is not None:
            raise self.fail_with
        if not self.replies:
            raise AssertionError("ScriptedProvider ran out of replies")
        return self.replies.pop(0)

    async def complete(self, prompt: str) -> Completion:
        return Completion(text=self._next(prompt), reasoning=self.reasoning)

    async def stream(self, prompt: str):
        text = self._next(prompt)
        if self.reasoning:
            yield StreamChunk(type="reasoning", content=self.reasoning)
        # split into a few fragments to exercise accumulation
        step = max(1, len(text) // 3)
        for i in range(0, len(text), step):
            yield StreamChunk(type="text", content=text[i:i + step])


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def auth_error():
    return ModelInvocationError("API error (401): invalid key", kind="auth", status_code=401)
