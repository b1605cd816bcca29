"""DeepSeek provider - OpenAI-compatible API with a reasoning side channel"""

from typing import AsyncIterator
import logging

import httpx
import openai

from .base import Provider, StreamChunk, Completion, ModelInvocationError, classify_status

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional academic writing assistant. You help researchers "
    "discuss, draft and revise papers, and you follow the tool-calling rules "
    "in the user message exactly."
)


def translate_openai_error(e: openai.OpenAIError, backend: str) -> ModelInvocationError:
    """Map an OpenAI SDK exception onto the provider error taxonomy"""
    if isinstance(e, openai.APIConnectionError):
        kind = "transport"
        message = f"Could not reach the {backend} API: {e}"
        status = None
    elif isinstance(e, openai.APIStatusError):
        status = e.status_code
        kind = classify_status(status)
        message = f"{backend} API error ({status}): {e.message}"
    else:
        kind = "server"
        message = f"{backend} API call failed: {e}"
        status = None
    return ModelInvocationError(message, kind=kind, status_code=status)


class DeepSeekProvider(Provider):
    """Provider for deepseek-chat and deepseek-reasoner"""

    name = "deepseek"
    supports_streaming = True
    BASE_URL = "https://api.deepseek.com/v1"

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str | None = None,
        temperature: float | None = 0.7,
        max_tokens: int = 8192,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(model)
        if not api_key:
            raise ModelInvocationError("An API key is required for DeepSeek", kind="auth")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or self.BASE_URL,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    def _request_kwargs(self, prompt: str) -> dict:
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.max_tokens,
        }
        # the reasoner ignores sampling parameters
        if self.temperature is not None and self.model != "deepseek-reasoner":
            kwargs["temperature"] = self.temperature
        return kwargs

    async def complete(self, prompt: str) -> Completion:
        logger.info(f"Making DeepSeek API call with model: {self.model}")
        try:
            response = await self.client.chat.completions.create(**self._request_kwargs(prompt))
        except openai.OpenAIError as e:
            raise translate_openai_error(e, "DeepSeek") from e

        if not response.choices:
            raise ModelInvocationError("DeepSeek returned no choices", kind="server")
        message = response.choices[0].message
        return Completion(
            text=message.content or "",
            reasoning=getattr(message, "reasoning_content", None) or "",
        )

    async def stream(self, prompt: str) -> AsyncIterator[StreamChunk]:
        logger.info(f"Making streaming DeepSeek API call with model: {self.model}")
        try:
            stream = await self.client.chat.completions.create(
                stream=True,
                **self._request_kwargs(prompt),
            )
        except openai.OpenAIError as e:
            raise translate_openai_error(e, "DeepSeek") from e

        try:
            async for chunk in stream:
                delta = chunk.choices[0].delta if chunk.choices else None
                if not delta:
                    continue

                reasoning = getattr(delta, "reasoning_content", None)
                if reasoning:
                    yield StreamChunk(type="reasoning", content=reasoning)

                if delta.content:
                    yield StreamChunk(type="text", content=delta.content)
        except openai.OpenAIError as e:
            raise translate_openai_error(e, "DeepSeek") from e
        except httpx.TransportError as e:
            raise ModelInvocationError(f"DeepSeek stream interrupted: {e}", kind="transport") from e
        finally:
            await stream.close()
