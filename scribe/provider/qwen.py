"""Qwen provider - DashScope compatible-mode API, blocking only"""

import json
import logging

import httpx

from .base import Provider, Completion, ModelInvocationError, classify_status
from .deepseek import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text[:500]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("message"):
            return body["message"]
    return str(body)[:500]


class QwenProvider(Provider):
    """Provider for Qwen models. The backend is used without streaming."""

    name = "qwen"
    supports_streaming = False
    API_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str | None = None,
        temperature: float | None = 0.7,
        max_tokens: int = 8192,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(model)
        if not api_key:
            raise ModelInvocationError("An API key is required for Qwen", kind="auth")
        self.api_key = api_key
        self.api_url = base_url or self.API_URL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, prompt: str) -> Completion:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.max_tokens,
        }
        if self.temperature is not None:
            body["temperature"] = self.temperature

        logger.info(f"Making Qwen API call with model: {self.model}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, headers=self._headers(), json=body)
        except httpx.TimeoutException as e:
            raise ModelInvocationError("Qwen API request timed out", kind="transport") from e
        except httpx.TransportError as e:
            raise ModelInvocationError(f"Could not reach the Qwen API: {e}", kind="transport") from e

        if response.status_code != 200:
            raise ModelInvocationError(
                f"Qwen API error ({response.status_code}): {_error_message(response)}",
                kind=classify_status(response.status_code),
                status_code=response.status_code,
            )

        try:
            data = response.json()
            message = data["choices"][0]["message"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError) as e:
            raise ModelInvocationError(f"Unexpected Qwen API response: {e}", kind="server") from e

        return Completion(text=message.get("content") or "")
