"""Tests for model providers and routing"""

import json

import httpx
import pytest

from scribe.provider.base import ModelInvocationError


def sse_body(*payloads) -> bytes:
    frames = [f"data: {json.dumps(p)}\n\n" for p in payloads]
    frames.append("data: [DONE]\n\n")
    return "".join(frames).encode()


def chunk(delta: dict, model: str = "deepseek-reasoner") -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": model,
        "choices": [{"index": 0, "delta": delta, "finish_reason": None}],
    }


def deepseek(handler, model: str = "deepseek-chat"):
    from scribe.provider.deepseek import DeepSeekProvider

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DeepSeekProvider(model, api_key="sk-test", http_client=client)


class TestDeepSeekProvider:
    @pytest.mark.asyncio
    async def test_stream_reasoning_then_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = sse_body(
                chunk({"role": "assistant", "content": None, "reasoning_content": "Let me think."}),
                chunk({"content": "Hello"}),
                chunk({"content": " world"}),
            )
            return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

        provider = deepseek(handler, "deepseek-reasoner")
        chunks = [c async for c in provider.stream("hi")]

        assert [(c.type, c.content) for c in chunks] == [
            ("reasoning", "Let me think."),
            ("text", "Hello"),
            ("text", " world"),
        ]

    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={
                "id": "chatcmpl-1",
                "object": "chat.completion",
                "created": 0,
                "model": "deepseek-chat",
                "choices": [{
                    "index": 0,
                    "message": {"role": "assistant", "content": "Hi there."},
                    "finish_reason": "stop",
                }],
            })

        completion = await deepseek(handler).complete("hello")

        assert completion.text == "Hi there."
        assert seen["model"] == "deepseek-chat"
        assert seen["temperature"] == 0.7
        assert seen["messages"][-1] == {"role": "user", "content": "hello"}

    @pytest.mark.asyncio
    async def test_reasoner_omits_temperature(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return httpx.Response(200, content=sse_body(chunk({"content": "ok"})),
                                  headers={"content-type": "text/event-stream"})

        provider = deepseek(handler, "deepseek-reasoner")
        [c async for c in provider.stream("hi")]

        assert "temperature" not in seen
        assert seen["stream"] is True

    @pytest.mark.asyncio
    async def test_unauthorized_is_auth_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "Invalid API key"}})

        provider = deepseek(handler)

        with pytest.raises(ModelInvocationError) as exc:
            [c async for c in provider.stream("hi")]

        assert exc.value.kind == "auth"
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "Slow down"}})

        with pytest.raises(ModelInvocationError) as exc:
            await deepseek(handler).complete("hi")

        assert exc.value.kind == "rate_limit"

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ModelInvocationError) as exc:
            await deepseek(handler).complete("hi")

        assert exc.value.kind == "transport"

    def test_missing_key(self):
        from scribe.provider.deepseek import DeepSeekProvider

        with pytest.raises(ModelInvocationError) as exc:
            DeepSeekProvider("deepseek-chat", api_key="")

        assert exc.value.kind == "auth"


class TestQwenProvider:
    def make(self, handler):
        from scribe.provider.qwen import QwenProvider

        return QwenProvider("qwen-plus", api_key="sk-test", transport=httpx.MockTransport(handler))

    def test_is_blocking_only(self):
        assert self.make(lambda request: httpx.Response(200)).supports_streaming is False

    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "Qwen says hi"}}]})

        completion = await self.make(handler).complete("hello")

        assert completion.text == "Qwen says hi"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "qwen-plus"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,kind", [(401, "auth"), (429, "rate_limit"), (500, "server")])
    async def test_status_classification(self, status, kind):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"error": {"message": "nope"}})

        with pytest.raises(ModelInvocationError) as exc:
            await self.make(handler).complete("hi")

        assert exc.value.kind == kind
        assert "nope" in exc.value.message

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ModelInvocationError) as exc:
            await self.make(handler).complete("hi")

        assert exc.value.kind == "transport"

    @pytest.mark.asyncio
    async def test_stream_not_supported(self):
        provider = self.make(lambda request: httpx.Response(200))

        with pytest.raises(NotImplementedError):
            [c async for c in provider.stream("hi")]


class TestModelRouter:
    @pytest.fixture
    def router(self, tmp_path, monkeypatch):
        from scribe.auth.credentials import CredentialStore
        from scribe.config.config import Config
        from scribe.provider.router import ModelRouter

        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        monkeypatch.delenv("DASHSCOPE_API_KEY", raising=False)
        return ModelRouter(Config(), CredentialStore(tmp_path))

    def test_resolve_model(self):
        from scribe.provider.router import ModelRouter

        assert ModelRouter.resolve_model("deepseek") == ("deepseek", "deepseek-chat")
        assert ModelRouter.resolve_model("deepseek-reasoner") == ("deepseek", "deepseek-reasoner")
        assert ModelRouter.resolve_model("qwen") == ("qwen", "qwen-plus")
        assert ModelRouter.resolve_model("qwen/qwen-max") == ("qwen", "qwen-max")

    def test_unknown_model(self):
        from scribe.provider.router import ModelRouter

        with pytest.raises(ValueError):
            ModelRouter.resolve_model("gpt-4")

    def test_request_key_wins(self, router):
        provider = router.get_provider("qwen", "sk-request")

        assert provider.name == "qwen"
        assert provider.api_key == "sk-request"

    def test_stored_then_env_key(self, router, monkeypatch):
        router.credentials.set("qwen", {"api_key": "sk-stored"})
        monkeypatch.setenv("DASHSCOPE_API_KEY", "sk-env")

        assert router.get_provider("qwen").api_key == "sk-stored"

        router.credentials.delete("qwen")
        assert router.get_provider("qwen").api_key == "sk-env"

    def test_missing_key_is_auth_error(self, router):
        with pytest.raises(ModelInvocationError) as exc:
            router.get_provider("deepseek")

        assert exc.value.kind == "auth"

    def test_deepseek_streams(self, router):
        provider = router.get_provider("deepseek-reasoner", "sk-test")

        assert provider.supports_streaming is True
        assert provider.model == "deepseek-reasoner"
