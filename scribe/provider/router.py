"""Model routing and provider selection"""

from typing import Dict, Type

from scribe.auth.credentials import CredentialStore
from scribe.config.config import Config
from .base import Provider, ModelInvocationError
from .deepseek import DeepSeekProvider
from .qwen import QwenProvider


class ModelRouter:
    """Routes a model selector to a configured provider instance"""

    PROVIDERS: Dict[str, Type[Provider]] = {
        "deepseek": DeepSeekProvider,
        "qwen": QwenProvider,
    }

    # selector -> (provider, model id)
    MODELS = {
        "deepseek": ("deepseek", "deepseek-chat"),
        "deepseek-reasoner": ("deepseek", "deepseek-reasoner"),
        "qwen": ("qwen", "qwen-plus"),
    }

    def __init__(self, config: Config | None = None, credentials: CredentialStore | None = None):
        self.config = config or Config()
        self.credentials = credentials or CredentialStore()

    @classmethod
    def resolve_model(cls, selector: str) -> tuple[str, str]:
        """Resolve a model selector to (provider, model_id)"""
        if selector in cls.MODELS:
            return cls.MODELS[selector]

        if "/" in selector:
            provider, model_id = selector.split("/", 1)
            if provider in cls.PROVIDERS:
                return provider, model_id

        raise ValueError(
            f"Unsupported model: {selector}. "
            f"Available: {', '.join(cls.MODELS)}"
        )

    def get_provider(self, selector: str, api_key: str | None = None) -> Provider:
        """Build a provider for a selector, resolving credentials"""
        provider_name, model_id = self.resolve_model(selector)
        settings = self.config.provider(provider_name)

        key = api_key or settings.api_key or self.credentials.get_api_key(provider_name)
        if not key:
            raise ModelInvocationError(f"No API key configured for {provider_name}", kind="auth")

        provider_class = self.PROVIDERS[provider_name]
        return provider_class(
            model_id,
            api_key=key,
            base_url=settings.base_url,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
        )
