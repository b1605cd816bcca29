"""Configuration management"""

from pathlib import Path
from pydantic import BaseModel, Field
import json


class ProviderConfig(BaseModel):
    """Settings for one model backend"""
    api_key: str | None = None
    base_url: str | None = None
    timeout: float = 120.0
    temperature: float | None = 0.7
    max_tokens: int = 8192


class CacheConfig(BaseModel):
    max_entries: int = Field(default=50, ge=1)
    ttl_seconds: float = Field(default=2 * 60 * 60, gt=0)


class AgentConfig(BaseModel):
    max_iterations: int = Field(default=10, ge=0)
    tool_timeout: float = Field(default=30.0, gt=0)
    max_tool_text_length: int = Field(default=40000, ge=0)
    # when True, an undecodable tool marker is cut from the visible reply too
    strip_dangling_markers: bool = False


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3001
    max_sessions: int = Field(default=1000, ge=1)


class Config(BaseModel):
    default_model: str = "deepseek"
    providers: dict[str, ProviderConfig] = {}
    cache: CacheConfig = Field(default_factory=CacheConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    data_dir: Path | None = None

    def provider(self, name: str) -> ProviderConfig:
        return self.providers.get(name) or ProviderConfig()

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from file"""
        if path is None:
            # Look for scribe.json in current dir or home
            candidates = [
                Path.cwd() / "scribe.json",
                Path.home() / ".config" / "scribe" / "config.json",
            ]
            for p in candidates:
                if p.exists():
                    path = p
                    break

        if path and path.exists():
            data = json.loads(path.read_text())
            return cls(**data)

        return cls()

    def save(self, path: Path):
        """Save config to file"""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))
