"""Credential storage for providers"""

import json
import os
from pathlib import Path
from typing import Optional

ENV_KEYS = {
    "deepseek": "DEEPSEEK_API_KEY",
    "qwen": "DASHSCOPE_API_KEY",
}


class CredentialStore:
    """Simple file-based credential storage"""

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = config_dir or Path.home() / ".config" / "scribe"
        self.credentials_file = self.config_dir / "credentials.json"

    def _load(self) -> dict:
        if self.credentials_file.exists():
            try:
                return json.loads(self.credentials_file.read_text())
            except (json.JSONDecodeError, IOError):
                return {}
        return {}

    def _save(self, data: dict):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_file.write_text(json.dumps(data, indent=2))
        self.credentials_file.chmod(0o600)

    def get(self, provider: str) -> Optional[dict]:
        """Get credentials for a provider"""
        data = self._load()
        return data.get(provider)

    def set(self, provider: str, credentials: dict):
        """Set credentials for a provider"""
        data = self._load()
        data[provider] = credentials
        self._save(data)

    def delete(self, provider: str):
        """Delete credentials for a provider"""
        data = self._load()
        if provider in data:
            del data[provider]
            self._save(data)

    def get_api_key(self, provider: str) -> Optional[str]:
        """Stored API key for a provider, falling back to the environment"""
        creds = self.get(provider)
        if creds and creds.get("api_key"):
            return creds["api_key"]
        env_name = ENV_KEYS.get(provider)
        if env_name:
            return os.environ.get(env_name) or None
        return None
