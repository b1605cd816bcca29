"""Tests for configuration loading"""

import json


class TestConfig:
    def test_defaults(self, tmp_path):
        from scribe.config.config import Config

        config = Config.load(tmp_path / "missing.json")

        assert config.default_model == "deepseek"
        assert config.cache.max_entries == 50
        assert config.cache.ttl_seconds == 7200
        assert config.agent.max_iterations == 10
        assert config.agent.tool_timeout == 30
        assert config.agent.strip_dangling_markers is False

    def test_save_then_load(self, tmp_path):
        from scribe.config.config import Config, ProviderConfig

        path = tmp_path / "nested" / "scribe.json"
        config = Config(default_model="qwen", providers={"qwen": ProviderConfig(timeout=10)})
        config.agent.max_iterations = 3

        config.save(path)
        loaded = Config.load(path)

        assert json.loads(path.read_text())["default_model"] == "qwen"
        assert loaded.default_model == "qwen"
        assert loaded.agent.max_iterations == 3
        assert loaded.provider("qwen").timeout == 10
        assert loaded.provider("deepseek").timeout == 120
