"""
Tests for project configuration: ENV > config.json > defaults.
"""

from __future__ import annotations

import json

import pytest

from backend.app.config import (
    DEFAULT_ENRICHMENT_MODEL,
    DEFAULT_ENRICHMENT_PROVIDER,
    DEFAULT_ENRICHMENT_TIMEOUT,
    Config,
    build_accessibility_prompt,
    get_provider_settings,
    validate_enrichment_config,
)


def _write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoading:
    def test_missing_file_uses_defaults(self, clean_env, tmp_path):
        cfg = Config(config_file=tmp_path / "missing.json")

        assert cfg.get_enrichment_provider() == DEFAULT_ENRICHMENT_PROVIDER
        assert cfg.get_enrichment_model() == DEFAULT_ENRICHMENT_MODEL
        assert cfg.get_enrichment_timeout() == DEFAULT_ENRICHMENT_TIMEOUT
        assert cfg.get_enrichment_api_key() is None
        assert cfg.get_placeholders() == {}

    def test_malformed_file_uses_defaults(self, clean_env, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")

        assert Config(config_file=path).get_enrichment_provider() == DEFAULT_ENRICHMENT_PROVIDER

    def test_file_values(self, clean_env, tmp_path):
        path = _write_config(
            tmp_path,
            {"enrichment": {"provider": "Ollama", "model": "llama3", "timeout": 5, "base_url": "http://x"}},
        )

        cfg = Config(config_file=path)

        assert cfg.get_enrichment_provider() == "ollama"
        assert cfg.get_enrichment_model() == "llama3"
        assert cfg.get_enrichment_timeout() == 5.0
        assert cfg.get_enrichment_base_url() == "http://x"

    def test_env_overrides_file(self, clean_env, tmp_path):
        path = _write_config(tmp_path, {"enrichment": {"provider": "ollama", "model": "llama3", "api_key": "file"}})
        clean_env.setenv("ENRICHMENT_PROVIDER", "OPENAI")
        clean_env.setenv("ENRICHMENT_MODEL", "gpt-4o")
        clean_env.setenv("ENRICHMENT_API_KEY", "sk-env")

        cfg = Config(config_file=path)

        assert cfg.get_enrichment_provider() == "openai"
        assert cfg.get_enrichment_model() == "gpt-4o"
        assert cfg.get_enrichment_api_key() == "sk-env"

    def test_api_key_falls_back_to_provider_env(self, clean_env, tmp_path):
        clean_env.setenv("OPENAI_API_KEY", "sk-openai")

        assert Config(config_file=tmp_path / "config.json").get_enrichment_api_key() == "sk-openai"

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_invalid_timeout_uses_default(self, clean_env, tmp_path, raw):
        clean_env.setenv("ENRICHMENT_TIMEOUT", raw)

        assert Config(config_file=tmp_path / "config.json").get_enrichment_timeout() == DEFAULT_ENRICHMENT_TIMEOUT


class TestPlaceholders:
    def test_only_known_keys_are_returned(self, clean_env, tmp_path):
        path = _write_config(tmp_path, {"placeholders": {"image_alt": "Photo", "unknown": "x"}})

        assert Config(config_file=path).get_placeholders() == {"image_alt": "Photo"}

    def test_null_section(self, clean_env, tmp_path):
        path = _write_config(tmp_path, {"placeholders": None})

        assert Config(config_file=path).get_placeholders() == {}


class TestProviderHelpers:
    def test_provider_settings(self):
        assert get_provider_settings("openai")["base_url"] == "https://api.openai.com/v1"
        assert get_provider_settings("anthropic", "claude-x")["model"] == "claude-x"
        assert get_provider_settings("heuristic", "gpt-4")["model"] == "heuristic"
        assert get_provider_settings("ollama", "llama3") == {"base_url": None, "model": "llama3"}

    @pytest.mark.parametrize(
        "provider, api_key, expected",
        [
            ("heuristic", None, []),
            ("mock", None, []),
            ("ollama", None, []),
            ("openai", "sk-abc", []),
            ("openai", "abc", ["Invalid OpenAI API key format"]),
            ("anthropic", "sk-ant-abc", []),
            ("anthropic", "sk-abc", ["Invalid Anthropic API key format"]),
            ("mistral", None, ["API key is required for mistral provider"]),
        ],
    )
    def test_validate_enrichment_config(self, provider, api_key, expected):
        assert validate_enrichment_config(provider, api_key) == expected

    def test_prompt_embeds_code_and_json_contract(self):
        prompt = build_accessibility_prompt("tsx", "<img />")

        assert "```tsx\n<img />\n```" in prompt
        assert '"issues"' in prompt
        assert "Keyboard Navigation" in prompt
