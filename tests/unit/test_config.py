"""Tests for notionpipe/config.py."""

from __future__ import annotations

import dataclasses

import pytest

from notionpipe.config import DEFAULT_BASE_URL, DEFAULT_NOTION_VERSION, NotionPipeConfig


class TestDefaults:
    def test_defaults(self):
        config = NotionPipeConfig(token="test-token-1234")
        assert config.base_url == DEFAULT_BASE_URL
        assert config.notion_version == DEFAULT_NOTION_VERSION
        assert config.timeout_seconds == 30.0
        assert config.retry_max_attempts == 3
        assert config.retry_base_delay == 1.0
        assert config.retry_after_max is None
        assert config.retry_jitter is False
        assert config.min_request_interval == 0.35
        assert config.debug_dump_payload is False

    def test_frozen(self):
        config = NotionPipeConfig(token="test-token-1234")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.token = "other"  # type: ignore[misc]

    def test_headers(self):
        config = NotionPipeConfig(token="abc", notion_version="2025-09-03")
        assert config.headers == {
            "Authorization": "Bearer abc",
            "Notion-Version": "2025-09-03",
            "Content-Type": "application/json",
        }


class TestValidation:
    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("retry_max_attempts", 0),
            ("retry_base_delay", -1.0),
            ("retry_after_max", -0.5),
            ("min_request_interval", -0.01),
            ("timeout_seconds", 0.0),
            ("timeout_seconds", -3.0),
        ],
    )
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValueError, match=field):
            NotionPipeConfig(token="t", **{field: value})

    def test_zero_delays_allowed(self):
        config = NotionPipeConfig(
            token="t", retry_base_delay=0.0, min_request_interval=0.0, retry_after_max=0.0,
        )
        assert config.min_request_interval == 0.0

    def test_http_rejected_for_remote_host(self):
        with pytest.raises(ValueError, match="insecure HTTP"):
            NotionPipeConfig(token="t", base_url="http://api.notion.com/v1")

    @pytest.mark.parametrize("host", ["localhost", "127.0.0.1"])
    def test_http_allowed_for_localhost(self, host):
        config = NotionPipeConfig(token="t", base_url=f"http://{host}:8080/v1")
        assert config.base_url.startswith("http://")


class TestFromEnv:
    def test_prefers_notion_key(self, monkeypatch):
        monkeypatch.setenv("NOTION_KEY", "first")
        monkeypatch.setenv("NOTION_API_KEY", "second")
        assert NotionPipeConfig.from_env().token == "first"

    def test_explicit_token_wins(self, monkeypatch):
        monkeypatch.setenv("NOTION_KEY", "env")
        assert NotionPipeConfig.from_env(token="explicit").token == "explicit"

    def test_empty_env_value_ignored(self, monkeypatch):
        monkeypatch.setenv("NOTION_KEY", "")
        monkeypatch.setenv("NOTION_API_KEY", "second")
        assert NotionPipeConfig.from_env().token == "second"

    def test_overrides_forwarded(self, monkeypatch):
        monkeypatch.setenv("NOTION_KEY", "env")
        config = NotionPipeConfig.from_env(min_request_interval=1.0)
        assert config.min_request_interval == 1.0

    def test_missing_raises(self, monkeypatch):
        monkeypatch.delenv("NOTION_KEY", raising=False)
        monkeypatch.delenv("NOTION_API_KEY", raising=False)
        with pytest.raises(ValueError, match="not found"):
            NotionPipeConfig.from_env()


class TestRepr:
    def test_token_masked(self):
        config = NotionPipeConfig(token="secret_abcdefghijkl")
        text = repr(config)
        assert "secret_abcdefghijkl" not in text
        assert "token='...ijkl'" in text
        assert "retry_max_attempts=3" in text

    def test_short_token_fully_masked(self):
        assert "token='****'" in repr(NotionPipeConfig(token="ab"))
