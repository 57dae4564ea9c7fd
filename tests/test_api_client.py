"""Tests for the OpenAI-backed text-generation client."""

import asyncio
import json
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, OpenAIError

from huridocs_intake.core.api_client import TextGenerationClient
from huridocs_intake.core.errors import UpstreamError
from huridocs_intake.processing.response_parser import parse_analysis


def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def connection_error():
    return APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))


@pytest.fixture
def sdk():
    mock = MagicMock()
    mock.chat.completions.create = AsyncMock(return_value=completion("  {\"keywords\": []}  "))
    return mock


class TestGenerate:
    def test_sends_single_user_message(self, sdk):
        client = TextGenerationClient(client=sdk, model="gpt-4o-mini")
        text = asyncio.run(client.generate("Prompt", max_tokens=2048))

        assert text == '{"keywords": []}'
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 2048
        assert kwargs["messages"] == [{"role": "user", "content": "Prompt"}]

    def test_model_override(self, sdk):
        client = TextGenerationClient(client=sdk, model="gpt-4o-mini")
        asyncio.run(client.generate("Prompt", model="other-model"))
        assert sdk.chat.completions.create.call_args.kwargs["model"] == "other-model"

    def test_sdk_error_becomes_upstream_error(self, sdk):
        sdk.chat.completions.create.side_effect = OpenAIError("invalid api key")
        client = TextGenerationClient(client=sdk)

        with pytest.raises(UpstreamError):
            asyncio.run(client.generate("Prompt"))

    def test_single_attempt_by_default(self, sdk):
        sdk.chat.completions.create.side_effect = connection_error()
        client = TextGenerationClient(client=sdk)

        with pytest.raises(UpstreamError):
            asyncio.run(client.generate("Prompt"))
        assert sdk.chat.completions.create.await_count == 1

    def test_retries_connection_errors_when_configured(self, sdk):
        sdk.chat.completions.create.side_effect = [connection_error(), completion("ok")]
        client = TextGenerationClient(client=sdk, max_attempts=3)

        assert asyncio.run(client.generate("Prompt")) == "ok"
        assert sdk.chat.completions.create.await_count == 2


class TestCache:
    def test_second_call_served_from_cache(self, sdk, tmp_path):
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)

        first = asyncio.run(client.generate("Prompt"))
        second = asyncio.run(client.generate("Prompt"))

        assert first == second
        assert sdk.chat.completions.create.await_count == 1
        assert len(list(tmp_path.glob("*.json"))) == 1

    def test_cache_key_includes_token_budget(self, sdk, tmp_path):
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)
        asyncio.run(client.generate("Prompt", max_tokens=100))
        asyncio.run(client.generate("Prompt", max_tokens=200))
        assert sdk.chat.completions.create.await_count == 2

    def test_cache_disabled_per_call(self, sdk, tmp_path):
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)
        asyncio.run(client.generate("Prompt", cache=False))
        assert list(tmp_path.glob("*.json")) == []

    def test_corrupt_cache_entry_is_ignored(self, sdk, tmp_path):
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)
        asyncio.run(client.generate("Prompt"))
        cache_file = next(tmp_path.glob("*.json"))
        cache_file.write_text("not json", encoding="utf-8")

        assert asyncio.run(client.generate("Prompt")) == '{"keywords": []}'
        assert sdk.chat.completions.create.await_count == 2
        assert json.loads(cache_file.read_text(encoding="utf-8"))["content"] == '{"keywords": []}'

    def test_empty_reply_not_cached(self, sdk, tmp_path):
        sdk.chat.completions.create.return_value = completion(None)
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)

        assert asyncio.run(client.generate("Prompt")) == ""
        assert list(tmp_path.glob("*.json")) == []

    def test_rejected_reply_not_cached(self, sdk, tmp_path):
        sdk.chat.completions.create.side_effect = [completion("Keine Ahnung."), completion('{"keywords": ["Haft"]}')]
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)

        assert asyncio.run(client.generate("Prompt", validate=parse_analysis)) == "Keine Ahnung."
        assert list(tmp_path.glob("*.json")) == []

        assert asyncio.run(client.generate("Prompt", validate=parse_analysis)) == '{"keywords": ["Haft"]}'
        assert sdk.chat.completions.create.await_count == 2
        assert len(list(tmp_path.glob("*.json"))) == 1

    def test_cached_entry_rejected_by_validator_is_refetched(self, sdk, tmp_path):
        sdk.chat.completions.create.side_effect = [completion("Keine Ahnung."), completion("{}")]
        client = TextGenerationClient(cache_dir=tmp_path, client=sdk)

        # Cached without a validator, then read back with one
        asyncio.run(client.generate("Prompt"))
        assert asyncio.run(client.generate("Prompt", validate=parse_analysis)) == "{}"
        assert sdk.chat.completions.create.await_count == 2
        cache_file = next(tmp_path.glob("*.json"))
        assert json.loads(cache_file.read_text(encoding="utf-8"))["content"] == "{}"

    def test_cache_write_failure_still_returns_reply(self, sdk, tmp_path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        client = TextGenerationClient(cache_dir=blocker / "cache", client=sdk)

        with caplog.at_level(logging.WARNING, logger="huridocs_intake.core.api_client"):
            text = asyncio.run(client.generate("Prompt"))

        assert text == '{"keywords": []}'
        assert "Could not write cache entry" in caplog.text


class TestGateway:
    def test_cloudflare_gateway_when_configured(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acc")
        monkeypatch.setenv("CLOUDFLARE_GATEWAY_ID", "gw")

        client = TextGenerationClient()
        assert "gateway.ai.cloudflare.com/v1/acc/gw/openai" in str(client.client.base_url)

    def test_placeholder_ids_use_direct_api(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
        monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "{account_id}")
        monkeypatch.setenv("CLOUDFLARE_GATEWAY_ID", "{gateway_id}")

        client = TextGenerationClient()
        assert "api.openai.com" in str(client.client.base_url)
