"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ats_optimizer.clients.llm_client import LLMClient, LLMResponse
from ats_optimizer.config import LLMConfig

PATCH_TARGET = "ats_optimizer.clients.llm_client.anthropic.AsyncAnthropic"


def _make_api_message(text: str, input_tokens: int = 100, output_tokens: int = 50) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    message.content = [MagicMock(text=text)]
    return message


def _client_returning(mock_cls, create: AsyncMock) -> None:
    mock_client = MagicMock()
    mock_client.messages.create = create
    mock_cls.return_value = mock_client


class TestLLMClientInit:
    def test_init_default_creates_client_with_no_kwargs(self):
        with patch(PATCH_TARGET) as mock_cls:
            llm = LLMClient()
            mock_cls.assert_called_once_with()
        assert llm.max_attempts == 1

    def test_init_passes_key_and_timeout(self):
        with patch(PATCH_TARGET) as mock_cls:
            LLMClient(api_key="test-key", timeout=30.0)
            mock_cls.assert_called_once_with(api_key="test-key", timeout=30.0)

    def test_max_attempts_floor(self):
        with patch(PATCH_TARGET):
            assert LLMClient(max_attempts=0).max_attempts == 1

    def test_from_config(self):
        with patch(PATCH_TARGET) as mock_cls:
            llm = LLMClient.from_config(LLMConfig(timeout=45, max_attempts=3))
            mock_cls.assert_called_once_with(timeout=45)
        assert llm.max_attempts == 3


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self):
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(mock_cls, AsyncMock(return_value=_make_api_message("hello")))
            llm = LLMClient()
            result = await llm.generate("say hello")

        assert isinstance(result, LLMResponse)
        assert result.text == "hello"
        assert result.input_tokens == 100
        assert result.output_tokens == 50

    async def test_system_prompt_and_temperature_forwarded(self):
        create = AsyncMock(return_value=_make_api_message("ok"))
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(mock_cls, create)
            llm = LLMClient()
            await llm.generate("prompt", system="be terse", model="m", temperature=0.3)

        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "be terse"
        assert kwargs["model"] == "m"
        assert kwargs["temperature"] == 0.3
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    async def test_no_system_key_when_empty(self):
        create = AsyncMock(return_value=_make_api_message("ok"))
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(mock_cls, create)
            await LLMClient().generate("prompt")

        assert "system" not in create.call_args.kwargs

    async def test_single_attempt_by_default(self):
        create = AsyncMock(side_effect=RuntimeError("rate limited"))
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(mock_cls, create)
            llm = LLMClient()
            with pytest.raises(RuntimeError, match="rate limited"):
                await llm.generate("prompt")

        assert create.await_count == 1
        assert llm.usage.calls == []

    async def test_retries_when_configured(self):
        create = AsyncMock(side_effect=[RuntimeError("flaky"), _make_api_message("ok")])
        with patch(PATCH_TARGET) as mock_cls, patch(
            "ats_optimizer.clients.llm_client.wait_exponential", return_value=lambda _: 0
        ):
            _client_returning(mock_cls, create)
            llm = LLMClient(max_attempts=2)
            result = await llm.generate("prompt")

        assert result.text == "ok"
        assert create.await_count == 2

    async def test_token_log_accumulates(self):
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(
                mock_cls, AsyncMock(return_value=_make_api_message("r", input_tokens=20, output_tokens=8))
            )
            llm = LLMClient()
            await llm.generate("one", model="claude-haiku-4-5-20251001")
            await llm.generate("two", model="claude-haiku-4-5-20251001")

        assert llm.usage.calls == [
            ("claude-haiku-4-5-20251001", 20, 8),
            ("claude-haiku-4-5-20251001", 20, 8),
        ]


    async def test_joins_text_blocks(self):
        message = _make_api_message("")
        message.content = [MagicMock(text="{\"a\": "), MagicMock(text="1}")]
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(mock_cls, AsyncMock(return_value=message))
            result = await LLMClient().generate("prompt")

        assert result.text == "{\"a\": 1}"


class TestLLMClientGenerateJson:
    async def test_parses_fenced_json(self):
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(
                mock_cls, AsyncMock(return_value=_make_api_message('```json\n{"a": 1}\n```'))
            )
            result = await LLMClient().generate_json("give me json")

        assert result == {"a": 1}

    async def test_raises_on_non_json_response(self):
        with patch(PATCH_TARGET) as mock_cls:
            _client_returning(mock_cls, AsyncMock(return_value=_make_api_message("plain text")))
            with pytest.raises(ValueError):
                await LLMClient().generate_json("give me json")


class TestLLMClientTokenSummary:
    def test_summary_totals_and_reset(self):
        with patch(PATCH_TARGET):
            llm = LLMClient()
        llm.usage.calls = [
            ("claude-haiku-4-5-20251001", 100, 50),
            ("claude-haiku-4-5-20251001", 200, 80),
        ]

        summary = llm.get_token_summary()
        assert summary["input"] == 300
        assert summary["output"] == 130
        assert len(summary["calls"]) == 2
        assert llm.get_token_summary() == {"input": 0, "output": 0, "calls": []}
