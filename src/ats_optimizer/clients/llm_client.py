"""Async Claude client shared by the analysis, rewrite and match steps."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import anthropic
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ats_optimizer.utils.json_parser import extract_json

if TYPE_CHECKING:
    from ats_optimizer.config import LLMConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_TOKENS = 8192


@dataclass
class LLMResponse:
    """Text reply plus the token counts billed for it."""

    text: str
    input_tokens: int
    output_tokens: int


@dataclass
class UsageLog:
    """Token usage per call, kept until the caller collects it."""

    calls: list[tuple[str, int, int]] = field(default_factory=list)  # (model, in, out)

    def record(self, model: str, response: LLMResponse) -> None:
        self.calls.append((model, response.input_tokens, response.output_tokens))

    def drain(self) -> dict:
        summary = {
            "input": sum(c[1] for c in self.calls),
            "output": sum(c[2] for c in self.calls),
            "calls": list(self.calls),
        }
        self.calls.clear()
        return summary


class LLMClient:
    """Thin wrapper over ``anthropic.AsyncAnthropic``.

    A failed call surfaces after ``max_attempts`` tries (default 1, i.e. no
    retry); the orchestrators turn it into a user-facing error.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_attempts: int = 1,
    ):
        options: dict = {}
        if api_key is not None:
            options["api_key"] = api_key
        if timeout is not None:
            options["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**options)
        self.max_attempts = max(1, max_attempts)
        self.usage = UsageLog()

    @classmethod
    def from_config(cls, config: LLMConfig, api_key: str | None = None) -> LLMClient:
        return cls(api_key=api_key, timeout=config.timeout, max_attempts=config.max_attempts)

    async def _create(self, request: dict) -> anthropic.types.Message:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(min=1, max=10),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("Retrying LLM call (attempt %d)", attempt.retry_state.attempt_number)
                return await self.client.messages.create(**request)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> LLMResponse:
        """Send one user turn and return the reply text."""
        request: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        logger.debug("LLM call: model=%s temperature=%.1f", model, temperature)
        try:
            message = await self._create(request)
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise

        response = LLMResponse(
            text="".join(getattr(block, "text", "") for block in message.content),
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
        logger.debug(
            "LLM response: %d input, %d output tokens",
            response.input_tokens,
            response.output_tokens,
        )
        self.usage.record(model, response)
        return response

    async def generate_json(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> dict | list:
        """Like :meth:`generate`, but parse the reply as JSON.

        Raises:
            ValueError: the reply holds no parseable JSON.
        """
        response = await self.generate(
            prompt=prompt,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract_json(response.text)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset it."""
        return self.usage.drain()
