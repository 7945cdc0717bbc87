"""Resilient Anthropic Client — Messages API calls with a retry policy and domain error mapping.

Invariants:
    - 429, 529 and connection/5xx failures are retried up to max_retries times
    - Retry-After (seconds) wins over computed backoff when the API sends it
    - Timeouts and other 4xx responses fail on the first attempt
    - Billing / credit / quota failures -> QuotaExceededError (402); everything else -> AnthropicAPIError
    - Empty system prompts and tool lists are left out of the request

Design Decisions:
    - Every SDK exception is classified once (_classify) and the loop only asks
      "retry or raise?", so the policy lives in one table instead of several except blocks
    - SDK retries disabled (max_retries=0): this wrapper owns the policy and logs each attempt
"""

import asyncio
import logging
import random
from dataclasses import dataclass

import anthropic
from anthropic import (
    APIConnectionError, APIError, APIStatusError, APITimeoutError,
    InternalServerError, RateLimitError,
)

from chainlab.core.errors import (
    AnthropicAPIError, ChainlabError, ErrorContext, QuotaExceededError,
)

logger = logging.getLogger(__name__)

_OVERLOADED = 529
_QUOTA_MARKERS = ("credit balance", "billing", "quota", "insufficient_quota")


@dataclass(frozen=True)
class _Failure:
    kind: str
    retryable: bool
    retry_after_ms: int | None = None


def _retry_after_ms(error: Exception) -> int | None:
    response = getattr(error, "response", None)
    raw = response.headers.get("retry-after") if response is not None else None
    if not raw:
        return None
    try:
        return int(float(raw) * 1000)
    except ValueError:
        return None


def _classify(error: Exception) -> _Failure:
    # APITimeoutError subclasses APIConnectionError: check it first.
    if isinstance(error, APITimeoutError):
        return _Failure("timeout", retryable=False)
    if isinstance(error, RateLimitError):
        return _Failure("rate_limit", retryable=True, retry_after_ms=_retry_after_ms(error))
    if isinstance(error, (APIConnectionError, InternalServerError)):
        return _Failure("connection_error", retryable=True)
    if isinstance(error, APIStatusError) and error.status_code == _OVERLOADED:
        return _Failure("connection_error", retryable=True)
    if isinstance(error, APIError):
        status = getattr(error, "status_code", None)
        text = str(error).lower()
        if status == 402 or any(marker in text for marker in _QUOTA_MARKERS):
            return _Failure("quota", retryable=False)
        return _Failure("client_error", retryable=False)
    return _Failure("unknown", retryable=False)


class ResilientAnthropicClient:
    def __init__(
        self,
        api_key: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 60_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key, timeout=timeout_seconds, max_retries=0,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        messages: list,
        system: str | None = None,
        tools: list | None = None,
        temperature: float | None = None,
        context: ErrorContext | None = None,
    ):
        request: dict = {"model": model, "max_tokens": max_tokens, "messages": messages}
        if system:
            request["system"] = system
        if tools:
            request["tools"] = tools
        if temperature is not None:
            request["temperature"] = temperature

        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(**request)
            except Exception as e:
                failure = _classify(e)
                if not failure.retryable or attempt >= self.max_retries:
                    raise self._to_domain_error(e, failure, context)
                delay = failure.retry_after_ms or self._backoff(attempt)
                logger.warning(
                    f"Anthropic {failure.kind}, retrying in {delay}ms",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
                attempt += 1
                continue

            logger.info(
                "Anthropic call ok",
                extra={
                    "attempt": attempt + 1,
                    "input_tokens": response.usage.input_tokens,
                    "output_tokens": response.usage.output_tokens,
                },
            )
            return response

    def _to_domain_error(
        self, error: Exception, failure: _Failure, context: ErrorContext | None,
    ) -> ChainlabError:
        if failure.kind == "quota":
            return QuotaExceededError(str(error), context=context)
        if failure.kind == "timeout":
            return AnthropicAPIError("API timeout", "timeout", context=context)
        if failure.kind == "rate_limit":
            return AnthropicAPIError(
                "Rate limit exceeded after retries", "rate_limit",
                retry_after_ms=failure.retry_after_ms, context=context,
            )
        if failure.kind == "connection_error":
            return AnthropicAPIError(
                f"Transient failure after {self.max_retries} retries: {error}",
                "connection_error", context=context,
            )
        if failure.kind == "unknown":
            logger.error(f"Unexpected Anthropic error: {error}", exc_info=error)
        return AnthropicAPIError(str(error), failure.kind, context=context)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff capped at max_delay_ms, ±25% jitter."""
        delay = min(self.max_delay_ms, self.base_delay_ms * 2 ** attempt)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    async def close(self) -> None:
        await self.client.close()
