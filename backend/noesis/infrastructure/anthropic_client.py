"""Resilient Anthropic Client: AsyncAnthropic behind one failure taxonomy.

Invariants:
    - Every SDK failure leaves as AnthropicAPIError with an api_error_type of
      rate_limit | connection_error | timeout | client_error | unknown
    - Only rate limits, connection drops, 5xx and 529 overloads are retryable;
      timeouts and 4xx never are
    - max_retries=0 (the default) surfaces the first failure untouched

Design Decisions:
    - SDK retries disabled: a single retry policy lives here, opt-in per settings
    - Retry-After (seconds) wins over computed backoff for rate limits
"""

import asyncio
import logging
import random
from dataclasses import dataclass

import anthropic
from anthropic import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from noesis.core.errors import AnthropicAPIError, ErrorContext

logger = logging.getLogger(__name__)

_OVERLOADED_STATUS = 529


@dataclass(frozen=True)
class _Failure:
    """How one SDK exception maps onto the domain taxonomy."""
    error_type: str
    retryable: bool
    message: str
    retry_after_ms: int | None = None


def _retry_after_ms(error: RateLimitError) -> int | None:
    response = getattr(error, "response", None)
    if response is None:
        return None
    value = response.headers.get("retry-after")
    return int(value) * 1000 if value and value.isdigit() else None


def _classify(error: Exception) -> _Failure:
    if isinstance(error, RateLimitError):
        return _Failure(
            "rate_limit", True, "Rate limit exceeded", _retry_after_ms(error),
        )
    # APITimeoutError subclasses APIConnectionError: check it first
    if isinstance(error, APITimeoutError):
        return _Failure("timeout", False, "API timeout")
    if isinstance(error, (APIConnectionError, InternalServerError)):
        return _Failure("connection_error", True, f"Transient failure: {error}")
    if isinstance(error, APIStatusError):
        if error.status_code == _OVERLOADED_STATUS:
            return _Failure("connection_error", True, f"API overloaded: {error}")
        return _Failure("client_error", False, str(error))
    return _Failure("unknown", False, str(error))


class ResilientAnthropicClient:
    """AsyncAnthropic with error mapping and optional backoff retries."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 0,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 120,
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
        system: str,
        messages: list,
        context: ErrorContext | None = None,
    ):
        """One Messages API call; raises AnthropicAPIError once retries run out."""
        attempt = 0
        while True:
            try:
                response = await self.client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=messages,
                )
            except Exception as e:
                failure = _classify(e)
                if failure.error_type == "unknown":
                    logger.error(f"Unexpected Anthropic error: {e}", exc_info=True)
                if not failure.retryable or attempt >= self.max_retries:
                    raise AnthropicAPIError(
                        failure.message,
                        failure.error_type,
                        retry_after_ms=failure.retry_after_ms,
                        context=context,
                    ) from e
                delay = failure.retry_after_ms or self._backoff(attempt)
                logger.warning(
                    f"{failure.error_type}, retrying in {delay}ms",
                    extra={"attempt": attempt + 1},
                )
                await asyncio.sleep(delay / 1000)
                attempt += 1
                continue

            usage = response.usage
            logger.info(
                "Anthropic API success",
                extra={
                    "attempt": attempt + 1,
                    "input_tokens": usage.input_tokens,
                    "output_tokens": usage.output_tokens,
                },
            )
            return response

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter, capped at max_delay_ms."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
