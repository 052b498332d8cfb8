"""Resilient Anthropic Client — wraps AsyncAnthropic with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, 529 overloaded): retried up to max_retries
    - Client errors (400/401/403): immediate failure, no retry
    - All failures mapped to OracleAPIError (core/errors.py)
    - max_retries=0 means exactly one request

Design Decisions:
    - Wrapper over raw client: isolates retry logic from the reading service
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
    - Optional arguments omitted from the request instead of sent as None
"""

import asyncio
import random
import logging

import anthropic
from anthropic import (
    APIError,
    APIConnectionError,
    APIStatusError,
    AuthenticationError,
    BadRequestError,
    PermissionDeniedError,
    RateLimitError,
    APITimeoutError,
    InternalServerError,
)

from thaiat.core.errors import OracleAPIError

logger = logging.getLogger(__name__)

# OverloadedError (HTTP 529) is not re-exported by every SDK release;
# detect via status code on APIStatusError instead of a private import.
_OVERLOADED_STATUS = 529


def _is_overloaded(e: APIError) -> bool:
    """Check if error is Anthropic 529 Overloaded."""
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


class ResilientAnthropicClient:
    """Wraps Anthropic client with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 0,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 120,
    ):
        # SDK-level retries disabled: this wrapper owns the retry policy
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
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
        tool_choice: dict | None = None,
        temperature: float | None = None,
    ):
        """Create message with automatic retry on transient failures."""
        kwargs: dict = {
            "model": model, "max_tokens": max_tokens, "messages": messages,
        }
        if system is not None:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = tools
        if tool_choice is not None:
            kwargs["tool_choice"] = tool_choice
        if temperature is not None:
            kwargs["temperature"] = temperature

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.messages.create(**kwargs)
                self._log_success(response, attempt)
                return response

            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt)

            except APITimeoutError:
                raise OracleAPIError(
                    "API timeout", "timeout",
                )

            except (APIConnectionError, InternalServerError) as e:
                await self._handle_transient_error(e, attempt)

            except BadRequestError as e:
                raise OracleAPIError(
                    str(e), "bad_request",
                )

            except (AuthenticationError, PermissionDeniedError) as e:
                raise OracleAPIError(
                    str(e), "permission",
                )

            except APIError as e:
                if _is_overloaded(e):
                    await self._handle_transient_error(e, attempt)
                    continue
                raise OracleAPIError(
                    str(e), "client_error",
                )

            except Exception as e:
                logger.error(
                    f"Unexpected Anthropic error: {e}", exc_info=True,
                )
                raise OracleAPIError(
                    str(e), "unknown",
                )

    def _log_success(self, response, attempt: int) -> None:
        """Log successful API call with token usage."""
        usage = response.usage
        logger.info(
            "Anthropic API success",
            extra={
                "attempt": attempt + 1,
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int,
    ) -> None:
        """Handle rate limit error with retry or raise."""
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise OracleAPIError(
                "Rate limit exceeded",
                "rate_limit",
                retry_after_ms=retry_after_ms,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise OracleAPIError(
                f"Transient failure after {attempt + 1} attempt(s): {e}",
                "connection_error",
            )
        delay = self._backoff(attempt)
        logger.warning(f"Transient error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        val = response.headers.get("retry-after")
        try:
            return int(float(val) * 1000) if val else None
        except ValueError:
            return None
