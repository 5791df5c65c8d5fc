# src/llm_roles/llms/retry.py

"""Exponential-backoff retry for single network attempts.

Transport only: rate limits, unavailable services, timeouts and reset
connections are retried. Everything else is the caller's problem.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import anthropic
import httpx
import openai
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from llm_roles.observability import names
from llm_roles.observability.base import MetricsHook, NoOpMetricsHook

from .errors import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 503})

CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    openai.APIConnectionError,  # includes APITimeoutError
    anthropic.APIConnectionError,
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    TimeoutError,
    ConnectionResetError,
)


def status_code_of(exc: BaseException) -> int | None:
    """HTTP status carried by an error, if any."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_retryable_error(exc: BaseException) -> bool:
    if status_code_of(exc) in RETRYABLE_STATUS_CODES:
        return True
    return isinstance(exc, CONNECTION_ERRORS)


class RetryPolicy:
    """Retry an async operation with 1s, 2s, 4s, ... backoff.

    Non-retryable errors propagate unchanged after the first attempt.
    When every attempt fails, RetryExhaustedError is raised from the
    last error.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self._sleep = sleep
        self.metrics_hook = metrics_hook

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "LLM request failed, retrying in %.0fms (attempt %d/%d): %s",
            delay * 1000,
            retry_state.attempt_number,
            self.max_attempts,
            exc,
        )
        self.metrics_hook.increment(names.LLM_RETRIES_TOTAL)

    async def call(
        self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=60),
            retry=retry_if_exception(is_retryable_error),
            before_sleep=self._before_sleep,
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await fn(*args, **kwargs)
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            raise RetryExhaustedError(
                exc.last_attempt.attempt_number, last_error  # type: ignore[arg-type]
            ) from last_error
