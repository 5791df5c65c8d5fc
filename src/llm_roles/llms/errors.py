# src/llm_roles/llms/errors.py

"""Exception hierarchy for the LLM client layer.

All errors raised by this package inherit from LLMRolesError, so callers
can catch one type at the boundary and inspect ``recoverable`` to decide
whether trying again later makes sense.
"""

from typing import Any

RECOVERABLE_STATUS_CODES = frozenset({429, 503})


class LLMRolesError(Exception):
    """Base exception for all llm-roles errors."""

    def __init__(
        self,
        message: str = "",
        *,
        recoverable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.recoverable = recoverable
        self.details = details or {}


class ConfigurationError(LLMRolesError):
    """Invalid or missing client configuration. Raised before any network call."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Configuration error: {message}", recoverable=False, details=details
        )


class RequestValidationError(LLMRolesError, ValueError):
    """Malformed request. Raised before any network call, never retried."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Validation error: {message}", recoverable=False, details=details
        )


class RetryExhaustedError(LLMRolesError):
    """Every attempt of a retried operation failed."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(
            f"Request failed after {attempts} attempts: {last_error}",
            recoverable=False,
            details={"attempts": attempts},
        )
        self.attempts = attempts
        self.last_error = last_error


class LLMRequestError(LLMRolesError):
    """A provider call failed.

    Recoverable only when the direct cause carried a rate-limit or
    service-unavailable status. Once retries are exhausted the cause is a
    RetryExhaustedError and the failure is final.
    """

    def __init__(
        self,
        message: str,
        *,
        model: str,
        provider: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"LLM error: {message}",
            recoverable=status_code in RECOVERABLE_STATUS_CODES,
            details={
                "model": model,
                "provider": provider,
                "status_code": status_code,
                **(details or {}),
            },
        )
        self.model = model
        self.provider = provider
        self.status_code = status_code
