# src/llm_roles/llms/client.py

import logging
from time import monotonic
from types import TracebackType

from llm_roles.observability import names
from llm_roles.observability.base import MetricsHook, NoOpMetricsHook

from .base import ChatRequest, LLMResponse, PricingInfo, ProviderAdapter, SamplingParams
from .config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, LLMConfig
from .errors import LLMRequestError, RequestValidationError, RetryExhaustedError
from .retry import RetryPolicy, status_code_of
from .streaming import StreamStats, TextStream

logger = logging.getLogger(__name__)


def validate_request(request: ChatRequest) -> None:
    """Reject malformed requests before anything touches the network."""
    if not request.messages:
        raise RequestValidationError("Request must contain at least one message")
    if request.temperature is not None and not 0 <= request.temperature <= 2:
        raise RequestValidationError(
            "Temperature must be between 0 and 2",
            {"temperature": request.temperature},
        )
    if request.max_tokens is not None and request.max_tokens < 1:
        raise RequestValidationError(
            "max_tokens must be positive", {"max_tokens": request.max_tokens}
        )


class LLMClient:
    """One configured provider/model pair.

    Combines a provider adapter with the retry policy and pricing-based
    cost calculation. Does not track usage: that belongs to the role
    manager.
    """

    def __init__(
        self,
        config: LLMConfig,
        adapter: ProviderAdapter,
        *,
        retry_policy: RetryPolicy | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        self.config = config
        self._adapter = adapter
        self._retry_policy = retry_policy or RetryPolicy(
            config.max_attempts, metrics_hook=metrics_hook
        )
        self.metrics_hook = metrics_hook

    @property
    def provider(self) -> str:
        return self._adapter.provider.value

    @property
    def model(self) -> str:
        return self._adapter.model

    def effective_temperature(self, request: ChatRequest) -> float:
        if request.temperature is not None:
            return request.temperature
        if self.config.temperature is not None:
            return self.config.temperature
        return DEFAULT_TEMPERATURE

    def effective_max_tokens(self, request: ChatRequest) -> int:
        if request.max_tokens is not None:
            return request.max_tokens
        if self.config.max_tokens is not None:
            return self.config.max_tokens
        return DEFAULT_MAX_TOKENS

    def _sampling_params(self, request: ChatRequest) -> SamplingParams:
        return SamplingParams(
            temperature=self.effective_temperature(request),
            max_tokens=self.effective_max_tokens(request),
            # Explicit request temperature takes over sampling control
            top_p=self.config.top_p if request.temperature is None else None,
        )

    async def chat(self, request: ChatRequest) -> LLMResponse:
        """Single completion with transport-only retries.

        Raises:
            RequestValidationError: Malformed request. No network call made.
            LLMRequestError: The call failed for good. The cause is the
                provider error, or RetryExhaustedError when retries ran out.
        """
        validate_request(request)
        params = self._sampling_params(request)

        logger.debug(
            "Calling %s: model=%s, messages=%d, tools=%d",
            self.provider,
            self.model,
            len(request.messages),
            len(request.tools) if request.tools else 0,
        )

        start = monotonic()
        try:
            response = await self._retry_policy.call(
                self._adapter.complete, request, params
            )
        except Exception as exc:
            self._record_failure(exc)
            # Exhausted retries are final, so no status that would mark it recoverable
            if isinstance(exc, RetryExhaustedError):
                status_code = None
                details = {
                    "attempts": exc.attempts,
                    "last_status_code": status_code_of(exc.last_error),
                }
            else:
                status_code = status_code_of(exc)
                details = {}
            raise LLMRequestError(
                f"{self.provider} request failed: {exc}",
                model=self.model,
                provider=self.provider,
                status_code=status_code,
                details=details,
            ) from exc

        elapsed_ms = 1000 * (monotonic() - start)
        self._record_success(response, elapsed_ms)

        logger.info(
            "%s completion: finish=%s, tokens=%d, latency=%.0fms",
            self.provider,
            response.finish_reason,
            response.usage.total_tokens,
            elapsed_ms,
        )

        return response

    def chat_stream(self, request: ChatRequest) -> TextStream:
        """Open a lazy stream of text fragments. Never retried.

        Validation happens here, synchronously. The network call is made
        when the first fragment is pulled.
        """
        validate_request(request)
        params = self._sampling_params(request)
        stats = StreamStats()

        logger.debug(
            "Streaming from %s: model=%s, messages=%d",
            self.provider,
            self.model,
            len(request.messages),
        )
        self.metrics_hook.increment(
            names.LLM_STREAMS_TOTAL,
            labels={"provider": self.provider, "model": self.model},
        )

        return TextStream(
            self._adapter.stream(request, params, stats),
            model=self.model,
            provider=self.provider,
            stats=stats,
            metrics_hook=self.metrics_hook,
        )

    def pricing(self) -> PricingInfo:
        return self._adapter.pricing()

    def estimate_cost(self, tokens: int) -> float:
        """A priori estimate assuming an even input/output split."""
        pricing = self.pricing()
        avg_cost_per_1k = (pricing.input + pricing.output) / 2
        return tokens / 1000 * avg_cost_per_1k

    def calculate_cost(self, prompt_tokens: int, completion_tokens: int) -> float:
        pricing = self.pricing()
        return (
            prompt_tokens / 1000 * pricing.input
            + completion_tokens / 1000 * pricing.output
        )

    def _record_success(self, response: LLMResponse, elapsed_ms: float) -> None:
        labels = {"provider": self.provider, "model": self.model}
        self.metrics_hook.record_latency(names.LLM_COMPLETION_DURATION, elapsed_ms)
        self.metrics_hook.increment(names.LLM_REQUESTS_TOTAL, labels=labels)
        self.metrics_hook.increment(
            names.LLM_TOKENS_PROMPT, response.usage.prompt_tokens
        )
        self.metrics_hook.increment(
            names.LLM_TOKENS_COMPLETION, response.usage.completion_tokens
        )
        self.metrics_hook.increment(names.LLM_TOKENS_TOTAL, response.usage.total_tokens)
        self.metrics_hook.record_gauge(
            names.LLM_COST,
            self.calculate_cost(
                response.usage.prompt_tokens, response.usage.completion_tokens
            ),
            labels=labels,
        )

    def _record_failure(self, exc: Exception) -> None:
        logger.error(
            "%s chat request failed: model=%s, error=%s", self.provider, self.model, exc
        )
        self.metrics_hook.increment(
            names.LLM_ERRORS_TOTAL,
            labels={"provider": self.provider, "model": self.model},
        )

    async def aclose(self) -> None:
        await self._adapter.aclose()

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
