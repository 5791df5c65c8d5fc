# src/llm_roles/llms/openai.py

import logging
from collections.abc import AsyncGenerator
from time import monotonic
from typing import Any

from openai import NOT_GIVEN, AsyncOpenAI

from ._openai_compat import convert_messages, parse_chat_completion
from ._tool_schema import tools_to_openai_schema
from .base import ChatRequest, LLMResponse, PricingInfo, Provider, SamplingParams
from .pricing import get_pricing
from .streaming import StreamStats

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """OpenAI chat-completions adapter.

    One network attempt per call. The SDK's own retries are disabled so
    the client's retry policy is the only one in effect.
    """

    provider = Provider.OPENAI

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        base_url: str | None = None,
        timeout: float = 60.0,
    ):
        self._client = AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )
        self.model = model
        logger.info(
            "Initialized OpenAIAdapter with model=%s, timeout=%s", model, timeout
        )

    def _build_params(
        self, request: ChatRequest, params: SamplingParams
    ) -> dict[str, Any]:
        # Convert to provider format (internal only - never leaks)
        return {
            "model": self.model,
            "messages": convert_messages(request.messages),
            "tools": tools_to_openai_schema(request.tools) if request.tools else NOT_GIVEN,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "top_p": params.top_p if params.top_p is not None else NOT_GIVEN,
        }

    async def complete(
        self, request: ChatRequest, params: SamplingParams
    ) -> LLMResponse:
        start = monotonic()
        raw = await self._client.chat.completions.create(
            **self._build_params(request, params)
        )
        elapsed_ms = 1000 * (monotonic() - start)
        # Normalize immediately - provider objects never escape
        return parse_chat_completion(raw.model_dump(), elapsed_ms)

    async def stream(
        self, request: ChatRequest, params: SamplingParams, stats: StreamStats
    ) -> AsyncGenerator[str, None]:
        stream = await self._client.chat.completions.create(
            **self._build_params(request, params), stream=True
        )
        try:
            async for chunk in stream:
                stats.chunks += 1
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        finally:
            await stream.close()

    def pricing(self) -> PricingInfo:
        return get_pricing(self.provider, self.model)

    async def aclose(self) -> None:
        await self._client.close()
