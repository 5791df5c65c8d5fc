# src/llm_roles/llms/anthropic.py

import logging
from collections.abc import AsyncGenerator
from time import monotonic
from typing import Any

from anthropic import NOT_GIVEN, AsyncAnthropic

from ._tool_schema import tools_to_anthropic_schema
from .base import (
    ChatRequest,
    FinishReason,
    LLMResponse,
    Message,
    PricingInfo,
    Provider,
    Role,
    SamplingParams,
    ToolCall,
    Usage,
)
from .pricing import get_pricing
from .streaming import StreamStats

logger = logging.getLogger(__name__)

STOP_REASONS: dict[str, FinishReason] = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_calls",
    "refusal": "error",
}


def map_stop_reason(signal: str | None) -> FinishReason:
    if signal in STOP_REASONS:
        return STOP_REASONS[signal]
    logger.debug("Unknown stop reason %r, treating as stop", signal)
    return "stop"


class AnthropicAdapter:
    """Anthropic messages adapter.

    One network attempt per call. System prompt travels as a separate
    parameter, tool traffic as typed content blocks.
    """

    provider = Provider.ANTHROPIC

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        timeout: float = 60.0,
    ):
        self._client = AsyncAnthropic(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )
        self.model = model
        logger.info(
            "Initialized AnthropicAdapter with model=%s, timeout=%s", model, timeout
        )

    def _build_params(
        self, request: ChatRequest, params: SamplingParams
    ) -> dict[str, Any]:
        # Extract system message (Anthropic handles it separately)
        system_content, non_system_messages = self._extract_system(request.messages)
        return {
            "model": self.model,
            "messages": self._convert_messages(non_system_messages),
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,  # Anthropic requires max_tokens
            "system": system_content if system_content else NOT_GIVEN,
            "tools": (
                tools_to_anthropic_schema(request.tools) if request.tools else NOT_GIVEN
            ),
        }

    async def complete(
        self, request: ChatRequest, params: SamplingParams
    ) -> LLMResponse:
        start = monotonic()
        raw = await self._client.messages.create(**self._build_params(request, params))
        elapsed_ms = 1000 * (monotonic() - start)
        # Normalize immediately - provider objects never escape
        return self._normalize_response(raw, elapsed_ms)

    async def stream(
        self, request: ChatRequest, params: SamplingParams, stats: StreamStats
    ) -> AsyncGenerator[str, None]:
        stream = await self._client.messages.create(
            **self._build_params(request, params), stream=True
        )
        try:
            async for event in stream:
                stats.chunks += 1
                if event.type != "content_block_delta":
                    continue
                if event.delta.type == "text_delta":
                    yield event.delta.text
        finally:
            await stream.close()

    def _extract_system(
        self, messages: list[Message]
    ) -> tuple[str | None, list[Message]]:
        """Extract the first system message from the message list.

        Anthropic requires system message as a separate parameter. Later
        system messages have no place in the format and are dropped.
        """
        system_content = None
        non_system = []

        for m in messages:
            if m.role != Role.SYSTEM:
                non_system.append(m)
            elif system_content is None:
                system_content = m.content
            else:
                logger.debug("Dropping additional system message for Anthropic")

        return system_content, non_system

    def _convert_messages(self, messages: list[Message]) -> list[dict]:
        """Convert Message objects to Anthropic format.

        Internal only. Provider format never leaks outside.
        """
        result = []
        for m in messages:
            if m.role == Role.TOOL:
                # Anthropic tool results have a different structure
                result.append(
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "tool_result",
                                "tool_use_id": m.tool_call_id,
                                "content": m.content,
                            }
                        ],
                    }
                )
            elif m.role == Role.ASSISTANT and m.tool_calls:
                blocks: list[dict[str, Any]] = []
                if m.content:
                    blocks.append({"type": "text", "text": m.content})
                blocks.extend(
                    {
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": tc.arguments,
                    }
                    for tc in m.tool_calls
                )
                result.append({"role": "assistant", "content": blocks})
            else:
                result.append({"role": m.role.value, "content": m.content})
        return result

    def _normalize_response(self, raw: Any, latency_ms: float) -> LLMResponse:
        """Normalize Anthropic response to LLMResponse.

        This is the boundary. Raw provider objects stop here.
        """
        # Extract content and tool calls from content blocks
        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []

        for block in raw.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCall(
                        id=block.id,
                        name=block.name,
                        arguments=block.input if isinstance(block.input, dict) else {},
                    )
                )

        finish_reason = map_stop_reason(raw.stop_reason)
        if tool_calls:
            finish_reason = "tool_calls"

        return LLMResponse(
            content="".join(text_parts),
            tool_calls=tool_calls,
            finish_reason=finish_reason,
            usage=Usage(
                prompt_tokens=raw.usage.input_tokens,
                completion_tokens=raw.usage.output_tokens,
                total_tokens=raw.usage.input_tokens + raw.usage.output_tokens,
            ),
            latency_ms=latency_ms,
        )

    def pricing(self) -> PricingInfo:
        return get_pricing(self.provider, self.model)

    async def aclose(self) -> None:
        await self._client.close()
