# src/llm_roles/llms/local.py

"""Adapter for locally hosted OpenAI-compatible endpoints (Ollama and friends)."""

import json
import logging
from collections.abc import AsyncGenerator
from time import monotonic
from typing import Any

import httpx

from ._openai_compat import convert_messages, delta_text, parse_chat_completion
from ._tool_schema import tools_to_openai_schema
from .base import ChatRequest, LLMResponse, PricingInfo, Provider, SamplingParams
from .config import DEFAULT_OLLAMA_BASE_URL
from .pricing import FREE
from .streaming import SSE_DONE, SSEDecoder, StreamStats

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


class LocalAdapter:
    """Chat-completions over plain HTTP. Local models are free."""

    provider = Provider.OLLAMA

    def __init__(
        self,
        model: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float = 60.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model
        self.base_url = (base_url or DEFAULT_OLLAMA_BASE_URL).rstrip("/")
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        logger.info(
            "Initialized LocalAdapter with model=%s, base_url=%s, timeout=%s",
            model,
            self.base_url,
            timeout,
        )

    def _build_body(
        self, request: ChatRequest, params: SamplingParams, *, stream: bool
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": convert_messages(request.messages),
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "stream": stream,
        }
        if request.tools:
            body["tools"] = tools_to_openai_schema(request.tools)
        return body

    async def complete(
        self, request: ChatRequest, params: SamplingParams
    ) -> LLMResponse:
        start = monotonic()
        response = await self._client.post(
            CHAT_COMPLETIONS_PATH, json=self._build_body(request, params, stream=False)
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("local endpoint response is not an object")
        elapsed_ms = 1000 * (monotonic() - start)
        return parse_chat_completion(payload, elapsed_ms)

    async def stream(
        self, request: ChatRequest, params: SamplingParams, stats: StreamStats
    ) -> AsyncGenerator[str, None]:
        decoder = SSEDecoder()
        async with self._client.stream(
            "POST",
            CHAT_COMPLETIONS_PATH,
            json=self._build_body(request, params, stream=True),
        ) as response:
            if response.is_error:
                await response.aread()
                response.raise_for_status()
            async for text in response.aiter_text():
                for payload in decoder.feed(text):
                    if payload == SSE_DONE:
                        return
                    fragment = self._decode_chunk(payload, stats)
                    if fragment:
                        yield fragment
            for payload in decoder.flush():
                if payload == SSE_DONE:
                    return
                fragment = self._decode_chunk(payload, stats)
                if fragment:
                    yield fragment

    @staticmethod
    def _decode_chunk(payload: str, stats: StreamStats) -> str | None:
        stats.chunks += 1
        try:
            chunk = json.loads(payload)
            if not isinstance(chunk, dict):
                raise ValueError("stream chunk is not an object")
            return delta_text(chunk)
        except ValueError as exc:
            # JSONDecodeError is a ValueError too
            stats.skipped += 1
            logger.warning("Skipping malformed stream chunk (%s): %.200s", exc, payload)
            return None

    def pricing(self) -> PricingInfo:
        return FREE

    async def aclose(self) -> None:
        await self._client.aclose()
