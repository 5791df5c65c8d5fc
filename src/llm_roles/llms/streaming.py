# src/llm_roles/llms/streaming.py

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from types import TracebackType

from llm_roles.observability import names
from llm_roles.observability.base import MetricsHook, NoOpMetricsHook

from .errors import LLMRequestError, LLMRolesError
from .retry import status_code_of

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"


@dataclass
class StreamStats:
    """Counters for one stream. Mutated by the adapter while it decodes."""

    chunks: int = 0
    skipped: int = 0


class SSEDecoder:
    """Incremental decoder for ``data: <payload>`` server-sent-event lines.

    Network reads can split a line anywhere, so the trailing partial line
    is buffered until the next feed.
    """

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, text: str) -> list[str]:
        """Return the data payloads of every line completed by ``text``."""
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return [p for p in map(self._payload, lines) if p is not None]

    def flush(self) -> list[str]:
        """Return the payload of a final line that had no trailing newline."""
        rest, self._buffer = self._buffer, ""
        payload = self._payload(rest)
        return [payload] if payload is not None else []

    @staticmethod
    def _payload(line: str) -> str | None:
        line = line.strip()
        if not line.startswith(SSE_DATA_PREFIX):
            return None
        return line[len(SSE_DATA_PREFIX) :].strip()


class TextStream:
    """Pull-based stream of text fragments from one model call.

    Nothing is sent until the first fragment is requested. Closing the
    stream (``aclose`` or leaving ``async with``) releases the transport.
    Transport failures close the stream and surface as LLMRequestError.
    """

    def __init__(
        self,
        source: AsyncGenerator[str, None],
        *,
        model: str,
        provider: str,
        stats: StreamStats,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        self._source = source
        self._model = model
        self._provider = provider
        self.stats = stats
        self.metrics_hook = metrics_hook
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "TextStream":
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        try:
            fragment = await self._source.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except LLMRolesError:
            await self.aclose()
            raise
        except Exception as exc:
            await self.aclose()
            logger.error(
                "%s streaming request failed: model=%s, error=%s",
                self._provider,
                self._model,
                exc,
            )
            self.metrics_hook.increment(
                names.LLM_ERRORS_TOTAL,
                labels={"provider": self._provider, "model": self._model},
            )
            raise LLMRequestError(
                f"{self._provider} streaming request failed: {exc}",
                model=self._model,
                provider=self._provider,
                status_code=status_code_of(exc),
            ) from exc
        return fragment

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._source.aclose()
        if self.stats.skipped:
            self.metrics_hook.increment(
                names.LLM_STREAM_CHUNKS_SKIPPED,
                self.stats.skipped,
                labels={"provider": self._provider, "model": self._model},
            )
        logger.debug(
            "Stream closed: provider=%s, chunks=%d, skipped=%d",
            self._provider,
            self.stats.chunks,
            self.stats.skipped,
        )

    async def read_all(self) -> str:
        """Consume the rest of the stream and return the concatenated text."""
        return "".join([fragment async for fragment in self])

    async def __aenter__(self) -> "TextStream":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
