# tests/unit/llms/test_streaming.py

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest

from llm_roles.llms.errors import LLMRequestError, RequestValidationError
from llm_roles.llms.streaming import SSEDecoder, StreamStats, TextStream


class TestSSEDecoder:
    def test_complete_lines(self) -> None:
        decoder = SSEDecoder()

        assert decoder.feed('data: {"a": 1}\n\ndata: [DONE]\n\n') == ['{"a": 1}', "[DONE]"]

    def test_partial_line_buffered(self) -> None:
        decoder = SSEDecoder()

        assert decoder.feed('data: {"a"') == []
        assert decoder.feed(': 1}\n') == ['{"a": 1}']

    def test_non_data_lines_ignored(self) -> None:
        decoder = SSEDecoder()

        payloads = decoder.feed(": keep-alive\nevent: message\nid: 7\ndata: x\n")

        assert payloads == ["x"]

    def test_crlf_and_missing_space(self) -> None:
        decoder = SSEDecoder()

        assert decoder.feed("data:x\r\ndata:  y \r\n") == ["x", "y"]

    def test_flush_returns_trailing_line(self) -> None:
        decoder = SSEDecoder()
        decoder.feed("data: tail")

        assert decoder.flush() == ["tail"]
        assert decoder.flush() == []

    def test_flush_ignores_non_data_tail(self) -> None:
        decoder = SSEDecoder()
        decoder.feed(": comment")

        assert decoder.flush() == []


async def fragments(
    *items: str, error: Exception | None = None
) -> AsyncGenerator[str, None]:
    for item in items:
        yield item
    if error is not None:
        raise error


def make_stream(source: AsyncGenerator[str, None], **kwargs) -> TextStream:
    return TextStream(
        source, model="gpt-4", provider="openai", stats=StreamStats(), **kwargs
    )


class TestTextStream:
    @pytest.mark.asyncio
    async def test_read_all_concatenates(self) -> None:
        stream = make_stream(fragments("Hel", "lo", " world"))

        assert await stream.read_all() == "Hello world"
        assert stream.closed

    @pytest.mark.asyncio
    async def test_iteration_stops_after_close(self) -> None:
        stream = make_stream(fragments("a", "b", "c"))

        assert await stream.__anext__() == "a"
        await stream.aclose()
        await stream.aclose()

        assert [f async for f in stream] == []

    @pytest.mark.asyncio
    async def test_context_manager_closes_source(self) -> None:
        closed = False

        async def source() -> AsyncGenerator[str, None]:
            nonlocal closed
            try:
                yield "a"
                yield "b"
            finally:
                closed = True

        async with make_stream(source()) as stream:
            assert await stream.__anext__() == "a"

        assert stream.closed
        assert closed

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self) -> None:
        metrics_hook = MagicMock()
        original = ConnectionResetError("peer went away")
        stream = make_stream(
            fragments("partial", error=original), metrics_hook=metrics_hook
        )

        assert await stream.__anext__() == "partial"
        with pytest.raises(LLMRequestError) as exc_info:
            await stream.__anext__()

        error = exc_info.value
        assert error.__cause__ is original
        assert error.status_code is None
        assert error.recoverable is False
        assert error.provider == "openai"
        assert stream.closed
        metrics_hook.increment.assert_called_once_with(
            "llm_errors_total", labels={"provider": "openai", "model": "gpt-4"}
        )

    @pytest.mark.asyncio
    async def test_package_errors_pass_through(self) -> None:
        original = RequestValidationError("bad")
        stream = make_stream(fragments(error=original))

        with pytest.raises(RequestValidationError) as exc_info:
            await stream.read_all()

        assert exc_info.value is original
        assert stream.closed

    @pytest.mark.asyncio
    async def test_skipped_chunks_reported_on_close(self) -> None:
        metrics_hook = MagicMock()
        stats = StreamStats(chunks=5, skipped=2)
        stream = TextStream(
            fragments("x"),
            model="llama3",
            provider="ollama",
            stats=stats,
            metrics_hook=metrics_hook,
        )

        await stream.read_all()

        metrics_hook.increment.assert_called_once_with(
            "llm_stream_chunks_skipped",
            2,
            labels={"provider": "ollama", "model": "llama3"},
        )
