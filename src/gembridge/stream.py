"""Streaming normalization: per-call accumulation state and the text stream.

A `StreamNormalizer` owns the mutable state of exactly one streaming call.
`TextStream` pulls backend chunks one at a time, feeds them through the
normalizer, and yields the non-empty text fragments. Callbacks are awaited
before the next chunk is requested, so they never overlap for one stream.

The google-genai async iterator has no cancellation primitive. Cancelling a
`TextStream` stops local consumption and callback delivery, and closes the
upstream iterator when it exposes ``aclose``/``close``; the backend may keep
producing regardless.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
import inspect
import logging
from typing import TYPE_CHECKING, Any

from gembridge import diagnostics as diag
from gembridge.diagnostics import Diagnostics, NullDiagnostics
from gembridge.errors import StreamProcessingError
from gembridge.models import FinishEvent, Step, UsageInfo
from gembridge.normalize import build_step, chunk_usage, prompt_feedback, response_text

if TYPE_CHECKING:
    from gembridge.options import ErrorCallback, FinishCallback, StepCallback

log = logging.getLogger(__name__)


class StreamStatus(str, Enum):
    """Lifecycle of one streaming call."""

    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
    CANCELLED = "cancelled"


@dataclass
class StreamState:
    """Mutable accumulation state scoped to a single stream."""

    accumulated_text: str = ""
    final_usage: UsageInfo | None = None
    status: StreamStatus = StreamStatus.OPEN


@dataclass
class StreamNormalizer:
    """Apply chunk, completion, failure, and cancellation transitions."""

    on_chunk: StepCallback | None = None
    on_step_finish: StepCallback | None = None
    on_finish: FinishCallback | None = None
    on_error: ErrorCallback | None = None
    diagnostics: Diagnostics = field(default_factory=NullDiagnostics)
    state: StreamState = field(default_factory=StreamState)

    @property
    def is_open(self) -> bool:
        return self.state.status is StreamStatus.OPEN

    @property
    def is_active(self) -> bool:
        """Open, or delivering the terminal callbacks."""
        return self.state.status in (StreamStatus.OPEN, StreamStatus.CLOSING)

    async def process_chunk(self, chunk: Any) -> str | None:
        """Fold one backend chunk into the state; return its text, if any.

        Chunks arriving after the stream left ``OPEN`` are discarded.
        """
        if not self.is_open:
            return None

        usage = chunk_usage(chunk)
        if usage is not None:
            # Final usage arrives on the last chunk; later values win.
            self.state.final_usage = usage

        feedback = prompt_feedback(chunk)
        if feedback is not None:
            self.diagnostics.emit(
                diag.STREAM_PROMPT_FEEDBACK,
                f"Prompt feedback received: {feedback}",
                feedback=feedback,
            )

        text = response_text(chunk)
        if not text:
            return None

        self.state.accumulated_text += text
        if self.on_chunk is not None:
            step = build_step(chunk, usage=usage)
            if step is not None:
                await invoke_callback(self.on_chunk, step)
        return text

    async def finalize(self) -> None:
        """Deliver the terminal step and completion event, then close."""
        if not self.is_open:
            return
        # Cancellation is no longer possible once completion has begun.
        self.state.status = StreamStatus.CLOSING
        if self.on_step_finish is not None:
            final_step = Step(
                id="",
                content=self.state.accumulated_text,
                usage=self.state.final_usage,
            )
            await invoke_callback(self.on_step_finish, final_step)
        if self.on_finish is not None:
            await invoke_callback(
                self.on_finish, FinishEvent(text=self.state.accumulated_text)
            )
        self.state.status = StreamStatus.CLOSED

    async def fail(self, exc: BaseException) -> None:
        """Close after an error and report it to ``on_error``."""
        if not self.is_active:
            return
        self.state.status = StreamStatus.CLOSED
        log.debug("Stream processing failed: %s", exc)
        if self.on_error is not None:
            await invoke_callback(self.on_error, exc)

    def cancel(self, reason: Any = None) -> bool:
        """Mark the stream cancelled; return whether this call did so."""
        if not self.is_open:
            return False
        self.state.status = StreamStatus.CANCELLED
        self.diagnostics.emit(
            diag.STREAM_CANCELLED,
            f"Stream cancelled: {reason}"
            if reason is not None
            else "Stream cancelled",
            reason=reason,
        )
        return True


class TextStream(AsyncIterator[str]):
    """Single-consumption async iterator over generated text fragments."""

    def __init__(self, upstream: Any, normalizer: StreamNormalizer) -> None:
        self._upstream = upstream
        self._iterator = _coerce_async_iterator(upstream)
        self._normalizer = normalizer
        self._started = False
        self._upstream_closed = False
        self._close_lock = asyncio.Lock()

    @property
    def state(self) -> StreamState:
        return self._normalizer.state

    def __aiter__(self) -> TextStream:
        if self._started:
            raise StreamProcessingError(
                "Text stream can only be consumed once",
                hint="Collect fragments during the first iteration.",
            )
        self._started = True
        return self

    async def __anext__(self) -> str:
        while True:
            if not self._normalizer.is_open:
                raise StopAsyncIteration

            try:
                chunk = await self._iterator.__anext__()
            except StopAsyncIteration:
                await self._complete()
                raise
            except asyncio.CancelledError:
                await self.aclose("consumer task cancelled")
                raise
            except Exception as exc:
                raise await self._fail(exc) from exc

            try:
                text = await self._normalizer.process_chunk(chunk)
            except asyncio.CancelledError:
                await self.aclose("consumer task cancelled")
                raise
            except Exception as exc:
                raise await self._fail(exc) from exc
            if text:
                return text

    async def collect(self) -> str:
        """Drain the stream and return the accumulated text."""
        async for _ in self:
            pass
        return self.state.accumulated_text

    async def aclose(self, reason: Any = None) -> None:
        """Cancel local consumption (best-effort upstream close)."""
        self._normalizer.cancel(reason)
        await self._close_upstream()

    cancel = aclose

    async def _complete(self) -> None:
        try:
            await self._normalizer.finalize()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise await self._fail(exc) from exc

    async def _fail(self, exc: Exception) -> StreamProcessingError:
        try:
            await self._normalizer.fail(exc)
        except Exception:
            log.warning("on_error callback raised while handling %r", exc, exc_info=True)
        finally:
            await self._close_upstream()
        return StreamProcessingError(
            f"Error during Google GenAI stream processing: {exc}"
        )

    async def _close_upstream(self) -> None:
        async with self._close_lock:
            if self._upstream_closed:
                return
            self._upstream_closed = True
            for closer_name in ("aclose", "close"):
                closer = getattr(self._upstream, closer_name, None)
                if closer is None or not callable(closer):
                    continue
                try:
                    result = closer()
                    if inspect.isawaitable(result):
                        await result
                except RuntimeError as exc:
                    # An async generator cannot be closed while another task awaits it.
                    log.debug("Upstream stream close skipped: %s", exc)
                return


@dataclass(frozen=True)
class StreamResult:
    """Return value of `stream_text()`.

    ``provider_stream`` and ``text_stream`` share one upstream iterator;
    consume only one of them.
    """

    provider_stream: Any
    text_stream: TextStream
    diagnostics: Diagnostics = field(default_factory=NullDiagnostics, compare=False)


async def invoke_callback(callback: Any, payload: Any) -> None:
    result = callback(payload)
    if inspect.isawaitable(result):
        await result


def _coerce_async_iterator(stream: Any) -> AsyncIterator[Any]:
    iterator_factory = getattr(stream, "__aiter__", None)
    if iterator_factory is None or not callable(iterator_factory):
        msg = "Backend stream must support async iteration"
        raise StreamProcessingError(msg)
    iterator = iterator_factory()
    anext = getattr(iterator, "__anext__", None)
    if anext is None or not callable(anext):
        msg = "Backend stream iterator must define '__anext__'"
        raise StreamProcessingError(msg)
    return iterator
