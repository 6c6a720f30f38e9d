"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: responses are real google-genai types
so the normalizers see exactly what the SDK hands back.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from google.genai import types


def make_response(
    text: str | None = None,
    *,
    usage: tuple[int, int, int] | None = None,
    finish_reason: types.FinishReason | None = None,
    response_id: str | None = None,
    prompt_feedback: types.GenerateContentResponsePromptFeedback | None = None,
) -> types.GenerateContentResponse:
    """Build a GenerateContentResponse (or stream chunk)."""
    candidates = None
    if text is not None or finish_reason is not None:
        parts = [types.Part(text=text)] if text is not None else None
        candidates = [
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                finish_reason=finish_reason,
            )
        ]
    usage_metadata = None
    if usage is not None:
        prompt, completion, total = usage
        usage_metadata = types.GenerateContentResponseUsageMetadata(
            prompt_token_count=prompt,
            candidates_token_count=completion,
            total_token_count=total,
        )
    return types.GenerateContentResponse(
        candidates=candidates,
        usage_metadata=usage_metadata,
        response_id=response_id,
        prompt_feedback=prompt_feedback,
    )


class ScriptedStream:
    """Async iterator over scripted chunks; exceptions in the script are raised."""

    def __init__(self, script: list[Any]) -> None:
        self._script = list(script)
        self.pulled = 0
        self.closed = False

    def __aiter__(self) -> ScriptedStream:
        return self

    async def __anext__(self) -> Any:
        if self.closed or not self._script:
            raise StopAsyncIteration
        item = self._script.pop(0)
        self.pulled += 1
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class _FakeModels:
    responses: list[Any] = field(default_factory=list)
    stream_scripts: list[list[Any]] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)
    stream_calls: list[dict[str, Any]] = field(default_factory=list)
    streams: list[ScriptedStream] = field(default_factory=list)

    async def generate_content(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        item = self.responses.pop(0) if self.responses else make_response("ok")
        if isinstance(item, BaseException):
            raise item
        return item

    async def generate_content_stream(self, **kwargs: Any) -> AsyncIterator[Any]:
        self.stream_calls.append(kwargs)
        script = self.stream_scripts.pop(0) if self.stream_scripts else []
        stream = ScriptedStream(script)
        self.streams.append(stream)
        return stream


@dataclass
class _FakeAio:
    models: _FakeModels = field(default_factory=_FakeModels)


@dataclass
class FakeClient:
    """Stand-in for ``genai.Client`` exposing ``client.aio.models``."""

    aio: _FakeAio = field(default_factory=_FakeAio)

    @property
    def models(self) -> _FakeModels:
        return self.aio.models


@dataclass
class Recorder:
    """Collects callback invocations in order, tagged by callback name."""

    events: list[tuple[str, Any]] = field(default_factory=list)

    def hook(self, name: str) -> Any:
        def _record(payload: Any) -> None:
            self.events.append((name, payload))

        return _record

    def async_hook(self, name: str) -> Any:
        async def _record(payload: Any) -> None:
            self.events.append((name, payload))

        return _record

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> list[Any]:
        return [payload for event, payload in self.events if event == name]
