"""Generation knobs and per-call options for `generate_text()` / `stream_text()`."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from gembridge.errors import ConfigurationError

if TYPE_CHECKING:
    from gembridge.diagnostics import Diagnostics
    from gembridge.models import FinishEvent, Message, Step

ResponseSchemaInput = type[BaseModel] | dict[str, Any]

StepCallback = Callable[["Step"], Awaitable[None] | None]
FinishCallback = Callable[["FinishEvent"], Awaitable[None] | None]
ErrorCallback = Callable[[BaseException], Awaitable[None] | None]


@dataclass(frozen=True)
class GenerationOptions:
    """Optional generation knobs; unset (``None``) knobs are never sent."""

    temperature: float | None = None
    top_p: float | None = None
    top_k: float | None = None
    stop_sequences: list[str] | None = None
    seed: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    max_output_tokens: int | None = None
    candidate_count: int | None = None
    response_mime_type: str | None = None
    #: Pydantic ``BaseModel`` subclass or JSON Schema dict.
    response_schema: ResponseSchemaInput | None = None
    safety_settings: list[Any] | None = None
    #: Escape hatch for config keys without a named knob. Merged last.
    extra_options: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if self.response_schema is not None and not (
            isinstance(self.response_schema, dict)
            or (
                isinstance(self.response_schema, type)
                and issubclass(self.response_schema, BaseModel)
            )
        ):
            raise ConfigurationError(
                "response_schema must be a Pydantic model class or JSON schema dict",
                hint="Pass a BaseModel subclass or a dict following JSON Schema.",
            )

        if self.max_output_tokens is not None and (
            not isinstance(self.max_output_tokens, int) or self.max_output_tokens <= 0
        ):
            raise ConfigurationError(
                "max_output_tokens must be a positive integer",
                hint="Pass max_output_tokens=1024 or leave it unset.",
            )

        if self.stop_sequences is not None and (
            isinstance(self.stop_sequences, str)
            or not isinstance(self.stop_sequences, Sequence)
        ):
            raise ConfigurationError(
                "stop_sequences must be a list of strings",
                hint="Pass stop_sequences=['END'].",
            )

        if self.extra_options is not None and not isinstance(
            self.extra_options, Mapping
        ):
            raise ConfigurationError(
                "extra_options must be a mapping",
                hint="Pass extra_options={'thinking_config': {...}}.",
            )

    def response_schema_json(self) -> dict[str, Any] | None:
        """Return JSON Schema for the backend API."""
        schema = self.response_schema
        if schema is None:
            return None
        if isinstance(schema, dict):
            return schema
        return schema.model_json_schema()


@dataclass(frozen=True)
class GenerateTextOptions:
    """Arguments for a single-shot `generate_text()` call."""

    model: str
    messages: Sequence[Message]
    provider: GenerationOptions | None = None
    on_step_finish: StepCallback | None = None
    #: Per-call collector; a fresh one is created when omitted.
    diagnostics: Diagnostics | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StreamTextOptions:
    """Arguments for a streaming `stream_text()` call."""

    model: str
    messages: Sequence[Message]
    provider: GenerationOptions | None = None
    on_chunk: StepCallback | None = None
    on_step_finish: StepCallback | None = None
    on_finish: FinishCallback | None = None
    on_error: ErrorCallback | None = None
    diagnostics: Diagnostics | None = field(default=None, compare=False)
