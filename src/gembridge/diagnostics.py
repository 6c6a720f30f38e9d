"""Structured diagnostics for non-fatal translation and streaming conditions.

Lossy role mappings, dropped content parts, and prompt-feedback signals do not
abort a call. They are reported here instead, so callers can inspect them per
call without capturing process-wide output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Protocol, runtime_checkable

log = logging.getLogger(__name__)

# Codes emitted by the library (exported so callers can match on them)
ROLE_SYSTEM_AS_MODEL = "role.system_as_model"
ROLE_TOOL_AS_MODEL = "role.tool_as_model"
ROLE_UNKNOWN_DEFAULTED = "role.unknown_defaulted"
PART_DROPPED = "part.dropped"
PART_PLACEHOLDER = "part.placeholder"
PART_EMPTY_FALLBACK = "part.empty_fallback"
OPTIONS_DUPLICATE_KEY = "options.duplicate_key"
STREAM_PROMPT_FEEDBACK = "stream.prompt_feedback"
STREAM_CANCELLED = "stream.cancelled"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal condition observed during a call."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class DiagnosticSink(Protocol):
    """Duck-typed protocol for diagnostic consumers."""

    def emit(self, diagnostic: Diagnostic) -> None: ...  # noqa: D102


class Diagnostics:
    """Per-call diagnostic collector.

    Records are kept in order of emission and, when a sink is attached,
    forwarded to it. Every record is also logged at WARNING so that the
    library stays observable through standard logging configuration.
    """

    def __init__(self, sink: DiagnosticSink | None = None) -> None:
        self._sink = sink
        self._records: list[Diagnostic] = []

    def emit(self, code: str, message: str, **details: Any) -> Diagnostic:
        """Record a diagnostic and return it."""
        diagnostic = Diagnostic(code=code, message=message, details=details)
        self._records.append(diagnostic)
        log.warning("%s: %s", code, message)
        if self._sink is not None:
            self._sink.emit(diagnostic)
        return diagnostic

    @property
    def records(self) -> tuple[Diagnostic, ...]:
        """Diagnostics emitted so far, oldest first."""
        return tuple(self._records)

    def codes(self) -> list[str]:
        """Return emitted codes in order."""
        return [d.code for d in self._records]

    def __len__(self) -> int:
        return len(self._records)


class NullDiagnostics(Diagnostics):
    """Collector that discards everything."""

    def emit(self, code: str, message: str, **details: Any) -> Diagnostic:  # noqa: D102
        return Diagnostic(code=code, message=message, details=details)
