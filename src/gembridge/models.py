"""Framework-neutral value types exchanged with the adapter."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

MessageRole = Literal["user", "assistant", "system", "tool"]
BackendRole = Literal["user", "model"]

BACKEND_ROLES: frozenset[str] = frozenset({"user", "model"})


class RolePolicy(str, Enum):
    """What to do with a message role that has no backend mapping."""

    FAIL = "fail"
    DEFAULT_USER = "default_user"


class PartPolicy(str, Enum):
    """What to do with content parts other than text."""

    DROP = "drop"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class TextPart:
    """A plain text content part."""

    text: str
    type: Literal["text"] = "text"


@dataclass(frozen=True)
class ImagePart:
    """An image content part (not translated; see ``PartPolicy``)."""

    data: str
    mime_type: str | None = None
    type: Literal["image"] = "image"


ContentPart = TextPart | ImagePart | Mapping[str, Any]


@dataclass(frozen=True)
class Message:
    """A single conversational turn, as supplied by the agent framework."""

    role: str
    content: str | Sequence[ContentPart]


@dataclass(frozen=True)
class UsageInfo:
    """Token accounting for one response or chunk."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class Step:
    """One observable unit of produced content surfaced through callbacks."""

    id: str
    content: str
    role: MessageRole = "assistant"
    usage: UsageInfo | None = None
    type: Literal["text"] = "text"


@dataclass(frozen=True)
class FinishEvent:
    """Completion payload delivered to ``on_finish`` once a stream ends."""

    text: str


@dataclass(frozen=True)
class TextResult:
    """Normalized result of a single-shot generation."""

    text: str
    usage: UsageInfo | None = None
    finish_reason: str | None = None
    #: The untouched backend response object.
    provider_response: Any = None
