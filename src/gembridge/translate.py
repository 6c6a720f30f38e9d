"""Request translation: framework messages and options to backend call parameters.

Everything here is pure. Non-fatal lossy conversions are reported through the
``diagnostics`` collector passed in by the caller; nothing touches the network.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from google.genai import types

from gembridge import diagnostics as diag
from gembridge.diagnostics import Diagnostics, NullDiagnostics
from gembridge.errors import InvalidRoleError, UnsupportedRoleError
from gembridge.models import (
    BACKEND_ROLES,
    BackendRole,
    ContentPart,
    Message,
    PartPolicy,
    RolePolicy,
)
from gembridge.options import GenerationOptions

# Named knobs in the order they are written into the config block.
_CONFIG_KNOBS: tuple[str, ...] = (
    "temperature",
    "top_p",
    "top_k",
    "stop_sequences",
    "seed",
    "presence_penalty",
    "frequency_penalty",
    "max_output_tokens",
    "candidate_count",
    "response_mime_type",
    "response_schema",
    "safety_settings",
)


@dataclass(frozen=True)
class RequestParams:
    """Keyword arguments for a backend ``generate_content`` call."""

    model: str
    contents: list[types.Content]
    #: ``None`` when no knob was set; never an empty dict.
    config: dict[str, Any] | None = None

    def as_kwargs(self) -> dict[str, Any]:
        """Return kwargs for ``client.aio.models.generate_content(...)``."""
        kwargs: dict[str, Any] = {"model": self.model, "contents": self.contents}
        if self.config is not None:
            kwargs["config"] = self.config
        return kwargs


def to_backend_role(
    role: str,
    *,
    policy: RolePolicy = RolePolicy.FAIL,
    diagnostics: Diagnostics | None = None,
) -> BackendRole:
    """Map a framework role onto the backend's two-role model."""
    sink = diagnostics if diagnostics is not None else NullDiagnostics()
    if role == "user":
        return "user"
    if role == "assistant":
        return "model"
    if role == "system":
        sink.emit(
            diag.ROLE_SYSTEM_AS_MODEL,
            "System role has no backend equivalent; mapping to 'model'",
            role=role,
        )
        return "model"
    if role == "tool":
        # Tool results need function-response parts, which are not built here.
        sink.emit(
            diag.ROLE_TOOL_AS_MODEL,
            "Tool role mapped to 'model' as a placeholder; tool results are not translated",
            role=role,
        )
        return "model"

    if policy is RolePolicy.DEFAULT_USER:
        sink.emit(
            diag.ROLE_UNKNOWN_DEFAULTED,
            f"Unsupported role {role!r}; defaulting to 'user'",
            role=role,
        )
        return "user"
    raise UnsupportedRoleError(
        role,
        hint="Use one of 'user', 'assistant', 'system', 'tool', "
        "or configure role_policy='default_user'.",
    )


def to_backend_content(
    message: Message,
    *,
    role_policy: RolePolicy = RolePolicy.FAIL,
    part_policy: PartPolicy = PartPolicy.DROP,
    diagnostics: Diagnostics | None = None,
) -> types.Content:
    """Translate one framework message into backend content."""
    sink = diagnostics if diagnostics is not None else NullDiagnostics()
    role = to_backend_role(message.role, policy=role_policy, diagnostics=sink)
    if role not in BACKEND_ROLES:
        raise InvalidRoleError(role)

    if isinstance(message.content, str):
        return types.Content(role=role, parts=[types.Part(text=message.content)])

    parts: list[types.Part] = []
    for part in message.content:
        text = _convert_part(part, policy=part_policy, diagnostics=sink)
        if text is not None:
            parts.append(types.Part(text=text))

    if not parts:
        # The backend rejects empty parts lists.
        sink.emit(
            diag.PART_EMPTY_FALLBACK,
            f"No supported parts found for message with role {role!r}; "
            "sending an empty text part",
            role=role,
        )
        parts = [types.Part(text="")]

    return types.Content(role=role, parts=parts)


def build_request(
    model: str,
    messages: Sequence[Message],
    options: GenerationOptions | None = None,
    *,
    role_policy: RolePolicy = RolePolicy.FAIL,
    part_policy: PartPolicy = PartPolicy.DROP,
    diagnostics: Diagnostics | None = None,
) -> RequestParams:
    """Build backend call parameters, preserving conversation order."""
    sink = diagnostics if diagnostics is not None else NullDiagnostics()
    contents = [
        to_backend_content(
            message,
            role_policy=role_policy,
            part_policy=part_policy,
            diagnostics=sink,
        )
        for message in messages
    ]
    config = build_config(options, diagnostics=sink)
    return RequestParams(model=model, contents=contents, config=config or None)


def build_config(
    options: GenerationOptions | None,
    *,
    diagnostics: Diagnostics | None = None,
) -> dict[str, Any]:
    """Collect defined knobs into a config dict, extra options merged last."""
    if options is None:
        return {}
    sink = diagnostics if diagnostics is not None else NullDiagnostics()

    config: dict[str, Any] = {}
    for knob in _CONFIG_KNOBS:
        value = (
            options.response_schema_json()
            if knob == "response_schema"
            else getattr(options, knob)
        )
        if value is not None:
            config[knob] = value

    for key, value in (options.extra_options or {}).items():
        if value is None:
            continue
        if key in config:
            sink.emit(
                diag.OPTIONS_DUPLICATE_KEY,
                f"extra_options duplicates named option {key!r}; extra value wins",
                key=key,
            )
        config[key] = value

    return config


def _convert_part(
    part: ContentPart,
    *,
    policy: PartPolicy,
    diagnostics: Diagnostics,
) -> str | None:
    """Return the text to send for *part*, or ``None`` to drop it."""
    part_type, text = _part_fields(part)
    if part_type == "text":
        if text is None:
            return ""
        if isinstance(text, str):
            return text
        reason = f"Text part carries non-string text ({type(text).__name__})"
    else:
        reason = f"Unsupported part type {part_type!r}"

    if policy is PartPolicy.PLACEHOLDER:
        diagnostics.emit(
            diag.PART_PLACEHOLDER,
            f"{reason}; replaced with placeholder text",
            part_type=part_type,
        )
        return f"[unsupported content: {part_type}]"

    diagnostics.emit(
        diag.PART_DROPPED,
        f"{reason}; skipping",
        part_type=part_type,
    )
    return None


def _part_fields(part: ContentPart) -> tuple[str, Any]:
    if isinstance(part, Mapping):
        return str(part.get("type", "unknown")), part.get("text")
    return str(getattr(part, "type", "unknown")), getattr(part, "text", None)
