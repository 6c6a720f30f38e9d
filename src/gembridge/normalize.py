"""Response normalization: backend responses to framework results.

Accepts google-genai ``GenerateContentResponse`` objects as well as plain
mappings shaped like the REST payload (camelCase keys), which keeps the
helpers usable on recorded responses.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gembridge.models import MessageRole, Step, TextResult, UsageInfo


def extract_usage(metadata: Any) -> UsageInfo | None:
    """Convert backend usage metadata into `UsageInfo`.

    Returns ``None`` for missing metadata and for metadata whose counts are
    all zero; the two cases are deliberately indistinguishable.
    """
    if metadata is None:
        return None

    prompt_tokens = _count(_field(metadata, "prompt_token_count", "promptTokenCount"))
    completion_tokens = _count(
        _field(metadata, "candidates_token_count", "candidatesTokenCount")
    )
    total_tokens = _count(_field(metadata, "total_token_count", "totalTokenCount"))

    if prompt_tokens or completion_tokens or total_tokens:
        return UsageInfo(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
        )
    return None


def response_text(response: Any) -> str:
    """Return the response's concatenated text view, ``""`` when absent."""
    text = _field(response, "text", "text")
    if text is None and isinstance(response, Mapping):
        text = _candidate_text(response)
    return text if isinstance(text, str) else ""


def response_id(response: Any) -> str:
    value = _field(response, "response_id", "responseId")
    return value if isinstance(value, str) else ""


def finish_reason(response: Any) -> str | None:
    """Return the first candidate's finish reason as a string."""
    candidates = _field(response, "candidates", "candidates")
    if not candidates:
        return None
    reason = _field(candidates[0], "finish_reason", "finishReason")
    if reason is None:
        return None
    if isinstance(reason, str) and not hasattr(reason, "name"):
        return reason
    # SDK enums: FinishReason.STOP -> "STOP"
    for attr in ("value", "name"):
        value = getattr(reason, attr, None)
        if isinstance(value, str) and value:
            return value
    return str(reason)


def prompt_feedback(response: Any) -> Any:
    return _field(response, "prompt_feedback", "promptFeedback")


def build_step(
    response: Any,
    *,
    usage: UsageInfo | None = None,
    role: MessageRole = "assistant",
) -> Step | None:
    """Synthesize a `Step` from a response or chunk; ``None`` if it has no text."""
    text = response_text(response)
    if not text:
        return None
    return Step(id=response_id(response), content=text, role=role, usage=usage)


def normalize_response(response: Any) -> TextResult:
    """Normalize a complete single-shot response."""
    return TextResult(
        text=response_text(response),
        usage=extract_usage(_field(response, "usage_metadata", "usageMetadata")),
        finish_reason=finish_reason(response),
        provider_response=response,
    )


def chunk_usage(chunk: Any) -> UsageInfo | None:
    return extract_usage(_field(chunk, "usage_metadata", "usageMetadata"))


def _candidate_text(payload: Mapping[str, Any]) -> str | None:
    # REST payloads: candidates[0].content.parts[].text, thought parts excluded
    candidates = payload.get("candidates")
    if not candidates:
        return None
    content = _field(candidates[0], "content", "content")
    parts = _field(content, "parts", "parts") if content is not None else None
    if not parts:
        return None
    texts = []
    for part in parts:
        text = _field(part, "text", "text")
        if isinstance(text, str) and not _field(part, "thought", "thought"):
            texts.append(text)
    return "".join(texts) if texts else None


def _field(obj: Any, attr: str, key: str) -> Any:
    if isinstance(obj, Mapping):
        value = obj.get(key)
        return obj.get(attr) if value is None else value
    return getattr(obj, attr, None)


def _count(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(number, 0)
