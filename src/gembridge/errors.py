"""Exception hierarchy for gembridge."""

from __future__ import annotations


class GemBridgeError(Exception):
    """Base exception for all gembridge errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(GemBridgeError):
    """Adapter configuration is incomplete or invalid."""


class TranslationError(GemBridgeError):
    """A framework message could not be translated into backend content.

    Raised synchronously, before any network call is made.
    """


class UnsupportedRoleError(TranslationError):
    """A message role has no backend equivalent under the active role policy."""

    def __init__(self, role: object, *, hint: str | None = None) -> None:
        super().__init__(f"Unsupported message role: {role!r}", hint=hint)
        self.role = role


class InvalidRoleError(TranslationError):
    """Role mapping produced something other than ``user`` or ``model``."""

    def __init__(self, role: object) -> None:
        super().__init__(
            f"Invalid backend role {role!r}; expected 'user' or 'model'",
        )
        self.role = role


class StreamProcessingError(GemBridgeError):
    """Consuming the backend's incremental response failed.

    The original exception is attached as ``__cause__``.
    """
