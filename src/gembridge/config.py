"""Configuration: frozen Config with explicit credential requirements."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv

from gembridge.errors import ConfigurationError
from gembridge.models import PartPolicy, RolePolicy

load_dotenv()

# Checked in order when api_key is not passed explicitly
_API_KEY_ENV_VARS: tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
_VERTEXAI_ENV_VAR = "GOOGLE_GENAI_USE_VERTEXAI"
_PROJECT_ENV_VAR = "GOOGLE_CLOUD_PROJECT"
_LOCATION_ENV_VAR = "GOOGLE_CLOUD_LOCATION"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a `GoogleGenAIProvider`.

    Either an API key or a complete Vertex AI triple (``vertexai=True`` with
    ``project`` and ``location``) is required. Missing values are resolved
    from standard environment variables.

    Example:
        config = Config(api_key="...")
        # or, for Vertex AI:
        config = Config(vertexai=True, project="my-project", location="us-central1")
    """

    #: Auto-resolved from ``GEMINI_API_KEY`` or ``GOOGLE_API_KEY`` when *None*.
    api_key: str | None = None
    #: Auto-resolved from ``GOOGLE_GENAI_USE_VERTEXAI`` when *None*.
    vertexai: bool | None = None
    project: str | None = None
    location: str | None = None
    role_policy: RolePolicy = RolePolicy.FAIL
    part_policy: PartPolicy = PartPolicy.DROP

    def __post_init__(self) -> None:
        """Auto-resolve credentials and validate configuration."""
        object.__setattr__(
            self, "role_policy", _coerce_policy(RolePolicy, self.role_policy)
        )
        object.__setattr__(
            self, "part_policy", _coerce_policy(PartPolicy, self.part_policy)
        )

        if self.vertexai is None:
            flag = os.environ.get(_VERTEXAI_ENV_VAR, "")
            object.__setattr__(self, "vertexai", flag.strip().lower() in _TRUTHY)
        if self.project is None:
            object.__setattr__(self, "project", os.environ.get(_PROJECT_ENV_VAR))
        if self.location is None:
            object.__setattr__(self, "location", os.environ.get(_LOCATION_ENV_VAR))

        # A complete Vertex AI triple is not overridden by an ambient API key.
        if self.api_key is None and not self.has_vertexai_credentials:
            for env_var in _API_KEY_ENV_VARS:
                resolved_key = os.environ.get(env_var)
                if resolved_key:
                    object.__setattr__(self, "api_key", resolved_key)
                    break

        if not self.api_key and not self.has_vertexai_credentials:
            raise ConfigurationError(
                "Google GenAI API key is required, or if using Vertex AI, "
                "both project and location must be specified",
                hint=(
                    "Set GEMINI_API_KEY or pass api_key=..., or pass "
                    "vertexai=True with project=... and location=..."
                ),
            )

    @property
    def has_vertexai_credentials(self) -> bool:
        """Whether the alternate-endpoint triple is complete."""
        return bool(self.vertexai and self.project and self.location)

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(api_key={'[REDACTED]' if self.api_key else None}, "
            f"vertexai={self.vertexai}, project={self.project!r}, "
            f"location={self.location!r}, role_policy={self.role_policy.value!r}, "
            f"part_policy={self.part_policy.value!r})"
        )

    __repr__ = __str__


def _coerce_policy(enum_cls: type[Any], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise ConfigurationError(
            f"Unknown {enum_cls.__name__}: {value!r}",
            hint=f"Supported values: {allowed}",
        ) from None
