"""gembridge: drive Google's Gemini API from a generic agent framework.

Public API:
    - GoogleGenAIProvider: generate_text() / stream_text() adapter
    - Config: credentials and translation policies
    - Message, TextPart, GenerationOptions: request-side types
    - TextResult, StreamResult, Step, UsageInfo: response-side types
"""

from __future__ import annotations

import logging

from gembridge.config import Config
from gembridge.diagnostics import Diagnostic, Diagnostics, DiagnosticSink
from gembridge.errors import (
    ConfigurationError,
    GemBridgeError,
    InvalidRoleError,
    StreamProcessingError,
    TranslationError,
    UnsupportedRoleError,
)
from gembridge.models import (
    FinishEvent,
    ImagePart,
    Message,
    PartPolicy,
    RolePolicy,
    Step,
    TextPart,
    TextResult,
    UsageInfo,
)
from gembridge.options import GenerateTextOptions, GenerationOptions, StreamTextOptions
from gembridge.provider import GoogleGenAIProvider
from gembridge.stream import StreamResult, StreamStatus, TextStream

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("gembridge")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("gembridge").addHandler(logging.NullHandler())

__all__ = [
    "Config",
    "ConfigurationError",
    "Diagnostic",
    "DiagnosticSink",
    "Diagnostics",
    "FinishEvent",
    "GemBridgeError",
    "GenerateTextOptions",
    "GenerationOptions",
    "GoogleGenAIProvider",
    "ImagePart",
    "InvalidRoleError",
    "Message",
    "PartPolicy",
    "RolePolicy",
    "Step",
    "StreamProcessingError",
    "StreamResult",
    "StreamStatus",
    "StreamTextOptions",
    "TextPart",
    "TextResult",
    "TextStream",
    "TranslationError",
    "UnsupportedRoleError",
    "UsageInfo",
]
