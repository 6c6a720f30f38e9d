"""Google GenAI provider: the framework-facing adapter."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from gembridge.config import Config
from gembridge.diagnostics import Diagnostics
from gembridge.models import Message, PartPolicy, RolePolicy, TextResult
from gembridge.normalize import build_step, normalize_response
from gembridge.options import GenerateTextOptions, StreamTextOptions
from gembridge.stream import StreamNormalizer, StreamResult, TextStream, invoke_callback
from gembridge.translate import RequestParams, build_request, to_backend_content

log = logging.getLogger(__name__)


class GoogleGenAIProvider:
    """Drive Google's Gemini API through a framework-neutral interface.

    The backend client is created once and reused for every call; all
    per-call state lives in the call itself.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        client: Any = None,
        **overrides: Any,
    ) -> None:
        """Create the provider, validating credentials up front.

        Args:
            config: Complete configuration. Mutually exclusive with *overrides*.
            client: Pre-built ``genai.Client`` (or a compatible double).
            **overrides: ``Config`` fields used when *config* is omitted.
        """
        if config is not None and overrides:
            joined = ", ".join(sorted(overrides))
            raise TypeError(f"Pass either config or keyword overrides, not both: {joined}")
        self.config = config if config is not None else Config(**overrides)
        self._client = client if client is not None else self._create_client()

    def _create_client(self) -> Any:
        cfg = self.config
        if cfg.has_vertexai_credentials:
            return genai.Client(
                vertexai=True, project=cfg.project, location=cfg.location
            )
        return genai.Client(api_key=cfg.api_key)

    @property
    def client(self) -> Any:
        """The underlying backend client."""
        return self._client

    @property
    def role_policy(self) -> RolePolicy:
        return self.config.role_policy

    @property
    def part_policy(self) -> PartPolicy:
        return self.config.part_policy

    def get_model_identifier(self, model: str) -> str:
        """Return the backend model identifier for *model*."""
        return model

    def to_message(
        self, message: Message, *, diagnostics: Diagnostics | None = None
    ) -> types.Content:
        """Translate one framework message using the configured policies."""
        return to_backend_content(
            message,
            role_policy=self.role_policy,
            part_policy=self.part_policy,
            diagnostics=diagnostics,
        )

    def build_request(
        self,
        options: GenerateTextOptions | StreamTextOptions,
        *,
        diagnostics: Diagnostics | None = None,
    ) -> RequestParams:
        """Translate call options into backend request parameters."""
        return build_request(
            self.get_model_identifier(options.model),
            options.messages,
            options.provider,
            role_policy=self.role_policy,
            part_policy=self.part_policy,
            diagnostics=diagnostics,
        )

    async def generate_text(self, options: GenerateTextOptions) -> TextResult:
        """Generate a complete response for the conversation."""
        diagnostics = (
            options.diagnostics if options.diagnostics is not None else Diagnostics()
        )
        params = self.build_request(options, diagnostics=diagnostics)

        response = await self._client.aio.models.generate_content(**params.as_kwargs())

        result = normalize_response(response)
        if options.on_step_finish is not None:
            step = build_step(response, usage=result.usage)
            if step is not None:
                await invoke_callback(options.on_step_finish, step)
        return result

    async def stream_text(self, options: StreamTextOptions) -> StreamResult:
        """Start a streaming generation and return its lazy text stream."""
        diagnostics = (
            options.diagnostics if options.diagnostics is not None else Diagnostics()
        )
        params = self.build_request(options, diagnostics=diagnostics)

        upstream = await self._client.aio.models.generate_content_stream(
            **params.as_kwargs()
        )

        normalizer = StreamNormalizer(
            on_chunk=options.on_chunk,
            on_step_finish=options.on_step_finish,
            on_finish=options.on_finish,
            on_error=options.on_error,
            diagnostics=diagnostics,
        )
        log.debug("Opened stream for model %s", params.model)
        return StreamResult(
            provider_stream=upstream,
            text_stream=TextStream(upstream, normalizer),
            diagnostics=diagnostics,
        )

    async def generate_object(self, options: Any) -> Any:
        """Structured-object generation is not supported."""
        raise NotImplementedError(
            "generate_object is not implemented for GoogleGenAIProvider yet."
        )

    async def stream_object(self, options: Any) -> Any:
        """Streaming structured-object generation is not supported."""
        raise NotImplementedError(
            "stream_object is not implemented for GoogleGenAIProvider yet."
        )
