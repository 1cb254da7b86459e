"""Abstract base class for LLM providers."""

import os
from abc import ABC, abstractmethod

from career_match.pipeline.prompt import RANKING_SYSTEM_PROMPT

# Used when a caller passes no system prompt.
SYSTEM_PROMPT = RANKING_SYSTEM_PROMPT

DEFAULT_MAX_OUTPUT_TOKENS = 4096


class LLMProvider(ABC):
    """Base class that every LLM provider must implement.

    Generation options shared by all providers:
        max_output_tokens: Upper bound on the response length.
        json_output: Ask the API for a JSON-only answer where it supports that.
        request_timeout: SDK-level timeout in seconds (None keeps the SDK default).
            Callers racing a deadline still apply their own; this one bounds the
            worker thread that keeps running after the caller gave up.
    """

    def __init__(
        self,
        *,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
        json_output: bool = True,
        request_timeout: float | None = None,
    ) -> None:
        self._max_output_tokens = max_output_tokens
        self._json_output = json_output
        self._request_timeout = request_timeout

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'gemini')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Blocking; callers that need a deadline run it in a worker thread.

        Args:
            prompt: The user prompt (profile plus catalog summary).
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.

        Returns:
            Raw text response from the LLM (expected, not guaranteed, to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    def _api_key(self) -> str:
        """Read the API key named by ``env_var``. Raises ValueError when unset."""
        name = self.env_var
        key = os.environ.get(name) if name else None
        if not key:
            msg = f"{name} environment variable is required"
            raise ValueError(msg)
        return key
