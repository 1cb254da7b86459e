"""Ollama local LLM provider (OpenAI-compatible API)."""

import logging
import os
from typing import Any

from career_match.llm.base import LLMProvider
from career_match.llm.openai import chat_completion

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """Ranks with a local Ollama model. No API key; ``OLLAMA_BASE_URL`` picks the host."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for Ollama (OpenAI-compatible API). "
                "Install with: pip install 'career-match[openai]'"
            )
            raise ImportError(msg) from None

        client_options: dict[str, Any] = {
            "base_url": os.environ.get("OLLAMA_BASE_URL", _OLLAMA_BASE_URL),
            "api_key": "ollama",
        }
        if self._request_timeout is not None:
            client_options["timeout"] = self._request_timeout
        client = openai.OpenAI(**client_options)

        use_model = model or self.default_model
        logger.info("Requesting career ranking from Ollama (%s)", use_model)
        return chat_completion(
            client, use_model, prompt, system, self._max_output_tokens, self._json_output
        )
