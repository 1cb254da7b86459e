"""OpenAI LLM provider."""

import logging
from typing import Any

from career_match.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


def chat_completion(
    client: Any,
    model: str,
    prompt: str,
    system: str | None,
    max_tokens: int,
    json_output: bool,
) -> str:
    """Run one chat completion and return its text (shared with Ollama)."""
    request: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system if system is not None else SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        "max_tokens": max_tokens,
    }
    if json_output:
        request["response_format"] = {"type": "json_object"}
    response = client.chat.completions.create(**request)
    return response.choices[0].message.content or ""


class OpenAIProvider(LLMProvider):
    """Ranks with the OpenAI Chat Completions API in JSON mode."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = self._api_key()
        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for this provider. "
                "Install with: pip install 'career-match[openai]'"
            )
            raise ImportError(msg) from None

        client_options: dict[str, Any] = {"api_key": api_key}
        if self._request_timeout is not None:
            client_options["timeout"] = self._request_timeout
        client = openai.OpenAI(**client_options)

        use_model = model or self.default_model
        logger.info("Requesting career ranking from OpenAI (%s)", use_model)
        return chat_completion(
            client, use_model, prompt, system, self._max_output_tokens, self._json_output
        )
