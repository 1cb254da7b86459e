"""Anthropic Claude LLM provider."""

import logging
from typing import Any

from career_match.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)

# Claude has no JSON response mode; starting the assistant turn with an
# opening brace keeps it from wrapping the answer in prose.
_JSON_PREFILL = "{"


class AnthropicProvider(LLMProvider):
    """Ranks with Claude through the Messages API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = self._api_key()
        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for this provider. "
                "Install with: pip install 'career-match[anthropic]'"
            )
            raise ImportError(msg) from None

        client_options: dict[str, Any] = {"api_key": api_key}
        if self._request_timeout is not None:
            client_options["timeout"] = self._request_timeout
        client = anthropic.Anthropic(**client_options)

        messages: list[dict[str, str]] = [{"role": "user", "content": prompt}]
        if self._json_output:
            messages.append({"role": "assistant", "content": _JSON_PREFILL})

        use_model = model or self.default_model
        logger.info("Requesting career ranking from Anthropic (%s)", use_model)
        message = client.messages.create(
            model=use_model,
            max_tokens=self._max_output_tokens,
            system=system if system is not None else SYSTEM_PROMPT,
            messages=messages,
        )

        text = "".join(getattr(block, "text", "") for block in message.content)
        return _JSON_PREFILL + text if self._json_output else text
