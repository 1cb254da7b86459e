"""Google Gemini LLM provider (google-genai SDK)."""

import logging
from typing import Any

from career_match.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Ranks with Gemini.

    ``thinking_budget`` caps the model's reasoning tokens; a small budget
    keeps ranking latency inside the oracle timeout.
    """

    def __init__(self, thinking_budget: int | None = None, **options: Any) -> None:
        super().__init__(**options)
        self._thinking_budget = thinking_budget

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = self._api_key()
        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for this provider. "
                "Install with: pip install 'career-match[gemini]'"
            )
            raise ImportError(msg) from None

        client_options: dict[str, Any] = {"api_key": api_key}
        if self._request_timeout is not None:
            # HttpOptions takes milliseconds.
            client_options["http_options"] = genai_types.HttpOptions(
                timeout=int(self._request_timeout * 1000)
            )
        client = genai.Client(**client_options)

        thinking = None
        if self._thinking_budget is not None:
            thinking = genai_types.ThinkingConfig(thinking_budget=self._thinking_budget)

        use_model = model or self.default_model
        logger.info("Requesting career ranking from Gemini (%s)", use_model)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system if system is not None else SYSTEM_PROMPT,
                max_output_tokens=self._max_output_tokens,
                response_mime_type="application/json" if self._json_output else None,
                thinking_config=thinking,
            ),
        )

        return response.text or ""
