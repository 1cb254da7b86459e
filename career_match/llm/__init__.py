"""LLM providers behind one registry; SDKs are imported only when a provider is used.

Usage:
    from career_match.llm import get_provider

    provider = get_provider("gemini", thinking_budget=512, request_timeout=15)
    raw = provider.complete(prompt, system=RANKING_SYSTEM_PROMPT)
"""

import importlib
from typing import Any

from career_match.llm.base import SYSTEM_PROMPT, LLMProvider

__all__ = ["SYSTEM_PROMPT", "LLMProvider", "available_providers", "get_provider"]

# provider name -> "module:ClassName"
_REGISTRY: dict[str, str] = {
    "anthropic": "career_match.llm.anthropic:AnthropicProvider",
    "gemini": "career_match.llm.gemini:GeminiProvider",
    "ollama": "career_match.llm.ollama:OllamaProvider",
    "openai": "career_match.llm.openai:OpenAIProvider",
}


def _provider_class(name: str) -> type[LLMProvider]:
    module_path, class_name = _REGISTRY[name].split(":")
    cls: type[LLMProvider] = getattr(importlib.import_module(module_path), class_name)
    return cls


def get_provider(name: str, **options: Any) -> LLMProvider:
    """Instantiate a provider by name.

    ``options`` go to the provider constructor: the shared generation options
    of LLMProvider plus provider-specific ones such as Gemini's
    ``thinking_budget``.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        msg = f"Unknown LLM provider '{name}'. Available: {', '.join(available_providers())}"
        raise ValueError(msg)
    return _provider_class(name)(**options)


def available_providers() -> list[str]:
    return sorted(_REGISTRY)
