"""Ranking oracle: an LLM provider behind an async, deadline-friendly call."""

import asyncio
import logging
from typing import Any

from career_match.core.config import OracleConfig
from career_match.llm import get_provider
from career_match.llm.base import LLMProvider
from career_match.pipeline.prompt import RANKING_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class RankingOracle:
    """Turns a ranking prompt into untrusted free text.

    Provider SDKs block, so each call runs in a worker thread. When the
    caller stops waiting (timeout), the thread finishes on its own and its
    result is never read.
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: str | None = None,
        system_prompt: str = RANKING_SYSTEM_PROMPT,
    ) -> None:
        self._provider = provider
        self._model = model
        self._system_prompt = system_prompt

    @property
    def provider_id(self) -> str:
        return self._provider.provider_id

    async def rank(self, prompt: str) -> str:
        return await asyncio.to_thread(
            self._provider.complete, prompt, self._model, system=self._system_prompt
        )


def build_oracle(
    config: OracleConfig,
    request_timeout: float | None = None,
) -> RankingOracle | None:
    """Create the configured oracle, or None when it is disabled.

    ``request_timeout`` (seconds) is handed to the provider SDK.
    """
    if not config.enabled:
        logger.info("Oracle disabled - matches will come from the fallback scorer")
        return None
    options: dict[str, Any] = {
        "max_output_tokens": config.max_output_tokens,
        "json_output": config.json_output,
        "request_timeout": request_timeout,
    }
    if config.provider == "gemini":
        options["thinking_budget"] = config.thinking_budget
    provider = get_provider(config.provider, **options)
    return RankingOracle(provider, model=config.model)
