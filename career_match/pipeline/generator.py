"""Match generator: oracle ranking under a deadline, fallback scorer behind it.

States per request:
  Start -> oracle.rank() raced against the budget
    ok + reconciled           -> OracleSucceeded
    timeout / error / invalid -> OracleFailed -> fallback -> FallbackSucceeded
  Fewer than K oracle candidates are topped up from the fallback ranking.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from career_match.core.errors import EmptyCatalogError, OracleTimeoutError
from career_match.core.schemas import CatalogItem, MatchCandidate, Stage, UserProfile
from career_match.pipeline.oracle import RankingOracle
from career_match.pipeline.prompt import build_ranking_prompt
from career_match.pipeline.reconciler import enrich_and_sort, reconcile
from career_match.pipeline.scorer import FallbackScorer

logger = logging.getLogger(__name__)

# A policy reorders or rewrites the ranked candidates for one profile.
MatchPolicy = Callable[[UserProfile, list[MatchCandidate], dict[str, CatalogItem]], list[MatchCandidate]]


@dataclass(frozen=True)
class GenerationOutcome:
    """Ranked candidates plus where they came from (oracle, fallback or mixed)."""

    candidates: list[MatchCandidate]
    source: str
    oracle_error: str | None = None


class CurrentPathPolicy:
    """Pin a Trailblazer's current career path to the top of the ranking."""

    def __init__(self, score: int = 95) -> None:
        self._score = score

    def __call__(
        self,
        profile: UserProfile,
        candidates: list[MatchCandidate],
        lookup: dict[str, CatalogItem],
    ) -> list[MatchCandidate]:
        path_id = profile.current_path_id
        if profile.stage is not Stage.TRAILBLAZER or not path_id or path_id not in lookup:
            return candidates

        item = lookup[path_id]
        existing = next((c for c in candidates if c.catalog_item_id == path_id), None)
        if existing is not None:
            pinned = existing.model_copy(update={"score": max(existing.score, self._score)})
        else:
            pinned = MatchCandidate(
                catalog_item_id=path_id,
                score=self._score,
                reasoning=f"Builds directly on your current path as {item.title or path_id}",
                strengths=["Direct experience in this path"],
                development_areas=["Next-level responsibilities"],
                recommendations=["Seek stretch assignments", "Find a senior mentor in your field"],
                source="policy",
                catalog_item=item,
            )
        logger.debug("Pinned current path '%s' first", path_id)
        return [pinned, *(c for c in candidates if c.catalog_item_id != path_id)]


async def _ask_oracle(
    oracle: RankingOracle,
    prompt: str,
    budget: float,
    profile: UserProfile,
    filtered_catalog: list[CatalogItem],
    full_catalog: list[CatalogItem] | None,
) -> tuple[list[MatchCandidate], str | None]:
    """Return (candidates, error). Never raises for oracle failures."""
    if budget <= 0:
        return [], "no time left for the oracle"
    try:
        raw = await asyncio.wait_for(oracle.rank(prompt), timeout=budget)
        return reconcile(raw, filtered_catalog, profile.stage, full_catalog), None
    except TimeoutError:
        error = OracleTimeoutError(f"Oracle did not answer within {budget:.1f}s")
        logger.warning("%s - using fallback", error)
        return [], str(error)
    except Exception as e:
        logger.warning("Oracle ranking failed (%s) - using fallback", e, exc_info=True)
        return [], str(e) or type(e).__name__


async def generate(
    profile: UserProfile,
    filtered_catalog: list[CatalogItem],
    oracle: RankingOracle | None,
    fallback_scorer: FallbackScorer,
    budget: float,
    *,
    target_count: int = 5,
    full_catalog: list[CatalogItem] | None = None,
    current_path: CatalogItem | None = None,
    policies: Sequence[MatchPolicy] = (),
) -> GenerationOutcome:
    """Produce up to ``target_count`` ranked candidates within ``budget`` seconds.

    Raises EmptyCatalogError before any work when there is nothing to rank.
    """
    if not filtered_catalog:
        raise EmptyCatalogError()

    lookup = {item.id: item for item in filtered_catalog}
    for item in full_catalog or []:
        if item.id in lookup:
            lookup[item.id] = item

    candidates: list[MatchCandidate] = []
    error: str | None = "oracle disabled"
    if oracle is not None:
        prompt = build_ranking_prompt(profile, filtered_catalog, target_count, current_path)
        candidates, error = await _ask_oracle(
            oracle, prompt, budget, profile, filtered_catalog, full_catalog
        )

    oracle_count = len(candidates)
    if oracle_count < target_count:
        if oracle_count:
            logger.info(
                "Only %d oracle matches, supplementing with fallback", oracle_count
            )
        known = {c.catalog_item_id for c in candidates}
        extra = [
            c for c in fallback_scorer.rank(profile, filtered_catalog)
            if c.catalog_item_id not in known
        ][: target_count - oracle_count]
        candidates = candidates + enrich_and_sort(extra, lookup)

    if oracle_count == 0:
        source = "fallback"
    elif len(candidates) > oracle_count:
        source = "mixed"
    else:
        source = "oracle"

    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    for policy in policies:
        ranked = policy(profile, ranked, lookup)

    return GenerationOutcome(
        candidates=ranked[:target_count],
        source=source,
        oracle_error=error if oracle_count == 0 else None,
    )
