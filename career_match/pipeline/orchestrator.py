"""Orchestrator: wires stores, normalizer, pre-filter, generator and write-back.

Data flow:
  1. Fetch profile and catalog concurrently (hard timeout)
  2. Normalize profile (request payload over stored record)
  3. Submit status write-back (detached)
  4. Resolve current career path (short, soft timeout)
  5. Pre-filter catalog
  6. Generate matches (oracle under deadline, fallback behind it)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from career_match.core.config import Settings
from career_match.core.errors import (
    CatalogNotFoundError,
    EmptyCatalogError,
    MatchTimeoutError,
    ProfileNotFoundError,
)
from career_match.core.schemas import CatalogItem, MatchResult, UserProfile
from career_match.pipeline.background import BackgroundWriter
from career_match.pipeline.generator import CurrentPathPolicy, MatchPolicy, generate
from career_match.pipeline.oracle import RankingOracle
from career_match.pipeline.prefilter import filter_catalog
from career_match.pipeline.scorer import FallbackScorer
from career_match.profile.normalizer import normalize, profile_update_fields
from career_match.stores.base import CatalogStore, ProfileStore, fetch_catalog

logger = logging.getLogger(__name__)


class MatchRequest(BaseModel):
    """Inbound match request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    talent_id: str = Field(
        min_length=1, validation_alias=AliasChoices("talentId", "profileId", "talent_id")
    )
    survey_responses: dict[str, Any] = Field(
        validation_alias=AliasChoices("surveyResponses", "responses", "survey_responses")
    )
    stage: str | None = Field(default=None, validation_alias=AliasChoices("stage", "careerStage"))


@dataclass
class MatchDependencies:
    """Collaborators built once per process and shared by every request."""

    profile_store: ProfileStore
    catalog_store: CatalogStore
    fallback_scorer: FallbackScorer
    oracle: RankingOracle | None = None
    writer: BackgroundWriter = field(default_factory=BackgroundWriter)


def build_policies(settings: Settings) -> list[MatchPolicy]:
    policies: list[MatchPolicy] = []
    if settings.matching.pin_current_path:
        policies.append(CurrentPathPolicy(settings.matching.pinned_path_score))
    return policies


async def _resolve_current_path(
    profile: UserProfile,
    catalog: list[CatalogItem],
    store: CatalogStore,
    timeout: float,
) -> CatalogItem | None:
    path_id = profile.current_path_id
    if not path_id:
        return None
    for item in catalog:
        if item.id == path_id:
            return item
    if timeout <= 0:
        return None
    try:
        return await asyncio.wait_for(store.get(path_id), timeout=timeout)
    except Exception as e:
        logger.warning("Could not fetch current career path '%s': %s", path_id, e)
        return None


async def run_match(
    request: MatchRequest,
    deps: MatchDependencies,
    settings: Settings,
) -> MatchResult:
    """Execute one match request through the full pipeline.

    Raises:
        MatchTimeoutError: Profile/catalog reads did not finish within the budget.
        CatalogNotFoundError / ProfileNotFoundError: Collaborator data is absent.
        InputError: The profile has no usable career stage.
    """
    cfg = settings.matching
    loop = asyncio.get_running_loop()
    deadline = loop.time() + cfg.overall_budget_ms / 1000

    # Step 1: concurrent reads
    try:
        stored, catalog = await asyncio.wait_for(
            asyncio.gather(
                deps.profile_store.find(request.talent_id),
                fetch_catalog(deps.catalog_store, cfg.catalog_page_size, cfg.catalog_max_items),
            ),
            timeout=cfg.overall_budget_ms / 1000,
        )
    except TimeoutError:
        msg = "Function execution timeout while reading profile and catalog"
        raise MatchTimeoutError(msg) from None

    if not catalog:
        raise CatalogNotFoundError()
    if stored is None:
        raise ProfileNotFoundError(request.talent_id)

    # Step 2: normalize
    profile = normalize(
        request.survey_responses,
        stored,
        stage=request.stage,
        max_free_text=cfg.max_free_text_length,
    )

    # Step 3: detached write-back
    record_id = stored.get("$id")
    if record_id:
        deps.writer.submit(
            deps.profile_store.update(str(record_id), profile_update_fields(request.survey_responses)),
            f"talent update for '{request.talent_id}'",
        )
    else:
        logger.warning("Stored talent '%s' has no record id - skipping update", request.talent_id)

    # Step 4: current career path
    remaining = deadline - loop.time()
    current_path = await _resolve_current_path(
        profile,
        catalog,
        deps.catalog_store,
        min(cfg.current_path_timeout_ms / 1000, remaining),
    )

    # Step 5: pre-filter
    filtered = filter_catalog(
        profile,
        catalog,
        max_size=cfg.prefilter_max_size,
        floor=cfg.prefilter_floor,
        weights=settings.prefilter_weights,
    )

    # Step 6: generate
    remaining = deadline - loop.time()
    oracle_budget = max(0.0, min(cfg.oracle_timeout_ms / 1000, remaining))
    try:
        outcome = await generate(
            profile,
            filtered,
            deps.oracle,
            deps.fallback_scorer,
            oracle_budget,
            target_count=cfg.target_match_count,
            full_catalog=catalog,
            current_path=current_path,
            policies=build_policies(settings),
        )
    except EmptyCatalogError:
        logger.warning("Nothing left to rank for '%s'", request.talent_id)
        return MatchResult(
            total_catalog_size=len(catalog),
            filtered_catalog_size=len(filtered),
            message="No matches available",
        )

    logger.info(
        "Matched '%s': %d matches from %s (%d/%d career paths considered)",
        request.talent_id, len(outcome.candidates), outcome.source,
        len(filtered), len(catalog),
    )
    return MatchResult(
        matches=tuple(outcome.candidates),
        total_catalog_size=len(catalog),
        filtered_catalog_size=len(filtered),
        source=outcome.source,
    )
