"""Catalog pre-filter: trim the catalog before the costly oracle call.

Steps:
  1. Cold profile (no skills, interests or fields) -> first ``max_size`` items
     verbatim. Nothing to score on, so the truncation is arbitrary but
     deterministic.
  2. Score every item on cheap overlaps; keep positive scores.
  3. Pad with unselected items in catalog order up to ``floor``.
  4. Sort by score descending (catalog order breaks ties), cap at ``max_size``.
"""

import logging

from career_match.core.config import PrefilterWeights
from career_match.core.schemas import CatalogItem, UserProfile
from career_match.pipeline.overlap import equals_any, overlap_count, tokens_match

logger = logging.getLogger(__name__)


def prefilter_score(
    item: CatalogItem,
    profile: UserProfile,
    weights: PrefilterWeights,
) -> float:
    """Weighted overlap between a catalog item and a profile."""
    score = 0.0
    if equals_any(item.industry, profile.interested_fields):
        score += weights.industry
    score += weights.skill * overlap_count(profile.current_skills, item.required_skills)
    score += weights.interest * overlap_count(profile.interests, item.required_interests)
    if profile.education and any(
        tokens_match(profile.education, edu) for edu in item.suggested_education
    ):
        score += weights.education
    return score


def filter_catalog(
    profile: UserProfile,
    catalog: list[CatalogItem],
    max_size: int = 25,
    floor: int = 12,
    weights: PrefilterWeights | None = None,
) -> list[CatalogItem]:
    """Return at most ``max_size`` relevant items. Never mutates ``catalog``."""
    if profile.is_cold:
        logger.debug("Cold profile - taking first %d catalog items", max_size)
        return list(catalog[:max_size])

    weights = weights or PrefilterWeights()
    scored = [(prefilter_score(item, profile, weights), index) for index, item in enumerate(catalog)]
    selected = [(score, index) for score, index in scored if score > 0]

    target = min(floor, max_size)
    if len(selected) < target:
        chosen = {index for _, index in selected}
        padding = [(0.0, i) for i in range(len(catalog)) if i not in chosen]
        padding = padding[: target - len(selected)]
        selected.extend(padding)
        logger.debug("Pre-filter padded with %d unscored items", len(padding))

    selected.sort(key=lambda pair: (-pair[0], pair[1]))
    result = [catalog[index] for _, index in selected[:max_size]]
    logger.info("Pre-filtered %d -> %d career paths", len(catalog), len(result))
    return result
