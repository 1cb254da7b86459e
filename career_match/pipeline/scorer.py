"""Deterministic fallback scorer used when the oracle is unavailable.

Score range: 0-100 (clamped). Points from FallbackWeights:
    base + skill*skills + learning*learn + interest*interests
         + industry*[industry in fields] + stage_fit*[level suits stage]

Jitter only perturbs the sort key so equal scores do not always come back in
catalog order; the reported score never includes it.
"""

import functools
import logging
import random
from collections.abc import Callable

from career_match.core.config import FallbackWeights
from career_match.core.errors import EmptyCatalogError
from career_match.core.schemas import CatalogItem, Level, MatchCandidate, Stage, UserProfile
from career_match.pipeline.overlap import equals_any, matched_tokens

logger = logging.getLogger(__name__)

Jitter = Callable[[], float]

STAGE_LEVELS: dict[Stage, frozenset[Level]] = {
    Stage.PATHFINDER: frozenset({Level.ENTRY}),
    Stage.TRAILBLAZER: frozenset({Level.ENTRY, Level.MID}),
    Stage.HORIZON_CHANGER: frozenset({Level.MID, Level.SENIOR}),
}


def no_jitter() -> float:
    return 0.0


def stage_level_fit(stage: Stage, level: Level | None) -> bool:
    return level is not None and level in STAGE_LEVELS[stage]


class FallbackScorer:
    """Rule-based ranking over the whole catalog. Cannot fail on a non-empty catalog.

    Usage::

        scorer = FallbackScorer(FallbackWeights(), jitter=no_jitter)
        ranked = scorer.rank(profile, catalog)
    """

    def __init__(
        self,
        weights: FallbackWeights | None = None,
        jitter: Jitter | None = None,
    ) -> None:
        self._weights = weights or FallbackWeights()
        if jitter is None:
            jitter = functools.partial(random.uniform, 0.0, self._weights.max_jitter)
        self._jitter = jitter

    def score_item(self, profile: UserProfile, item: CatalogItem) -> MatchCandidate:
        """Score one catalog item and render its template texts."""
        w = self._weights
        skills = matched_tokens(item.required_skills, profile.current_skills)
        learning = matched_tokens(item.required_skills, profile.skills_to_learn)
        interests = matched_tokens(item.required_interests, profile.interests)
        industry_fit = equals_any(item.industry, profile.interested_fields)
        level_fit = stage_level_fit(profile.stage, item.level)

        score = w.base
        score += w.skill * len(skills)
        score += w.learning * len(learning)
        score += w.interest * len(interests)
        if industry_fit:
            score += w.industry
        if level_fit:
            score += w.stage_fit

        return MatchCandidate(
            catalog_item_id=item.id,
            score=score,
            reasoning=_reasoning(profile, item, skills, learning, interests, industry_fit, level_fit),
            strengths=_strengths(skills, interests),
            development_areas=_development_areas(item, skills),
            recommendations=_recommendations(item),
            source="fallback",
        )

    def rank(
        self,
        profile: UserProfile,
        catalog: list[CatalogItem],
        limit: int | None = None,
    ) -> list[MatchCandidate]:
        """Score every item, sorted by score (plus jitter) descending.

        Raises EmptyCatalogError on an empty catalog.
        """
        if not catalog:
            raise EmptyCatalogError()

        keyed = [
            (candidate.score + self._jitter(), index, candidate)
            for index, candidate in enumerate(self.score_item(profile, item) for item in catalog)
        ]
        keyed.sort(key=lambda k: (-k[0], k[1]))
        ranked = [candidate for _, _, candidate in keyed]
        logger.debug("Fallback ranked %d career paths", len(ranked))
        return ranked[:limit] if limit is not None else ranked


def _plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"


def _reasoning(
    profile: UserProfile,
    item: CatalogItem,
    skills: list[str],
    learning: list[str],
    interests: list[str],
    industry_fit: bool,
    level_fit: bool,
) -> str:
    parts: list[str] = []
    if skills:
        parts.append(f"{_plural(len(skills), 'skill match', 'es')} ({', '.join(skills)})")
    if learning:
        parts.append(f"eager to learn {', '.join(learning)}")
    if interests:
        parts.append(f"{_plural(len(interests), 'interest alignment')} ({', '.join(interests)})")
    if industry_fit:
        parts.append(f"strong interest in {item.industry}")
    if level_fit:
        parts.append(f"fits {profile.stage.value} level")
    if not parts:
        return f"Potential fit for a {profile.stage.value} profile"
    text = "; ".join(parts)
    return text[0].upper() + text[1:]


def _strengths(skills: list[str], interests: list[str]) -> list[str]:
    strengths = [f"Existing {skill} experience" for skill in skills[:2]]
    if len(strengths) < 2 and interests:
        strengths.append(f"Genuine interest in {interests[0]}")
    strengths.append("Growth mindset")
    return strengths


def _development_areas(item: CatalogItem, skills: list[str]) -> list[str]:
    matched = {s.lower() for s in skills}
    gaps = [s for s in item.required_skills if s.lower() not in matched]
    areas = [f"Build {skill} skills" for skill in gaps[:2]]
    if len(areas) < 2:
        industry = item.industry or "industry"
        areas.append(f"{industry} knowledge")
    if len(areas) < 2:
        areas.append("Specialized skills")
    return areas


def _recommendations(item: CatalogItem) -> list[str]:
    field = item.industry or "the field"
    title = item.title or "this path"
    return [
        f"Research what a {title} does day to day",
        f"Take relevant courses in {field}",
        f"Network with {field} professionals",
        f"Build projects that show {title} skills",
    ]
