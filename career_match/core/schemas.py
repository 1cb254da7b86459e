"""Core data models for the career matcher."""

import math
import re
from datetime import date
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_STRENGTHS = 3
MAX_DEVELOPMENT_AREAS = 3
MAX_RECOMMENDATIONS = 4
NEUTRAL_SCORE = 50

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _squash(value: str) -> str:
    return re.sub(r"[\s_\-]+", "", value).lower()


class Stage(str, Enum):
    """Career stage of the person being matched."""

    PATHFINDER = "Pathfinder"
    TRAILBLAZER = "Trailblazer"
    HORIZON_CHANGER = "HorizonChanger"

    @classmethod
    def parse(cls, value: "Stage | str") -> "Stage":
        """Parse a stage ignoring case, spaces, underscores and hyphens.

        Raises ValueError for anything else.
        """
        if isinstance(value, Stage):
            return value
        key = _squash(str(value))
        for stage in cls:
            if _squash(stage.value) == key:
                return stage
        msg = f"Unknown career stage '{value}'"
        raise ValueError(msg)


class Level(str, Enum):
    """Seniority a catalog item is aimed at."""

    ENTRY = "Entry"
    MID = "Mid"
    SENIOR = "Senior"


_LEVEL_PREFIXES: list[tuple[tuple[str, ...], Level]] = [
    (("entry", "junior", "intern", "graduate"), Level.ENTRY),
    (("mid", "intermediate"), Level.MID),
    (("senior", "lead", "principal", "staff"), Level.SENIOR),
]


def parse_level(value: Any) -> Level | None:
    """Map free-form level text onto Level; unknown text yields None."""
    if value is None or isinstance(value, Level):
        return value
    text = str(value).strip().lower()
    for prefixes, level in _LEVEL_PREFIXES:
        if text.startswith(prefixes):
            return level
    return None


def as_string_tuple(value: Any) -> tuple[str, ...]:
    """Coerce a scalar, list or None into an ordered, de-duplicated tuple.

    Blank entries are dropped; duplicates are detected case-insensitively and
    the first spelling wins.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        items: list[Any] = [value]
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    else:
        items = [value]

    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        result.append(text)
    return tuple(result)


def coerce_score(value: Any, default: int = NEUTRAL_SCORE) -> int:
    """Best-effort conversion of an oracle score into an int within 0-100.

    Accepts numbers and strings such as ``"85"``, ``"85%"`` or ``"score: 7.5"``.
    Booleans and anything without a number fall back to ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_RE.search(str(value))
        if match is None:
            return default
        number = float(match.group())
    if math.isnan(number):
        return default
    return int(round(max(0.0, min(100.0, number))))


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserProfile(_Record):
    """Canonical profile built once per match request. Never mutated."""

    stage: Stage
    education: str | None = None
    current_skills: tuple[str, ...] = ()
    skills_to_learn: tuple[str, ...] = ()
    interests: tuple[str, ...] = ()
    interested_fields: tuple[str, ...] = ()
    current_path_id: str | None = None
    years_experience: float | None = None
    seniority_level: str | None = None
    free_text_context: str | None = None
    degree_program: str | None = None
    work_environment_preference: str | None = None
    career_goals: str | None = None
    reason_for_change: str | None = None
    date_of_birth: date | None = None

    @field_validator("stage", mode="before")
    @classmethod
    def lenient_stage(cls, v: Any) -> Stage:
        return Stage.parse(v)

    @field_validator(
        "current_skills", "skills_to_learn", "interests", "interested_fields", mode="before"
    )
    @classmethod
    def string_sets(cls, v: Any) -> tuple[str, ...]:
        return as_string_tuple(v)

    @property
    def is_cold(self) -> bool:
        """True when there is no skill, interest or field signal to score on."""
        return not (self.current_skills or self.interests or self.interested_fields)

    def age(self, today: date | None = None) -> int | None:
        if self.date_of_birth is None:
            return None
        today = today or date.today()
        dob = self.date_of_birth
        years = today.year - dob.year
        if (today.month, today.day) < (dob.month, dob.day):
            years -= 1
        return years


class CatalogItem(_Record):
    """One career path, read-only for the duration of a request."""

    id: str = Field(validation_alias=AliasChoices("id", "$id", "careerPathId"))
    title: str = ""
    industry: str = ""
    required_skills: tuple[str, ...] = ()
    required_interests: tuple[str, ...] = ()
    suggested_education: tuple[str, ...] = ()
    salary_range: tuple[float, float] | None = None
    level: Level | None = None
    description: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def id_not_empty(cls, v: Any) -> str:
        text = "" if v is None else str(v).strip()
        if not text:
            msg = "catalog item id must not be empty"
            raise ValueError(msg)
        return text

    @field_validator("required_skills", "required_interests", "suggested_education", mode="before")
    @classmethod
    def string_sets(cls, v: Any) -> tuple[str, ...]:
        return as_string_tuple(v)

    @field_validator("level", mode="before")
    @classmethod
    def lenient_level(cls, v: Any) -> Level | None:
        return parse_level(v)

    @field_validator("salary_range", mode="before")
    @classmethod
    def salary_pair(cls, v: Any) -> Any:
        if isinstance(v, dict):
            v = (v.get("min"), v.get("max"))
        # A range missing either end is treated as no range.
        if isinstance(v, (list, tuple)) and (len(v) != 2 or None in v):
            return None
        return v

    @model_validator(mode="after")
    def salary_ordered(self) -> "CatalogItem":
        if self.salary_range is not None and self.salary_range[0] > self.salary_range[1]:
            msg = f"salary_range min must not exceed max, got {self.salary_range}"
            raise ValueError(msg)
        return self


class MatchCandidate(_Record):
    """One scored recommendation exchanged between generator and reconciler."""

    catalog_item_id: str
    score: int = NEUTRAL_SCORE
    reasoning: str = ""
    strengths: tuple[str, ...] = ()
    development_areas: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    source: str = "oracle"
    catalog_item: CatalogItem | None = None

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> int:
        return coerce_score(v)

    @field_validator("strengths", mode="before")
    @classmethod
    def bounded_strengths(cls, v: Any) -> tuple[str, ...]:
        return as_string_tuple(v)[:MAX_STRENGTHS]

    @field_validator("development_areas", mode="before")
    @classmethod
    def bounded_development_areas(cls, v: Any) -> tuple[str, ...]:
        return as_string_tuple(v)[:MAX_DEVELOPMENT_AREAS]

    @field_validator("recommendations", mode="before")
    @classmethod
    def bounded_recommendations(cls, v: Any) -> tuple[str, ...]:
        return as_string_tuple(v)[:MAX_RECOMMENDATIONS]


class MatchResult(_Record):
    """Final ordered recommendations plus catalog sizes."""

    matches: tuple[MatchCandidate, ...] = ()
    total_catalog_size: int = 0
    filtered_catalog_size: int = 0
    source: str = "fallback"
    message: str | None = None
