"""Profile normalizer: survey payload + stored talent record -> UserProfile.

The payload wins field by field. A field counts as absent when its key is
missing or holds None; absent fields fall back to the stored record and then
to an empty default.
"""

import logging
from datetime import date, datetime
from typing import Any

from career_match.core.errors import InvalidStageError, MissingStageError
from career_match.core.schemas import Stage, UserProfile, as_string_tuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_FREE_TEXT = 200

# Canonical field -> keys it may arrive under (survey payload or talent record).
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "education": ("education", "educationLevel", "degrees"),
    "current_skills": ("currentSkills", "current_skills", "skills"),
    "skills_to_learn": ("skillsToLearn", "skills_to_learn"),
    "interests": ("interests",),
    "interested_fields": ("interestedFields", "interested_fields"),
    "current_path_id": ("currentPath", "currentPathId", "current_path_id"),
    "years_experience": ("yearsExperience", "yearsOfExperience", "years_experience"),
    "seniority_level": ("currentSeniorityLevel", "seniorityLevel", "seniority_level"),
    "free_text_context": ("freeTextContext", "additionalContext", "free_text_context"),
    "degree_program": ("degreeProgram", "degree_program"),
    "work_environment_preference": ("workEnvironmentPreference", "work_environment_preference"),
    "career_goals": ("careerGoals", "career_goals"),
    "reason_for_change": ("reasonForChange", "reason_for_change"),
    "date_of_birth": ("dateOfBirth", "dateofBirth", "date_of_birth"),
}

_STAGE_KEYS = ("stage", "careerStage", "career_stage")

_SET_FIELDS = ("current_skills", "skills_to_learn", "interests", "interested_fields")

_FREE_TEXT_FIELDS = (
    "free_text_context",
    "degree_program",
    "work_environment_preference",
    "career_goals",
    "reason_for_change",
)

# Attributes the talent store accepts on write-back; the array-typed ones
# are always written as lists.
VALID_TALENT_ATTRIBUTES = (
    "fullname", "email", "avatar", "careerStage", "dateofBirth", "talentId",
    "selectedPath", "degrees", "certifications", "skills", "interests",
    "currentPath", "testTaken", "interestedFields", "savedPaths",
    "currentSeniorityLevel", "savedJobs",
)
ARRAY_ATTRIBUTES = (
    "degrees", "certifications", "skills", "interests",
    "interestedFields", "savedPaths", "savedJobs",
)


def normalize(
    request_payload: dict[str, Any] | None,
    stored_profile: dict[str, Any] | None,
    stage: Stage | str | None = None,
    max_free_text: int = DEFAULT_MAX_FREE_TEXT,
) -> UserProfile:
    """Merge a request payload over a stored profile into a UserProfile.

    Args:
        request_payload: Survey answers for this request (may be None).
        stored_profile: Previously stored talent record (may be None).
        stage: Explicit stage from the request envelope; beats both sources.
        max_free_text: Free-text fields are silently cut to this length.

    Raises:
        MissingStageError: No stage anywhere.
        InvalidStageError: A stage is present but unrecognised.
    """
    payload = request_payload or {}
    stored = stored_profile or {}

    raw_stage = stage if _present(stage) else _pick(_STAGE_KEYS, payload, stored)
    if raw_stage is None:
        raise MissingStageError()
    try:
        parsed_stage = Stage.parse(raw_stage)
    except ValueError as e:
        raise InvalidStageError(str(e)) from e

    fields: dict[str, Any] = {"stage": parsed_stage}
    for name, keys in _FIELD_KEYS.items():
        value = _pick(keys, payload, stored)
        if name in _SET_FIELDS:
            fields[name] = as_string_tuple(value)
        elif name == "education":
            fields[name] = _truncate(_join(value), max_free_text)
        elif name == "years_experience":
            fields[name] = _as_number(value)
        elif name == "date_of_birth":
            fields[name] = _as_date(value)
        elif name in _FREE_TEXT_FIELDS:
            fields[name] = _truncate(_text(value), max_free_text)
        else:
            fields[name] = _text(value)

    return UserProfile(**fields)


def profile_update_fields(request_payload: dict[str, Any]) -> dict[str, Any]:
    """Build the write-back body for the talent store.

    Unknown attributes are dropped, array attributes are coerced to lists,
    and the assessment is marked as taken.
    """
    updates: dict[str, Any] = {}
    for key, value in request_payload.items():
        if key not in VALID_TALENT_ATTRIBUTES:
            continue
        if key in ARRAY_ATTRIBUTES:
            updates[key] = list(value) if isinstance(value, (list, tuple)) else (
                [value] if value else []
            )
        else:
            updates[key] = value
    updates["testTaken"] = True
    return updates


def _present(value: Any) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def _pick(keys: tuple[str, ...], payload: dict[str, Any], stored: dict[str, Any]) -> Any:
    for source in (payload, stored):
        for key in keys:
            if key in source and _present(source[key]):
                return source[key]
    return None


def _text(value: Any) -> str | None:
    if not _present(value):
        return None
    return str(value).strip()


def _join(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        parts = as_string_tuple(value)
        return ", ".join(parts) if parts else None
    return _text(value)


def _truncate(value: str | None, limit: int) -> str | None:
    if value is None or len(value) <= limit:
        return value
    return value[:limit]


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric years of experience: %r", value)
        return None


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug("Ignoring unparseable date of birth: %r", value)
        return None
