"""Response reconciler: untrusted oracle text -> validated MatchCandidates.

Parsing runs a chain of stages, each applied to the previous stage's text:
  1. direct      - parse as-is
  2. fences      - drop ```json / ``` markers
  3. balanced    - cut out the first balanced {...} or [...] that holds JSON
  4. repair      - remove trailing commas before } or ]

Every stage yields a ParseOutcome value; only exhausting the chain raises.
"""

import json
import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from career_match.core.errors import InvalidOracleOutputError, UnparsableOracleOutputError
from career_match.core.schemas import CatalogItem, MatchCandidate, Stage

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?")

_LIST_KEYS = ("matches", "recommendations", "candidates", "results", "careerMatches")
_ID_KEYS = ("careerPathId", "catalogItemId", "pathId", "id", "$id")
_SCORE_KEYS = ("matchScore", "score")

_STAGE_DEFAULTS: dict[Stage, dict[str, list[str]]] = {
    Stage.PATHFINDER: {
        "strengths": ["Strong foundation for growth", "Fresh perspective"],
        "development_areas": ["Industry knowledge", "Specialized skills"],
        "recommendations": [
            "Take relevant courses",
            "Build portfolio projects",
            "Network with professionals",
            "Look for an internship or entry-level role",
        ],
    },
    Stage.TRAILBLAZER: {
        "strengths": ["Hands-on experience", "Proven ability to deliver"],
        "development_areas": ["Specialized skills", "Leadership experience"],
        "recommendations": [
            "Deepen expertise with advanced courses",
            "Take on stretch projects",
            "Find a mentor in the field",
            "Earn a recognised certification",
        ],
    },
    Stage.HORIZON_CHANGER: {
        "strengths": ["Transferable skills", "Broad professional perspective"],
        "development_areas": ["Industry knowledge", "Domain-specific tools"],
        "recommendations": [
            "Map your transferable skills to the new field",
            "Take a bridging course",
            "Network with professionals in the target field",
            "Build a portfolio project in the new field",
        ],
    },
}


@dataclass(frozen=True)
class ParseOutcome:
    """Result of one parse stage."""

    stage: str
    text: str
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _try_parse(stage: str, text: str) -> ParseOutcome:
    try:
        return ParseOutcome(stage=stage, text=text, value=json.loads(text))
    except json.JSONDecodeError as e:
        return ParseOutcome(stage=stage, text=text, error=str(e))


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def repair_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing bracket (outside strings)."""
    out: list[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in ("}", "]"):
            # Walk back over whitespace to a dangling comma.
            j = len(out) - 1
            while j >= 0 and out[j].isspace():
                j -= 1
            if j >= 0 and out[j] == ",":
                del out[j]
        out.append(char)
    return "".join(out)


_MAX_BLOCK_ATTEMPTS = 64


def _balanced_from(text: str, start: int) -> str | None:
    closers = {"{": "}", "[": "]"}
    stack: list[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in closers:
            stack.append(closers[char])
        elif char in ("}", "]"):
            if not stack or stack.pop() != char:
                return None
            if not stack:
                return text[start:index + 1]
    return None


def balanced_blocks(text: str) -> Iterator[str]:
    """Yield the balanced block opening at each ``{`` or ``[``, left to right.

    Brackets inside JSON strings are ignored.
    """
    attempts = 0
    for start, char in enumerate(text):
        if char not in "{[":
            continue
        attempts += 1
        if attempts > _MAX_BLOCK_ATTEMPTS:
            return
        block = _balanced_from(text, start)
        if block is not None:
            yield block


def _loads_ok(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def extract_balanced(text: str) -> str | None:
    """Return the first balanced object or array that holds JSON, or None.

    A block counts when it parses as-is or after trailing-comma repair, so
    bracketed prose such as "[top 5]" ahead of the payload is skipped. When
    no block qualifies the first balanced one is returned for the later stages.
    """
    first: str | None = None
    for block in balanced_blocks(text):
        if first is None:
            first = block
        if _loads_ok(block) or _loads_ok(repair_trailing_commas(block)):
            return block
    return first


_Transform = Callable[[str], str | None]

PARSE_STAGES: list[tuple[str, _Transform]] = [
    ("direct", lambda text: text),
    ("fences", strip_code_fences),
    ("balanced", extract_balanced),
    ("repair", repair_trailing_commas),
]


def run_parse_pipeline(text: str) -> list[ParseOutcome]:
    """Run the stages in order and return every outcome up to the first success."""
    outcomes: list[ParseOutcome] = []
    current = text
    for stage, transform in PARSE_STAGES:
        transformed = transform(current)
        if transformed is None:
            outcomes.append(ParseOutcome(stage=stage, text=current, error="no match"))
            continue
        current = transformed
        outcome = _try_parse(stage, current)
        outcomes.append(outcome)
        if outcome.ok:
            break
    return outcomes


def parse_oracle_output(text: str) -> Any:
    """Parse oracle text into JSON data or raise UnparsableOracleOutputError."""
    outcomes = run_parse_pipeline(text)
    last = outcomes[-1]
    if last.ok:
        if last.stage != "direct":
            logger.debug("Oracle output parsed at stage '%s'", last.stage)
        return last.value
    msg = "; ".join(f"{o.stage}: {o.error}" for o in outcomes)
    raise UnparsableOracleOutputError(f"Oracle output is not parseable JSON ({msg})")


def extract_candidate_entries(data: Any) -> list[dict[str, Any]]:
    """Locate the list of candidate objects in parsed oracle data."""
    entries: Any = None
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        for key in _LIST_KEYS:
            if isinstance(data.get(key), list):
                entries = data[key]
                break
        else:
            entries = next(
                (
                    v for v in data.values()
                    if isinstance(v, list) and v and all(isinstance(e, dict) for e in v)
                ),
                None,
            )
    if entries is None:
        msg = "Oracle output holds no list of candidates"
        raise InvalidOracleOutputError(msg)
    return [e for e in entries if isinstance(e, dict)]


def _entry_id(entry: dict[str, Any]) -> str | None:
    for key in _ID_KEYS:
        value = entry.get(key)
        if isinstance(value, (str, int)) and str(value).strip():
            return str(value).strip()
    nested = entry.get("careerPath")
    if isinstance(nested, dict):
        return _entry_id(nested)
    if isinstance(nested, str) and nested.strip():
        return nested.strip()
    return None


def _entry_score(entry: dict[str, Any]) -> tuple[bool, Any]:
    for key in _SCORE_KEYS:
        if key in entry:
            return True, entry[key]
    return False, None


def _list_or_default(value: Any, default: list[str]) -> Any:
    if isinstance(value, (list, tuple)) and any(str(v).strip() for v in value if v is not None):
        return value
    if isinstance(value, str) and value.strip():
        return [value]
    return default


def reconcile(
    oracle_output: str | dict[str, Any] | list[Any],
    filtered_catalog: list[CatalogItem],
    stage: Stage = Stage.PATHFINDER,
    full_catalog: list[CatalogItem] | None = None,
) -> list[MatchCandidate]:
    """Validate, repair and enrich oracle output against the known catalog.

    Raises:
        UnparsableOracleOutputError: Text could not be parsed by any stage.
        InvalidOracleOutputError: Parsed data has no candidate list.
    """
    data = parse_oracle_output(oracle_output) if isinstance(oracle_output, str) else oracle_output
    entries = extract_candidate_entries(data)

    allowed = {item.id for item in filtered_catalog}
    lookup = {item.id: item for item in filtered_catalog}
    for item in full_catalog or []:
        if item.id in allowed:
            lookup[item.id] = item
    defaults = _STAGE_DEFAULTS[stage]

    candidates: list[MatchCandidate] = []
    seen: set[str] = set()
    for entry in entries:
        item_id = _entry_id(entry)
        if item_id is None:
            logger.info("Dropping oracle candidate without a career path id")
            continue
        if item_id not in allowed:
            logger.info("Dropping oracle candidate with unknown career path '%s'", item_id)
            continue
        if item_id in seen:
            logger.debug("Dropping duplicate oracle candidate '%s'", item_id)
            continue
        has_score, raw_score = _entry_score(entry)
        if not has_score:
            logger.info("Dropping oracle candidate '%s' without a score", item_id)
            continue
        seen.add(item_id)

        reasoning = entry.get("reasoning")
        candidates.append(
            MatchCandidate(
                catalog_item_id=item_id,
                score=raw_score,
                reasoning=(
                    str(reasoning).strip()
                    if reasoning is not None and str(reasoning).strip()
                    else f"Good fit for a {stage.value} profile"
                ),
                strengths=_list_or_default(entry.get("strengths"), defaults["strengths"]),
                development_areas=_list_or_default(
                    entry.get("developmentAreas", entry.get("development_areas")),
                    defaults["development_areas"],
                ),
                recommendations=_list_or_default(
                    entry.get("recommendations"), defaults["recommendations"]
                ),
                source="oracle",
            )
        )

    logger.info("Reconciled %d of %d oracle candidates", len(candidates), len(entries))
    return enrich_and_sort(candidates, lookup)


def enrich_and_sort(
    candidates: list[MatchCandidate],
    lookup: dict[str, CatalogItem],
) -> list[MatchCandidate]:
    """Attach full catalog records and sort by score descending (stable)."""
    enriched = [
        c.model_copy(update={"catalog_item": lookup.get(c.catalog_item_id, c.catalog_item)})
        for c in candidates
    ]
    return sorted(enriched, key=lambda c: c.score, reverse=True)
