"""Request handler: JSON payload in, JSON envelope and status code out."""

import json
import logging
import time
import traceback
from typing import Any

from pydantic import ValidationError

from career_match.core.config import Settings
from career_match.core.db import init_db
from career_match.core.errors import InputError, MatchError
from career_match.pipeline.oracle import build_oracle
from career_match.pipeline.orchestrator import MatchDependencies, MatchRequest, run_match
from career_match.pipeline.scorer import FallbackScorer
from career_match.stores.sqlite import SqliteCatalogStore, SqliteProfileStore

logger = logging.getLogger(__name__)

Envelope = dict[str, Any]


def build_dependencies(settings: Settings, *, use_oracle: bool = True) -> MatchDependencies:
    """Construct the process-wide collaborators from settings."""
    conn = init_db(settings.database.path)
    return MatchDependencies(
        profile_store=SqliteProfileStore(conn),
        catalog_store=SqliteCatalogStore(conn),
        fallback_scorer=FallbackScorer(settings.fallback_weights),
        oracle=(
            build_oracle(settings.oracle, settings.matching.oracle_timeout_ms / 1000)
            if use_oracle
            else None
        ),
    )


def parse_request(body: str | bytes | dict[str, Any]) -> MatchRequest:
    """Validate the inbound payload. Raises InputError."""
    try:
        data = json.loads(body) if isinstance(body, (str, bytes)) else body
    except json.JSONDecodeError as e:
        msg = f"Request body is not valid JSON: {e}"
        raise InputError(msg) from e
    if not isinstance(data, dict):
        msg = "Request body must be a JSON object"
        raise InputError(msg)
    try:
        return MatchRequest.model_validate(data)
    except ValidationError as e:
        msg = "Missing required parameters: talentId and surveyResponses"
        raise InputError(msg) from e


async def handle_request(
    body: str | bytes | dict[str, Any],
    deps: MatchDependencies,
    settings: Settings,
) -> tuple[Envelope, int]:
    """Run one match request and always return a well-formed envelope."""
    started = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        request = parse_request(body)
        result = await run_match(request, deps, settings)
    except MatchError as e:
        logger.warning("Career matching failed after %dms: %s", elapsed_ms(), e)
        return _error_envelope(str(e), e, elapsed_ms(), settings.debug), e.status_code
    except Exception as e:
        logger.exception("Career matching crashed after %dms", elapsed_ms())
        return (
            _error_envelope("Failed to generate career matches", e, elapsed_ms(), settings.debug),
            500,
        )

    envelope: Envelope = {"success": True}
    envelope.update(result.model_dump(by_alias=True, mode="json", exclude_none=True))
    envelope["matchedCount"] = len(result.matches)
    envelope["executionTimeMs"] = elapsed_ms()
    logger.info("Total execution time: %dms", envelope["executionTimeMs"])
    return envelope, 200


def _error_envelope(message: str, exc: Exception, elapsed: int, debug: bool) -> Envelope:
    envelope: Envelope = {
        "success": False,
        "error": message,
        "errorType": type(exc).__name__,
        "executionTimeMs": elapsed,
    }
    if debug:
        envelope["details"] = "".join(traceback.format_exception(exc))
    return envelope
