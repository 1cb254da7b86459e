"""Integration test: full match flow over SQLite with a mock LLM provider."""

import json
import time
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from career_match.core.config import DatabaseConfig, MatchingConfig, OracleConfig, Settings
from career_match.core.db import find_talent, init_db
from career_match.handler import build_dependencies, handle_request
from career_match.llm.base import LLMProvider
from career_match.pipeline.oracle import RankingOracle
from career_match.pipeline.orchestrator import MatchDependencies
from career_match.pipeline.scorer import FallbackScorer, no_jitter
from career_match.stores.importer import import_catalog, import_profiles

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _catalog_docs(unrelated: int = 9) -> list[dict[str, Any]]:
    docs: list[dict[str, Any]] = [
        {
            "$id": "p1",
            "title": "Data Analyst",
            "industry": "Technology",
            "requiredSkills": ["Python", "SQL"],
            "level": "Entry",
        }
    ]
    docs += [
        {
            "$id": f"u{i}",
            "title": f"Unrelated {i}",
            "industry": f"Industry{i}",
            "requiredSkills": [f"Skill{i}"],
            "level": "Senior",
        }
        for i in range(unrelated)
    ]
    return docs


TALENT = {
    "$id": "rec-1",
    "talentId": "talent-001",
    "fullname": "Ada Example",
    "careerStage": "Pathfinder",
    "testTaken": False,
}

SURVEY = {
    "currentSkills": ["Python"],
    "interests": ["Data"],
    "interestedFields": ["Technology"],
}


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database=DatabaseConfig(path=str(tmp_path / "match.db")),
        matching=MatchingConfig(oracle_timeout_ms=500),
        oracle=OracleConfig(enabled=False),
    )


def _seed(settings: Settings, catalog: list[dict[str, Any]] | None = None) -> None:
    conn = init_db(settings.database.path)
    import_catalog(conn, _catalog_docs() if catalog is None else catalog)
    import_profiles(conn, [dict(TALENT)])
    conn.close()


def _deps(settings: Settings, provider: MagicMock | None = None) -> MatchDependencies:
    deps = build_dependencies(settings, use_oracle=False)
    deps.fallback_scorer = FallbackScorer(settings.fallback_weights, jitter=no_jitter)
    if provider is not None:
        deps.oracle = RankingOracle(provider)
    return deps


def _provider(response: str | None = None, error: Exception | None = None) -> MagicMock:
    provider = MagicMock(spec=LLMProvider)
    provider.provider_id = "mock"
    if error is not None:
        provider.complete.side_effect = error
    else:
        provider.complete.return_value = response
    return provider


def _ids(envelope: dict[str, Any]) -> list[str]:
    return [m["catalogItemId"] for m in envelope["matches"]]


async def _run(
    settings: Settings,
    deps: MatchDependencies,
    survey: dict[str, Any] | None = None,
) -> dict[str, Any]:
    body = json.dumps({"talentId": "talent-001", "surveyResponses": survey or SURVEY})
    envelope, _ = await handle_request(body, deps, settings)
    await deps.writer.drain(timeout=5)
    return envelope


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestFallbackPath:
    async def test_failed_oracle_ranks_best_path_first(self, settings: Settings) -> None:
        _seed(settings)
        deps = _deps(settings, _provider(error=RuntimeError("quota exceeded")))

        envelope = await _run(settings, deps)

        assert envelope["success"] is True
        assert envelope["source"] == "fallback"
        assert _ids(envelope)[0] == "p1"
        assert envelope["matches"][0]["score"] >= 85
        assert len(envelope["matches"]) == min(settings.matching.target_match_count, 10)

    async def test_no_oracle_configured(self, settings: Settings) -> None:
        _seed(settings)
        envelope = await _run(settings, _deps(settings))
        assert envelope["source"] == "fallback"
        assert envelope["matchedCount"] == 5

    async def test_slow_oracle_falls_back(self, settings: Settings) -> None:
        _seed(settings)
        provider = _provider()

        def slow(*args: Any, **kwargs: Any) -> str:
            time.sleep(1.5)
            return "[]"

        provider.complete.side_effect = slow
        deps = _deps(settings, provider)

        started = time.monotonic()
        envelope = await _run(settings, deps)

        assert time.monotonic() - started < 1.5
        assert envelope["success"] is True
        assert envelope["source"] == "fallback"
        assert envelope["matchedCount"] == 5


class TestOraclePath:
    async def test_malformed_output_recovered(self, settings: Settings) -> None:
        _seed(settings)
        text = 'Here are your matches: ```json\n[{"pathId":"p1","score":150,}]\n```'
        deps = _deps(settings, _provider(text))

        envelope = await _run(settings, deps)

        first = envelope["matches"][0]
        assert first["catalogItemId"] == "p1"
        assert first["score"] == 100
        assert first["source"] == "oracle"
        assert envelope["source"] == "mixed"
        assert envelope["matchedCount"] == 5

    async def test_hallucinated_id_dropped(self, settings: Settings) -> None:
        _seed(settings)
        response = json.dumps(
            {
                "matches": [
                    {"careerPathId": "made-up", "matchScore": 99, "reasoning": "?"},
                    {"careerPathId": "p1", "matchScore": 91, "reasoning": "Python + data"},
                ]
            }
        )
        deps = _deps(settings, _provider(response))

        envelope = await _run(settings, deps)

        assert "made-up" not in _ids(envelope)
        assert _ids(envelope)[0] == "p1"
        assert envelope["matches"][0]["reasoning"] == "Python + data"
        assert len(set(_ids(envelope))) == len(_ids(envelope))

    async def test_full_oracle_answer(self, settings: Settings) -> None:
        _seed(settings)
        response = json.dumps(
            {"matches": [{"careerPathId": f"u{i}", "matchScore": 80 - i} for i in range(5)]}
        )
        deps = _deps(settings, _provider(response))

        envelope = await _run(settings, deps)

        assert envelope["source"] == "oracle"
        assert _ids(envelope) == ["u0", "u1", "u2", "u3", "u4"]
        assert all(m["catalogItem"]["title"].startswith("Unrelated") for m in envelope["matches"])


class TestPrefilter:
    async def test_cold_profile_sends_catalog_prefix(self, settings: Settings) -> None:
        catalog = [{"$id": f"c{i:02d}", "title": f"Path {i}"} for i in range(40)]
        _seed(settings, catalog)
        provider = _provider('{"matches": []}')
        deps = _deps(settings, provider)

        envelope = await _run(settings, deps, survey={"interests": []})

        assert envelope["totalCatalogSize"] == 40
        assert envelope["filteredCatalogSize"] == 25
        prompt = provider.complete.call_args.args[0]
        assert "c24:" in prompt
        assert "c25:" not in prompt
        assert prompt.index("c00:") < prompt.index("c01:") < prompt.index("c24:")


class TestFailures:
    async def test_missing_stage(self, settings: Settings) -> None:
        conn = init_db(settings.database.path)
        import_catalog(conn, _catalog_docs())
        import_profiles(conn, [{"talentId": "talent-001", "$id": "rec-1"}])
        conn.close()
        provider = _provider('{"matches": []}')
        deps = _deps(settings, provider)

        envelope = await _run(settings, deps)

        assert envelope["success"] is False
        assert envelope["error"] == "Career stage is required"
        provider.complete.assert_not_called()
        conn = init_db(settings.database.path)
        assert find_talent(conn, "talent-001").get("testTaken") is None  # type: ignore[union-attr]
        conn.close()

    async def test_unknown_talent(self, settings: Settings) -> None:
        _seed(settings)
        body = {"talentId": "nobody", "surveyResponses": SURVEY}
        envelope, status = await handle_request(body, _deps(settings), settings)
        assert status == 404
        assert envelope["success"] is False


class TestWriteBack:
    async def test_talent_marked_as_tested(self, settings: Settings) -> None:
        _seed(settings)
        deps = _deps(settings)

        await _run(settings, deps, survey={"skills": ["Python"], "unknownField": 1})

        conn = init_db(settings.database.path)
        doc = find_talent(conn, "talent-001")
        conn.close()
        assert doc is not None
        assert doc["testTaken"] is True
        assert doc["skills"] == ["Python"]
        assert doc["fullname"] == "Ada Example"
        assert "unknownField" not in doc
