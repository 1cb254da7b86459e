"""Tests for the ranking oracle wrapper and prompt assembly."""

from datetime import date
from unittest.mock import MagicMock, patch

from career_match.core.config import OracleConfig
from career_match.core.schemas import CatalogItem, UserProfile
from career_match.llm.base import LLMProvider
from career_match.pipeline.oracle import RankingOracle, build_oracle
from career_match.pipeline.prompt import (
    RANKING_SYSTEM_PROMPT,
    build_catalog_summary,
    build_profile_section,
    build_ranking_prompt,
)


def _profile(**kwargs: object) -> UserProfile:
    defaults: dict[str, object] = {
        "stage": "Trailblazer",
        "education": "BSc Statistics",
        "current_skills": ["Python", "SQL"],
        "interests": ["Data"],
        "interested_fields": ["Technology"],
    }
    defaults.update(kwargs)
    return UserProfile(**defaults)


CATALOG = [
    CatalogItem(
        id="p1",
        title="Data Analyst",
        industry="Technology",
        required_skills=["Python", "SQL", "Excel", "Tableau"],
        required_interests=["Data", "Puzzles", "Business"],
        level="Entry",
    ),
    CatalogItem(id="p2", title="Chef", industry="Hospitality"),
]


class TestRankingOracle:
    async def test_rank_calls_provider_with_system_prompt(self) -> None:
        provider = MagicMock(spec=LLMProvider)
        provider.complete.return_value = '{"matches": []}'
        oracle = RankingOracle(provider, model="some-model")

        assert await oracle.rank("prompt text") == '{"matches": []}'
        provider.complete.assert_called_once_with(
            "prompt text", "some-model", system=RANKING_SYSTEM_PROMPT
        )

    def test_provider_id(self) -> None:
        provider = MagicMock(spec=LLMProvider)
        provider.provider_id = "mock"
        assert RankingOracle(provider).provider_id == "mock"


class TestBuildOracle:
    def test_disabled(self) -> None:
        assert build_oracle(OracleConfig(enabled=False)) is None

    def test_gemini_gets_thinking_budget(self) -> None:
        with patch("career_match.pipeline.oracle.get_provider") as mock_get:
            oracle = build_oracle(OracleConfig(provider="gemini", thinking_budget=64))
        mock_get.assert_called_once_with(
            "gemini",
            max_output_tokens=4096,
            json_output=True,
            request_timeout=None,
            thinking_budget=64,
        )
        assert isinstance(oracle, RankingOracle)

    def test_other_providers_get_no_thinking_budget(self) -> None:
        with patch("career_match.pipeline.oracle.get_provider") as mock_get:
            build_oracle(OracleConfig(provider="openai", model="gpt-4o"), request_timeout=12.0)
        assert mock_get.call_args.args == ("openai",)
        assert "thinking_budget" not in mock_get.call_args.kwargs
        assert mock_get.call_args.kwargs["request_timeout"] == 12.0

    def test_real_registry(self) -> None:
        oracle = build_oracle(OracleConfig(provider="ollama"))
        assert oracle is not None
        assert oracle.provider_id == "ollama"


class TestPrompt:
    def test_system_prompt_is_career_advisor(self) -> None:
        assert "career advisor" in RANKING_SYSTEM_PROMPT
        assert "JSON" in RANKING_SYSTEM_PROMPT

    def test_profile_section(self) -> None:
        profile = _profile(
            date_of_birth=date(1990, 1, 1),
            degree_program="Applied Maths",
            career_goals="Lead a data team",
        )
        text = build_profile_section(profile)
        assert text.startswith("PROFILE: Trailblazer")
        assert "BSc Statistics (Applied Maths)" in text
        assert "SKILLS: Current: Python, SQL" in text
        assert "FIELDS: Technology" in text
        assert "GOALS: Lead a data team" in text
        assert "CURRENT:" not in text

    def test_profile_section_with_current_path(self) -> None:
        profile = _profile(years_experience=3, seniority_level="Mid", reason_for_change="Growth")
        text = build_profile_section(profile, CATALOG[0])
        assert "CURRENT: Data Analyst (3 years, Mid level), Change reason: Growth" in text

    def test_empty_lists_marked(self) -> None:
        text = build_profile_section(UserProfile(stage="Pathfinder"))
        assert "Learning: not specified" in text
        assert "Age: ?" in text

    def test_catalog_summary_is_compact(self) -> None:
        lines = build_catalog_summary(CATALOG).splitlines()
        assert len(lines) == 2
        assert lines[0].startswith('p1: "Data Analyst" | Technology')
        assert "Skills: Python,SQL,Excel |" in lines[0]
        assert "Interests: Data,Puzzles |" in lines[0]
        assert lines[0].endswith("Level: Entry")
        assert "Tableau" not in lines[0]

    def test_ranking_prompt(self) -> None:
        prompt = build_ranking_prompt(_profile(), CATALOG, 5)
        assert "CAREER PATHS AVAILABLE (2):" in prompt
        assert "TOP 5 BEST MATCHES" in prompt
        assert '"careerPathId"' in prompt
        assert '"matchScore"' in prompt
