"""Tests for core data models and coercion helpers."""

from datetime import date

import pytest
from pydantic import ValidationError

from career_match.core.schemas import (
    CatalogItem,
    Level,
    MatchCandidate,
    MatchResult,
    Stage,
    UserProfile,
    as_string_tuple,
    coerce_score,
    parse_level,
)


class TestStage:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Pathfinder", Stage.PATHFINDER),
            ("pathfinder", Stage.PATHFINDER),
            ("TRAILBLAZER", Stage.TRAILBLAZER),
            ("HorizonChanger", Stage.HORIZON_CHANGER),
            ("Horizon Changer", Stage.HORIZON_CHANGER),
            ("horizon_changer", Stage.HORIZON_CHANGER),
            ("horizon-changer", Stage.HORIZON_CHANGER),
        ],
    )
    def test_parse_lenient(self, raw: str, expected: Stage) -> None:
        assert Stage.parse(raw) is expected

    def test_parse_stage_passthrough(self) -> None:
        assert Stage.parse(Stage.TRAILBLAZER) is Stage.TRAILBLAZER

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown career stage 'Astronaut'"):
            Stage.parse("Astronaut")


class TestParseLevel:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Entry", Level.ENTRY),
            ("entry-level", Level.ENTRY),
            ("Junior", Level.ENTRY),
            ("Mid-Level", Level.MID),
            ("Senior", Level.SENIOR),
            ("Lead Engineer", Level.SENIOR),
        ],
    )
    def test_known(self, raw: str, expected: Level) -> None:
        assert parse_level(raw) is expected

    def test_unknown_and_none(self) -> None:
        assert parse_level("wizard") is None
        assert parse_level(None) is None


class TestAsStringTuple:
    def test_none(self) -> None:
        assert as_string_tuple(None) == ()

    def test_scalar(self) -> None:
        assert as_string_tuple("Python") == ("Python",)

    def test_dedupes_case_insensitively_keeping_first(self) -> None:
        assert as_string_tuple(["Python", "python", " SQL ", "", None, "sql"]) == (
            "Python",
            "SQL",
        )


class TestCoerceScore:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (85, 85),
            (150, 100),
            (-5, 0),
            (72.6, 73),
            ("85", 85),
            ("85%", 85),
            ("score: 7.5", 8),
            ("n/a", 50),
            (None, 50),
            (True, 50),
            (float("nan"), 50),
        ],
    )
    def test_values(self, raw: object, expected: int) -> None:
        assert coerce_score(raw) == expected

    def test_custom_default(self) -> None:
        assert coerce_score(None, default=0) == 0


class TestUserProfile:
    def test_minimal(self) -> None:
        p = UserProfile(stage="pathfinder")
        assert p.stage is Stage.PATHFINDER
        assert p.current_skills == ()
        assert p.is_cold

    def test_camel_case_input(self) -> None:
        p = UserProfile.model_validate(
            {"stage": "Trailblazer", "currentSkills": ["Python"], "interestedFields": "Tech"}
        )
        assert p.current_skills == ("Python",)
        assert p.interested_fields == ("Tech",)
        assert not p.is_cold

    def test_skills_to_learn_alone_is_cold(self) -> None:
        assert UserProfile(stage="Pathfinder", skills_to_learn=["Go"]).is_cold

    def test_frozen(self) -> None:
        p = UserProfile(stage="Pathfinder")
        with pytest.raises(ValidationError):
            p.education = "BSc"  # type: ignore[misc]

    def test_bad_stage(self) -> None:
        with pytest.raises(ValidationError):
            UserProfile(stage="Astronaut")

    def test_age(self) -> None:
        p = UserProfile(stage="Pathfinder", date_of_birth=date(2000, 6, 15))
        assert p.age(today=date(2024, 6, 14)) == 23
        assert p.age(today=date(2024, 6, 15)) == 24
        assert UserProfile(stage="Pathfinder").age() is None


class TestCatalogItem:
    def test_dollar_id_alias(self) -> None:
        item = CatalogItem.model_validate(
            {
                "$id": "p1",
                "title": "Data Analyst",
                "industry": "Technology",
                "requiredSkills": ["Python", "SQL"],
                "level": "Entry",
            }
        )
        assert item.id == "p1"
        assert item.required_skills == ("Python", "SQL")
        assert item.level is Level.ENTRY

    def test_career_path_id_alias(self) -> None:
        assert CatalogItem.model_validate({"careerPathId": "p2"}).id == "p2"

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CatalogItem(id="  ")

    def test_unknown_level_becomes_none(self) -> None:
        assert CatalogItem(id="x", level="wizard").level is None

    def test_salary_range_from_dict(self) -> None:
        item = CatalogItem.model_validate({"id": "x", "salaryRange": {"min": 40000, "max": 60000}})
        assert item.salary_range == (40000.0, 60000.0)

    @pytest.mark.parametrize(
        "raw", [{"min": 50000}, {"max": 70000}, {}, [50000, None], (None, None)]
    )
    def test_partial_salary_range_becomes_none(self, raw: object) -> None:
        item = CatalogItem.model_validate({"id": "x", "title": "Nurse", "salaryRange": raw})
        assert item.salary_range is None
        assert item.title == "Nurse"

    def test_salary_range_ordered(self) -> None:
        with pytest.raises(ValidationError, match="salary_range"):
            CatalogItem(id="x", salary_range=(60000, 40000))


class TestMatchCandidate:
    def test_score_clamped(self) -> None:
        assert MatchCandidate(catalog_item_id="p1", score=150).score == 100
        assert MatchCandidate(catalog_item_id="p1", score="-3").score == 0

    def test_lists_truncated(self) -> None:
        c = MatchCandidate(
            catalog_item_id="p1",
            strengths=["a", "b", "c", "d"],
            development_areas=["a", "b", "c", "d"],
            recommendations=["a", "b", "c", "d", "e"],
        )
        assert len(c.strengths) == 3
        assert len(c.development_areas) == 3
        assert len(c.recommendations) == 4

    def test_defaults(self) -> None:
        c = MatchCandidate(catalog_item_id="p1")
        assert c.score == 50
        assert c.source == "oracle"
        assert c.catalog_item is None


class TestMatchResult:
    def test_dump_uses_camel_case(self) -> None:
        result = MatchResult(
            matches=(MatchCandidate(catalog_item_id="p1", score=90),),
            total_catalog_size=10,
            filtered_catalog_size=5,
        )
        dumped = result.model_dump(by_alias=True, mode="json", exclude_none=True)
        assert dumped["totalCatalogSize"] == 10
        assert dumped["filteredCatalogSize"] == 5
        assert dumped["matches"][0]["catalogItemId"] == "p1"
        assert "message" not in dumped
