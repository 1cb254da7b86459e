"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from career_match.core.config import (
    FallbackWeights,
    MatchingConfig,
    OracleConfig,
    PrefilterWeights,
    Settings,
)


class TestMatchingConfig:
    def test_defaults(self) -> None:
        m = MatchingConfig()
        assert m.target_match_count == 5
        assert m.prefilter_max_size == 25
        assert m.prefilter_floor == 12
        assert m.oracle_timeout_ms == 12000
        assert m.overall_budget_ms == 25000
        assert m.pin_current_path is False

    def test_target_count_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MatchingConfig(target_match_count=0)
        with pytest.raises(ValidationError):
            MatchingConfig(target_match_count=21)

    def test_floor_may_not_exceed_cap(self) -> None:
        with pytest.raises(ValidationError, match="prefilter_floor"):
            MatchingConfig(prefilter_max_size=10, prefilter_floor=11)

    def test_floor_equal_to_cap_allowed(self) -> None:
        m = MatchingConfig(prefilter_max_size=10, prefilter_floor=10)
        assert m.prefilter_floor == 10


class TestWeights:
    def test_prefilter_ratio(self) -> None:
        w = PrefilterWeights()
        assert w.skill > w.industry > w.interest > w.education

    def test_fallback_defaults(self) -> None:
        w = FallbackWeights()
        assert (w.skill, w.interest, w.industry, w.stage_fit) == (25.0, 20.0, 25.0, 10.0)
        assert w.max_jitter <= 10.0

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FallbackWeights(skill=-1)

    def test_jitter_bounded(self) -> None:
        with pytest.raises(ValidationError):
            FallbackWeights(max_jitter=11)


class TestOracleConfig:
    def test_defaults(self) -> None:
        o = OracleConfig()
        assert o.enabled is True
        assert o.provider == "gemini"
        assert o.model is None

    def test_provider_normalized(self) -> None:
        assert OracleConfig(provider="  Anthropic ").provider == "anthropic"

    def test_empty_provider_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OracleConfig(provider="   ")


class TestSettings:
    def test_all_defaults(self) -> None:
        s = Settings()
        assert s.database.path == "data/career_match.db"
        assert s.debug is False

    def test_from_yaml(self, tmp_path: Path) -> None:
        p = tmp_path / "settings.yaml"
        p.write_text(dedent("""\
            matching:
              target_match_count: 8
              prefilter_max_size: 30
            oracle:
              provider: openai
            fallback_weights:
              max_jitter: 0
        """))
        s = Settings.from_yaml(p)
        assert s.matching.target_match_count == 8
        assert s.matching.prefilter_max_size == 30
        assert s.oracle.provider == "openai"
        assert s.fallback_weights.max_jitter == 0.0

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        p = tmp_path / "settings.yaml"
        p.write_text("")
        assert Settings.from_yaml(p) == Settings()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        p = tmp_path / "settings.yaml"
        p.write_text("matching:\n  oracle_timeout_ms: 5\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(p)

    def test_example_settings_load(self) -> None:
        example = Path(__file__).parent.parent.parent / "config" / "settings.example.yaml"
        s = Settings.from_yaml(example)
        assert s.oracle.thinking_budget == 512
