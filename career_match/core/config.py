"""Configuration models and YAML loader for the career matcher."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/career_match.db"


class MatchingConfig(BaseModel):
    """Pipeline sizes and time budgets.

    Values differ between deployments (K was tuned anywhere from 3 to 8,
    the pre-filter cap from 20 to 50) so none of them are constants.
    """

    target_match_count: int = Field(default=5, ge=1, le=20)
    prefilter_max_size: int = Field(default=25, ge=1, le=200)
    prefilter_floor: int = Field(default=12, ge=0)
    oracle_timeout_ms: int = Field(default=12000, ge=100)
    overall_budget_ms: int = Field(default=25000, ge=1000)
    current_path_timeout_ms: int = Field(default=2000, ge=100)
    catalog_page_size: int = Field(default=100, ge=1, le=1000)
    catalog_max_items: int = Field(default=1000, ge=1)
    max_free_text_length: int = Field(default=200, ge=1)
    pin_current_path: bool = False
    pinned_path_score: int = Field(default=95, ge=0, le=100)

    @model_validator(mode="after")
    def floor_within_cap(self) -> "MatchingConfig":
        if self.prefilter_floor > self.prefilter_max_size:
            msg = (
                f"prefilter_floor ({self.prefilter_floor}) must not exceed "
                f"prefilter_max_size ({self.prefilter_max_size})"
            )
            raise ValueError(msg)
        return self


class PrefilterWeights(BaseModel):
    """Weights for the cheap overlap score used to trim the catalog."""

    skill: float = Field(default=3.0, ge=0.0)
    industry: float = Field(default=2.0, ge=0.0)
    interest: float = Field(default=1.0, ge=0.0)
    education: float = Field(default=0.5, ge=0.0)


class FallbackWeights(BaseModel):
    """Points awarded by the deterministic fallback scorer."""

    base: float = Field(default=25.0, ge=0.0)
    skill: float = Field(default=25.0, ge=0.0)
    learning: float = Field(default=15.0, ge=0.0)
    interest: float = Field(default=20.0, ge=0.0)
    industry: float = Field(default=25.0, ge=0.0)
    stage_fit: float = Field(default=10.0, ge=0.0)
    max_jitter: float = Field(default=5.0, ge=0.0, le=10.0)


class OracleConfig(BaseModel):
    """Which LLM provider ranks the catalog."""

    enabled: bool = True
    provider: str = "gemini"
    model: str | None = None
    thinking_budget: int | None = Field(default=512, ge=0)
    max_output_tokens: int = Field(default=4096, ge=64)
    json_output: bool = True

    @field_validator("provider")
    @classmethod
    def provider_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "provider must not be empty"
            raise ValueError(msg)
        return v.strip().lower()


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    prefilter_weights: PrefilterWeights = Field(default_factory=PrefilterWeights)
    fallback_weights: FallbackWeights = Field(default_factory=FallbackWeights)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    debug: bool = False

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
