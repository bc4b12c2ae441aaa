"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from . import defaults
from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ScoreWeights(BaseModel):
    """Maximum contribution of each signal to the similarity score."""

    category: float = Field(defaults.CATEGORY_WEIGHT, ge=0, le=100)
    location: float = Field(defaults.LOCATION_WEIGHT, ge=0, le=100)
    keywords: float = Field(defaults.KEYWORD_WEIGHT, ge=0, le=100)

    model_config = {"frozen": True}


class MatchingConfig(BaseModel):
    """Scoring and selection rules shared by the score calculator and match finder.

    One instance is built at startup and injected everywhere it is needed;
    the model is frozen so it can be shared across worker threads.
    """

    threshold: int = Field(
        defaults.MATCH_THRESHOLD, ge=0, le=100, description="Minimum score for a candidate"
    )
    max_matches: int = Field(
        defaults.MAX_MATCHES_PER_PASS, ge=1, le=50, description="Candidates accepted per pass"
    )
    max_keywords: int = Field(
        defaults.MAX_KEYWORDS, ge=1, le=200, description="Keywords kept per item"
    )
    min_token_length: int = Field(
        defaults.MIN_TOKEN_LENGTH, ge=1, le=20, description="Shortest keyword token"
    )
    location_min_token_length: int = Field(
        defaults.LOCATION_MIN_TOKEN_LENGTH,
        ge=1,
        le=20,
        description="Shortest word that counts for the shared-word location tier",
    )
    weights: ScoreWeights = Field(default_factory=ScoreWeights)
    location_partial_factor: float = Field(
        0.7, ge=0, le=1, description="Share of location weight for a substring match"
    )
    location_token_factor: float = Field(
        0.5, ge=0, le=1, description="Share of location weight for a shared location word"
    )
    overlap_bonus: float = Field(
        0.3, ge=0, le=1, description="Extra keyword credit at full absolute overlap"
    )
    overlap_saturation: int = Field(
        5, ge=1, description="Shared keyword count at which the overlap bonus is maxed"
    )
    example_keywords: int = Field(
        5, ge=0, description="Shared keywords recorded in the score breakdown"
    )
    extra_stop_words: List[str] = Field(
        default_factory=list, description="Stop words added to the built-in list"
    )

    model_config = {"frozen": True}

    @field_validator("extra_stop_words")
    @classmethod
    def normalize_stop_words(cls, v: List[str]) -> List[str]:
        """Lower-case and strip extra stop words, dropping empties."""
        return [word.strip().lower() for word in v if word and word.strip()]

    @model_validator(mode="after")
    def validate_location_tiers(self):
        """A weaker location tier must never outscore a stronger one."""
        if self.location_token_factor > self.location_partial_factor:
            raise ValueError(
                "location_token_factor cannot exceed location_partial_factor"
            )
        return self

    @property
    def max_attainable_score(self) -> float:
        """Highest score any pair can reach once clamped to 100."""
        keyword_ceiling = self.weights.keywords * (1 + self.overlap_bonus)
        return min(100.0, self.weights.category + self.weights.location + keyword_ceiling)

    @property
    def stop_words(self) -> FrozenSet[str]:
        """Built-in stop words plus any configured extras."""
        if not self.extra_stop_words:
            return defaults.DEFAULT_STOP_WORDS
        return defaults.DEFAULT_STOP_WORDS | frozenset(self.extra_stop_words)


class ItemConfig(BaseModel):
    """Lifecycle settings applied to newly posted items."""

    ttl: str = Field("3d", description="How long a new item stays matchable")

    # Computed field
    ttl_seconds: Optional[int] = None

    @field_validator("ttl")
    @classmethod
    def validate_ttl(cls, v: str) -> str:
        """TTL must parse and lie between one hour and 90 days."""
        try:
            validate_duration_range(
                parse_duration(v), min_seconds=3600, max_seconds=90 * 86400, label="Item TTL"
            )
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_ttl_seconds(self):
        self.ttl_seconds = parse_duration(self.ttl)
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the match engine."""

    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    items: ItemConfig = Field(default_factory=ItemConfig)
    sweep_interval: str = Field("5m", description="Interval of the pending-item sweep")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Computed field
    sweep_interval_seconds: Optional[int] = None

    @field_validator("sweep_interval")
    @classmethod
    def validate_sweep_interval(cls, v: str) -> str:
        """Sweep interval must parse and lie between one minute and 24 hours."""
        try:
            validate_duration_range(
                parse_duration(v), min_seconds=60, max_seconds=86400, label="Sweep interval"
            )
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_fields(self):
        self.sweep_interval_seconds = parse_duration(self.sweep_interval)
        return self
