"""
Application configuration for AAC usage insights.

Provides environment-aware settings with conservative defaults. All anomaly
thresholds are configurable to avoid hard-coded "magic numbers".
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class DetectorConfig(BaseModel):
	"""
	Thresholds for the per-metric Z-score test.

	Rationale:
	- A warning at |Z| >= 2 catches roughly the outer 5% of a normal day.
	- Critical at |Z| >= 3 is reserved for days that need a caregiver's attention.
	- min_sample_days is the warm-up before a baseline is trusted.
	"""

	warning_threshold: float = Field(2.0, gt=0.0, description="|Z| for warning severity")
	critical_threshold: float = Field(3.0, gt=0.0, description="|Z| for critical severity")
	min_sample_days: int = Field(7, ge=0, description="Days of history a baseline needs")
	enable_day_of_week_adjustment: bool = Field(
		True, description="Scale the baseline mean by its day-of-week factor"
	)

	def validate_thresholds(self) -> None:
		"""Raise ConfigurationError if the thresholds cannot produce a sane step function."""
		if self.warning_threshold <= 0 or self.critical_threshold <= 0:
			raise ConfigurationError("Z-score thresholds must be positive")
		if self.warning_threshold >= self.critical_threshold:
			raise ConfigurationError(
				f"warning_threshold ({self.warning_threshold}) must be below "
				f"critical_threshold ({self.critical_threshold})"
			)


class DuplicatePolicy(str, Enum):
	"""What persisting does when an anomaly already exists for (child, metric, date)."""

	APPEND = "append"
	SKIP = "skip"
	REPLACE = "replace"


class StoreConfig(BaseModel):
	"""
	Anomaly store configuration.

	Notes:
	- duplicate_policy: APPEND keeps every re-detection as an audit trail.
	- value_precision: decimal digits kept for expected/actual/deviation.
	- default_unacknowledged_limit / default_recent_days: query defaults.
	"""

	duplicate_policy: DuplicatePolicy = DuplicatePolicy.APPEND
	value_precision: int = Field(4, ge=0, le=10)
	default_unacknowledged_limit: int = Field(20, ge=1)
	default_recent_days: int = Field(7, ge=0)


class JobConfig(BaseModel):
	"""
	Detection job configuration.

	Notes:
	- max_workers: 1 processes children sequentially; more uses a bounded thread pool.
	- child_timeout_seconds: how long to wait for one child before counting it as failed.
	"""

	max_workers: int = Field(1, ge=1)
	child_timeout_seconds: Optional[float] = Field(None, gt=0.0)


class AnomalyConfig(BaseModel):
	"""
	Anomaly detection configuration.
	"""

	detector: DetectorConfig = DetectorConfig()
	store: StoreConfig = StoreConfig()
	job: JobConfig = JobConfig()


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.

	Nested values use a double underscore, e.g.
	AAC_ANOMALY__DETECTOR__WARNING_THRESHOLD=2.5
	"""

	model_config = SettingsConfigDict(
		env_prefix="AAC_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	database_url: str = Field("sqlite:///aac_insights.db", description="SQLAlchemy database URL")
	anomaly: AnomalyConfig = AnomalyConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
