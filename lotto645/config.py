"""
Pipeline configuration for the Lotto 6/45 predictor.

Window sizes, trial counts and paths used across the prediction pipeline.
Defaults are the reference policy; every field can be overridden through
LOTTO645_* environment variables (see PipelineConfig.from_env).
"""
import os
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")
CSV_PATH = os.path.join(DATA_DIR, "lotto645_results.csv")
SNAPSHOT_PATH = os.path.join(DATA_DIR, "snapshot.joblib")
PREDICTIONS_LOG = os.path.join(DATA_DIR, "predictions_log.csv")

MIN_NUMBER = 1
MAX_NUMBER = 45
ALL_NUMBERS = list(range(MIN_NUMBER, MAX_NUMBER + 1))
NUMBERS_PER_DRAW = 6

NUM_COLS = ["num1", "num2", "num3", "num4", "num5", "num6"]

FEATURE_COLUMNS = [
    "recency",
    "freq_short",
    "freq_mid",
    "freq_total_main",
    "freq_total_bonus",
]

_ENV_PREFIX = "LOTTO645_"


class PipelineConfig(BaseSettings):
    """Knobs for one retraining run."""

    short_window: int = Field(default=10, ge=1)
    mid_window: int = Field(default=25, ge=1)
    trials_per_family: int = Field(default=3, ge=1)
    sets_to_generate: int = Field(default=5, ge=1)
    pad_short_sets: bool = False
    # joblib workers across families, and inside each family across numbers
    n_jobs: int = 1
    per_number_jobs: int = 1
    random_seed: Optional[int] = None
    log_level: str = "INFO"
    data_dir: str = DATA_DIR

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_ignore_empty=True,
        frozen=True,
    )

    @model_validator(mode="after")
    def _check_windows(self):
        if self.short_window > self.mid_window:
            raise ValueError(
                f"short_window ({self.short_window}) must not exceed "
                f"mid_window ({self.mid_window})"
            )
        return self

    @property
    def csv_path(self):
        return os.path.join(self.data_dir, os.path.basename(CSV_PATH))

    @property
    def snapshot_path(self):
        return os.path.join(self.data_dir, os.path.basename(SNAPSHOT_PATH))

    @property
    def predictions_log(self):
        return os.path.join(self.data_dir, os.path.basename(PREDICTIONS_LOG))

    @property
    def min_history(self):
        """Smallest history that yields at least one training row."""
        return self.mid_window + 1

    def with_overrides(self, **overrides):
        """Return a validated copy with the non-None overrides applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**values)

    @classmethod
    def from_env(cls, environ=None):
        """
        Build a config from LOTTO645_* variables.

        Reads the process environment unless a mapping is given. Empty values
        fall back to the defaults; malformed ones raise a ValidationError.
        """
        if environ is None:
            return cls()
        values = {}
        for name in cls.model_fields:
            raw = environ.get(_ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)
