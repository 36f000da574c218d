"""
Runner settings.

Environment variable configuration for fixture runs. CLI flags override
these values.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunnerConfig(BaseSettings):
    """Fixture runner configuration, read from NANOMONEY_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="NANOMONEY_",
        extra="ignore",
        frozen=True,
    )

    percent_rates: bool = Field(
        default=False,
        description="Rates are percentages (15.11 for 15.11%) and are shifted before use"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    fail_on_mismatch: bool = Field(
        default=True,
        description="Exit non-zero when any fixture mismatches, fails or is malformed"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return level
