"""
Race configuration schema using Pydantic v2
Validates the JSON config consumed by the race driver
"""

import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .durations import parse_duration, parse_time_of_day
from .errors import ConfigError

logger = logging.getLogger(__name__)


class RaceConfig(BaseModel):
    """Static race parameters, loaded once per run"""

    laps: int = Field(..., ge=1, description="Number of main laps")
    lap_len: float = Field(..., alias="lapLen", ge=0, description="Main lap length (m)")
    penalty_len: float = Field(
        ..., alias="penaltyLen", ge=0, description="Penalty loop length per miss (m)"
    )
    firing_lines: int = Field(
        ..., alias="firingLines", ge=1, description="Number of firing lines"
    )
    start: timedelta = Field(..., description="Nominal start time of day (HH:MM:SS)")
    start_delta: timedelta = Field(
        ..., alias="startDelta", description="Start window after the scheduled start"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("start", mode="before")
    @classmethod
    def validate_start(cls, v: Any) -> Any:
        """Parse start time of day (HH:MM:SS[.mmm])"""
        if isinstance(v, str):
            return parse_time_of_day(v.strip())
        return v

    @field_validator("start_delta", mode="before")
    @classmethod
    def validate_start_delta(cls, v: Any) -> Any:
        """Parse start window duration (HH:MM:SS[.mmm])"""
        if isinstance(v, str):
            return parse_duration(v.strip())
        return v

    @field_validator("start_delta")
    @classmethod
    def validate_start_delta_sign(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("startDelta must not be negative")
        return v

    @property
    def race_day(self) -> timedelta:
        """Midnight of the race day the start time belongs to"""
        return timedelta(days=self.start.days)

    def scheduled_start_for(self, time_of_day: timedelta) -> timedelta:
        """Combine a drawn time of day with the race date"""
        return self.race_day + time_of_day


def load_config(path: Union[str, Path]) -> RaceConfig:
    """
    Load and validate the race configuration file

    Returns:
        RaceConfig: Validated configuration

    Raises:
        ConfigError: If the file is not valid JSON or fails validation
        OSError: If the file cannot be read
    """
    raw = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Config {path} is not valid JSON: {e}")
        raise ConfigError(f"error parsing config JSON: {e}") from e
    try:
        return RaceConfig.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Config validation failed: {e}")
        raise ConfigError(f"Invalid config: {e}") from e


__all__ = [
    "RaceConfig",
    "load_config",
]
