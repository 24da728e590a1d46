"""Exception types shared by the parser, the race driver and the config loader."""
from __future__ import annotations


class FormatError(ValueError):
    """Malformed duration, timestamp or event line."""


class UnknownCompetitorError(LookupError):
    """An event refers to a competitor id that was never registered."""

    def __init__(self, competitor_id: int) -> None:
        super().__init__(f"unknown competitor {competitor_id}")
        self.competitor_id = competitor_id


class ConfigError(ValueError):
    """Race configuration could not be parsed or validated."""
