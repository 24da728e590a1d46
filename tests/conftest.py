import pytest

from biathlon_core import RaceConfig


@pytest.fixture
def config() -> RaceConfig:
    return RaceConfig(
        laps=2,
        lap_len=1000,
        penalty_len=100,
        firing_lines=1,
        start="10:00:00",
        start_delta="00:00:30",
    )
