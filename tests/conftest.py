from datetime import date

import numpy as np
import pytest

from denial_sim.config import SimulationConfig
from denial_sim.pipeline import simulate


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def small_config():
    """One calendar year, a few hundred claims."""
    return SimulationConfig(
        start_date=date(2023, 1, 1),
        end_date=date(2023, 12, 31),
        total_claims=600,
        seed=123,
    )


@pytest.fixture
def small_run(small_config):
    return simulate(small_config)


class FixedRng:
    """Stand-in generator returning a scripted sequence from random()."""

    def __init__(self, *values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


@pytest.fixture
def fixed_rng():
    return FixedRng
