import numpy as np
import pytest

from galaxy import GalaxyParameters


class FixedRandom:
    """Random source that returns the same value for every draw."""
    def __init__(self, value=0.5):
        self.value = value
        self.calls = []

    def random(self, size=None):
        self.calls.append(size)
        return np.full(size, self.value, dtype=np.float64)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def params():
    return GalaxyParameters()
