import numpy as np
import pytest

from stipplify import Field


@pytest.fixture
def uniform_field():
    return Field(np.ones((10, 10)))


@pytest.fixture
def corner_field():
    weights = np.zeros((10, 10))
    weights[9, 9] = 1.0
    return Field(weights)


@pytest.fixture
def random_field():
    rng = np.random.default_rng(7)
    weights = rng.random((24, 32))
    weights[weights < 0.2] = 0.0
    return Field(weights)


class ConstantRng:
    """Stands in for np.random.Generator; every draw returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self, size=None):
        return np.full(size, self.value, dtype=np.float64)


@pytest.fixture
def constant_rng():
    return ConstantRng
