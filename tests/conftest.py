# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import numpy as np
import pytest

from lobsim.market import Simulation


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(seed)


@pytest.fixture
def sim(seed):
    """Fresh simulation at tick 0 with the fixed seed."""
    return Simulation(seed=seed)
