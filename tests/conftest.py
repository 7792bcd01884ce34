import os
import sys

import numpy as np
import pytest

# Ensure repository root is on sys.path so `import lotto_engine` works without installing
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from lotto_engine.config import EngineConfig, reset_config  # noqa: E402
from lotto_engine.models import draws_from_numbers  # noqa: E402


def make_rows(count: int, seed: int = 2024):
    """Deterministic synthetic history rows of 6 distinct numbers"""
    gen = np.random.default_rng(seed)
    return [sorted(int(n) for n in gen.choice(np.arange(1, 46), size=6, replace=False)) for _ in range(count)]


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def sample_rows():
    return make_rows(120)


@pytest.fixture
def sample_draws(sample_rows):
    """120 weekly draws starting 2002-12-07"""
    return draws_from_numbers(sample_rows)


@pytest.fixture
def fast_config():
    """Config with Monte-Carlo sizes small enough for unit tests"""
    return EngineConfig(payout_iterations=2_000, payout_batch_size=500, payout_workers=2)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    # Keep LOTTO_ENGINE_* variables from the outer shell out of the tests
    for key in list(os.environ):
        if key.startswith("LOTTO_ENGINE_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
