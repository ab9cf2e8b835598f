"""
Shared fixtures: fresh states and scripted random sources.
"""

import pytest

from state import create_initial_state


class ScriptedRng:
    """
    Stand-in for random.Random that replays a fixed list of draws.

    Once the script runs out every further draw returns `default`.
    With the default of 0.99 no probability check ever fires and
    every pick() lands on the last option.
    """

    def __init__(self, values=(), default=0.99):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


@pytest.fixture
def state():
    return create_initial_state()


@pytest.fixture
def quiet_rng():
    """No events, no encounters, no oracle."""
    return ScriptedRng()


@pytest.fixture
def scripted():
    """Factory for scripted rngs: scripted([0.1, 0.5], default=0.99)."""
    return ScriptedRng
