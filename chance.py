"""
Compute Wars - Random Draws

Every random decision in the engine goes through an rng object exposing
random() -> float in [0, 1). The ambient random module is the default;
tests hand in random.Random(seed) or a scripted stand-in.
"""

import random
from typing import Any, Optional, Sequence


def default_rng(rng: Optional[Any] = None) -> Any:
    return rng if rng is not None else random


def chance(rng, probability: float) -> bool:
    """True with the given probability."""
    return rng.random() < probability


def pick(rng, options: Sequence[Any]) -> Any:
    """Uniform choice from a non-empty sequence."""
    return options[int(rng.random() * len(options))]


def roll_int(rng, low: int, span: int) -> int:
    """Uniform integer in [low, low + span)."""
    return low + int(rng.random() * span)


def roll_float(rng, low: float, high: float) -> float:
    """Uniform float in [low, high)."""
    return low + rng.random() * (high - low)
