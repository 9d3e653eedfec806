"""
Injectable randomness for the simulation engine.

Every random draw in the engine goes through a RandomSource, so tests can
replace the production source with a seeded or scripted one.
"""
import random
from typing import List, Protocol

from .encoding import Basis


class RandomSource(Protocol):
    def random(self) -> float:
        """Uniform float in [0, 1)."""
        ...


def default_source() -> RandomSource:
    """Production source backed by the operating system's entropy pool."""
    return random.SystemRandom()


def random_bit(rng: RandomSource) -> int:
    return 0 if rng.random() < 0.5 else 1


def random_basis(rng: RandomSource) -> Basis:
    return Basis.RECTILINEAR if rng.random() < 0.5 else Basis.DIAGONAL


def flip_with(rng: RandomSource, bit: int, probability: float) -> int:
    """Flips *bit* with the given probability."""
    if rng.random() < probability:
        return bit ^ 1
    return bit


def spawn_sources(rng: RandomSource, count: int) -> List[RandomSource]:
    """
    Creates *count* independent child sources, each seeded from *rng*.

    Seeds are drawn sequentially before any worker starts, so chunk results
    do not depend on thread scheduling.
    """
    return [random.Random(int(rng.random() * 2 ** 53)) for _ in range(count)]
