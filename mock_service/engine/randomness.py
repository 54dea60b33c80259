"""Injectable randomness sources for the business rules.

Rules never reach for ambient random state; they draw from the source
handed to them so tests can pin the sequence.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence, TypeVar

import numpy as np


T = TypeVar("T")


class RandomSource(ABC):
    """Uniform draws used by the transforms."""
    
    @abstractmethod
    def random(self) -> float:
        """Uniform float in [0, 1)."""
    
    def randint(self, low: int, high: int) -> int:
        """Uniform integer in the inclusive range [low, high]."""
        return low + int(self.random() * (high - low + 1))
    
    def uniform(self, low: float, high: float) -> float:
        """Uniform float in [low, high)."""
        return low + self.random() * (high - low)
    
    def choice(self, options: Sequence[T]) -> T:
        """Uniformly pick one element of a non-empty sequence."""
        return options[self.randint(0, len(options) - 1)]


class SeededRandomSource(RandomSource):
    """numpy ``Generator`` backed source; ``seed=None`` draws OS entropy."""
    
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)
    
    def random(self) -> float:
        return float(self._rng.random())
    
    def randint(self, low: int, high: int) -> int:
        return int(self._rng.integers(low, high, endpoint=True))


class ScriptedRandomSource(RandomSource):
    """Replays a fixed sequence of [0, 1) floats, cycling when exhausted."""
    
    def __init__(self, values: Iterable[float]):
        self.values = [float(v) for v in values]
        if not self.values:
            raise ValueError("ScriptedRandomSource needs at least one value")
        for value in self.values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Scripted value {value} outside [0, 1)")
        self._position = 0
    
    def random(self) -> float:
        value = self.values[self._position % len(self.values)]
        self._position += 1
        return value


def create_random_source(seed: Optional[int] = None) -> RandomSource:
    """Production factory: seeded when a seed is configured, entropy otherwise."""
    return SeededRandomSource(seed)
