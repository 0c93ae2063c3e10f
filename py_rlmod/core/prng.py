"""
Seeded random number generation for map generation.

A single MapPRNG instance is created per generation run and passed through
every stage, so a seed reproduces the whole run. All draws go through
``random()`` so the call counter reflects the exact consumption order.
"""

import math
from typing import List, MutableSequence, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class MapPRNG:
    """
    Mersenne Twister generator with the helpers the generator needs.

    Backed by NumPy's MT19937 bit generator.
    """

    def __init__(self, seed: int):
        """Initialize with an integer seed."""
        self.seed = seed
        self.call_count = 0
        self._generator = np.random.Generator(np.random.MT19937(seed))

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        return float(self._generator.random())

    def randint(self, low: int, high: int) -> int:
        """
        Random integer in [low, high).

        An empty range returns ``low`` without consuming a draw.
        """
        if high <= low:
            return low
        return low + int(self.random() * (high - low))

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + (high - low) * self.random()

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def shuffle(self, seq: MutableSequence[T]) -> None:
        """Shuffle a sequence in place (Fisher-Yates)."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.randint(0, i + 1)
            seq[i], seq[j] = seq[j], seq[i]

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        """Draw ``k`` distinct elements, in draw order."""
        pool = list(seq)
        if k > len(pool):
            raise ValueError("Sample larger than population")
        picked = []
        for _ in range(k):
            picked.append(pool.pop(self.randint(0, len(pool))))
        return picked

    def gauss(self, mean: float, std_dev: float) -> float:
        """Normally distributed value (Box-Muller transform)."""
        u1 = 1.0 - self.random()
        u2 = 1.0 - self.random()
        standard_normal = math.sqrt(-2.0 * math.log(u1)) * math.sin(2.0 * math.pi * u2)
        return mean + std_dev * standard_normal
