"""
Dice source with an injectable random generator.
"""

import random
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Roll:
    """A pair of dice values."""

    die1: int
    die2: int

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    @property
    def is_double(self) -> bool:
        return self.die1 == self.die2

    def __str__(self) -> str:
        return f"{self.die1}+{self.die2}={self.total}"


class Dice:
    """Two six-sided dice."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def roll(self) -> Roll:
        return Roll(self.rng.randint(1, 6), self.rng.randint(1, 6))
