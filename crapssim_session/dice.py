"""
Dice sources for the roll engine.

The engine never touches a global RNG: every roll draws from a DiceSource
handed to it, so tests can replay fixed sequences and batch workers can
each own a private generator.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple, Union

from .errors import DiceSequenceExhausted

Roll = Tuple[int, int]


class DiceSource(ABC):
    @abstractmethod
    def roll(self) -> Roll:
        """Return two independent die faces, each 1-6."""


class RandomDice(DiceSource):
    """Two uniform draws per roll from a private ``random.Random``."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random(seed)

    def roll(self) -> Roll:
        return self.rng.randint(1, 6), self.rng.randint(1, 6)


class SequenceDice(DiceSource):
    """
    Replays a fixed sequence. Entries may be (die1, die2) pairs or plain
    totals 2-12, which are split into a valid pair.
    """

    def __init__(self, sequence: Iterable[Union[int, Roll]]):
        self.sequence: List[Roll] = [_as_pair(item) for item in sequence]
        self.index = 0

    def roll(self) -> Roll:
        if self.index >= len(self.sequence):
            raise DiceSequenceExhausted(f"Dice sequence exhausted after {self.index} rolls")
        pair = self.sequence[self.index]
        self.index += 1
        return pair

    @property
    def remaining(self) -> int:
        return len(self.sequence) - self.index


def _as_pair(item: Union[int, Roll]) -> Roll:
    if isinstance(item, int):
        if not 2 <= item <= 12:
            raise ValueError(f"Dice total out of range: {item}")
        first = min(6, item - 1)
        return first, item - first
    die1, die2 = item
    if not (1 <= die1 <= 6 and 1 <= die2 <= 6):
        raise ValueError(f"Invalid dice faces: {item!r}")
    return int(die1), int(die2)
