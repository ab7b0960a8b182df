"""Sources for the sequence of pieces handed to a session.

A session only needs something with a ``next_type()`` method.  Games use one
of the random sources; tests feed a fixed sequence so that every spawn is
known in advance.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Protocol

from .pieces import PieceType


class PieceSource(Protocol):
    """Anything that can name the next piece to spawn."""

    def next_type(self) -> PieceType:
        ...


class RandomPieceSource:
    """Pick each piece uniformly at random."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def next_type(self) -> PieceType:
        return self._rng.choice(list(PieceType))


class BagPieceSource:
    """Deal pieces from a shuffled bag holding one of each type.

    When the bag runs out a fresh one is shuffled, so every run of seven
    consecutive bags contains each piece exactly once.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self._bag: List[PieceType] = []

    def next_type(self) -> PieceType:
        if not self._bag:
            self._bag = list(PieceType)
            self._rng.shuffle(self._bag)
        return self._bag.pop()


class SequencePieceSource:
    """Return pieces from a fixed sequence.

    Raises ``IndexError`` once the sequence is used up unless ``cycle`` is
    set, in which case it starts over.
    """

    def __init__(self, types: Iterable[int], *, cycle: bool = False) -> None:
        self._types = [PieceType(t) for t in types]
        if not self._types:
            raise ValueError("Piece sequence must not be empty")
        self._cycle = cycle
        self._index = 0

    def next_type(self) -> PieceType:
        if self._index >= len(self._types):
            if not self._cycle:
                raise IndexError("Piece sequence exhausted")
            self._index = 0
        piece = self._types[self._index]
        self._index += 1
        return piece


def make_piece_source(seed: Optional[int] = None, bag: bool = False) -> PieceSource:
    """Return a bag source when ``bag`` is set, otherwise a uniform one."""

    if bag:
        return BagPieceSource(seed)
    return RandomPieceSource(seed)
