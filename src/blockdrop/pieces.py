"""Piece catalog: the seven shapes and their colours.

Offsets are ``(x, y)`` pairs relative to a piece's anchor, with ``y`` growing
downwards.  The catalog is read-only; rotation produces new offset tuples
rather than changing these.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Tuple

Offset = Tuple[int, int]
Offsets = Tuple[Offset, Offset, Offset, Offset]
RGB = Tuple[int, int, int]


class PieceType(IntEnum):
    """The seven piece shapes.

    The integer value doubles as the catalog index; the board stores
    ``value + 1`` so that ``0`` can mean an empty cell.
    """

    SQUARE = 0
    LINE = 1
    Z = 2
    S = 3
    T = 4
    L = 5
    J = 6

    @property
    def color_index(self) -> int:
        """Value written to the board when a piece of this type lands."""

        return int(self) + 1


_SHAPES: Dict[PieceType, Offsets] = {
    PieceType.SQUARE: ((0, 0), (0, 1), (1, 0), (1, 1)),
    PieceType.LINE: ((0, 0), (0, 1), (0, 2), (0, 3)),
    PieceType.Z: ((0, 0), (0, 1), (1, 1), (1, 2)),
    PieceType.S: ((0, 1), (0, 2), (1, 0), (1, 1)),
    PieceType.T: ((0, 0), (0, 1), (0, 2), (1, 1)),
    PieceType.L: ((0, 0), (1, 0), (2, 0), (2, 1)),
    PieceType.J: ((0, 1), (1, 1), (2, 0), (2, 1)),
}

_COLORS: Dict[PieceType, RGB] = {
    PieceType.SQUARE: (255, 255, 0),
    PieceType.LINE: (0, 255, 255),
    PieceType.Z: (255, 0, 0),
    PieceType.S: (0, 255, 0),
    PieceType.T: (255, 0, 255),
    PieceType.L: (255, 128, 0),
    PieceType.J: (0, 0, 255),
}


def shape_of(piece_type: int) -> Offsets:
    """Return the spawn offsets for ``piece_type``.

    Raises:
        ValueError: If ``piece_type`` is not one of the seven types.
    """

    return _SHAPES[PieceType(piece_type)]


def color_of(piece_type: int) -> RGB:
    """Return the RGB colour for ``piece_type``.

    Raises:
        ValueError: If ``piece_type`` is not one of the seven types.
    """

    return _COLORS[PieceType(piece_type)]


def rotate_offsets(offsets: Offsets) -> Offsets:
    """Return ``offsets`` rotated a quarter turn about the local origin.

    Each ``(x, y)`` maps to ``(y, -x)``.  No normalisation is applied, so the
    result may contain negative offsets; four applications give back the
    input exactly.
    """

    return tuple((y, -x) for x, y in offsets)  # type: ignore[return-value]


def orientations(piece_type: int) -> List[Offsets]:
    """Return the four offset sets reachable from the spawn shape by rotation."""

    state = shape_of(piece_type)
    result = [state]
    for _ in range(3):
        state = rotate_offsets(state)
        result.append(state)
    return result


__all__ = [
    "Offset",
    "Offsets",
    "PieceType",
    "RGB",
    "color_of",
    "orientations",
    "rotate_offsets",
    "shape_of",
]
