"""The falling piece and its collision rules."""

from __future__ import annotations

from typing import Optional, Tuple

from .board import Board
from .pieces import RGB, Offsets, PieceType, color_of, rotate_offsets, shape_of


class ActivePieceController:
    """Track the current piece's type, shape and position on ``board``.

    The piece's absolute cells are ``anchor + offset`` for each of its four
    offsets.  Rotation replaces the offsets; movement shifts the anchor.
    """

    def __init__(self, board: Board) -> None:
        self.board = board
        self._type: Optional[PieceType] = None
        self.next_type: Optional[PieceType] = None
        self._offsets: Optional[Offsets] = None
        self.anchor: Tuple[int, int] = (0, 0)

    def _require_piece(self) -> Offsets:
        if self._offsets is None:
            raise RuntimeError("No active piece has been spawned")
        return self._offsets

    @property
    def piece_type(self) -> PieceType:
        self._require_piece()
        assert self._type is not None
        return self._type

    @property
    def offsets(self) -> Offsets:
        return self._require_piece()

    @property
    def color_index(self) -> int:
        return self.piece_type.color_index

    @property
    def color(self) -> RGB:
        return color_of(self.piece_type)

    def spawn(self, piece_type: int, next_type: int) -> None:
        """Make ``piece_type`` the active piece at the top centre.

        ``next_type`` is remembered as the following piece.  No collision check
        is made here; callers test ``can_move(0, 0)`` straight afterwards to
        detect a blocked spawn.
        """

        self._type = PieceType(piece_type)
        self.next_type = PieceType(next_type)
        self._offsets = shape_of(self._type)
        self.anchor = (self.board.width // 2 - 2, 0)

    def cells(self) -> Tuple[Tuple[int, int], ...]:
        """Return the absolute board coordinates of the piece's four cells."""

        ax, ay = self.anchor
        return tuple((ax + ox, ay + oy) for ox, oy in self._require_piece())

    def _fits(self, offsets: Offsets, dx: int, dy: int) -> bool:
        ax, ay = self.anchor
        for ox, oy in offsets:
            x = ax + ox + dx
            y = ay + oy + dy
            if x < 0 or x >= self.board.width or y >= self.board.height:
                return False
            # Rows above the board are open space.
            if y >= 0 and self.board.is_occupied(x, y):
                return False
        return True

    def can_move(self, dx: int, dy: int) -> bool:
        """Return ``True`` if the piece could be shifted by ``(dx, dy)``."""

        return self._fits(self._require_piece(), dx, dy)

    def attempt_move(self, dx: int, dy: int) -> bool:
        """Shift the piece by ``(dx, dy)`` if it fits; report whether it moved."""

        if not self.can_move(dx, dy):
            return False
        ax, ay = self.anchor
        self.anchor = (ax + dx, ay + dy)
        return True

    def attempt_rotate(self) -> bool:
        """Rotate the piece a quarter turn in place if the result fits.

        The rotated shape is validated before it replaces the current one, so a
        blocked rotation leaves the piece exactly as it was.  No wall kicks
        are tried.
        """

        candidate = rotate_offsets(self._require_piece())
        if not self._fits(candidate, 0, 0):
            return False
        self._offsets = candidate
        return True
