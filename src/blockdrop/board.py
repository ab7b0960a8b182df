"""Board representation for the playfield."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .config import HEIGHT, WIDTH


Grid = NDArray[np.uint8]

# Highest colour index a landed piece can leave behind (seven types, 1-based).
MAX_COLOR_INDEX = 7


@dataclass(frozen=True)
class Cell:
    """A single board square.

    ``color_index`` is ``0`` for an empty cell and ``piece type + 1``
    otherwise, so ``occupied`` is always ``color_index != 0``.
    """

    occupied: bool
    color_index: int


EMPTY = Cell(occupied=False, color_index=0)


def create_empty_grid() -> Grid:
    """Return a new empty board grid filled with zeros."""

    return np.zeros((HEIGHT, WIDTH), dtype=np.uint8)


class Board:
    """Fixed 10x20 grid of landed cells.

    The grid is indexed ``[y, x]`` with row ``0`` at the top.  Each entry holds
    the colour index of the cell; occupancy is derived from it.
    """

    width: int = WIDTH
    height: int = HEIGHT

    def __init__(self) -> None:
        self.grid: Grid = create_empty_grid()

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        """Build a board from ``height`` rows of ``width`` colour indices."""

        grid = np.asarray(rows, dtype=np.int64)
        if grid.shape != (cls.height, cls.width):
            raise ValueError(f"Expected a {cls.height}x{cls.width} grid, got {grid.shape}")
        if np.any(grid < 0) or np.any(grid > MAX_COLOR_INDEX):
            raise ValueError("Colour indices must be between 0 and 7")
        board = cls()
        board.grid = grid.astype(np.uint8)
        return board

    def reset(self) -> None:
        """Empty every cell."""

        self.grid = create_empty_grid()

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        """Return the cell at ``(x, y)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        if not self._in_bounds(x, y):
            raise IndexError("Cell out of bounds")
        value = int(self.grid[y, x])
        return Cell(occupied=value != 0, color_index=value)

    def is_occupied(self, x: int, y: int) -> bool:
        """Return ``True`` if the cell at ``(x, y)`` holds a landed block.

        Rows above the board (``y < 0``) are always free so that pieces can
        spawn and rotate partly outside the visible grid.

        Raises:
            IndexError: If ``x`` is off the board or ``y`` is below it.
        """

        if y < 0:
            return False
        if not self._in_bounds(x, y):
            raise IndexError("Cell out of bounds")
        return bool(self.grid[y, x] != 0)

    def commit(self, cells: Iterable[Tuple[int, int]], color_index: int) -> None:
        """Write a landed piece's cells into the grid.

        Cells above the board are skipped.  All coordinates are validated
        before anything is written, so a bad call leaves the grid untouched.

        Raises:
            ValueError: If ``color_index`` is not a piece colour (1..7).
            IndexError: If a cell is off the sides or below the board.
        """

        if not 1 <= color_index <= MAX_COLOR_INDEX:
            raise ValueError(f"Invalid colour index: {color_index}")
        visible = []
        for x, y in cells:
            if not 0 <= x < self.width or y >= self.height:
                raise IndexError("Block out of bounds")
            if y >= 0:
                visible.append((x, y))
        for x, y in visible:
            self.grid[y, x] = np.uint8(color_index)

    def clear_full_rows(self) -> int:
        """Remove completed rows and return how many were removed.

        Rows are scanned from the bottom up.  When a full row is found the
        rows above it drop by one and row ``0`` becomes empty; the same index
        is then examined again because the row that moved into it may also be
        full.
        """

        cleared = 0
        y = self.height - 1
        while y >= 0:
            if np.all(self.grid[y] != 0):
                cleared += 1
                self.grid[1 : y + 1] = self.grid[0:y].copy()
                self.grid[0] = 0
                continue
            y -= 1
        return cleared

    def occupied_count(self) -> int:
        """Return the number of occupied cells."""

        return int(np.count_nonzero(self.grid))

    def rows(self) -> Grid:
        """Return a copy of the grid."""

        return self.grid.copy()
