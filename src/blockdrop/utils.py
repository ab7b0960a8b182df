"""Rendering helpers shared by the front-ends."""

from __future__ import annotations

from typing import List

from .board import MAX_COLOR_INDEX
from .pieces import RGB, color_of
from .session import Snapshot


BACKGROUND: RGB = (0, 0, 0)


def cell_color(color_index: int, background: RGB = BACKGROUND) -> RGB:
    """Return the colour to paint for a board colour index.

    ``0`` and anything outside ``1..7`` map to ``background`` rather than
    indexing the piece catalog out of range.
    """

    if 1 <= color_index <= MAX_COLOR_INDEX:
        return color_of(color_index - 1)
    return background


def render_grid(snapshot: Snapshot) -> List[List[int]]:
    """Return the snapshot's grid with the active piece overlaid.

    Cells covered by the falling piece receive its colour index.  Parts of the
    piece above the board are left out.
    """

    grid = [[int(v) for v in row] for row in snapshot.colors]
    height = len(grid)
    width = len(grid[0]) if grid else 0
    value = snapshot.active_type.color_index
    for x, y in snapshot.active_cells:
        if 0 <= y < height and 0 <= x < width:
            grid[y][x] = value
    return grid


def format_grid(grid: List[List[int]]) -> str:
    """Format a grid as text, ``#`` for blocks and ``.`` for empty cells."""

    return "\n".join("".join("#" if cell else "." for cell in row) for row in grid)
