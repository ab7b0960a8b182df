"""Falling-block puzzle game: board, pieces, scoring and the game session."""

from .board import Board, Cell
from .pieces import PieceType, color_of, orientations, rotate_offsets, shape_of
from .piece_source import BagPieceSource, RandomPieceSource, SequencePieceSource
from .active_piece import ActivePieceController
from .scoring import Scoring, saturating_add, tick_period_for
from .clock import GameClock, ManualScheduler, Scheduler
from .session import GameSession, GameStatus, Snapshot, TickResult
from .utils import cell_color, render_grid

__all__ = [
    "ActivePieceController",
    "BagPieceSource",
    "Board",
    "Cell",
    "GameClock",
    "GameSession",
    "GameStatus",
    "ManualScheduler",
    "PieceType",
    "RandomPieceSource",
    "Scheduler",
    "Scoring",
    "SequencePieceSource",
    "Snapshot",
    "TickResult",
    "cell_color",
    "color_of",
    "orientations",
    "render_grid",
    "rotate_offsets",
    "saturating_add",
    "shape_of",
    "tick_period_for",
]
