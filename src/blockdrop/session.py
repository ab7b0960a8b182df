"""Game session: the state machine behind a single game.

A :class:`GameSession` owns the board, the falling piece, the score and the
gravity clock.  Front-ends call the command methods in response to input,
the clock calls :meth:`GameSession.tick`, and renderers read an immutable
:class:`Snapshot`.

All entry points assume they are called one at a time.  Hosts that deliver
input and timer callbacks from different threads should construct the
session with ``threadsafe=True`` so every command and tick runs under one
re-entrant lock.
"""

from __future__ import annotations

import functools
import logging
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple, TypeVar

import numpy as np

from .active_piece import ActivePieceController
from .board import Board, Cell, Grid
from .clock import GameClock, Scheduler
from .piece_source import PieceSource, RandomPieceSource
from .pieces import RGB, PieceType, color_of
from .scoring import Scoring


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class GameStatus(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class TickResult(str, Enum):
    """Outcome of one gravity step."""

    CONTINUE = "continue"
    LANDED = "landed"
    GAME_OVER = "game_over"


@dataclass(frozen=True, eq=False)
class Snapshot:
    """Read-only view of a session for renderers."""

    colors: Grid
    active_cells: Tuple[Tuple[int, int], ...]
    active_type: PieceType
    next_type: PieceType
    score: int
    level: int
    tick_period_ms: int
    status: GameStatus

    @property
    def paused(self) -> bool:
        return self.status is GameStatus.PAUSED

    @property
    def game_over(self) -> bool:
        return self.status is GameStatus.GAME_OVER

    @property
    def active_color(self) -> RGB:
        return color_of(self.active_type)

    @property
    def next_color(self) -> RGB:
        return color_of(self.next_type)

    @property
    def occupied(self) -> np.ndarray:
        """Boolean ``(height, width)`` occupancy mask."""

        return self.colors != 0

    def cell(self, x: int, y: int) -> Cell:
        """Return the landed cell at ``(x, y)``.

        Raises:
            IndexError: If the coordinates are outside the board.
        """
        height, width = self.colors.shape
        if not (0 <= x < width and 0 <= y < height):
            raise IndexError("Cell out of bounds")
        value = int(self.colors[y, x])
        return Cell(occupied=value != 0, color_index=value)


def _serialized(method: Callable[..., T]) -> Callable[..., T]:
    @functools.wraps(method)
    def wrapper(self: "GameSession", *args, **kwargs) -> T:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class GameSession:
    """One game from :meth:`new_game` until game over.

    Parameters
    ----------
    scheduler:
        Recurring-callback capability used by the gravity clock.
    piece_source:
        Supplies piece types.  Defaults to a uniformly random source.
    threadsafe:
        Guard every command, tick and snapshot with a single lock.

    The session starts a game as soon as it is constructed.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        piece_source: Optional[PieceSource] = None,
        *,
        threadsafe: bool = False,
    ) -> None:
        self._lock = threading.RLock() if threadsafe else nullcontext()
        self.piece_source: PieceSource = piece_source or RandomPieceSource()
        self.board = Board()
        self.active = ActivePieceController(self.board)
        self.scoring = Scoring()
        self.clock = GameClock(scheduler, self._on_clock)
        self._status = GameStatus.PLAYING
        self.new_game()

    # Read-only state --------------------------------------------------
    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def paused(self) -> bool:
        return self._status is GameStatus.PAUSED

    @property
    def game_over(self) -> bool:
        return self._status is GameStatus.GAME_OVER

    @property
    def score(self) -> int:
        return self.scoring.score

    @property
    def level(self) -> int:
        return self.scoring.level

    @property
    def tick_period_ms(self) -> int:
        return self.scoring.tick_period_ms

    # Internal helpers -------------------------------------------------
    def _spawn(self, piece_type: PieceType) -> bool:
        """Spawn ``piece_type`` with a fresh next piece; report whether it fits."""

        self.active.spawn(piece_type, self.piece_source.next_type())
        return self.active.can_move(0, 0)

    def _land(self) -> TickResult:
        piece_type = self.active.piece_type
        self.board.commit(self.active.cells(), piece_type.color_index)
        lines = self.board.clear_full_rows()
        points = self.scoring.on_lines_cleared(lines)
        LOGGER.debug(
            "Landed %s, cleared %d row(s) for %d points", piece_type.name, lines, points
        )
        if self.scoring.maybe_level_up():
            LOGGER.info(
                "Level %d reached, tick period %d ms",
                self.scoring.level,
                self.scoring.tick_period_ms,
            )
            self.clock.reschedule(self.scoring.tick_period_ms)

        assert self.active.next_type is not None
        if not self._spawn(self.active.next_type):
            self._status = GameStatus.GAME_OVER
            self.clock.stop()
            LOGGER.info("Game over. Score: %d, level: %d", self.score, self.level)
            return TickResult.GAME_OVER
        return TickResult.LANDED

    def _on_clock(self) -> None:
        self.tick()

    def _move(self, dx: int, dy: int) -> bool:
        if self._status is not GameStatus.PLAYING:
            return False
        return self.active.attempt_move(dx, dy)

    # Commands ---------------------------------------------------------
    @_serialized
    def new_game(self) -> bool:
        """Reset everything and start playing at level 1."""

        self.clock.stop()
        self.board.reset()
        self.scoring.reset()
        self._spawn(self.piece_source.next_type())
        self._status = GameStatus.PLAYING
        self.clock.start(self.scoring.tick_period_ms)
        LOGGER.info("New game started")
        return True

    @_serialized
    def toggle_pause(self) -> bool:
        """Switch between playing and paused.  Has no effect after game over."""

        if self._status is GameStatus.PLAYING:
            self._status = GameStatus.PAUSED
        elif self._status is GameStatus.PAUSED:
            self._status = GameStatus.PLAYING
        else:
            return False
        LOGGER.debug("Status is now %s", self._status.value)
        return True

    @_serialized
    def move_left(self) -> bool:
        return self._move(-1, 0)

    @_serialized
    def move_right(self) -> bool:
        return self._move(1, 0)

    @_serialized
    def move_down(self) -> bool:
        return self._move(0, 1)

    @_serialized
    def rotate(self) -> bool:
        if self._status is not GameStatus.PLAYING:
            return False
        return self.active.attempt_rotate()

    @_serialized
    def tick(self) -> TickResult:
        """Advance gravity by one row, landing the piece when it cannot fall."""

        if self._status is GameStatus.PAUSED:
            return TickResult.CONTINUE
        if self._status is GameStatus.GAME_OVER:
            return TickResult.GAME_OVER
        if self.active.attempt_move(0, 1):
            return TickResult.CONTINUE
        return self._land()

    @_serialized
    def snapshot(self) -> Snapshot:
        colors = self.board.rows()
        colors.flags.writeable = False
        assert self.active.next_type is not None
        return Snapshot(
            colors=colors,
            active_cells=self.active.cells(),
            active_type=self.active.piece_type,
            next_type=self.active.next_type,
            score=self.scoring.score,
            level=self.scoring.level,
            tick_period_ms=self.scoring.tick_period_ms,
            status=self._status,
        )
