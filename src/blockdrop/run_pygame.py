"""pygame front-end for the game.

The front-end is deliberately thin: it owns the window, translates key
presses into session commands, turns pygame timer events into clock ticks
and paints :class:`~blockdrop.session.Snapshot` objects.  All game rules live
in :mod:`blockdrop.session`.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Callable, Dict, List, Optional, Tuple

import pygame

from .board import Board
from .clock import Callback
from .config import FrontendConfig
from .piece_source import make_piece_source
from .pieces import shape_of
from .session import GameSession, Snapshot
from .utils import cell_color


LOGGER = logging.getLogger(__name__)

GRID_LINE = (50, 50, 50)
PANEL_BG = (51, 51, 51)
PANEL_BORDER = (128, 128, 128)
OVERLAY_BG = (0, 0, 0, 230)
TEXT_COLOR = (255, 255, 255)


class PygameScheduler:
    """Recurring callbacks backed by ``pygame.time.set_timer``.

    Each registration arms a timer with an event carrying a unique ``handle``
    attribute.  The game loop passes each event to :meth:`dispatch`, which
    runs the callback registered under that handle.  Cancelled handles are
    never issued again, so timer events still sitting in the queue are
    ignored even when a later registration reuses their event type.
    """

    def __init__(self) -> None:
        self._registrations: Dict[int, Tuple[int, Callback]] = {}
        self._free_types: List[int] = []
        self._next_handle = 1

    def register(self, period_ms: int, callback: Callback) -> int:
        event_type = self._free_types.pop() if self._free_types else pygame.event.custom_type()
        handle = self._next_handle
        self._next_handle += 1
        self._registrations[handle] = (event_type, callback)
        pygame.time.set_timer(pygame.event.Event(event_type, handle=handle), period_ms)
        return handle

    def cancel(self, handle: int) -> None:
        registration = self._registrations.pop(handle, None)
        if registration is None:
            return
        event_type, _ = registration
        pygame.time.set_timer(event_type, 0)
        self._free_types.append(event_type)

    def dispatch(self, event: pygame.event.Event) -> bool:
        """Run the callback registered for ``event``; report whether one ran."""

        registration = self._registrations.get(getattr(event, "handle", None))
        if registration is None or registration[0] != event.type:
            return False
        registration[1]()
        return True


KEY_COMMANDS: Dict[int, Callable[[GameSession], bool]] = {
    pygame.K_LEFT: GameSession.move_left,
    pygame.K_RIGHT: GameSession.move_right,
    pygame.K_DOWN: GameSession.move_down,
    pygame.K_UP: GameSession.rotate,
    pygame.K_p: GameSession.toggle_pause,
    pygame.K_n: GameSession.new_game,
}


def handle_key(event: pygame.event.Event, session: GameSession) -> bool:
    """Apply the command bound to ``event.key``; report whether state changed.

    Movement keys are passed through regardless of pause or game over; the
    session ignores them itself.
    """

    command = KEY_COMMANDS.get(getattr(event, "key", None))
    if command is None:
        return False
    return command(session)


class Renderer:
    """Paint snapshots onto a pygame surface."""

    def __init__(self, config: Optional[FrontendConfig] = None) -> None:
        self.config = config or FrontendConfig()
        self._font: Optional[pygame.font.Font] = None

    @property
    def board_size(self) -> tuple[int, int]:
        cell = self.config.cell_size
        return Board.width * cell, Board.height * cell

    @property
    def preview_size(self) -> int:
        return self.config.preview_cells * self.config.cell_size // 2

    @property
    def window_size(self) -> tuple[int, int]:
        width, height = self.board_size
        return width + self.preview_size + 10, height

    def _cell_rect(self, x: int, y: int) -> pygame.Rect:
        cell = self.config.cell_size
        return pygame.Rect(x * cell, y * cell, cell - 1, cell - 1)

    def draw_board(self, surface: pygame.Surface, snapshot: Snapshot) -> None:
        """Render the landed cells."""

        for y in range(Board.height):
            for x in range(Board.width):
                rect = self._cell_rect(x, y)
                pygame.draw.rect(surface, cell_color(int(snapshot.colors[y, x])), rect)
                pygame.draw.rect(surface, GRID_LINE, rect, 1)

    def draw_active(self, surface: pygame.Surface, snapshot: Snapshot) -> None:
        """Render the falling piece, skipping cells above the board."""

        color = snapshot.active_color
        for x, y in snapshot.active_cells:
            if y >= 0 and 0 <= x < Board.width:
                pygame.draw.rect(surface, color, self._cell_rect(x, y))

    def draw_preview(self, surface: pygame.Surface, snapshot: Snapshot) -> None:
        """Render the next piece in the side panel at half scale."""

        left = self.board_size[0] + 5
        size = self.preview_size
        small = self.config.cell_size // 2
        pygame.draw.rect(surface, PANEL_BG, pygame.Rect(left, 0, size, size))
        pygame.draw.rect(surface, PANEL_BORDER, pygame.Rect(left + 5, 5, size - 10, size - 10), 1)
        for ox, oy in shape_of(snapshot.next_type):
            rect = pygame.Rect(left + (ox + 1) * small, (oy + 1) * small, small - 1, small - 1)
            pygame.draw.rect(surface, snapshot.next_color, rect)

    def draw_game_over(self, surface: pygame.Surface) -> None:
        """Render the game-over banner over the middle of the board."""

        width, height = self.board_size
        box = pygame.Rect(width // 2 - 100, height // 2 - 40, 200, 80)
        overlay = pygame.Surface(box.size, pygame.SRCALPHA)
        overlay.fill(OVERLAY_BG)
        surface.blit(overlay, box.topleft)
        pygame.draw.rect(surface, PANEL_BORDER, box, 1)
        if self._font is None:
            pygame.font.init()
            self._font = pygame.font.SysFont("sans", 40, bold=True)
        text = self._font.render("GAME OVER", True, TEXT_COLOR)
        surface.blit(text, text.get_rect(center=box.center))

    def draw(self, surface: pygame.Surface, snapshot: Snapshot) -> None:
        surface.fill((25, 25, 25))
        self.draw_board(surface, snapshot)
        self.draw_active(surface, snapshot)
        self.draw_preview(surface, snapshot)
        if snapshot.game_over:
            self.draw_game_over(surface)


def caption_for(snapshot: Snapshot) -> str:
    """Return the window caption showing score, level and pause state."""

    paused = "Paused - " if snapshot.paused else ""
    return f"Blockdrop - {paused}Score: {snapshot.score}  Level: {snapshot.level}"


class GameRunner:
    """Manage the window, the event loop and one game session."""

    def __init__(self, config: Optional[FrontendConfig] = None) -> None:
        self.config = config or FrontendConfig()
        self.renderer = Renderer(self.config)
        self.scheduler = PygameScheduler()
        self._running = False
        self._screen: Optional[pygame.Surface] = None
        self._session: Optional[GameSession] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def session(self) -> Optional[GameSession]:
        return self._session

    def _handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self._running = False
        elif event.type == pygame.KEYDOWN and self._session is not None:
            handle_key(event, self._session)
        else:
            self.scheduler.dispatch(event)

    async def _run_loop(self) -> None:
        # Bind SDL to the page canvas when running in a browser.
        os.environ.setdefault("SDL_HINT_EMSCRIPTEN_CANVAS_ELEMENT_ID", "#canvas")
        os.environ.setdefault("SDL_HINT_EMSCRIPTEN_KEYBOARD_ELEMENT", "#canvas")
        pygame.init()
        self._screen = pygame.display.set_mode(self.renderer.window_size)
        clock = pygame.time.Clock()

        self._session = GameSession(self.scheduler, make_piece_source(self.config.seed, self.config.bag))
        LOGGER.info("Game started")

        self._running = True
        while self._running:
            clock.tick(self.config.fps)
            for event in pygame.event.get():
                self._handle_event(event)

            snapshot = self._session.snapshot()
            self.renderer.draw(self._screen, snapshot)
            pygame.display.set_caption(caption_for(snapshot))
            pygame.display.flip()

            # Yield to the host event loop to keep the UI responsive.
            await asyncio.sleep(0)

        self._session.clock.stop()
        pygame.quit()
        LOGGER.info("Game stopped")

    def start(self) -> None:
        if self._running:
            LOGGER.info("Game already running")
            return
        asyncio.run(self._run_loop())

    def stop(self) -> None:
        if not self._running:
            LOGGER.info("Stop ignored: game not running")
            return
        self._running = False


def main(config: Optional[FrontendConfig] = None) -> None:
    """Open the window and play until it is closed."""

    GameRunner(config).start()


if __name__ == "__main__":  # pragma: no cover - manual execution only
    main()
