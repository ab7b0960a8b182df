"""Command line entry point.

Run with: `python -m blockdrop`

By default the game runs headless: gravity is driven by a virtual clock for
``--ticks`` steps and the final frame is printed as ASCII art, which is a
handy smoke test without a display.  Pass ``--gui`` to play in a pygame
window instead.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .clock import ManualScheduler
from .config import FrontendConfig
from .piece_source import make_piece_source
from .session import GameSession
from .utils import format_grid, render_grid


LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--ticks", type=int, default=200, help="Gravity ticks to run headless.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the piece sequence.")
    parser.add_argument("--bag", action="store_true", help="Deal pieces from a shuffled 7-bag.")
    parser.add_argument("--gui", action="store_true", help="Open a pygame window instead.")
    parser.add_argument("--cell-size", type=int, default=30, help="Cell size in pixels (GUI only).")
    parser.add_argument("--fps", type=int, default=60, help="Frame rate cap (GUI only).")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING).",
    )
    return parser.parse_args(argv)


def run_headless(config: FrontendConfig, ticks: int) -> GameSession:
    """Let gravity play ``ticks`` steps on a virtual clock and return the session."""

    scheduler = ManualScheduler()
    session = GameSession(scheduler, make_piece_source(config.seed, config.bag))
    fired = 0
    while fired < ticks and not session.game_over:
        fired += scheduler.advance(session.tick_period_ms)
    LOGGER.info("Ran %d tick(s) in %d ms of game time", fired, scheduler.now_ms)
    return session


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s"
    )
    config = FrontendConfig.from_args(args)

    if args.gui:
        from .run_pygame import main as run_gui

        run_gui(config)
        return

    session = run_headless(config, args.ticks)
    snapshot = session.snapshot()
    print(format_grid(render_grid(snapshot)))
    print(f"Score: {snapshot.score}  Level: {snapshot.level}  Status: {snapshot.status.value}")


if __name__ == "__main__":
    main()
