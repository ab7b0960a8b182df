"""Game constants and front-end configuration."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional


# Dimensions of the playfield.
WIDTH = 10
HEIGHT = 20

# Gravity period at level 1; higher levels divide it by the level number.
BASE_TICK_MS = 500
# Points needed per level before advancing (``level * LEVEL_THRESHOLD``).
LEVEL_THRESHOLD = 5000
MAX_LEVEL = 10
POINTS_PER_LINE = 100
# Largest score a session will ever report.
MAX_SCORE = 2**31 - 1


@dataclass
class FrontendConfig:
    """Tunables for the pygame and command line front-ends."""

    cell_size: int = 30
    preview_cells: int = 5
    fps: int = 60
    seed: Optional[int] = None
    bag: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "FrontendConfig":
        """Build a config from parsed command line arguments.

        Attributes missing from ``args`` keep their defaults.
        """

        defaults = cls()
        return cls(
            cell_size=getattr(args, "cell_size", defaults.cell_size),
            preview_cells=getattr(args, "preview_cells", defaults.preview_cells),
            fps=getattr(args, "fps", defaults.fps),
            seed=getattr(args, "seed", defaults.seed),
            bag=getattr(args, "bag", defaults.bag),
            log_level=getattr(args, "log_level", defaults.log_level),
        )
