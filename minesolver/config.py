"""Solver configuration, difficulty presets and logging setup."""

import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple, Union

from .board import Board
from .utils import TOPOLOGIES

# Standard difficulty levels: name -> (width, height, mines)
LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}

DEFAULT_LEVEL = "expert"

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


@dataclass(frozen=True)
class SolverConfig:
    """
    Everything needed to set up one solving session.

    Attributes:
        width: Board width, must be > 0.
        height: Board height, must be > 0.
        mines_count: Mines on the board, 0 <= mines_count < width * height.
        topology: Neighborhood rule: "square", "wrap" or "hex".
        seed: Seed for mine placement and tie-breaking; None for fresh entropy.
        record_steps: Record a board snapshot after every move (for replay).
    """

    width: int = LEVELS[DEFAULT_LEVEL][0]
    height: int = LEVELS[DEFAULT_LEVEL][1]
    mines_count: int = LEVELS[DEFAULT_LEVEL][2]
    topology: str = "square"
    seed: Optional[int] = None
    record_steps: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive.")
        if self.mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if self.mines_count >= self.width * self.height:
            raise ValueError("At least one cell must be free of mines.")
        if self.topology not in TOPOLOGIES:
            raise ValueError(
                f"topology must be one of {sorted(TOPOLOGIES)}, got {self.topology!r}."
            )

    @classmethod
    def from_level(cls, level: str, **overrides: object) -> "SolverConfig":
        """Build a config from a named difficulty level plus keyword overrides."""
        try:
            width, height, mines = LEVELS[level.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown level {level!r}; expected one of {sorted(LEVELS)}."
            ) from None
        return replace(
            cls(width=width, height=height, mines_count=mines), **overrides  # type: ignore[arg-type]
        )

    def rng(self, offset: int = 0) -> random.Random:
        """A random source derived from the seed (independent streams via offset)."""
        if self.seed is None:
            return random.Random()
        return random.Random(self.seed + offset)

    def make_board(self) -> Board:
        """Create a fresh random board for this configuration."""
        return Board.random(
            self.width,
            self.height,
            self.mines_count,
            topology=self.topology,
            rng=self.rng(),
        )


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Library modules only create loggers; applications (the CLI, the demo)
    call this once to see the output.
    """
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger("minesolver")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
