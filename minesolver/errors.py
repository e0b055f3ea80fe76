"""Exception types raised by the solver."""

from fractions import Fraction
from typing import Optional


class MineHit(Exception):
    """A guessed cell turned out to be mined; the game is lost."""

    def __init__(self, index: int, success_probability: Optional[Fraction] = None) -> None:
        self.index = index
        self.success_probability = success_probability
        super().__init__(f"Hit a mine at cell {index}.")


class DeductionError(RuntimeError):
    """A cell proven safe by deduction was mined. Deduction must be sound."""


class InconsistentBoardError(RuntimeError):
    """The known constraints admit no mine placement at all."""
