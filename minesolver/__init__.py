"""
Minesweeper Solver

A set-based Minesweeper solver that combines two strategies:
- Deduction: comparing overlapping mine-count constraints until no cell is left
  that can be proven safe or mined
- Probabilistic guessing: exact mine probabilities from every consistent
  arrangement of the frontier, weighted by the ways to fill the rest of the board
"""

from .board import Board, Cell
from .config import LEVELS, SolverConfig, configure_logging
from .errors import DeductionError, InconsistentBoardError, MineHit
from .frontier import Frontier
from .hypothesis import Hypothesis, MineState
from .inference import MineWeights, weigh_hypotheses, weigh_regions
from .mineset import MineSet, MineSetIndex
from .solver import MinesweeperSolver
from .analysis import (
    format_frontier,
    run_solver_single_test,
    run_solver_many_tests,
    run_solver_level_analysis,
    summarize_move_mix,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Board",
    "Cell",
    "MineSet",
    "MineSetIndex",
    "Frontier",
    "Hypothesis",
    "MineState",
    "MineWeights",
    "MinesweeperSolver",
    "weigh_hypotheses",
    "weigh_regions",
    # Configuration
    "LEVELS",
    "SolverConfig",
    "configure_logging",
    # Errors
    "MineHit",
    "DeductionError",
    "InconsistentBoardError",
    # Analysis functions
    "format_frontier",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_level_analysis",
    "summarize_move_mix",
]
