"""Minesweeper solver: sound deduction first, exact-probability guessing when stuck."""

import logging
import random
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .board import Board
from .config import SolverConfig
from .errors import DeductionError, InconsistentBoardError, MineHit
from .frontier import Frontier
from .inference import weigh_regions
from .utils import Coord

logger = logging.getLogger(__name__)


class MinesweeperSolver:
    """
    Board-level driver around a single Frontier.

    The solver alternates between two phases:
    1. Deduction: compare MineSets in the frontier until nothing new is
       learned (plus the global mine-count rule once the frontier is idle).
    2. Guessing: enumerate every arrangement of each frontier region, weight
       the combinations by the number of ways to place the remaining mines in
       the bulk, and reveal the cell with the lowest exact mine probability.
    """

    def __init__(
        self,
        board: Board,
        rng: Optional[random.Random] = None,
        record_steps: bool = False,
    ) -> None:
        """
        Initialize a solving agent bound to a specific board.

        Args:
            board: The board to solve. Cells already revealed seed the frontier.
            rng: Random source for tie-breaking between equally safe guesses.
            record_steps: If True, record a board snapshot after every move
                for replay. Leave False for benchmarks.
        """
        self.board = board
        self.rng = rng or random.Random()
        self.record_steps = record_steps

        self.frontier = Frontier(board)
        for index in board.revealed_cells():
            self.frontier.add_revealed(index)

        # Metrics / counters (for analysis)
        self.reveal_moves_count: int = 0
        self.counted_clear_count: int = 0
        self.counted_mines_count: int = 0
        self.probabilistic_guesses_config_count: int = 0
        self.probabilistic_guesses_no_config_count: int = 0
        self.guess_success_probabilities: List[Fraction] = []
        self.max_frontier: int = len(self.frontier)

        self.moves_sequence: List[Tuple[int, int, str]] = []

        # Each step is a dict with: action, cell, method, step_number, board_snapshot
        self.steps_history: List[Dict[str, Any]] = []

    @classmethod
    def from_config(cls, config: SolverConfig) -> "MinesweeperSolver":
        """Create a random board from ``config`` and a solver for it."""
        return cls(config.make_board(), rng=config.rng(1), record_steps=config.record_steps)

    # -------------------------------------------------------------------------
    # Deduction
    # -------------------------------------------------------------------------

    def has_deduction_work(self) -> bool:
        """True if a deduction step might still change the board."""
        return self.frontier.has_work() or self._count_rule_applies()

    def propagate_step(self) -> bool:
        """
        Perform one deduction step.

        Returns:
            True if a cell was revealed or flagged with certainty.

        Raises:
            DeductionError: If a deduced-safe cell was mined (an engine bug).
        """
        if not self.frontier.has_work():
            return self._apply_count_rule()

        changed = self.frontier.compare_one()
        for index in self.frontier.last_clear:
            self._log_move(index, "S", "deduction")
        for index in self.frontier.last_mined:
            self._log_move(index, "M", "deduction")
        if changed:
            self.max_frontier = max(self.max_frontier, len(self.frontier))
        return changed

    def propagate_all(self) -> bool:
        """Deduce until no further certain move exists. True if the board changed."""
        changed = False
        while self.has_deduction_work():
            changed = self.propagate_step() or changed
        return changed

    def _count_rule_applies(self) -> bool:
        unresolved = len(self.board.unresolved)
        if unresolved == 0:
            return False
        remaining = self.board.remaining_mines
        return remaining == 0 or remaining == unresolved

    def _apply_count_rule(self) -> bool:
        """
        Resolve every unresolved cell when the mine budget alone decides them.

        With no mines left every cell is safe; with as many mines left as
        unresolved cells every cell is mined.
        """
        if not self._count_rule_applies():
            return False

        cells = sorted(self.board.unresolved)
        if self.board.remaining_mines == 0:
            for index in cells:
                if self.board.reveal(index) == -1:
                    raise DeductionError(
                        f"Cell {self.board.cells[index].coord} was counted safe but is mined."
                    )
                self._log_move(index, "S", "count")
            self.counted_clear_count += len(cells)
        else:
            for index in cells:
                self.board.flag(index)
                self._log_move(index, "M", "count")
            self.counted_mines_count += len(cells)

        for index in cells:
            self.frontier.known_cell(index)
        return True

    # -------------------------------------------------------------------------
    # Guessing logic implementation
    # -------------------------------------------------------------------------

    def bulk_cells(self) -> List[int]:
        """Unresolved cells the frontier knows nothing about."""
        return [i for i in sorted(self.board.unresolved) if i not in self.frontier]

    def guess_best_move(self) -> Optional[Tuple[int, Fraction]]:
        """
        Reveal the cell with the lowest probability of being mined.

        Returns:
            ``(cell_index, success_probability)``, or None if the board is
            already solved.

        Raises:
            MineHit: If the guessed cell was mined.
            InconsistentBoardError: If no arrangement fits what is known.
        """
        if self.board.is_solved():
            return None

        bulk = self.bulk_cells()
        remaining = self.board.remaining_mines
        regions = [
            self.frontier.all_hypotheses(r, max_mines=remaining)
            for r in self.frontier.regions()
        ]

        if not regions:
            if not bulk:
                raise InconsistentBoardError("No unresolved cell is left to guess.")
            self.probabilistic_guesses_no_config_count += 1
            choice = self._pick(bulk)
            success = 1 - Fraction(remaining, len(bulk))
            return self._reveal_guess(choice, success)

        self.probabilistic_guesses_config_count += 1
        weights = weigh_regions(regions, len(bulk), remaining)

        best = weights.safest()
        candidates = [c for c in best if c is not None]
        if None in best:
            candidates.extend(bulk)

        choice = self._pick(candidates)
        if choice in weights.mined:
            mine_probability = weights.probability(choice)
        else:
            mine_probability = weights.bulk_probability() or Fraction(0)
        return self._reveal_guess(choice, 1 - mine_probability)

    def pick_equal_odds(self, candidates: Iterable[int]) -> Optional[int]:
        """
        Select one cell among several with equal probability of being mined.

        Prefers cells with the most unresolved frontier neighbors, then the
        fewest unresolved non-frontier neighbors: such guesses are the most
        likely to unlock new deductions. Remaining ties are broken at random.

        Returns:
            The chosen cell index, or None if there are no candidates.
        """
        best: List[int] = []
        best_key: Optional[Tuple[int, int]] = None

        for index in candidates:
            edge_count = bulk_count = 0
            for n in self.board.neighbours(index):
                if self.board.cells[n].is_resolved:
                    continue
                if n in self.frontier:
                    edge_count += 1
                else:
                    bulk_count += 1

            key = (edge_count, -bulk_count)
            if best_key is None or key > best_key:
                best_key = key
                best = [index]
            elif key == best_key:
                best.append(index)

        if not best:
            return None
        return self.rng.choice(best)

    def _pick(self, candidates: List[int]) -> int:
        choice = self.pick_equal_odds(candidates)
        if choice is None:
            raise InconsistentBoardError("No candidate cell to guess.")
        return choice

    def _reveal_guess(self, index: int, success: Fraction) -> Tuple[int, Fraction]:
        """Reveal a guessed cell and fold what it shows into the frontier."""
        coord = self.board.cells[index].coord
        logger.info("Guessing %s with %.2f%% chance of success.", coord, float(success) * 100)

        self.guess_success_probabilities.append(success)
        self.reveal_moves_count += 1

        if self.board.reveal(index) == -1:
            self._log_move(index, "G", "guess")
            raise MineHit(index, success)

        self.frontier.add(Frontier.around(self.board, index))
        self.frontier.known_cell(index)
        self.max_frontier = max(self.max_frontier, len(self.frontier))
        self._log_move(index, "G", "guess")
        return index, success

    # -------------------------------------------------------------------------
    # Main solving loop
    # -------------------------------------------------------------------------

    def is_solved(self) -> bool:
        return self.board.is_solved()

    def solve(self) -> Tuple[int, Dict[str, Any]]:
        """
        Solve the board end-to-end, deducing first and guessing only when stuck.

        Returns:
            Tuple of (status, payload) where status is -1 (loss) or 1 (win),
            and payload is the solver's terminal metrics dictionary.
        """
        while not self.is_solved():
            if self.has_deduction_work():
                self.propagate_step()
                continue

            try:
                self.guess_best_move()
            except MineHit as hit:
                logger.info("Hit a mine at %s. Lost.", self.board.cells[hit.index].coord)
                self.board.reveal_remaining()
                return -1, self.process_end_of_game_payload(-1)

        logger.info("Solved after %d guesses.", len(self.guess_success_probabilities))
        return 1, self.process_end_of_game_payload(1)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _log_move(self, index: int, kind: str, method: str) -> None:
        """Append one move ("S" safe, "M" mine, "G" guess) and record its step."""
        coord = self.board.cells[index].coord
        self.moves_sequence.append(coord + (kind,))
        self._record_step("mark" if kind == "M" else "reveal", coord, method)

    def _record_step(self, action: str, cell: Coord, method: str) -> None:
        """Record a step for replay functionality."""
        if not self.record_steps:
            return
        self.steps_history.append({
            "action": action,  # "reveal" or "mark"
            "cell": cell,
            "method": method,
            "step_number": len(self.steps_history),
            "board_snapshot": self.board.rows(),
        })

    def process_end_of_game_payload(self, status: int) -> Dict[str, Any]:
        """Build the solver's metrics payload for a finished game."""
        if status not in (-1, 1):
            raise ValueError(f"Unexpected status for end-of-game payload: {status}")

        cells = self.board.cells
        probabilities = self.guess_success_probabilities
        return {
            "reveal_moves_count": self.reveal_moves_count,
            "moves_sequence": self.moves_sequence,
            "steps_history": self.steps_history,
            "revealed_cells_count": sum(1 for c in cells if c.revealed and not c.mined),
            "markings_count": self.board.flagged_count,
            "max_frontier": self.max_frontier,
            "deduced_clear_count": self.frontier.deduced_clear,
            "deduced_mines_count": self.frontier.deduced_mines,
            "counted_clear_count": self.counted_clear_count,
            "counted_mines_count": self.counted_mines_count,
            "probabilistic_guesses_config_count": self.probabilistic_guesses_config_count,
            "probabilistic_guesses_no_config_count": self.probabilistic_guesses_no_config_count,
            "guesses_count": len(probabilities),
            "guess_success_probabilities": [float(p) for p in probabilities],
            "expected_survival": float(_product(probabilities)),
        }


def _product(values: Iterable[Fraction]) -> Fraction:
    out = Fraction(1)
    for v in values:
        out *= v
    return out
