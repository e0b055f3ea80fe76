"""
The frontier: everything known about the unresolved cells next to revealed ones.

A Frontier indexes each live MineSet under every cell it touches and keeps a
queue of sets that have not yet been compared with their neighbors. Comparing
sets (``compare_one`` / ``compare_all``) is a monotone fixed-point computation:
each step either resolves cells or produces a set with strictly less
uncertainty than what was known, so the queue always drains.
"""

import logging
from collections import deque
from typing import (
    TYPE_CHECKING,
    AbstractSet,
    Deque,
    Dict,
    Iterable,
    KeysView,
    List,
    Optional,
    Sequence,
    Set,
)

from .errors import DeductionError, InconsistentBoardError
from .hypothesis import Hypothesis, MineState
from .mineset import MineSet, MineSetIndex

if TYPE_CHECKING:
    from .board import Board

logger = logging.getLogger(__name__)


class Frontier:
    """
    Constraint store and propagation engine for one board.

    Attributes:
        board: The board whose cells this frontier reasons about.
        by_cell: Cell index -> index of the live MineSets containing that cell.
        pending: MineSets still to be compared with their neighbors (FIFO).
        deduced_clear: Cells revealed by deduction so far.
        deduced_mines: Cells flagged by deduction so far.
        last_clear: Cells revealed by the most recent ``compare_one``.
        last_mined: Cells flagged by the most recent ``compare_one``.
    """

    def __init__(self, board: "Board") -> None:
        self.board = board
        self.by_cell: Dict[int, MineSetIndex] = {}
        self.pending: MineSetIndex = MineSetIndex()
        self.deduced_clear: int = 0
        self.deduced_mines: int = 0
        self.last_clear: List[int] = []
        self.last_mined: List[int] = []

    @classmethod
    def around(cls, board: "Board", index: int) -> "Frontier":
        """
        Create a frontier holding only what one revealed cell tells us.

        An unrevealed cell yields an empty frontier.
        """
        frontier = cls(board)
        if board.cells[index].revealed:
            frontier.add_revealed(index)
        return frontier

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def cells(self) -> KeysView[int]:
        """Cells this frontier holds information about. Resolved cells leave it."""
        return self.by_cell.keys()

    def __contains__(self, index: object) -> bool:
        return index in self.by_cell

    def __len__(self) -> int:
        return len(self.by_cell)

    def has_work(self) -> bool:
        """True if comparing sets might still teach us something."""
        return bool(self.pending)

    def sets(self) -> MineSetIndex:
        """Every distinct live MineSet."""
        out = MineSetIndex()
        for index in self.by_cell.values():
            out.add_or_update_all(index)
        return out

    def _find(self, cells: AbstractSet[int]) -> Optional[MineSet]:
        if not cells:
            return None
        index = self.by_cell.get(next(iter(cells)))
        return index.find(cells) if index is not None else None

    # -------------------------------------------------------------------------
    # Building the frontier
    # -------------------------------------------------------------------------

    def add_revealed(self, index: int) -> bool:
        """Add the constraint implied by a revealed cell. True if it was new."""
        return self._register(MineSet.from_revealed(self.board, index))

    def _register(self, x: MineSet) -> bool:
        """
        Store ``x`` under each of its cells, narrowing any set with the same cells.

        The resulting set is queued for comparison if anything changed.
        """
        x = x.reduce(self.board)
        if x.is_contradiction:
            raise InconsistentBoardError(f"No mine count fits {x!r}.")
        if not x.cells:
            return False

        updated: Optional[MineSet] = None
        for cell in x.cells:
            index = self.by_cell.get(cell)
            if index is None:
                index = self.by_cell[cell] = MineSetIndex()
            result = index.add_or_update(x)
            if result is None:
                continue
            if result.is_contradiction:
                raise InconsistentBoardError(f"No mine count fits {result!r}.")
            if updated is None:
                updated = result
            elif result != updated:
                logger.warning(
                    "Duplicate MineSets exist for cell %s: %r and %r",
                    self.board.cells[cell].coord,
                    updated,
                    result,
                )

        if updated is None:
            return False
        self.pending.add_or_update(updated)
        return True

    def add(self, other: "Frontier") -> None:
        """
        Merge all of the information of another frontier into this one.

        Shared sets are only ever narrowed; any narrowed set is queued again.
        ``other`` is left empty.
        """
        if other is self:
            return
        if other.board is not self.board:
            raise ValueError("Cannot merge frontiers of different boards.")

        for x in other.sets():
            self._register(x)
        for x in other.pending:
            current = self._find(x.reduce(self.board).cells)
            if current is not None:
                self.pending.add_or_update(current)

        self.deduced_clear += other.deduced_clear
        self.deduced_mines += other.deduced_mines
        logger.debug("Merged frontier of %d cells; now %d cells", len(other), len(self))

        other.by_cell.clear()
        other.pending.clear()
        other.deduced_clear = other.deduced_mines = 0

    def known_cell(self, index: int) -> None:
        """Drop a cell resolved outside propagation (usually by a guess)."""
        if index in self.by_cell and self.board.cells[index].is_resolved:
            self._evict([index])

    def _evict(self, cells: Iterable[int]) -> None:
        """Remove resolved cells and re-register every set that mentioned them."""
        stale = MineSetIndex()
        for cell in cells:
            index = self.by_cell.pop(cell, None)
            if index is not None:
                stale.add_or_update_all(index)

        for x in stale:
            for cell in x.cells:
                index = self.by_cell.get(cell)
                if index is None:
                    continue
                index.discard(x.cells)
                if not index:
                    del self.by_cell[cell]
            self.pending.discard(x.cells)

        for x in stale:
            self._register(x)

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------

    def compare_all(self) -> bool:
        """Compare sets until nothing is left to learn. True if the board changed."""
        changed = False
        while self.has_work():
            changed = self.compare_one() or changed
        return changed

    def compare_one(self, x: Optional[MineSet] = None) -> bool:
        """
        Compare one MineSet with every set it overlaps.

        Args:
            x: The set to compare; defaults to the oldest queued set.

        Returns:
            True if a cell was revealed or flagged, False otherwise. The cells
            themselves are left in ``last_clear`` and ``last_mined``.

        Raises:
            DeductionError: If a cell proven safe turns out to be mined.
            InconsistentBoardError: If the constraints contradict each other.
        """
        self.last_clear = []
        self.last_mined = []
        if x is None:
            if not self.pending:
                return False
            x = self.pending.pop()

        x = x.reduce(self.board)
        if not x.cells:
            return False
        self._register(x)
        self.pending.discard(x.cells)
        current = self._find(x.cells)
        if current is None:
            return False
        x = current

        # Gather all neighboring information for comparison.
        neighbours = MineSetIndex()
        for cell in x.cells:
            neighbours.add_or_update_all(self.by_cell.get(cell, ()))
        logger.debug("Comparing %r with %d overlapping sets", x, len(neighbours))

        new_clear: Set[int] = set()
        new_mined: Set[int] = set()
        to_process = MineSetIndex()
        for y in neighbours:
            for part in x.split(y):
                if part.is_contradiction:
                    raise InconsistentBoardError(f"{x!r} and {y!r} cannot both hold.")
                if not part.cells:
                    continue
                if part.is_all_clear:
                    new_clear.update(part.cells)
                elif part.is_all_mined:
                    new_mined.update(part.cells)
                elif part != x and part != y:
                    to_process.add_or_update(part)

        if new_clear & new_mined:
            raise InconsistentBoardError(
                f"Cells {sorted(new_clear & new_mined)} deduced both safe and mined."
            )

        for cell in sorted(new_clear):
            if self.board.reveal(cell) == -1:
                raise DeductionError(
                    f"Cell {self.board.cells[cell].coord} was deduced safe but is mined."
                )
            self.last_clear.append(cell)
            to_process.add_or_update(MineSet.from_revealed(self.board, cell))
        for cell in sorted(new_mined):
            self.board.flag(cell)
            self.last_mined.append(cell)

        self.deduced_clear += len(new_clear)
        self.deduced_mines += len(new_mined)
        if new_clear or new_mined:
            logger.debug(
                "Deduced %d safe and %d mined cells", len(new_clear), len(new_mined)
            )

        self._evict(new_clear | new_mined)
        for part in to_process:
            self._register(part)

        return bool(new_clear or new_mined)

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def regions(self) -> List[List[int]]:
        """
        Split the frontier cells into independent regions.

        Two cells share a region when a chain of sets links them. Each region
        is listed in connectivity order: every cell after the first shares a
        set with an earlier one.
        """
        out: List[List[int]] = []
        remaining = dict.fromkeys(self.by_cell)

        while remaining:
            start = next(iter(remaining))
            del remaining[start]
            region: List[int] = []
            linked: Deque[int] = deque([start])
            while linked:
                cell = linked.popleft()
                region.append(cell)
                for x in self.by_cell[cell]:
                    for other in x.cells:
                        if other in remaining:
                            del remaining[other]
                            linked.append(other)
            out.append(region)
        return out

    def connectivity_order(self) -> List[int]:
        """Order frontier cells so each one shares a set with an earlier one where possible."""
        return [cell for region in self.regions() for cell in region]

    def all_hypotheses(
        self,
        region: Optional[Sequence[int]] = None,
        max_mines: Optional[int] = None,
    ) -> List[Hypothesis]:
        """
        Find every way mines could be placed on the cells of this frontier.

        Each region is searched cell by cell in connectivity order. A set is
        checked as soon as one of its cells is decided, so a partial
        assignment is dropped the moment some set can no longer reach any of
        its counts. Regions are then multiplied out by merging their
        arrangements pairwise.

        Args:
            region: Restrict enumeration to one region from ``regions()``.
                Defaults to the whole frontier, which multiplies out every
                region.
            max_mines: Skip arrangements holding more mines than this, usually
                ``board.remaining_mines``. No limit if None.

        Returns:
            One complete Hypothesis per arrangement consistent with every set.
            Empty if there are no cells.
        """
        if region is not None:
            order = list(region)
            return self._search(order, max_mines) if order else []

        regions = self.regions()
        if not regions:
            return []

        blank = Hypothesis([cell for r in regions for cell in r])
        valid: List[Hypothesis] = [blank]
        for r in regions:
            fragments = [
                Hypothesis.fragment(blank, h.cells, h.mines())
                for h in self._search(r, max_mines)
            ]
            merged: List[Hypothesis] = []
            for h in valid:
                for f in fragments:
                    z = h.compatible(f)
                    if z is None:
                        continue
                    if max_mines is not None and z.mine_count() > max_mines:
                        continue
                    merged.append(z)
            valid = merged
            if not valid:
                break

        logger.debug("Multiplied out %d arrangements over %d regions", len(valid), len(regions))
        return valid

    def _search(self, order: List[int], max_mines: Optional[int]) -> List[Hypothesis]:
        """Depth-first assignment of ``order``, checking every set that touches it."""
        positions = {cell: i for i, cell in enumerate(order)}
        size = len(order)

        sets = MineSetIndex()
        for cell in order:
            sets.add_or_update_all(self.by_cell.get(cell, ()))
        constraints = [x for x in sets if all(c in positions for c in x.cells)]

        touching: List[List[int]] = [[] for _ in range(size)]
        for j, x in enumerate(constraints):
            for cell in x.cells:
                touching[positions[cell]].append(j)
        undecided = [len(x) for x in constraints]
        placed = [0] * len(constraints)

        states: List[MineState] = [MineState.UNKNOWN] * size
        found: List[Hypothesis] = []

        def fits(j: int) -> bool:
            counts = constraints[j].counts
            if undecided[j] == 0:
                return placed[j] in counts
            return placed[j] <= counts[-1] and placed[j] + undecided[j] >= counts[0]

        def assign(i: int, mines: int) -> None:
            if i == size:
                found.append(Hypothesis(order, states, positions))
                return
            for state in (MineState.CLEAR, MineState.MINE):
                hit = 1 if state is MineState.MINE else 0
                if hit and max_mines is not None and mines >= max_mines:
                    continue
                for j in touching[i]:
                    undecided[j] -= 1
                    placed[j] += hit
                if all(fits(j) for j in touching[i]):
                    states[i] = state
                    assign(i + 1, mines + hit)
                for j in touching[i]:
                    undecided[j] += 1
                    placed[j] -= hit
            states[i] = MineState.UNKNOWN

        assign(0, 0)
        logger.debug("Enumerated %d arrangements over %d cells", len(found), size)
        return found
