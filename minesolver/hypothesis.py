"""Hypothetical mine arrangements over an ordered list of frontier cells."""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


class MineState(Enum):
    """Hypothetical state of a cell: no mine, a mine, or not yet decided."""

    CLEAR = "O"
    MINE = "X"
    UNKNOWN = "U"


class Hypothesis:
    """
    One assignment of MINE / CLEAR / UNKNOWN to each cell of a fixed order.

    Every hypothesis built during one enumeration shares the same cell order
    (and its position map), so merging two of them is a positional walk.
    """

    __slots__ = ("cells", "_positions", "states")

    def __init__(
        self,
        cells: Sequence[int],
        states: Optional[Sequence[MineState]] = None,
        positions: Optional[Dict[int, int]] = None,
    ) -> None:
        self.cells: Tuple[int, ...] = tuple(cells)
        self._positions: Dict[int, int] = (
            positions if positions is not None
            else {cell: i for i, cell in enumerate(self.cells)}
        )
        if states is None:
            self.states: Tuple[MineState, ...] = (MineState.UNKNOWN,) * len(self.cells)
        else:
            if len(states) != len(self.cells):
                raise ValueError("states and cells must have the same length.")
            self.states = tuple(states)

    @classmethod
    def fragment(
        cls,
        order: "Hypothesis",
        clear: Iterable[int],
        mines: Iterable[int],
    ) -> "Hypothesis":
        """
        A hypothesis over ``order``'s cells deciding only the given cells.

        Args:
            order: Any hypothesis whose cell order should be reused.
            clear: Cells to mark CLEAR.
            mines: Cells to mark MINE (applied after ``clear``).
        """
        states: List[MineState] = [MineState.UNKNOWN] * len(order.cells)
        for cell in clear:
            states[order._positions[cell]] = MineState.CLEAR
        for cell in mines:
            states[order._positions[cell]] = MineState.MINE
        return cls(order.cells, states, order._positions)

    def __len__(self) -> int:
        return len(self.cells)

    def index(self, cell: int) -> int:
        """Position of ``cell`` in this hypothesis, or -1 if absent."""
        return self._positions.get(cell, -1)

    def get(self, cell: int) -> MineState:
        return self.states[self._positions[cell]]

    def mines(self) -> List[int]:
        return [c for c, s in zip(self.cells, self.states) if s is MineState.MINE]

    def mine_count(self) -> int:
        return sum(1 for s in self.states if s is MineState.MINE)

    def is_complete(self) -> bool:
        return MineState.UNKNOWN not in self.states

    def compatible(self, other: "Hypothesis") -> Optional["Hypothesis"]:
        """
        Combine two hypotheses if they never contradict each other.

        Returns:
            A hypothesis in which both are true, or None if some cell is MINE
            in one and CLEAR in the other (or the cell orders differ).
        """
        if self.cells != other.cells:
            return None
        combined: List[MineState] = list(self.states)
        for i, theirs in enumerate(other.states):
            if theirs is MineState.UNKNOWN:
                continue
            ours = combined[i]
            if ours is MineState.UNKNOWN:
                combined[i] = theirs
            elif ours is not theirs:
                return None
        return Hypothesis(self.cells, combined, self._positions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hypothesis):
            return NotImplemented
        return self.cells == other.cells and self.states == other.states

    def __hash__(self) -> int:
        return hash((self.cells, self.states))

    def __repr__(self) -> str:
        body = ", ".join(f"{c}={s.value}" for c, s in zip(self.cells, self.states))
        return f"[{body}]"
