"""
Constraint sets: a group of cells and the mine counts still possible for it.

A MineSet is an immutable value. Whenever the number of mines in a group of
cells is known, or merely restricted, a MineSet describes it; the simplest is
the set implied by a revealed cell, whose hidden neighbors hold exactly its
clue minus the flags around it. Comparing overlapping sets with ``split`` is
the building block of every deduction the solver makes.
"""

from collections import OrderedDict
from typing import (
    TYPE_CHECKING,
    AbstractSet,
    FrozenSet,
    Iterable,
    Iterator,
    Optional,
    Tuple,
)

if TYPE_CHECKING:
    from .board import Board


def _clip(counts: Iterable[int], size: int) -> Tuple[int, ...]:
    return tuple(sorted({n for n in counts if 0 <= n <= size}))


class MineSet:
    """
    A set of cell indices together with the possible numbers of mines in it.

    ``counts`` is sorted, duplicate-free and only holds values in
    ``0..len(cells)``. Instances are hashable and compare by value.
    """

    __slots__ = ("cells", "counts")

    def __init__(self, cells: AbstractSet[int], counts: Iterable[int]) -> None:
        cells = frozenset(cells)
        object.__setattr__(self, "cells", cells)
        object.__setattr__(self, "counts", _clip(counts, len(cells)))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("MineSet is immutable.")

    @classmethod
    def exactly(cls, mines: int, cells: Iterable[int]) -> "MineSet":
        """A MineSet in which ``cells`` hold exactly ``mines`` mines."""
        return cls(frozenset(cells), (mines,))

    @classmethod
    def from_revealed(cls, board: "Board", index: int) -> "MineSet":
        """
        The constraint implied by a revealed cell.

        Args:
            board: Board holding the cell.
            index: Arena index of a revealed, safe cell.

        Returns:
            The cell's unresolved neighbors, holding its clue minus the flags
            around it.

        Raises:
            ValueError: If the cell is not revealed.
        """
        cell = board.cells[index]
        if not cell.revealed:
            raise ValueError(f"Cell {cell.coord} is not revealed.")
        hidden = board.hidden_neighbours(index)
        flagged = sum(1 for n in cell.neighbours if board.cells[n].flagged)
        return cls.exactly(cell.adjacent - flagged, hidden)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, index: object) -> bool:
        return index in self.cells

    def __iter__(self) -> Iterator[int]:
        return iter(self.cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MineSet):
            return NotImplemented
        return self.cells == other.cells and self.counts == other.counts

    def __hash__(self) -> int:
        return hash((self.cells, self.counts))

    def same_cells(self, other: "MineSet") -> bool:
        return self.cells == other.cells

    @property
    def is_all_clear(self) -> bool:
        """True if every cell is certainly safe."""
        return self.counts == (0,)

    @property
    def is_all_mined(self) -> bool:
        """True if every cell certainly holds a mine."""
        return bool(self.cells) and self.counts == (len(self.cells),)

    @property
    def is_contradiction(self) -> bool:
        return not self.counts

    # -------------------------------------------------------------------------
    # Derivations
    # -------------------------------------------------------------------------

    def reduce(self, board: "Board") -> "MineSet":
        """
        Drop resolved cells, shifting counts down by the flags removed.

        Returns ``self`` when no cell is resolved.
        """
        known = [i for i in self.cells if board.cells[i].is_resolved]
        if not known:
            return self
        flags = sum(1 for i in known if board.cells[i].flagged)
        return MineSet(self.cells.difference(known), (n - flags for n in self.counts))

    def narrow(self, other: "MineSet") -> "MineSet":
        """Intersect the possible counts of two sets over the same cells."""
        if not self.same_cells(other):
            raise ValueError("Only sets over the same cells can be narrowed.")
        counts = set(self.counts).intersection(other.counts)
        if len(counts) == len(self.counts):
            return self
        return MineSet(self.cells, counts)

    def split(self, other: "MineSet") -> Tuple["MineSet", "MineSet", "MineSet"]:
        """
        Compare with another set and describe the intersection and differences.

        Every pair of possible counts (nA, nB) is tried together with every
        feasible number of mines nI in the intersection; each feasible triple
        contributes nI, nA - nI and nB - nI to the three results.

        Returns:
            ``(intersection, self - other, other - self)``.
        """
        inter = self.cells & other.cells
        only_a = self.cells - inter
        only_b = other.cells - inter

        counts_i = set()
        counts_a = set()
        counts_b = set()
        for n_a in self.counts:
            for n_b in other.counts:
                low = max(n_a - len(only_a), n_b - len(only_b), 0)
                high = min(len(inter), n_a, n_b)
                for n_i in range(low, high + 1):
                    counts_i.add(n_i)
                    counts_a.add(n_a - n_i)
                    counts_b.add(n_b - n_i)

        return (
            MineSet(inter, counts_i),
            MineSet(only_a, counts_a),
            MineSet(only_b, counts_b),
        )

    def __repr__(self) -> str:
        return f"MineSet(cells={sorted(self.cells)}, counts={list(self.counts)})"


class MineSetIndex:
    """
    An ordered collection holding at most one MineSet per cell membership.

    Adding a set whose cells match an existing entry narrows that entry
    instead of duplicating it. Iteration and ``pop`` follow insertion order,
    so the index doubles as a de-duplicated FIFO work queue.
    """

    def __init__(self, sets: Iterable[MineSet] = ()) -> None:
        self._sets: "OrderedDict[FrozenSet[int], MineSet]" = OrderedDict()
        self.add_or_update_all(sets)

    def find(self, cells: AbstractSet[int]) -> Optional[MineSet]:
        """Return the stored set over exactly ``cells``, if any."""
        return self._sets.get(frozenset(cells))

    def add_or_update(self, x: MineSet) -> Optional[MineSet]:
        """
        Add ``x``, or narrow the stored set with the same cells.

        Returns:
            ``x`` if it was added, the narrowed replacement if an existing set
            lost possibilities, or None if nothing changed.
        """
        current = self._sets.get(x.cells)
        if current is None:
            self._sets[x.cells] = x
            return x
        narrowed = current.narrow(x)
        if narrowed is current:
            return None
        self._sets[x.cells] = narrowed
        return narrowed

    def add_or_update_all(self, sets: Iterable[MineSet]) -> bool:
        """Apply ``add_or_update`` to each set; True if anything changed."""
        changed = False
        for x in sets:
            changed = (self.add_or_update(x) is not None) or changed
        return changed

    def discard(self, cells: AbstractSet[int]) -> None:
        self._sets.pop(frozenset(cells), None)

    def pop(self) -> MineSet:
        """Remove and return the oldest set."""
        _, x = self._sets.popitem(last=False)
        return x

    def clear(self) -> None:
        self._sets.clear()

    def __iter__(self) -> Iterator[MineSet]:
        return iter(list(self._sets.values()))

    def __len__(self) -> int:
        return len(self._sets)

    def __bool__(self) -> bool:
        return bool(self._sets)

    def __contains__(self, x: object) -> bool:
        return isinstance(x, MineSet) and self._sets.get(x.cells) == x

    def __repr__(self) -> str:
        return f"MineSetIndex({list(self._sets.values())!r})"
