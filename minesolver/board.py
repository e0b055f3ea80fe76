"""Minesweeper board: a cell arena over a pluggable topology, with text load/render."""

import random
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .utils import Coord, get_neighborhoods

# Characters understood by Board.from_text.
_MINE_CHARS = "X*"
_HIDDEN_CHARS = ". 012345678"
_START_CHAR = "@"
_HOLE_CHARS = "#\0"


class Cell:
    """
    One board cell, identified by its index in the board's arena.

    The mine flag is hidden from the solver; everything else is what a player
    could see. Neighbors are arena indices and never change once linked.
    """

    __slots__ = ("index", "coord", "mined", "revealed", "flagged", "adjacent", "neighbours")

    def __init__(self, index: int, coord: Coord, mined: bool) -> None:
        self.index: int = index
        self.coord: Coord = coord
        self.mined: bool = mined
        self.revealed: bool = False
        self.flagged: bool = False
        self.adjacent: int = 0
        self.neighbours: Tuple[int, ...] = ()

    @property
    def is_revealed(self) -> bool:
        return self.revealed

    @property
    def is_flagged(self) -> bool:
        return self.flagged

    @property
    def is_resolved(self) -> bool:
        return self.revealed or self.flagged

    def adjacent_mine_count(self) -> int:
        """Number of mined neighbors, or -1 while the cell is hidden."""
        return self.adjacent if self.revealed else -1

    def reveal(self) -> int:
        """
        Reveal this cell.

        Returns:
            -1 if the cell is mined (mine hit), otherwise 0.
        """
        self.revealed = True
        return -1 if self.mined else 0

    def flag(self) -> bool:
        """Mark this cell as mined. Returns True if the state changed."""
        if self.flagged:
            return False
        self.flagged = True
        return True

    def symbol(self, reveal_all: bool = False) -> str:
        if self.flagged:
            return "*"
        if self.revealed or reveal_all:
            if self.mined:
                return "X"
            return " " if self.adjacent == 0 else str(self.adjacent)
        return "."

    def __repr__(self) -> str:
        return f"Cell({self.index}, {self.coord}, {self.symbol()!r})"


class Board:
    """
    A set of cells linked by a topology, plus the counters the solver needs.

    Cells live in ``self.cells`` and are referred to by index everywhere else.
    The board keeps ``unresolved`` (neither revealed nor flagged) and
    ``flagged_count`` up to date on every reveal and flag.
    """

    def __init__(
        self,
        width: int,
        height: int,
        mines: Iterable[Coord],
        topology: str = "square",
        holes: Iterable[Coord] = (),
        revealed: Iterable[Coord] = (),
    ) -> None:
        """
        Build a board over a width x height lattice.

        Args:
            width: Lattice width, must be > 0.
            height: Lattice height, must be > 0.
            mines: Coordinates of mined cells.
            topology: Neighborhood rule: "square", "wrap" or "hex".
            holes: Lattice points that hold no cell.
            revealed: Safe cells revealed before solving starts.

        Raises:
            ValueError: If a coordinate is outside the lattice, a mine sits on a
                hole, or a pre-revealed cell is mined.
        """
        neighborhoods = get_neighborhoods(width, height, topology)

        self.width: int = width
        self.height: int = height
        self.topology: str = topology

        hole_set: Set[Coord] = set(holes)
        mine_set: Set[Coord] = set(mines)
        for coord in mine_set | hole_set:
            if coord not in neighborhoods:
                raise ValueError(f"Cell {coord} is outside the board.")
        if mine_set & hole_set:
            raise ValueError("Mines cannot be placed on holes.")

        self.cells: List[Cell] = []
        self._index: Dict[Coord, int] = {}
        for y in range(height):
            for x in range(width):
                if (x, y) in hole_set:
                    continue
                cell = Cell(len(self.cells), (x, y), (x, y) in mine_set)
                self._index[(x, y)] = cell.index
                self.cells.append(cell)

        for cell in self.cells:
            cell.neighbours = tuple(
                self._index[n] for n in neighborhoods[cell.coord] if n in self._index
            )
            cell.adjacent = sum(1 for n in cell.neighbours if self.cells[n].mined)

        self.mines_count: int = len(mine_set)
        self.flagged_count: int = 0
        self.unresolved: Set[int] = {cell.index for cell in self.cells}

        for coord in revealed:
            if self.reveal(self.index_of(coord)) == -1:
                raise ValueError(f"Pre-revealed cell {coord} is mined.")

    @classmethod
    def random(
        cls,
        width: int,
        height: int,
        mines_count: int,
        topology: str = "square",
        rng: Optional[random.Random] = None,
        safe: Iterable[Coord] = (),
    ) -> "Board":
        """
        Create a board with mines sampled uniformly without replacement.

        Args:
            width: Board width (number of columns), must be > 0.
            height: Board height (number of rows), must be > 0.
            mines_count: Total number of mines, must be >= 0.
            topology: Neighborhood rule: "square", "wrap" or "hex".
            rng: Random source; pass a seeded instance for reproducible boards.
            safe: Coordinates that must not receive a mine.

        Raises:
            ValueError: If dimensions are invalid or the mines do not fit.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")

        rng = rng or random.Random()
        safe_set: Set[Coord] = set(safe)
        eligible: List[Coord] = [
            (x, y)
            for y in range(height)
            for x in range(width)
            if (x, y) not in safe_set
        ]
        if mines_count > len(eligible):
            raise ValueError("Cannot place that many mines on this board.")

        mines = rng.sample(eligible, mines_count)
        return cls(width, height, mines, topology=topology)

    @classmethod
    def from_text(cls, text: str, topology: str = "square") -> "Board":
        """
        Parse a board from its text form.

        One row per line. ``X`` or ``*`` is a mine; ``.``, space and digits
        are hidden safe cells (digits are recomputed, not trusted); ``@`` is a
        safe cell revealed up front; ``#`` is a hole. Short lines are padded
        with holes.

        Raises:
            ValueError: If the text is empty or contains an unknown character.
        """
        lines = [line.rstrip("\n") for line in text.splitlines()]
        lines = [line for line in lines if line.strip("\n")]
        if not lines:
            raise ValueError("Board text is empty.")

        width = max(len(line) for line in lines)
        height = len(lines)
        mines: List[Coord] = []
        holes: List[Coord] = []
        revealed: List[Coord] = []

        for y, line in enumerate(lines):
            padded = line.ljust(width, "#")
            for x, ch in enumerate(padded):
                if ch in _MINE_CHARS:
                    mines.append((x, y))
                elif ch == _START_CHAR:
                    revealed.append((x, y))
                elif ch in _HOLE_CHARS:
                    holes.append((x, y))
                elif ch not in _HIDDEN_CHARS:
                    raise ValueError(f"Unknown board character {ch!r} at ({x}, {y}).")

        return cls(width, height, mines, topology=topology, holes=holes, revealed=revealed)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def index_of(self, coord: Coord) -> int:
        """Return the arena index of the cell at ``coord``."""
        try:
            return self._index[coord]
        except KeyError:
            raise ValueError(f"No cell at {coord}.") from None

    def cell(self, coord: Coord) -> Cell:
        return self.cells[self.index_of(coord)]

    def neighbours(self, index: int) -> Tuple[int, ...]:
        return self.cells[index].neighbours

    def hidden_neighbours(self, index: int) -> List[int]:
        """Neighbors of ``index`` that are neither revealed nor flagged."""
        return [n for n in self.cells[index].neighbours if not self.cells[n].is_resolved]

    @property
    def remaining_mines(self) -> int:
        """Mines not yet flagged, assuming every flag is correct."""
        return self.mines_count - self.flagged_count

    def is_solved(self) -> bool:
        return not self.unresolved

    def revealed_cells(self) -> List[int]:
        return [cell.index for cell in self.cells if cell.revealed]

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def reveal(self, index: int) -> int:
        """
        Reveal one cell (no flood fill: zero cells are left to deduction).

        Returns:
            -1 if the cell was mined, otherwise 0. Revealing a resolved cell
            is a no-op returning 0.
        """
        cell = self.cells[index]
        if cell.is_resolved:
            return 0
        self.unresolved.discard(index)
        return cell.reveal()

    def flag(self, index: int) -> bool:
        """Flag one cell as mined. Returns True if the state changed."""
        cell = self.cells[index]
        if cell.revealed:
            return False
        changed = cell.flag()
        if changed:
            self.flagged_count += 1
            self.unresolved.discard(index)
        return changed

    def reveal_remaining(self) -> None:
        """Reveal every unresolved cell, for the end-of-game display."""
        for index in sorted(self.unresolved):
            self.cells[index].reveal()
        self.unresolved.clear()

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    def rows(self, reveal_all: bool = False) -> List[str]:
        """Text rows of the board, one character per lattice point."""
        out: List[str] = []
        for y in range(self.height):
            chars: List[str] = []
            for x in range(self.width):
                index = self._index.get((x, y))
                chars.append("#" if index is None else self.cells[index].symbol(reveal_all))
            out.append("".join(chars))
        return out

    def format_board(self, reveal_all: bool = False) -> str:
        """
        Render the board as a multi-line string.

        Hidden cells are '.', flags '*', mines 'X', revealed zeros ' ' and
        holes '#'. Hex boards indent odd rows by half a cell.
        """
        rows = self.rows(reveal_all)
        if self.topology == "hex":
            rows = [
                (" " + " ".join(row)) if y % 2 else (" ".join(row) + " ")
                for y, row in enumerate(rows)
            ]
        return "\n".join(rows)

    def __str__(self) -> str:
        return self.format_board()
