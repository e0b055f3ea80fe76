"""Topology strategies and exact arithmetic helpers for the Minesweeper solver."""

from math import comb
from typing import Callable, Dict, List, Tuple

Coord = Tuple[int, int]
Topology = Callable[[int, int], Dict[Coord, Tuple[Coord, ...]]]

# Module-level cache: (topology, width, height) -> {(x,y): ((nx,ny), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[str, int, int],
    Dict[Coord, Tuple[Coord, ...]]
] = {}


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")


def square_neighborhoods(width: int, height: int) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Compute 8-connected neighbor coordinates for every cell in a bounded grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each cell (x, y) to a tuple of valid neighboring
        coordinates (nx, ny) under 8-connectivity.
    """
    _check_size(width, height)

    neighborhoods: Dict[Coord, Tuple[Coord, ...]] = {}
    for y in range(height):
        for x in range(width):
            nbrs: List[Coord] = []
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        nbrs.append((nx, ny))
            neighborhoods[(x, y)] = tuple(nbrs)
    return neighborhoods


def wrap_neighborhoods(width: int, height: int) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Compute 8-connected neighbors on a toroidal grid (edges wrap around).

    On boards narrower than three cells the wrapped offsets collide, so each
    neighbor is listed once and a cell is never its own neighbor.
    """
    _check_size(width, height)

    neighborhoods: Dict[Coord, Tuple[Coord, ...]] = {}
    for y in range(height):
        for x in range(width):
            nbrs: List[Coord] = []
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    n = ((x + dx) % width, (y + dy) % height)
                    if n == (x, y) or n in nbrs:
                        continue
                    nbrs.append(n)
            neighborhoods[(x, y)] = tuple(nbrs)
    return neighborhoods


def hex_neighborhoods(width: int, height: int) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Compute 6-connected neighbors on a hexagonal grid stored as offset rows.

    Odd rows are shifted half a cell to the right, so the two neighbors in the
    row above and the row below are (x-1, x) on even rows and (x, x+1) on odd
    rows.
    """
    _check_size(width, height)

    neighborhoods: Dict[Coord, Tuple[Coord, ...]] = {}
    for y in range(height):
        shift = y % 2
        for x in range(width):
            nbrs: List[Coord] = []
            for ny in (y - 1, y, y + 1):
                if ny < 0 or ny >= height:
                    continue
                if ny == y:
                    xs = (x - 1, x + 1)
                else:
                    xs = (x - 1 + shift, x + shift)
                for nx in xs:
                    if 0 <= nx < width:
                        nbrs.append((nx, ny))
            neighborhoods[(x, y)] = tuple(nbrs)
    return neighborhoods


TOPOLOGIES: Dict[str, Topology] = {
    "square": square_neighborhoods,
    "wrap": wrap_neighborhoods,
    "hex": hex_neighborhoods,
}


def get_neighborhoods(
    width: int, height: int, topology: str = "square"
) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Precompute and cache neighbor coordinates for every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.
        topology: One of "square", "wrap" or "hex".

    Returns:
        Mapping from each cell (x, y) to a tuple of neighboring coordinates.

    Raises:
        ValueError: If width or height is non-positive or the topology is unknown.
    """
    if topology not in TOPOLOGIES:
        raise ValueError(
            f"topology must be one of {sorted(TOPOLOGIES)}, got {topology!r}."
        )
    _check_size(width, height)

    key = (topology, width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods = TOPOLOGIES[topology](width, height)
    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def binomial(n: int, k: int) -> int:
    """Exact n choose k; 0 outside 0 <= k <= n."""
    if k < 0 or n < 0 or k > n:
        return 0
    return comb(n, k)
