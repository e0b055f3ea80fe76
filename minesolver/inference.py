"""Exact mine probabilities from enumerated frontier arrangements."""

from collections import defaultdict
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import InconsistentBoardError
from .hypothesis import Hypothesis
from .utils import binomial


@dataclass
class MineWeights:
    """
    Weighted mine counts over all feasible arrangements.

    Each frontier arrangement with ``m`` mines is weighted by the number of
    ways to hide the remaining ``M - m`` mines among the ``Y`` bulk cells,
    ``C(Y, M - m)``. All sums are exact integers or Fractions.

    Attributes:
        total: Sum of the weights of all feasible arrangements.
        mined: Frontier cell -> summed weight of arrangements mining it.
        bulk_expectation: Sum of weight * (bulk mines / bulk size).
        bulk_size: Number of unresolved cells outside the frontier.
        feasible: Number of arrangements that fit the mine budget.
    """

    total: int = 0
    mined: Dict[int, int] = field(default_factory=dict)
    bulk_expectation: Fraction = Fraction(0)
    bulk_size: int = 0
    feasible: int = 0

    def probability(self, cell: int) -> Fraction:
        """Exact probability that a frontier cell holds a mine."""
        return Fraction(self.mined[cell], self.total)

    def bulk_probability(self) -> Optional[Fraction]:
        """Average mine probability of a bulk cell, or None if there is no bulk."""
        if self.bulk_size == 0:
            return None
        return self.bulk_expectation / self.total

    def candidates(self) -> Dict[Optional[int], Fraction]:
        """
        Probability per choice: each frontier cell, plus ``None`` for the bulk.

        The bulk is only a choice when it has cells.
        """
        out: Dict[Optional[int], Fraction] = {
            cell: self.probability(cell) for cell in self.mined
        }
        bulk = self.bulk_probability()
        if bulk is not None:
            out[None] = bulk
        return out

    def safest(self) -> List[Optional[int]]:
        """All choices sharing the minimum probability (exact ties)."""
        probabilities = self.candidates()
        best = min(probabilities.values())
        return [c for c, p in probabilities.items() if p == best]


def weigh_hypotheses(
    hypotheses: Iterable[Hypothesis],
    bulk_size: int,
    remaining_mines: int,
) -> MineWeights:
    """
    Combine frontier arrangements with the bulk into exact mine weights.

    Args:
        hypotheses: Complete arrangements over the frontier cells.
        bulk_size: Unresolved cells outside the frontier.
        remaining_mines: Mines not yet flagged anywhere on the board.

    Returns:
        The accumulated weights.

    Raises:
        InconsistentBoardError: If no arrangement fits the mine budget.
    """
    weights = MineWeights(bulk_size=bulk_size)

    for h in hypotheses:
        if not weights.mined:
            weights.mined = {cell: 0 for cell in h.cells}

        mines = h.mines()
        mines_in_edge = len(mines)
        if mines_in_edge > remaining_mines:
            continue
        mines_in_bulk = remaining_mines - mines_in_edge

        weight = binomial(bulk_size, mines_in_bulk)
        if weight == 0:
            continue

        weights.feasible += 1
        for cell in mines:
            weights.mined[cell] += weight
        if bulk_size > 0:
            weights.bulk_expectation += Fraction(mines_in_bulk, bulk_size) * weight
        weights.total += weight

    if weights.total == 0:
        raise InconsistentBoardError(
            "No arrangement of the frontier fits the remaining mine count."
        )
    return weights


def _mine_count_distribution(
    hypotheses: Sequence[Hypothesis],
) -> Tuple[Dict[int, int], Dict[int, Dict[int, int]]]:
    """
    Count the arrangements of one region by number of mines.

    Returns:
        ``(ways, mined)`` where ``ways[m]`` is the number of arrangements with
        ``m`` mines and ``mined[cell][m]`` how many of those mine ``cell``.
    """
    ways: Dict[int, int] = defaultdict(int)
    mined: Dict[int, Dict[int, int]] = {cell: defaultdict(int) for cell in hypotheses[0].cells}
    for h in hypotheses:
        mines = h.mines()
        m = len(mines)
        ways[m] += 1
        for cell in mines:
            mined[cell][m] += 1
    return ways, mined


def _convolve(a: Dict[int, int], b: Dict[int, int]) -> Dict[int, int]:
    out: Dict[int, int] = defaultdict(int)
    for i, x in a.items():
        for j, y in b.items():
            out[i + j] += x * y
    return out


def weigh_regions(
    regions: Sequence[Sequence[Hypothesis]],
    bulk_size: int,
    remaining_mines: int,
) -> MineWeights:
    """
    Exact mine weights for a frontier made of independent regions.

    Gives the same result as ``weigh_hypotheses`` over every combination of
    one arrangement per region, without building those combinations: each
    region is reduced to its distribution of mine counts and the
    distributions are convolved.

    Args:
        regions: Complete arrangements of each region, one list per region.
        bulk_size: Unresolved cells outside the frontier.
        remaining_mines: Mines not yet flagged anywhere on the board.

    Raises:
        InconsistentBoardError: If a region has no arrangement, or no
            combination fits the mine budget.
    """
    if any(not hypotheses for hypotheses in regions):
        raise InconsistentBoardError("A frontier region has no possible arrangement.")

    stats = [_mine_count_distribution(hypotheses) for hypotheses in regions]
    n = len(stats)

    # prefix[i] covers regions before i, suffix[i] regions from i on.
    prefix: List[Dict[int, int]] = [{0: 1}]
    for ways, _ in stats:
        prefix.append(_convolve(prefix[-1], ways))
    suffix: List[Dict[int, int]] = [{0: 1}] * (n + 1)
    for i in range(n - 1, -1, -1):
        suffix[i] = _convolve(stats[i][0], suffix[i + 1])

    def fill(mines_in_edge: int) -> int:
        return binomial(bulk_size, remaining_mines - mines_in_edge)

    weights = MineWeights(bulk_size=bulk_size)
    for m, count in prefix[n].items():
        weight = fill(m)
        if weight == 0:
            continue
        weights.feasible += count
        weights.total += count * weight
        if bulk_size > 0:
            weights.bulk_expectation += (
                Fraction(remaining_mines - m, bulk_size) * count * weight
            )

    if weights.total == 0:
        raise InconsistentBoardError(
            "No arrangement of the frontier fits the remaining mine count."
        )

    for i, (_, mined) in enumerate(stats):
        others = _convolve(prefix[i], suffix[i + 1])
        for cell, by_count in mined.items():
            weights.mined[cell] = sum(
                hits * ways * fill(m + k)
                for m, hits in by_count.items()
                for k, ways in others.items()
            )
    return weights
