import itertools
import random
from fractions import Fraction

import pytest

from minesolver import (
    Board,
    Frontier,
    Hypothesis,
    InconsistentBoardError,
    MinesweeperSolver,
    weigh_hypotheses,
    weigh_regions,
)


def arrangements(cells, mined_sets):
    blank = Hypothesis(cells)
    return [Hypothesis.fragment(blank, cells, mines) for mines in mined_sets]


def stalled_position(seed, width=5, height=5, mines=5, revealed=3):
    rng = random.Random(seed)
    board = Board.random(width, height, mines, rng=rng)
    safe = [c.index for c in board.cells if not c.mined]
    for index in rng.sample(safe, revealed):
        board.reveal(index)
    solver = MinesweeperSolver(board, rng=rng)
    solver.propagate_all()
    return solver


def brute_force_probabilities(board):
    """Mine probability of every unresolved cell over all consistent placements."""
    unresolved = sorted(board.unresolved)
    clues = [
        (set(board.neighbours(c.index)), c.adjacent)
        for c in board.cells
        if c.revealed and not c.mined
    ]
    flagged = {c.index for c in board.cells if c.flagged}
    hits = dict.fromkeys(unresolved, 0)
    total = 0
    for mines in itertools.combinations(unresolved, board.remaining_mines):
        placed = flagged | set(mines)
        if all(len(placed & nbrs) == n for nbrs, n in clues):
            total += 1
            for cell in mines:
                hits[cell] += 1
    return {cell: Fraction(h, total) for cell, h in hits.items()}


def test_bulk_tracks_remaining_over_size_for_equal_mine_counts():
    """Every frontier arrangement holds one mine, so the bulk holds M - 1."""
    hypotheses = arrangements([0, 1], [[0], [1]])
    weights = weigh_hypotheses(hypotheses, bulk_size=10, remaining_mines=4)
    assert weights.bulk_probability() == Fraction(3, 10)
    assert weights.probability(0) == weights.probability(1) == Fraction(1, 2)


def test_arrangements_are_weighted_by_bulk_fillings():
    """0 or 1 frontier mines: C(4, 2) vs C(4, 1) ways to fill the bulk."""
    hypotheses = arrangements([0], [[], [0]])
    weights = weigh_hypotheses(hypotheses, bulk_size=4, remaining_mines=2)
    assert weights.total == 6 + 4
    assert weights.probability(0) == Fraction(4, 10)
    assert weights.bulk_probability() == (Fraction(2, 4) * 6 + Fraction(1, 4) * 4) / 10


def test_arrangements_over_budget_are_skipped():
    hypotheses = arrangements([0, 1], [[0, 1], [0]])
    weights = weigh_hypotheses(hypotheses, bulk_size=0, remaining_mines=1)
    assert weights.feasible == 1
    assert weights.probability(0) == 1
    assert weights.probability(1) == 0
    assert weights.bulk_probability() is None
    assert None not in weights.candidates()


def test_no_feasible_arrangement_is_inconsistent():
    hypotheses = arrangements([0, 1], [[0, 1]])
    with pytest.raises(InconsistentBoardError):
        weigh_hypotheses(hypotheses, bulk_size=0, remaining_mines=1)
    with pytest.raises(InconsistentBoardError):
        weigh_regions([hypotheses, []], bulk_size=3, remaining_mines=3)


def test_safest_keeps_exact_ties_including_the_bulk():
    hypotheses = arrangements([0, 1], [[0], [1]])
    weights = weigh_hypotheses(hypotheses, bulk_size=4, remaining_mines=3)
    # frontier cells 1/2, bulk cells 2/4
    assert weights.safest() == [0, 1, None]


def stalled_positions(count, limit=3000, **kwargs):
    """Yield up to ``count`` stalled solvers that still have a frontier."""
    found = 0
    for seed in range(limit):
        solver = stalled_position(seed, **kwargs)
        if len(solver.frontier) == 0:
            continue
        yield solver
        found += 1
        if found == count:
            return


def test_probabilities_conserve_the_mine_count():
    checked = 0
    for solver in stalled_positions(30):
        board = solver.board
        regions = [solver.frontier.all_hypotheses(r) for r in solver.frontier.regions()]
        bulk = solver.bulk_cells()
        weights = weigh_regions(regions, len(bulk), board.remaining_mines)

        expected = sum(weights.probability(c) for c in weights.mined)
        if bulk:
            expected += weights.bulk_probability() * len(bulk)
        assert expected == board.remaining_mines
        checked += 1
    assert checked == 30


def test_region_weights_equal_full_enumeration():
    checked = several = 0
    for solver in stalled_positions(3000, width=7, height=7, mines=8, revealed=5):
        frontier = solver.frontier
        if len(frontier) > 16:
            continue
        bulk = len(solver.bulk_cells())
        remaining = solver.board.remaining_mines

        regions = frontier.regions()
        by_region = weigh_regions(
            [frontier.all_hypotheses(r, max_mines=remaining) for r in regions],
            bulk,
            remaining,
        )
        whole = weigh_hypotheses(frontier.all_hypotheses(), bulk, remaining)
        assert by_region.total == whole.total
        assert by_region.mined == whole.mined
        assert by_region.bulk_probability() == whole.bulk_probability()
        assert by_region.feasible == whole.feasible

        checked += 1
        several += len(regions) > 1
        if checked >= 60 and several >= 5:
            break
    assert checked >= 60
    assert several >= 5


def test_probabilities_match_brute_force():
    checked = 0
    for solver in stalled_positions(15, width=4, height=4, mines=4, revealed=2):
        board = solver.board
        remaining = board.remaining_mines
        expected = brute_force_probabilities(board)
        bulk = solver.bulk_cells()
        regions = [
            solver.frontier.all_hypotheses(r, max_mines=remaining)
            for r in solver.frontier.regions()
        ]

        weights = weigh_regions(regions, len(bulk), remaining)
        for cell in weights.mined:
            assert weights.probability(cell) == expected[cell]
        for cell in bulk:
            assert weights.bulk_probability() == expected[cell]
        checked += 1
    assert checked == 15


def test_single_region_frontier_with_large_bulk():
    """One clue on a big board: bulk odds follow the leftover budget exactly."""
    rows = ["@X" + "." * 18, "X" + "." * 19, "." * 4 + "X" * 3 + "." * 13]
    board = Board.from_text("\n".join(rows))
    solver = MinesweeperSolver(board)
    frontier = Frontier.around(board, board.index_of((0, 0)))

    hypotheses = frontier.all_hypotheses()
    assert {h.mine_count() for h in hypotheses} == {2}

    bulk = len(board.unresolved) - len(frontier)
    weights = weigh_hypotheses(hypotheses, bulk, board.remaining_mines)
    assert weights.bulk_probability() == Fraction(board.remaining_mines - 2, bulk)
    assert solver.bulk_cells() == sorted(i for i in board.unresolved if i not in frontier)
