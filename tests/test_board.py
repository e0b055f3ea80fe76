import random

import pytest

from minesolver import Board
from minesolver.utils import binomial, get_neighborhoods


def test_square_neighborhoods_corner_edge_and_center():
    n = get_neighborhoods(4, 3)
    assert len(n[(0, 0)]) == 3
    assert len(n[(1, 0)]) == 5
    assert len(n[(1, 1)]) == 8
    assert (0, 0) not in n[(0, 0)]


def test_wrap_neighborhoods_are_all_full():
    n = get_neighborhoods(5, 4, "wrap")
    assert all(len(v) == 8 for v in n.values())
    assert (4, 3) in n[(0, 0)]


def test_wrap_on_tiny_boards_has_no_duplicates_or_self():
    n = get_neighborhoods(2, 2, "wrap")
    for coord, nbrs in n.items():
        assert coord not in nbrs
        assert len(set(nbrs)) == len(nbrs) == 3


def test_hex_neighborhoods_have_six_inside_and_are_symmetric():
    n = get_neighborhoods(6, 6, "hex")
    assert len(n[(2, 2)]) == 6
    assert len(n[(2, 3)]) == 6
    assert set(n[(2, 2)]) == {(1, 2), (3, 2), (1, 1), (2, 1), (1, 3), (2, 3)}
    assert set(n[(2, 3)]) == {(1, 3), (3, 3), (2, 2), (3, 2), (2, 4), (3, 4)}
    for coord, nbrs in n.items():
        for other in nbrs:
            assert coord in n[other]


def test_unknown_topology_and_bad_size_raise():
    with pytest.raises(ValueError):
        get_neighborhoods(3, 3, "triangle")
    with pytest.raises(ValueError):
        get_neighborhoods(0, 3)


def test_binomial_domain():
    assert binomial(5, 2) == 10
    assert binomial(5, 0) == 1
    assert binomial(0, 0) == 1
    assert binomial(5, 6) == 0
    assert binomial(5, -1) == 0
    assert binomial(10, 5) == 252


def test_board_counts_adjacent_mines():
    board = Board.from_text("X..\n...\n..X")
    assert board.cell((1, 1)).adjacent == 2
    assert board.cell((0, 1)).adjacent == 1
    assert board.cell((2, 0)).adjacent == 0
    assert board.mines_count == 2
    assert board.remaining_mines == 2


def test_from_text_reads_revealed_holes_and_ragged_lines():
    board = Board.from_text("@.*\n#3\n...")
    assert board.cell((0, 0)).revealed
    assert board.cell((2, 0)).mined
    assert board.cell((1, 1)).adjacent == 1  # digits are recomputed
    with pytest.raises(ValueError):
        board.index_of((0, 1))
    with pytest.raises(ValueError):
        board.index_of((2, 1))  # padded with a hole
    assert len(board.cells) == 7
    assert len(board.unresolved) == 6


def test_from_text_rejects_bad_input():
    with pytest.raises(ValueError):
        Board.from_text("")
    with pytest.raises(ValueError):
        Board.from_text("..?")
    with pytest.raises(ValueError):
        Board(2, 1, [(0, 0)], revealed=[(0, 0)])
    with pytest.raises(ValueError):
        Board(2, 1, [(5, 0)])


def test_reveal_and_flag_keep_counters():
    board = Board.from_text("X.\n..")
    mine = board.index_of((0, 0))
    safe = board.index_of((1, 1))

    assert board.cells[safe].adjacent_mine_count() == -1
    assert board.reveal(safe) == 0
    assert board.cells[safe].adjacent_mine_count() == 1
    assert board.reveal(safe) == 0
    assert safe not in board.unresolved

    assert board.flag(mine)
    assert not board.flag(mine)
    assert board.flagged_count == 1
    assert board.remaining_mines == 0
    assert not board.flag(safe)  # revealed cells cannot be flagged
    assert len(board.unresolved) == 2


def test_revealing_a_mine_reports_a_hit():
    board = Board(1, 1, [(0, 0)])
    assert board.reveal(0) == -1
    assert board.cells[0].revealed


def test_random_board_is_reproducible_and_respects_safe_cells():
    a = Board.random(9, 9, 10, rng=random.Random(3), safe=[(4, 4)])
    b = Board.random(9, 9, 10, rng=random.Random(3), safe=[(4, 4)])
    assert a.rows(reveal_all=True) == b.rows(reveal_all=True)
    assert sum(c.mined for c in a.cells) == 10
    assert not a.cell((4, 4)).mined
    with pytest.raises(ValueError):
        Board.random(2, 2, 5)


def test_format_board_symbols():
    board = Board.from_text("X.\n.@")
    board.flag(board.index_of((0, 0)))
    assert board.format_board() == "*.\n.1"
    board.reveal_remaining()
    assert board.format_board(reveal_all=True) == "*1\n11"
    assert board.is_solved()


def test_hex_board_indents_odd_rows():
    board = Board.from_text("..\n..", topology="hex")
    assert board.format_board().splitlines() == [". . ", " . ."]
