import itertools

import pytest

from minesolver import Board, MineSet, MineSetIndex


def brute_force_split(a, b):
    """Project every assignment satisfying both sets onto the three parts."""
    cells = sorted(a.cells | b.cells)
    inter = a.cells & b.cells
    only_a = a.cells - inter
    only_b = b.cells - inter
    counts = (set(), set(), set())
    for bits in itertools.product((0, 1), repeat=len(cells)):
        mined = {c for c, bit in zip(cells, bits) if bit}
        if len(mined & a.cells) not in a.counts:
            continue
        if len(mined & b.cells) not in b.counts:
            continue
        counts[0].add(len(mined & inter))
        counts[1].add(len(mined & only_a))
        counts[2].add(len(mined & only_b))
    return counts


def test_counts_are_clipped_sorted_and_unique():
    x = MineSet({1, 2, 3}, [3, -1, 0, 4, 3, 1])
    assert x.counts == (0, 1, 3)
    assert len(x) == 3
    assert 2 in x and 5 not in x


def test_impossible_exact_count_is_a_contradiction():
    assert MineSet.exactly(3, [0, 1]).is_contradiction
    assert MineSet.exactly(-1, [0]).is_contradiction
    assert not MineSet.exactly(2, [0, 1]).is_contradiction


def test_all_clear_and_all_mined():
    assert MineSet.exactly(0, [4, 5]).is_all_clear
    assert MineSet.exactly(2, [4, 5]).is_all_mined
    assert not MineSet({4, 5}, [1, 2]).is_all_mined
    assert not MineSet.exactly(0, []).is_all_mined


def test_minesets_are_immutable_values():
    a = MineSet.exactly(1, [0, 1])
    b = MineSet.exactly(1, [1, 0])
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
    with pytest.raises(AttributeError):
        a.counts = (0,)


def test_split_of_overlapping_pairs():
    """A 1 over {0,1} and a 1 over {1,2}: every part may hold 0 or 1 mines."""
    inter, only_a, only_b = MineSet.exactly(1, [0, 1]).split(MineSet.exactly(1, [1, 2]))
    assert inter == MineSet({1}, [0, 1])
    assert only_a == MineSet({0}, [0, 1])
    assert only_b == MineSet({2}, [0, 1])


def test_split_of_subset_proves_the_rest_clear():
    """One mine among {0,1,2} and one among {1,2}: cell 0 is safe."""
    inter, only_a, only_b = MineSet.exactly(1, [0, 1, 2]).split(MineSet.exactly(1, [1, 2]))
    assert inter == MineSet.exactly(1, [1, 2])
    assert only_a.cells == {0}
    assert only_a.is_all_clear
    assert not only_b.cells


def test_split_forces_mines():
    """Two mines among {0,1,2} but at most one among {1,2}: cell 0 is mined."""
    _, only_a, _ = MineSet.exactly(2, [0, 1, 2]).split(MineSet.exactly(1, [1, 2]))
    assert only_a.is_all_mined


@pytest.mark.parametrize(
    "a,b",
    [
        (MineSet({0, 1, 2}, [1, 2]), MineSet({2, 3}, [1])),
        (MineSet({0, 1, 2, 3}, [2]), MineSet({2, 3, 4, 5}, [1, 3])),
        (MineSet({0, 1}, [0, 1, 2]), MineSet({1, 2, 3}, [3])),
        (MineSet({0, 1, 2}, [1]), MineSet({3, 4}, [1, 2])),
        (MineSet({0, 1, 2, 3, 4}, [2, 4]), MineSet({0, 1, 2, 3, 4}, [1, 2])),
        (MineSet({0, 1, 2}, [2]), MineSet({1, 2, 3}, [0])),
    ],
)
def test_split_matches_brute_force(a, b):
    """split must keep exactly the counts some joint assignment can reach."""
    inter, only_a, only_b = a.split(b)
    expected = brute_force_split(a, b)
    assert set(inter.counts) == expected[0]
    assert set(only_a.counts) == expected[1]
    assert set(only_b.counts) == expected[2]


def test_split_never_emits_out_of_range_counts():
    a = MineSet({0, 1, 2, 3}, [0, 1, 2, 3, 4])
    b = MineSet({3, 4}, [0, 1, 2])
    for part in a.split(b):
        assert all(0 <= n <= len(part) for n in part.counts)


def test_narrow_requires_same_cells():
    a = MineSet({0, 1}, [0, 1, 2])
    assert a.narrow(MineSet({0, 1}, [1, 2])) == MineSet({0, 1}, [1, 2])
    assert a.narrow(a) is a
    with pytest.raises(ValueError):
        a.narrow(MineSet({0}, [0]))


def test_from_revealed_subtracts_flags():
    board = Board.from_text("X.X\n.@.\n...")
    center = board.index_of((1, 1))
    board.flag(board.index_of((0, 0)))

    x = MineSet.from_revealed(board, center)
    assert board.index_of((0, 0)) not in x
    assert len(x) == 7
    assert x.counts == (1,)

    with pytest.raises(ValueError):
        MineSet.from_revealed(board, board.index_of((2, 2)))


def test_reduce_drops_resolved_cells():
    board = Board.from_text("X..\n...")
    a, b, c = (board.index_of((x, 0)) for x in range(3))
    x = MineSet.exactly(1, [a, b, c])
    assert x.reduce(board) is x

    board.flag(a)
    board.reveal(b)
    reduced = x.reduce(board)
    assert reduced.cells == {c}
    assert reduced.is_all_clear


def test_index_adds_then_narrows_then_ignores():
    index = MineSetIndex()
    wide = MineSet({0, 1}, [0, 1, 2])

    assert index.add_or_update(wide) is wide
    narrowed = index.add_or_update(MineSet({0, 1}, [1, 2]))
    assert narrowed == MineSet({0, 1}, [1, 2])
    assert index.add_or_update(MineSet({0, 1}, [0, 1, 2])) is None
    assert len(index) == 1
    assert index.find({0, 1}) == narrowed
    assert narrowed in index
    assert wide not in index


def test_index_pops_in_insertion_order():
    sets = [MineSet.exactly(1, [i, i + 1]) for i in range(4)]
    index = MineSetIndex(sets)
    index.discard(sets[1].cells)
    assert [index.pop() for _ in range(len(index))] == [sets[0], sets[2], sets[3]]
    assert not index
