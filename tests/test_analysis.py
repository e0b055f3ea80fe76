import matplotlib

matplotlib.use("Agg")

import pytest

from minesolver import Board, Frontier, SolverConfig
from minesolver import analysis


def test_single_test_payload_has_status():
    out = analysis.run_solver_single_test(SolverConfig(8, 8, 8, seed=2))
    assert out["status"] in (-1, 1)
    assert out["guesses_count"] >= 1


def test_many_tests_average_and_win_rate():
    stats = analysis.run_solver_many_tests(SolverConfig(6, 6, 4, seed=0), runs=8)
    assert 0.0 <= stats["win_rate"] <= 1.0
    assert stats["avg_guesses_total"] >= 1.0
    assert 0.0 < stats["mean_guess_success"] <= 1.0
    assert "avg_deduced_clear_count" in stats
    assert "avg_moves_sequence" not in stats

    again = analysis.run_solver_many_tests(SolverConfig(6, 6, 4, seed=0), runs=8)
    assert again == stats

    with pytest.raises(ValueError):
        analysis.run_solver_many_tests(SolverConfig(6, 6, 4), runs=0)


def test_level_analysis_and_move_mix(monkeypatch):
    shown = []
    monkeypatch.setattr(analysis.plt, "show", lambda: shown.append(True))

    results = analysis.run_solver_level_analysis(2, levels=["beginner"], seed=1)
    assert list(results) == ["beginner"]
    assert len(shown) == 3

    mix = analysis.summarize_move_mix(results, level="beginner")
    total = mix["deduced_frac"] + mix["counted_frac"] + mix["guess_frac"]
    assert total == pytest.approx(1.0)
    with pytest.raises(KeyError):
        analysis.summarize_move_mix(results, level="expert")


def test_format_frontier_marks_frontier_cells():
    board = Board.from_text("X..\n.@.\n...")
    frontier = Frontier.around(board, board.index_of((1, 1)))
    text = analysis.format_frontier(board, frontier, show_coords=False)
    assert text.splitlines() == [" ?  ?  ?", " ?  1  ?", " ?  ?  ?"]
