"""Analysis and benchmarking tools for the Minesweeper solver."""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .board import Board
from .config import LEVELS, SolverConfig
from .frontier import Frontier
from .solver import MinesweeperSolver


def format_frontier(board: Board, frontier: Frontier, *, show_coords: bool = True) -> str:
    """
    Format the board with frontier cells highlighted.

    Args:
        board: Board to display.
        frontier: Frontier whose cells should be marked.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where frontier cells are shown as '?', other hidden cells
        as '.', flags as '*' and revealed cells as their mine counts.
    """
    w, h = board.width, board.height
    rows = board.rows()

    def cell_char(x: int, y: int) -> str:
        ch = rows[y][x]
        if ch == ".":
            index = board.index_of((x, y))
            if index in frontier:
                return "?"
        return ch

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{x:2d}" for x in range(w))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * w - 1))

    for y in range(h):
        row = " ".join(f" {cell_char(x, y)}" for x in range(w))
        lines.append(f"{y:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def run_solver_single_test(config: SolverConfig, *, show_boards: bool = False) -> Dict[str, object]:
    """
    Run one end-to-end game on a fresh random board.

    Args:
        config: Board size, mine count, topology and seed.
        show_boards: If True, print the underlying board and the final state.

    Returns:
        The solver's terminal payload augmented with "status" (-1 loss, 1 win).
    """
    solver = MinesweeperSolver.from_config(config)
    status, payload = solver.solve()

    if show_boards:
        print("Underlying board (mines visible):")
        print(solver.board.format_board(reveal_all=True))
        print()
        print(f"Finished with status {status}.")

    out = dict(payload)
    out["status"] = status
    return out


def run_solver_many_tests(config: SolverConfig, runs: int) -> Dict[str, float]:
    """
    Run many independent games and return averaged terminal metrics plus win rate.

    Game ``i`` uses seed ``config.seed + i`` when a seed is set, so a whole
    benchmark is reproducible.

    Args:
        config: Board size, mine count, topology and base seed.
        runs: Number of independent games to run, must be > 0.

    Returns:
        Averages of numeric payload metrics (prefixed with "avg_"), plus:
        - win_rate
        - avg_guesses_total
        - guess_failure_rate
        - mean_guess_success (mean success probability over all guesses)
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    sums: Dict[str, float] = defaultdict(float)
    wins = 0
    total_guesses = 0
    total_failed_guesses = 0
    all_probabilities: List[float] = []

    for i in range(runs):
        seed = None if config.seed is None else config.seed + i
        game_config = SolverConfig(
            width=config.width,
            height=config.height,
            mines_count=config.mines_count,
            topology=config.topology,
            seed=seed,
        )
        status, payload = MinesweeperSolver.from_config(game_config).solve()
        if status == 1:
            wins += 1
        elif status == -1:
            total_failed_guesses += 1
        else:
            raise RuntimeError(f"Unexpected solver status: {status}")

        probabilities = payload["guess_success_probabilities"]
        total_guesses += len(probabilities)
        all_probabilities.extend(probabilities)

        for k, v in payload.items():
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] += float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["win_rate"] = wins / runs
    out["avg_guesses_total"] = total_guesses / runs
    out["guess_failure_rate"] = (
        (total_failed_guesses / total_guesses) if total_guesses > 0 else 0.0
    )
    out["mean_guess_success"] = (
        float(np.mean(all_probabilities)) if all_probabilities else 1.0
    )
    return out


def run_solver_level_analysis(
    runs: int,
    *,
    levels: Optional[Iterable[str]] = None,
    seed: Optional[int] = None,
    topology: str = "square",
    show_plots: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated solver tests on standard difficulty levels and plot summaries.

    Args:
        runs: Number of independent games to run per difficulty level.
        levels: Level names from ``config.LEVELS``; all of them by default.
        seed: Base seed for reproducible runs.
        topology: Neighborhood rule used for every level.
        show_plots: If False, skip plotting and only return the statistics.

    Returns:
        Mapping from level name to statistics dict returned by run_solver_many_tests().
    """
    level_names = list(levels) if levels is not None else list(LEVELS)

    results: Dict[str, Dict[str, float]] = {}
    for level in level_names:
        config = SolverConfig.from_level(level, seed=seed, topology=topology)
        results[level] = run_solver_many_tests(config, runs)

    if show_plots:
        plot_level_results(results)
    return results


def plot_level_results(results: Dict[str, Dict[str, float]]) -> None:
    """Bar charts of deductions, guesses and win rate per level."""
    level_names = list(results)
    x = np.arange(len(level_names))
    bar_w = 0.35

    # 1) Cells resolved by deduction vs guesses
    deduced = [
        results[n]["avg_deduced_clear_count"] + results[n]["avg_deduced_mines_count"]
        for n in level_names
    ]
    guesses = [results[n]["avg_guesses_total"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, deduced, width=bar_w, label="deduced")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, guesses, width=bar_w, label="guesses")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average count")  # type: ignore[misc]
    plt.title("Average deductions and guesses (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Max frontier size
    max_frontier = [results[n]["avg_max_frontier"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, max_frontier)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average max frontier size")  # type: ignore[misc]
    plt.title("Average max frontier size (per game)")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 3) Win rate by level
    win_rates = [results[n]["win_rate"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, win_rates)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Win rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Win rate by difficulty level")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]


def summarize_move_mix(
    results: Dict[str, Dict[str, float]], *, level: str = "expert"
) -> Dict[str, float]:
    """
    Split one level's average moves into deductions and guesses.

    Args:
        results: Dict[level_name -> metrics_dict] from run_solver_level_analysis().
        level: Which level to summarize.

    Returns:
        Dict with keys:
        - deduced_frac, counted_frac, guess_frac: fractions of resolved cells
        - guess_success_prob: mean success probability of guesses
        - total_moves: average cells resolved per game
    """
    if level not in results:
        raise KeyError(f"Level {level!r} not found in results.")
    m = results[level]

    def get(k: str) -> float:
        if k not in m:
            raise KeyError(f"Missing key {k!r} in metrics for level {level!r}.")
        return float(m[k])

    d = get("avg_deduced_clear_count") + get("avg_deduced_mines_count")
    c = get("avg_counted_clear_count") + get("avg_counted_mines_count")
    g = get("avg_guesses_total")

    total = d + c + g
    if total == 0.0:
        raise ZeroDivisionError("No moves recorded; cannot compute fractions.")

    return {
        "deduced_frac": d / total,
        "counted_frac": c / total,
        "guess_frac": g / total,
        "guess_success_prob": get("mean_guess_success"),
        "total_moves": total,
    }
