"""Command-line runner: solve a random or loaded board, or benchmark many games."""

import argparse
import random
import sys
from typing import List, Optional

from .analysis import run_solver_many_tests
from .board import Board
from .config import DEFAULT_LEVEL, LEVELS, SolverConfig, configure_logging
from .errors import MineHit
from .solver import MinesweeperSolver
from .utils import TOPOLOGIES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minesolver",
        description="Solve Minesweeper boards by deduction and exact-probability guessing.",
    )
    parser.add_argument(
        "size",
        nargs="*",
        type=int,
        metavar="N",
        help="WIDTH HEIGHT MINES for a random board (default: expert 30 16 99)",
    )
    parser.add_argument(
        "--level",
        choices=sorted(LEVELS),
        default=None,
        help="Named difficulty level instead of WIDTH HEIGHT MINES",
    )
    parser.add_argument("--load", metavar="FILE", help="Load a board from a text file")
    parser.add_argument(
        "--topology",
        choices=sorted(TOPOLOGIES),
        default="square",
        help="Cell neighborhood rule (default: square)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument(
        "--detail",
        action="store_true",
        help="Print the board after every deduction and guess",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=None,
        metavar="N",
        help="Benchmark mode: play N random games and print statistics",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    return parser


def _config_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> SolverConfig:
    if args.size and args.level:
        parser.error("give either WIDTH HEIGHT MINES or --level, not both")
    try:
        if args.size:
            if len(args.size) != 3:
                parser.error("expected exactly three numbers: WIDTH HEIGHT MINES")
            width, height, mines = args.size
            return SolverConfig(width, height, mines, topology=args.topology, seed=args.seed)
        return SolverConfig.from_level(
            args.level or DEFAULT_LEVEL, topology=args.topology, seed=args.seed
        )
    except ValueError as exc:
        parser.error(str(exc))
        raise


def run_detailed(solver: MinesweeperSolver) -> int:
    """Play one game step by step, printing the board after every move."""
    board = solver.board
    print(board.format_board())
    while not solver.is_solved():
        if solver.has_deduction_work():
            if solver.propagate_step():
                print()
                print(board.format_board())
            continue
        try:
            index, success = solver.guess_best_move()  # type: ignore[misc]
        except MineHit as hit:
            print(f"\nGuessed {board.cells[hit.index].coord} and hit a mine.")
            board.reveal_remaining()
            print(board.format_board(reveal_all=True))
            return -1
        print(f"\nGuessed {board.cells[index].coord} ({float(success) * 100:.2f}% safe)")
        print(board.format_board())
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the ``minesolver`` console script.

    Returns:
        0 if every game played was won, 1 otherwise.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.load:
        try:
            with open(args.load, encoding="utf-8") as f:
                board = Board.from_text(f.read(), topology=args.topology)
        except (OSError, ValueError) as exc:
            parser.error(f"cannot load {args.load}: {exc}")
        solver = MinesweeperSolver(board, rng=random.Random(args.seed))
        return _play_one(solver, args.detail)

    config = _config_from_args(parser, args)

    if args.games is not None:
        if args.games <= 0:
            parser.error("--games must be positive")
        stats = run_solver_many_tests(config, args.games)
        print(
            f"{args.games} games on {config.width}x{config.height} "
            f"with {config.mines_count} mines ({config.topology})"
        )
        for key in sorted(stats):
            print(f"  {key:40s} {stats[key]:.4f}")
        return 0 if stats["win_rate"] == 1.0 else 1

    return _play_one(MinesweeperSolver.from_config(config), args.detail)


def _play_one(solver: MinesweeperSolver, detail: bool) -> int:
    if detail:
        status = run_detailed(solver)
    else:
        status, payload = solver.solve()
        print(solver.board.format_board(reveal_all=True))
        print()
        print(f"Guesses: {payload['guesses_count']}")
        print(f"Deduced safe: {payload['deduced_clear_count']}")
        print(f"Deduced mines: {payload['deduced_mines_count']}")
    print("Won!" if status == 1 else "Lost.")
    return 0 if status == 1 else 1


if __name__ == "__main__":
    sys.exit(main())
