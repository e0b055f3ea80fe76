"""
Quickstart example for the Minesweeper solver.

This script demonstrates basic usage of the solver.
"""

from minesolver import (
    Board,
    MineHit,
    MinesweeperSolver,
    SolverConfig,
    run_solver_many_tests,
)


def main():
    print("=" * 60)
    print("Minesweeper Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game
    print("\n1. Solving a single Intermediate game (16x16, 40 mines)...")
    print("-" * 60)

    config = SolverConfig.from_level("intermediate", seed=7)
    solver = MinesweeperSolver.from_config(config)
    status, payload = solver.solve()

    result = "WON" if status == 1 else "LOST"
    print(f"Result: {result}")
    print(f"Guesses: {payload['guesses_count']}")
    print(f"Cells revealed: {payload['revealed_cells_count']}")
    print(f"Mines marked: {payload['markings_count']}")
    print(f"Deduced safe cells: {payload['deduced_clear_count']}")
    print(f"Deduced mines: {payload['deduced_mines_count']}")
    print(f"Chance of surviving every guess: {payload['expected_survival']*100:.1f}%")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(solver.board.format_board(reveal_all=True))

    # Example 3: Exact probabilities on a hand-written position
    print("\n3. Exact odds on a small position...")
    print("-" * 60)

    board = Board.from_text("X.\n.@")
    solver = MinesweeperSolver(board)
    try:
        cell, success = solver.guess_best_move()
        print(f"Guessed {board.cells[cell].coord}, success probability {success}")
    except MineHit as hit:
        print(f"Hit a mine; the guess had success probability {hit.success_probability}")

    # Example 4: Run multiple games for statistics
    print("\n4. Running 50 games for win rate statistics...")
    print("-" * 60)

    results = run_solver_many_tests(config, runs=50)

    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average guesses per game: {results['avg_guesses_total']:.1f}")
    print(f"Mean guess success: {results['mean_guess_success']*100:.1f}%")
    print(f"Guess failure rate: {results['guess_failure_rate']*100:.1f}%")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
