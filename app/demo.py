"""
Minesweeper Solver - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Any, Dict, List, Optional, Tuple

from minesolver import LEVELS, MinesweeperSolver, SolverConfig

COLORS = {
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}

METHOD_LABELS = {"guess": "Guess", "deduction": "Deduction", "count": "Mine count"}


def render_rows_html(
    rows: List[str],
    highlight_cell: Optional[Tuple[int, int]] = None,
    hit_cell: Optional[Tuple[int, int]] = None,
) -> str:
    """Render text board rows (as produced by Board.rows) as an HTML table."""
    width = max((len(r) for r in rows), default=0)
    # Scale cell size based on board width
    if width >= 30:
        cell_size, font_size = 14, "10px"
    elif width >= 16:
        cell_size, font_size = 20, "13px"
    else:
        cell_size, font_size = 26, "15px"

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for y, row in enumerate(rows):
        html += "<tr>"
        for x, ch in enumerate(row):
            if ch == "*":
                display, bg, text_color = "F", "#ffa500", "#ffffff"
            elif ch == "X":
                display, bg, text_color = "M", "#ffcccc", "#ff0000"
                if (x, y) == hit_cell:
                    bg, text_color = "#ff0000", "#ffffff"
            elif ch == ".":
                display, bg, text_color = ".", "#c0c0c0", "#666666"
            elif ch == "#":
                display, bg, text_color = "", "#333333", "#333333"
            else:
                display, bg, text_color = ch, "#f0f0f0", COLORS.get(ch, "#000000")

            border = "2px solid #ff0000" if (x, y) == highlight_cell else "1px solid #999"
            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def new_session(config: SolverConfig) -> None:
    st.session_state.solver = MinesweeperSolver.from_config(config)
    st.session_state.status = None
    st.session_state.payload = {}
    st.session_state.current_step = 0


def main():
    st.set_page_config(page_title="Minesweeper Solver", page_icon="💣", layout="wide")
    st.title("Minesweeper Solver")
    st.caption("Set-based deduction with exact-probability guessing.")

    # Sidebar configuration
    st.sidebar.header("Game Configuration")
    preset = st.sidebar.selectbox("Difficulty", [*LEVELS, "custom"], index=1)
    if preset == "custom":
        width = st.sidebar.slider("Width", 5, 30, 16)
        height = st.sidebar.slider("Height", 5, 30, 16)
        max_mines = width * height - 1
        mines = st.sidebar.slider("Mines", 1, max_mines, min(40, max_mines))
    else:
        width, height, mines = LEVELS[preset]
    topology = st.sidebar.selectbox("Topology", ["square", "wrap", "hex"])
    seed = st.sidebar.number_input("Seed", min_value=0, value=0, step=1)

    config = SolverConfig(
        width=width,
        height=height,
        mines_count=mines,
        topology=topology,
        seed=int(seed),
        record_steps=True,
    )

    if st.session_state.get("config") != config:
        st.session_state.config = config
        new_session(config)

    col1, col2 = st.columns([3, 1])

    with col1:
        bcol1, bcol2 = st.columns(2)
        with bcol1:
            if st.button("Regenerate Board", type="primary"):
                new_session(config)
        with bcol2:
            if st.button("Solve"):
                if st.session_state.status is not None:
                    new_session(config)
                status, payload = st.session_state.solver.solve()
                st.session_state.status = status
                st.session_state.payload = payload
                st.session_state.current_step = max(len(payload["steps_history"]) - 1, 0)

        solver: MinesweeperSolver = st.session_state.solver
        steps: List[Dict[str, Any]] = st.session_state.payload.get("steps_history", [])

        if steps:
            step_display = st.slider("Step", 1, len(steps), st.session_state.current_step + 1)
            st.session_state.current_step = step_display - 1
            step = steps[st.session_state.current_step]
            label = METHOD_LABELS.get(step["method"], step["method"])
            st.info(
                f"**Step {step_display}/{len(steps)}**: {label}, "
                f"{step['action']} {step['cell']}"
            )

            is_final_step = st.session_state.current_step == len(steps) - 1
            if is_final_step:
                hit = step["cell"] if st.session_state.status == -1 else None
                rows = solver.board.rows(reveal_all=True)
                html = render_rows_html(rows, highlight_cell=step["cell"], hit_cell=hit)
            else:
                html = render_rows_html(step["board_snapshot"], highlight_cell=step["cell"])
        else:
            html = render_rows_html(solver.board.rows())

        st.markdown(html, unsafe_allow_html=True)

        if st.session_state.status == 1:
            st.success("Solved! All safe cells revealed.")
        elif st.session_state.status == -1:
            st.error("Game Over! Hit a mine.")

    with col2:
        st.subheader("Solver Statistics")
        payload = st.session_state.payload
        if st.session_state.status is not None:
            st.metric("Result", "Win" if st.session_state.status == 1 else "Loss")
            st.metric("Guesses", payload["guesses_count"])
            st.metric("Cells Revealed", payload["revealed_cells_count"])
            st.metric("Mines Marked", payload["markings_count"])
            st.markdown("---")
            st.text(f"Deduced safe:  {payload['deduced_clear_count']}")
            st.text(f"Deduced mines: {payload['deduced_mines_count']}")
            st.text(f"Max frontier:  {payload['max_frontier']}")
            st.text(f"Survival odds: {payload['expected_survival'] * 100:.1f}%")
            probabilities = payload["guess_success_probabilities"]
            if probabilities:
                st.line_chart(probabilities)
        else:
            st.info("Run the solver to see statistics.")


if __name__ == "__main__":
    main()
