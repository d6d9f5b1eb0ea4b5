"""
Main Streamlit application: a bonus-round inspector.
"""

import logging
import logging.config
import random

import streamlit as st

from config import BET_LEVELS, GRID_COLS, MAX_SPINS, MONTE_CARLO_ROUNDS, validate_config
from game_logic import award_bonus_spins
from models import BetError, GameState, StateError
from round_engine import BonusRound
from simulation import simulate_rounds
from ui import (
    print_rules,
    render_grid,
    render_multipliers,
    render_simulation_summary,
    render_timeline,
    render_tools,
)

logging.config.dictConfig({
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '[%(asctime)s] [%(levelname)-5s] [%(name)-12s] --- %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
            'level': 'INFO',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    }
})
logger = logging.getLogger(__name__)


def run_app() -> None:
    """Run the main Streamlit application."""
    st.set_page_config(page_title="Mining Bonus Inspector", layout="wide")
    st.title("Mining Bonus Inspector")

    validate_config()

    if "round" not in st.session_state:
        st.session_state["round"] = BonusRound()
        st.session_state["sim_results"] = None

    game: BonusRound = st.session_state["round"]

    with st.expander("Blocks, tools & rules", expanded=False):
        print_rules()

    # Controls
    col_bet, col_spins, col_start, col_spin, col_reset = st.columns([1, 1, 1, 1, 1])

    with col_bet:
        bet = st.selectbox("Bet", BET_LEVELS, format_func=lambda b: f"$ {b:.2f}")
    with col_spins:
        spins = st.number_input("Spins", min_value=1, max_value=50, value=MAX_SPINS, step=1)
        if st.button("🥚 Pick an egg"):
            st.session_state["egg_spins"] = award_bonus_spins()
        if st.session_state.get("egg_spins"):
            st.caption(f"Egg awarded {st.session_state['egg_spins']} spins")

    with col_start:
        game.auto_first_spin = st.checkbox("Auto first spin", value=game.auto_first_spin)
        if st.button("▶️ Start round"):
            spin_count = st.session_state.pop("egg_spins", None) or int(spins)
            try:
                game.start_game(float(bet), spin_count)
            except (BetError, StateError) as e:
                st.warning(str(e))
            else:
                if game.auto_first_spin:
                    game.run_until_idle()

    with col_spin:
        if st.button("⛏️ Spin"):
            if game.play_spin() is None:
                st.warning("No spin available.")

    with col_reset:
        if st.button("🔁 Reset round"):
            game.reset_game()

    # Status
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("State", game.game_state.value)
    m2.metric("Spins left", game.spins_remaining)
    m3.metric("Mining winnings", f"$ {game.accumulated_win:.2f}")
    m4.metric("Total win", f"$ {game.total_win:.2f}")

    if game.game_state is GameState.FINISHED:
        st.success(
            f"Round over: $ {game.accumulated_win:.2f} x {max(game.multiplier_sum, 1)} "
            f"= $ {game.total_win:.2f} (cleared columns: {game.earned_columns or 'none'})"
        )

    board_col, detail_col = st.columns([1.2, 1.8])

    with board_col:
        st.subheader("Board")
        render_grid(game.grid)
        render_multipliers(game.grid, game.multipliers,
                           reveal_all=game.game_state is GameState.FINISHED)

    with detail_col:
        st.subheader("Last spin")
        render_tools(game.tools)
        render_timeline(game.timeline)

    st.subheader("Monte Carlo")
    n_rounds = st.number_input("Rounds", min_value=10, max_value=20000,
                               value=MONTE_CARLO_ROUNDS, step=10)
    seed = st.number_input("Seed", min_value=0, value=42, step=1)
    if st.button("📈 Simulate"):
        logger.info("Simulating %d rounds at bet %.2f", n_rounds, bet)
        st.session_state["sim_results"] = simulate_rounds(
            int(n_rounds), float(bet), int(spins), random.Random(int(seed))
        )
    if st.session_state["sim_results"]:
        render_simulation_summary(st.session_state["sim_results"], GRID_COLS)
        st.caption(f"Estimated from {len(st.session_state['sim_results'])} simulated rounds.")


if __name__ == "__main__":
    run_app()
