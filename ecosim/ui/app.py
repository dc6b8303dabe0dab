"""
Ecosystem Simulator Streamlit web UI.

Sidebar navigation between:
  1. Home        : what the simulation models
  2. Single Run  : run the simulation with live map, KPIs and charts
"""

import streamlit as st

# Must be the very first Streamlit command
st.set_page_config(
    page_title="Ecosystem Simulator",
    page_icon="🌲",
    layout="wide",
    initial_sidebar_state="expanded",
)


def main() -> None:
    """Main entry point for the Streamlit app."""

    st.sidebar.title("🌲 Ecosystem Simulator")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation",
        options=[
            "🏠 Home",
            "▶️ Single Run",
        ],
        index=0,
    )

    if page == "🏠 Home":
        _render_home()
    elif page == "▶️ Single Run":
        from ecosim.ui.pages.sim_runner import render_sim_runner
        render_sim_runner()


def _render_home() -> None:
    """Render the home page."""
    st.title("🌲 Ecosystem Simulator")
    st.markdown("""
    A discrete-time ecosystem on a bounded grid. Every tick the sun and the
    rain reset the conditions of each cell; ferns and trees drink the
    moisture of the cell they stand on, grow, spread seedlings into nearby
    cells once mature, and die of old age, drought or fire. Rocks never move
    and never die.

    | Entity | Glyph | Lifespan | Thirst | Seed range |
    |--------|-------|----------|--------|------------|
    | **Fern** | 🌿 | 12 ticks | 2 moisture | adjacent cells |
    | **Tree** | 🌲 | 80 ticks | 4 moisture | up to 3 cells |
    | **Rock** | 🪨 | forever | — | — |

    When the board fills past its plant limit, almost every plant catches
    fire (🔥) and burns down over the following ticks.
    """)


if __name__ == "__main__":
    main()
