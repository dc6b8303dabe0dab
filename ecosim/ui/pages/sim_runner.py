"""
Single Run page for the Ecosystem Simulator UI.

Allows users to:
  - Pick board size, starting population, climate and tick count
  - Run the simulation with a live glyph map and KPIs
  - Inspect population, death and condition charts afterwards
"""

import time

import streamlit as st
import pandas as pd

from ecosim.core.config import get_default_config
from ecosim.simulation.engine import SimulationEngine
from ecosim.simulation.metrics import MetricsCollector
from ecosim.ui.components.charts import (
    births_and_deaths,
    conditions_over_time,
    population_over_time,
)
from ecosim.ui.components.grid_view import render_world_grid


def _init_session_state() -> None:
    """Initialize session state for the sim runner."""
    defaults = {
        "sim_engine": None,
        "sim_tick_data": [],
        "sim_log": [],
        "sim_result": None,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def render_sim_runner() -> None:
    """Render the single simulation runner page."""
    _init_session_state()
    st.title("▶️ Single Simulation Run")

    config = get_default_config()

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        board_size = st.selectbox(
            "Board dimension", options=[32, 64, 128, 256], index=2, key="sr_board",
        )
        map_size = st.selectbox(
            "Map size", options=[8, 16, 32], index=2, key="sr_map",
        )
    with col2:
        ferns = st.number_input("Ferns", min_value=0, max_value=1000, value=config.population.ferns, key="sr_ferns")
        trees = st.number_input("Trees", min_value=0, max_value=1000, value=config.population.trees, key="sr_trees")
    with col3:
        rainfall = st.number_input("Rainfall", min_value=0, max_value=100, value=config.climate.rainfall, key="sr_rain")
        light = st.number_input("Ambient light", min_value=0, max_value=1000, value=config.climate.ambient_light, key="sr_light")
    with col4:
        max_ticks = st.number_input("Ticks", min_value=1, max_value=100_000, value=500, step=50, key="sr_ticks")
        seed = st.number_input("Seed", min_value=0, max_value=999_999_999, value=config.board.seed, key="sr_seed")

    refresh_every = st.slider("Redraw map every N ticks", 1, 100, 10, key="sr_refresh")

    config.board.size = int(board_size) - 1
    config.board.seed = int(seed)
    config.run.map_size = int(map_size)
    config.run.max_ticks = int(max_ticks)
    config.population.ferns = int(ferns)
    config.population.trees = int(trees)
    config.climate.rainfall = int(rainfall)
    config.climate.ambient_light = int(light)

    errors = config.validate()
    if errors:
        for err in errors:
            st.error(err)
        return

    st.markdown("---")
    if st.button("🚀 Start Simulation", key="sr_start"):
        _run_simulation(config, refresh_every)

    if st.session_state.sim_tick_data:
        _display_results()


def _run_simulation(config, refresh_every: int) -> None:
    """Run the full simulation with live progress display."""
    st.session_state.sim_tick_data = []
    st.session_state.sim_log = []

    engine = SimulationEngine(config)
    engine.initialize()
    metrics = MetricsCollector()
    st.session_state.sim_engine = engine

    log: list[str] = []
    engine.on_message = lambda text, eng: log.append(f"tick {eng.current_tick + 1}: {text}")

    progress_bar = st.progress(0.0, text="Starting simulation...")
    status_container = st.empty()
    kpi_cols = st.columns(4)
    kpi_plants = kpi_cols[0].empty()
    kpi_ferns = kpi_cols[1].empty()
    kpi_trees = kpi_cols[2].empty()
    kpi_burning = kpi_cols[3].empty()
    map_placeholder = st.empty()

    start_time = time.time()
    max_ticks = config.run.max_ticks

    try:
        result = None

        def on_tick(tick: int, eng: SimulationEngine) -> None:
            kpis = metrics.collect(eng.world, eng.tick_stats)
            if tick % refresh_every == 0 or eng.is_extinct:
                progress_bar.progress(min(tick / max_ticks, 1.0), text=f"Tick {tick}/{max_ticks}")
                kpi_plants.metric("🌱 Plants", kpis["plant_count"])
                kpi_ferns.metric("🌿 Ferns", kpis["fern_count"])
                kpi_trees.metric("🌲 Trees", kpis["tree_count"])
                kpi_burning.metric("🔥 Burning", kpis["burning_count"])
                map_placeholder.code(eng.render().to_text(debug=True), language=None)

        engine.on_tick = on_tick
        result = engine.run()
    except Exception as e:
        status_container.error(f"Simulation error: {e}")
        return

    elapsed = time.time() - start_time
    progress_bar.progress(1.0, text="✅ Simulation complete!")
    map_placeholder.code(engine.render().to_text(debug=True), language=None)

    st.session_state.sim_tick_data = metrics.get_history()
    st.session_state.sim_log = log
    st.session_state.sim_result = result

    if result.extinct:
        status_container.warning(f"⚠️ Everything is extinct at tick {result.extinction_tick}.")
    else:
        status_container.success(
            f"✅ Done: {result.total_ticks} ticks in {elapsed:.1f}s. "
            f"Final plants: {result.final_plant_count}."
        )


def _display_results() -> None:
    """Display tick KPI data as charts and table."""
    df = pd.DataFrame(st.session_state.sim_tick_data)
    if df.empty:
        return

    st.markdown("---")
    st.subheader("📈 Tick KPIs")

    tab_pop, tab_deaths, tab_conditions, tab_board = st.tabs([
        "Population", "Births & Deaths", "Conditions", "Board",
    ])
    with tab_pop:
        st.plotly_chart(population_over_time(df), use_container_width=True)
    with tab_deaths:
        st.plotly_chart(births_and_deaths(df), use_container_width=True)
    with tab_conditions:
        st.plotly_chart(conditions_over_time(df), use_container_width=True)
    with tab_board:
        engine = st.session_state.sim_engine
        if engine is not None:
            st.plotly_chart(render_world_grid(engine.world), use_container_width=False)

    with st.expander("📜 Lifecycle messages"):
        st.text("\n".join(st.session_state.sim_log[-500:]) or "(none)")

    with st.expander("📋 Raw Data Table"):
        st.dataframe(df, use_container_width=True)

    st.download_button(
        "⬇️ Download CSV",
        data=df.to_csv(index=False),
        file_name="simulation_kpis.csv",
        mime="text/csv",
        key="sr_dl_csv",
    )
