"""
Reusable chart components for the Ecosystem Simulator UI.

Provides helper functions that return Plotly figures for:
  - Population over time (ferns, trees, total)
  - Births and deaths by cause
  - Board conditions over time
"""

import plotly.graph_objects as go
import pandas as pd


def _x_axis(df: pd.DataFrame):
    return df["tick"] if "tick" in df.columns else df.index


def population_over_time(
    df: pd.DataFrame,
    title: str = "Population Over Time",
) -> go.Figure:
    """
    Line chart of plant counts per tick.

    Args:
        df: DataFrame of tick KPIs (from MetricsCollector).
        title: Chart title.

    Returns:
        Plotly figure.
    """
    fig = go.Figure()

    pop_cols = {
        "plant_count": ("Plants", "#2ecc71"),
        "fern_count": ("Ferns", "#27ae60"),
        "tree_count": ("Trees", "#145a32"),
        "burning_count": ("Burning", "#e67e22"),
    }

    for col, (label, color) in pop_cols.items():
        if col in df.columns:
            fig.add_trace(go.Scatter(
                x=_x_axis(df),
                y=df[col],
                mode="lines",
                name=label,
                line=dict(color=color, width=2),
            ))

    if "plant_limit" in df.columns and not df.empty:
        fig.add_hline(
            y=float(df["plant_limit"].iloc[-1]),
            line_dash="dash",
            line_color="#e74c3c",
            annotation_text="fire threshold",
        )

    fig.update_layout(
        title=title,
        xaxis_title="Tick",
        yaxis_title="Count",
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def births_and_deaths(
    df: pd.DataFrame,
    title: str = "Births and Deaths",
) -> go.Figure:
    """Stacked bars of deaths by cause with a births line."""
    fig = go.Figure()

    death_cols = {
        "deaths_age": ("Old age", "#95a5a6"),
        "deaths_drought": ("Drought", "#f1c40f"),
        "deaths_fire": ("Fire", "#e74c3c"),
    }
    for col, (label, color) in death_cols.items():
        if col in df.columns:
            fig.add_trace(go.Bar(x=_x_axis(df), y=df[col], name=label, marker_color=color))

    if "births" in df.columns:
        fig.add_trace(go.Scatter(
            x=_x_axis(df), y=df["births"],
            mode="lines", name="Births",
            line=dict(color="#3498db", width=2),
        ))

    fig.update_layout(
        title=title,
        barmode="stack",
        xaxis_title="Tick",
        yaxis_title="Plants",
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def conditions_over_time(
    df: pd.DataFrame,
    title: str = "Average Board Conditions",
) -> go.Figure:
    """Average light and moisture per cell, measured after each tick."""
    fig = go.Figure()
    for col, label, color in (
        ("avg_light", "Light", "#f39c12"),
        ("avg_moisture", "Moisture", "#2980b9"),
    ):
        if col in df.columns:
            fig.add_trace(go.Scatter(
                x=_x_axis(df), y=df[col],
                mode="lines", name=label,
                line=dict(color=color, width=2),
            ))

    fig.update_layout(
        title=title,
        xaxis_title="Tick",
        yaxis_title="Per cell",
        template="plotly_white",
    )
    return fig
