"""
2D Grid View component for the Ecosystem Simulator UI.

Renders the world at full resolution using Plotly:
  - Ferns and trees as green markers (burning plants in orange)
  - Rocks as grey squares, drawn last so they sit on top
"""

from typing import Optional

import plotly.graph_objects as go

from ecosim.core.plant import PlantKind
from ecosim.core.world import World


def render_world_grid(
    world: World,
    title: Optional[str] = None,
    width: int = 700,
    height: int = 700,
    max_entities: int = 20000,
) -> go.Figure:
    """
    Scatter plot of every entity on the board.

    Args:
        world: World with plants and rocks.
        title: Optional chart title.
        width, height: Plot size in pixels.
        max_entities: Cap on plotted plants (performance).

    Returns:
        Plotly figure.
    """
    fig = go.Figure()
    n = world.board.dimension

    if title is None:
        title = f"Board ({n}×{n}) | Tick {world.tick_count}"

    alive = [p for p in world.plants if p.alive][:max_entities]
    layers = (
        ("Ferns", [p for p in alive if p.kind is PlantKind.FERN and not p.on_fire], "#27ae60", "circle"),
        ("Trees", [p for p in alive if p.kind is PlantKind.TREE and not p.on_fire], "#145a32", "triangle-up"),
        ("Burning", [p for p in alive if p.on_fire], "#e67e22", "star"),
    )
    for label, plants, color, symbol in layers:
        if not plants:
            continue
        fig.add_trace(go.Scatter(
            x=[p.location.x for p in plants],
            y=[p.location.y for p in plants],
            mode="markers",
            marker=dict(symbol=symbol, size=6, color=color, line=dict(width=0)),
            name=f"{label} ({len(plants)})",
            text=[p.summary() for p in plants],
            hovertemplate="%{text}<extra></extra>",
        ))

    if world.rocks:
        fig.add_trace(go.Scatter(
            x=[r.location.x for r in world.rocks],
            y=[r.location.y for r in world.rocks],
            mode="markers",
            marker=dict(symbol="square", size=7, color="rgba(127, 140, 141, 0.9)"),
            name=f"Rocks ({len(world.rocks)})",
            hovertemplate="Rock (%{x}, %{y})<extra></extra>",
        ))

    fig.update_layout(
        title=title,
        width=width,
        height=height,
        xaxis=dict(
            range=[-0.5, n - 0.5],
            title="X",
            scaleanchor="y",
            scaleratio=1,
            constrain="domain",
        ),
        yaxis=dict(range=[-0.5, n - 0.5], title="Y"),
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        margin=dict(l=40, r=40, t=60, b=40),
    )
    return fig
