"""
UI components and visualization helpers.
"""

from typing import List

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from analytics import (
    column_clear_rates,
    expected_block_value,
    expected_multiplier,
    expected_slot_damage,
    grid_frame,
    payout_distribution,
    summarize_rounds,
    timeline_frame,
    tool_type_probabilities,
)
from config import BLOCKS_CONFIG, COLOR_MAP, TOOL_ICONS, TOOLS_CONFIG
from game_logic import cleared_columns
from models import Grid, TimelineEvent, ToolSlot
from simulation import RoundSummary


def print_rules() -> None:
    """Display the static block and tool tables."""
    st.markdown("### Blocks")
    st.dataframe(
        pd.DataFrame(
            [{"Block": b.value, "Health": cfg["health"], "Base value": cfg["value"]}
             for b, cfg in BLOCKS_CONFIG.items()]
        ),
        use_container_width=True,
        hide_index=True,
    )
    st.markdown("### Tools")
    probs = tool_type_probabilities()
    st.dataframe(
        pd.DataFrame(
            [{"Tool": f"{TOOL_ICONS[t]} {t.value}", "Uses": cfg["uses"], "Damage": cfg["damage"],
              "P(per slot)": float(probs.get(t, 0))}
             for t, cfg in TOOLS_CONFIG.items()]
        ),
        use_container_width=True,
        hide_index=True,
    )
    st.info(
        "Picks strike straight down their column until their uses run out.\n"
        "- TNT waits for every pick on the board to finish, then hits its column's top block "
        "and the top blocks of the neighbouring columns that sit within one row of it.\n"
        "- A cleared column reveals its multiplier; the round pays mining winnings times the "
        "sum of revealed multipliers (at least x1)."
    )
    st.caption(
        f"Expected block value at base bet: {float(expected_block_value()):.2f} · "
        f"expected column multiplier: {float(expected_multiplier()):.2f} · "
        f"expected damage per tool slot: {float(expected_slot_damage()):.2f}"
    )


def render_grid(grid: Grid) -> None:
    """Wall coloured by block type; destroyed cells are left blank."""
    if not grid:
        st.info("No board yet.")
        return

    df = grid_frame(grid)
    types = list(COLOR_MAP)
    # one flat band per block type on a 0..len(types) scale
    colorscale = []
    for i, name in enumerate(types):
        colorscale += [[i / len(types), COLOR_MAP[name]], [(i + 1) / len(types), COLOR_MAP[name]]]
    codes = df.assign(
        code=[None if destroyed else types.index(t) + 0.5 for t, destroyed in zip(df["type"], df["destroyed"])]
    ).pivot(index="row", columns="col", values="code")
    labels = df.assign(
        label=df.apply(
            lambda r: "" if r["destroyed"] else f"{r['type']}<br>{r['health']}/{r['max_health']}",
            axis=1,
        )
    ).pivot(index="row", columns="col", values="label")

    fig = go.Figure(
        data=go.Heatmap(
            z=codes.values,
            text=labels.values,
            texttemplate="%{text}",
            colorscale=colorscale,
            zmin=0,
            zmax=len(types),
            showscale=False,
            xgap=3,
            ygap=3,
        )
    )
    fig.update_layout(
        xaxis=dict(title="Column", dtick=1),
        yaxis=dict(title="Row", autorange="reversed", dtick=1),
        height=420,
        margin=dict(l=10, r=10, t=30, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)


def render_tools(tools: List[List[ToolSlot]]) -> None:
    """Tool-drop matrix for the last spin: icon, start delay and planned rows."""
    st.markdown("#### Tools (last spin)")
    if not tools:
        st.write("*No spin yet*")
        return
    rows = []
    for r, slots in enumerate(tools):
        row = {"Tool row": r}
        for c, slot in enumerate(slots):
            if slot.tool is None:
                row[f"Col {c}"] = "·"
            else:
                path = ",".join(str(p) for p in slot.planned_path) or "-"
                row[f"Col {c}"] = f"{TOOL_ICONS[slot.tool.type]} @{slot.start_delay}ms [{path}]"
        rows.append(row)
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def render_multipliers(grid: Grid, multipliers: List[int], reveal_all: bool = False) -> None:
    """Multiplier row; a column's multiplier stays hidden until it is cleared."""
    earned = set(cleared_columns(grid))
    cols = st.columns(len(multipliers)) if multipliers else []
    for c, (col, mult) in enumerate(zip(cols, multipliers)):
        with col:
            if c in earned:
                st.metric(f"Col {c}", f"x{mult}", delta="cleared")
            elif reveal_all:
                st.metric(f"Col {c}", f"x{mult}")
            else:
                st.metric(f"Col {c}", "?")


def render_timeline(events: List[TimelineEvent]) -> None:
    st.markdown("#### Spin timeline")
    if not events:
        st.write("*No events*")
        return
    df = timeline_frame(events)
    st.dataframe(df, use_container_width=True, hide_index=True)

    fig = go.Figure()
    for kind, color in (("hit", "#4daf4a"), ("explosion", "#e41a1c"), ("fade", "#999999")):
        part = df[df["kind"] == kind]
        if part.empty:
            continue
        fig.add_trace(
            go.Scatter(
                x=part["time_ms"],
                y=part["column"],
                mode="markers",
                name=kind,
                marker=dict(size=12, color=color, line=dict(width=1, color="black")),
                hovertext=part["tool"] + " rows " + part["rows"],
            )
        )
    fig.update_layout(
        xaxis=dict(title="Time (ms)"),
        yaxis=dict(title="Column", dtick=1),
        height=300,
        margin=dict(l=10, r=10, t=30, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)


def render_simulation_summary(results: List[RoundSummary], cols: int) -> None:
    st.markdown("#### Monte Carlo summary")
    summary = summarize_rounds(results)
    st.dataframe(
        pd.DataFrame([{"Metric": k, "Value": v} for k, v in summary.items()]),
        use_container_width=True,
        hide_index=True,
    )

    rates = column_clear_rates(results, cols)
    rates_df = pd.DataFrame({"Column": list(rates), "Clear rate": list(rates.values())})
    st.bar_chart(rates_df, x="Column", y="Clear rate")

    dist = payout_distribution(results)
    fig = go.Figure(go.Bar(x=dist["bucket"], y=dist["share"], marker_color=COLOR_MAP["gold_ore"]))
    fig.update_layout(
        xaxis=dict(title="Total win (x bet)"),
        yaxis=dict(title="Share of rounds"),
        height=300,
        margin=dict(l=10, r=10, t=30, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)
