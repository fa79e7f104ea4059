"""
Reusable Streamlit UI components for the benchmark dashboard.
"""

import streamlit as st
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List, Optional, Any

# ─────────────────────────────────────────────
# COLOR PALETTE
# ─────────────────────────────────────────────

CATEGORY_COLORS = {
    "growth": "#EF4444",
    "monitor": "#F59E0B",
    "strength": "#22C55E",
}

HEATMAP_SCALE = [[0, "#7F1D1D"], [0.5, "#F59E0B"], [0.75, "#65A30D"], [1, "#22C55E"]]


def inject_css():
    """Inject global CSS overrides for dark professional styling."""
    st.markdown("""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@300;400;500;600;700&family=JetBrains+Mono:wght@400;500&display=swap');

        html, body, [class*="css"] {
            font-family: 'Space Grotesk', sans-serif;
        }

        .stApp {
            background: #0A0C14;
        }

        section[data-testid="stSidebar"] {
            background: #0F1117;
            border-right: 1px solid #1E2235;
        }

        .bm-card {
            background: linear-gradient(135deg, #12172A 0%, #1A1D30 100%);
            border: 1px solid #1E2640;
            border-radius: 12px;
            padding: 20px;
            margin-bottom: 12px;
        }

        .card-label {
            font-size: 11px;
            font-weight: 600;
            letter-spacing: 0.08em;
            text-transform: uppercase;
            color: #6B7494;
            margin-bottom: 6px;
        }

        .card-value {
            font-size: 32px;
            font-weight: 700;
            color: #E8EAF6;
            line-height: 1;
            font-family: 'JetBrains Mono', monospace;
        }

        .card-desc {
            font-size: 11px;
            color: #4A5068;
            margin-top: 4px;
        }

        .section-header {
            display: flex;
            align-items: center;
            gap: 10px;
            margin: 28px 0 16px 0;
            padding-bottom: 10px;
            border-bottom: 1px solid #1E2235;
        }

        .section-title {
            font-size: 15px;
            font-weight: 700;
            letter-spacing: 0.06em;
            text-transform: uppercase;
        }

        .section-desc {
            font-size: 11px;
            color: #6B7494;
        }

        .sol-tag {
            display: inline-block;
            padding: 3px 10px;
            border-radius: 20px;
            font-size: 11px;
            font-weight: 600;
            margin: 2px;
            background: #1E2640;
            color: #8B99C0;
            border: 1px solid #2D3A60;
        }

        hr { border-color: #1E2235 !important; }
    </style>
    """, unsafe_allow_html=True)


def metric_card(label: str, value: Any, unit: str = "", description: str = ""):
    """Render a styled metric card."""
    if isinstance(value, float):
        value_str = f"{value:.1f}"
    elif value is None:
        value_str = "–"
    else:
        value_str = str(value)

    st.markdown(f"""
    <div class="bm-card">
        <div class="card-label">{label}</div>
        <div><span class="card-value">{value_str}</span> <span class="card-desc">{unit}</span></div>
        <div class="card-desc">{description}</div>
    </div>
    """, unsafe_allow_html=True)


def section_header(title: str, description: str = "", color: str = "#4F8EF7"):
    st.markdown(f"""
    <div class="section-header">
        <span class="section-title" style="color: {color};">{title}</span>
        <span class="section-desc">{description}</span>
    </div>
    """, unsafe_allow_html=True)


def standard_tags(codes: List[str], color: str = "#8B99C0"):
    if not codes:
        st.caption("None")
        return
    tags = "".join(f'<span class="sol-tag" style="color:{color};">{c}</span>' for c in codes)
    st.markdown(tags, unsafe_allow_html=True)


# ─────────────────────────────────────────────
# CHARTS
# ─────────────────────────────────────────────

PLOTLY_LAYOUT = dict(
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(family="Space Grotesk, sans-serif", color="#8B92B0", size=11),
    margin=dict(l=10, r=10, t=30, b=30),
    legend=dict(bgcolor="rgba(0,0,0,0)", font=dict(color="#8B92B0")),
)


def score_heatmap(z: List[List[Optional[float]]], x: List[str], y: List[str], title: str = "", height: Optional[int] = None):
    """Percent matrix rendered red → green; None cells stay blank."""
    if not z or not x:
        st.caption("No data")
        return
    fig = go.Figure(go.Heatmap(
        z=z, x=x, y=y,
        colorscale=HEATMAP_SCALE,
        zmin=0, zmax=100,
        hoverongaps=False,
        xgap=1, ygap=1,
    ))
    layout = {**PLOTLY_LAYOUT, "height": height or max(240, 22 * len(y) + 80),
              "title": dict(text=title, font=dict(size=12, color="#C0C8E8"))}
    fig.update_layout(**layout)
    fig.update_yaxes(autorange="reversed")
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def standard_bar_chart(rows: List[Dict], title: str = "", height: int = 260):
    """Standard percentages colored by category."""
    scored = [r for r in rows if r.get("total")]
    if not scored:
        st.caption("No scored standards")
        return
    fig = go.Figure(go.Bar(
        x=[r["standard"] for r in scored],
        y=[r["percentage"] for r in scored],
        marker_color=[CATEGORY_COLORS.get(r.get("category"), "#64748B") for r in scored],
        marker_line_width=0,
    ))
    layout = {**PLOTLY_LAYOUT, "height": height, "title": dict(text=title, font=dict(size=12, color="#C0C8E8"))}
    fig.update_layout(**layout)
    fig.update_yaxes(range=[0, 100])
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def delta_bar_chart(labels: List[str], deltas: List[Optional[float]], title: str = "", height: int = 260):
    pairs = [(l, d) for l, d in zip(labels, deltas) if d is not None]
    if not pairs:
        st.caption("No comparable data")
        return
    fig = go.Figure(go.Bar(
        x=[p[0] for p in pairs],
        y=[p[1] for p in pairs],
        marker_color=["#22C55E" if p[1] >= 0 else "#EF4444" for p in pairs],
        marker_line_width=0,
    ))
    layout = {**PLOTLY_LAYOUT, "height": height, "title": dict(text=title, font=dict(size=12, color="#C0C8E8"))}
    fig.update_layout(**layout)
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


# ─────────────────────────────────────────────
# TABLES
# ─────────────────────────────────────────────

def item_table(items: List[Dict]):
    if not items:
        st.caption("No questions")
        return
    df = pd.DataFrame([{
        "Q": i["number"],
        "Standard": i["standard"],
        "Key (inferred)": i["correct_answer"],
        "% Correct": i["pct_correct"],
        "Difficulty": i["difficulty"],
        "Top Wrong": i["top_wrong_answer"],
        "Top Wrong #": i["top_wrong_count"],
        "Review": "⚑" if i["review_flag"] else "",
    } for i in items])
    st.dataframe(df, use_container_width=True, hide_index=True)


def group_card(group: Dict):
    period = "Unknown period" if group["is_unknown_period"] else f"Period {group['period']}"
    st.markdown(f"**Group {group['group_number']}** · {period} · {group['student_count']} students")
    st.caption(", ".join(group["student_names"]))
    standard_tags(group["shared_weak_standards"], color=CATEGORY_COLORS["growth"])


def summary_table(rows: List[Dict]):
    df = pd.DataFrame([{
        "Standard": r["standard"],
        "%": r["percentage"] if r["total"] else None,
        "Correct": r["correct"],
        "Attempts": r["total"],
        "Red": r["red_count"],
        "Yellow": r["yellow_count"],
        "Green": r["green_count"],
    } for r in rows])
    st.dataframe(df, use_container_width=True, hide_index=True)
