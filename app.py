"""
Lotto 6/45 Predictor -- Streamlit Web Application

Presentation layer only: reads the snapshot published by the retraining
service (scripts/auto_update.py) and renders predictions, backtest scores
and number probabilities. No training happens on page load.
"""
import os
import sys

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from lotto645.backtester import ModelScore
from lotto645.champion import SelectionPolicy
from lotto645.config import PipelineConfig
from lotto645.errors import Lotto645Error
from lotto645.features import features_frame
from lotto645.history import load_history
from lotto645.rank import random_ticket_odds
from lotto645.training_service import build_snapshot, load_snapshot, save_snapshot

CONFIG = PipelineConfig.from_env()

POLICY_LABELS = {
    SelectionPolicy.BEST_RANK_FIRST: "Best rank first",
    SelectionPolicy.MOST_WINS_FIRST: "Most wins first",
}

# -- Page Config ----------------------------------------------------------

st.set_page_config(
    page_title="Lotto 6/45 Predictor",
    page_icon="🎱",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.2rem;
        font-weight: 700;
        text-align: center;
        padding: 1rem 0;
    }
    .number-ball {
        display: inline-block;
        width: 44px;
        height: 44px;
        border-radius: 50%;
        text-align: center;
        line-height: 44px;
        font-size: 1.1rem;
        font-weight: 700;
        margin: 4px;
        color: white;
    }
    .ball-1 { background: #FBC400; }
    .ball-2 { background: #69C8F2; }
    .ball-3 { background: #FF7272; }
    .ball-4 { background: #AAAAAA; }
    .ball-5 { background: #B0D840; }
    .disclaimer {
        background: #2D1B1B;
        border: 1px solid #FF6B6B;
        border-radius: 8px;
        padding: 1rem;
        margin: 1rem 0;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)


def ball_html(numbers):
    # Official ball colours by decade: 1-10, 11-20, 21-30, 31-40, 41-45
    return " ".join(
        f'<span class="number-ball ball-{min((n - 1) // 10 + 1, 5)}">{n}</span>'
        for n in numbers
    )


# -- Snapshot Loading (Cached) --------------------------------------------

@st.cache_resource(ttl=3600)
def get_snapshot():
    return load_snapshot(CONFIG.snapshot_path)


def score_rows(scores):
    return pd.DataFrame([
        {"Family": s.family_name, "Best rank": s.best_rank.name, "Wins": s.total_wins}
        for s in sorted(scores.values(), key=lambda s: s.family_name)
    ])


# -- Sidebar --------------------------------------------------------------

st.sidebar.markdown("## Lotto 6/45 Predictor")
page = st.sidebar.radio("Navigate", ["Predictions", "Backtest", "Probabilities", "History"])
st.sidebar.markdown("---")
st.sidebar.markdown(
    "**Disclaimer:** For educational purposes only. "
    "The draw is random -- no model can guarantee wins."
)

snapshot = get_snapshot()

if snapshot is None:
    st.warning("No trained snapshot found. Run `python scripts/auto_update.py` first, "
               "or train from the cached history below.")
    if st.button("Train from cached history"):
        try:
            with st.spinner("Backtesting and training..."):
                snap = build_snapshot(load_history(CONFIG.csv_path), config=CONFIG)
        except Lotto645Error as e:
            st.error(f"Training failed: {e}")
        else:
            save_snapshot(snap, CONFIG.snapshot_path)
            get_snapshot.clear()
            st.rerun()
    st.stop()


# ==========================================================================
# PAGE 1: PREDICTIONS
# ==========================================================================

if page == "Predictions":
    st.markdown(f'<div class="main-header">Draw #{snapshot.next_draw_index} Predictions</div>',
                unsafe_allow_html=True)
    st.caption(f"Trained {snapshot.trained_at} on draws up to #{snapshot.last_draw_index}")

    sets = st.slider("Sets per strategy", 1, 10, snapshot.config.sets_to_generate)
    for policy, label in POLICY_LABELS.items():
        score: ModelScore = snapshot.champion_scores[policy]
        st.subheader(f"{label}: {score.family_name}")
        st.caption(f"Backtest best rank {score.best_rank.name}, {score.total_wins} wins")
        for i, numbers in enumerate(snapshot.predict(policy, sets_to_generate=sets)):
            kind = "Top 6" if i == 0 else f"Sample {i}"
            st.markdown(f"**{kind}** {ball_html(numbers)}", unsafe_allow_html=True)

    st.markdown("""
    <div class="disclaimer">
    <strong>IMPORTANT:</strong> Lotto 6/45 draws are random. First prize odds are
    <strong>1 in 8,145,060</strong>. These tickets come from statistical patterns in past
    draws and carry no guarantee. Play responsibly.
    </div>
    """, unsafe_allow_html=True)


# ==========================================================================
# PAGE 2: BACKTEST
# ==========================================================================

elif page == "Backtest":
    st.markdown('<div class="main-header">Backtest on the Latest Draw</div>',
                unsafe_allow_html=True)
    held = snapshot.held_out
    st.markdown(f"Held-out draw **#{held.draw_index}**: "
                f"{ball_html(held.sorted_numbers)} + bonus {ball_html([held.bonus_number])}",
                unsafe_allow_html=True)

    st.dataframe(score_rows(snapshot.scores), use_container_width=True)
    for name in sorted(snapshot.backtest.predictions):
        with st.expander(name):
            for numbers, rank in zip(snapshot.backtest.predictions[name],
                                     snapshot.backtest.ranks[name]):
                st.markdown(f"{ball_html(numbers)} -> **{rank.name}**", unsafe_allow_html=True)
    for name, err in snapshot.backtest.failures.items():
        st.error(f"{name}: {err}")

    st.subheader("Random ticket odds")
    st.dataframe(pd.DataFrame([
        {"Rank": rank.name, "Probability": p, "1 in": round(1 / p) if p else None}
        for rank, p in random_ticket_odds().items()
    ]), use_container_width=True)


# ==========================================================================
# PAGE 3: PROBABILITIES
# ==========================================================================

elif page == "Probabilities":
    st.markdown('<div class="main-header">Per-Number Probabilities</div>',
                unsafe_allow_html=True)
    policy = st.selectbox("Strategy", list(POLICY_LABELS), format_func=POLICY_LABELS.get)
    probs = snapshot.probabilities(policy)
    prob_df = pd.DataFrame(probs, columns=["Number", "Probability"])

    fig = go.Figure(go.Bar(x=prob_df["Number"], y=prob_df["Probability"],
                           marker_color="#3498DB"))
    fig.add_hline(y=6 / 45, line_dash="dash", annotation_text="Uniform 6/45")
    fig.update_layout(title=f"P(drawn) by number -- {snapshot.champions[policy]}",
                      xaxis_title="Number", yaxis_title="Probability", height=420)
    st.plotly_chart(fig, use_container_width=True)

    st.dataframe(features_frame(snapshot.features), use_container_width=True)


# ==========================================================================
# PAGE 4: HISTORY
# ==========================================================================

elif page == "History":
    st.markdown('<div class="main-header">Draw History</div>', unsafe_allow_html=True)
    hist_df = snapshot.history.to_dataframe()
    st.metric("Total Draws", len(hist_df))
    st.dataframe(hist_df.sort_values("draw_number", ascending=False),
                 use_container_width=True)
