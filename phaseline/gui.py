"""
Streamlit GUI for phaseline
Sliders for r and x0 over a precomputed continuation.

Run with: streamlit run phaseline/gui.py
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import matplotlib.pyplot as plt

from phaseline import AnalysisSession, AnalysisConfig, PhaselineError
from phaseline.cli import EXAMPLES
from phaseline.visualization import PhaseVisualizer

st.set_page_config(
    page_title="phaseline",
    page_icon="📈",
    layout="wide"
)


def init_session_state():
    """Initialize session state variables."""
    if 'analysis' not in st.session_state:
        st.session_state.analysis = AnalysisSession(AnalysisConfig())
    if 'loaded_expression' not in st.session_state:
        st.session_state.loaded_expression = None


def sidebar_config():
    """Sidebar with global configuration."""
    st.sidebar.header("⚙️ Settings")

    debug_mode = st.sidebar.checkbox("🐛 Debug mode", value=False)
    if debug_mode:
        import phaseline
        phaseline.enable_debug_logging(level="DEBUG")
        st.sidebar.info("Logs in the terminal")

    st.sidebar.divider()

    if st.sidebar.button("🗑️ Clear re-solve cache"):
        cache = st.session_state.analysis.provider.cache
        cleared = cache.clear() if cache is not None else 0
        st.sidebar.success(f"✅ {cleared} entries cleared")

    st.sidebar.divider()
    st.sidebar.markdown("""
    ### 📚 Quick help

    - Enter f(x, r) using `x`, `r` (and optionally `t`)
    - Roots and stability are computed once over the r sweep
    - Sliders only look them up and re-integrate
    """)


def expression_input():
    """Expression entry; reloads the session when the text changes."""
    names = ["Custom"] + [f"{name}: {expr}" for name, expr in EXAMPLES.values()]
    choice = st.selectbox("Example:", names, index=1)

    default = "r*x - x**3" if choice == "Custom" else choice.split(": ", 1)[1]
    heading = None if choice == "Custom" else choice.split(": ", 1)[0]
    text = st.text_input("ẋ = f(x, r):", value=default, placeholder="ex: r*x - x**3")

    if text and text != st.session_state.loaded_expression:
        with st.spinner("Solving and sweeping r..."):
            try:
                st.session_state.analysis.load_expression(text, heading=heading)
                st.session_state.loaded_expression = text
            except PhaselineError as e:
                st.error(f"❌ Error: {e}")
                st.session_state.loaded_expression = None


def parameter_sliders():
    """Sliders configured from the session's ranges."""
    session = st.session_state.analysis
    r_cfg, x0_cfg = session.config.r, session.config.x0

    col1, col2 = st.columns(2)
    with col1:
        r = st.slider("r", float(r_cfg.min), float(r_cfg.max), float(session.r), float(r_cfg.step))
    with col2:
        x0 = st.slider("x₀", float(x0_cfg.min), float(x0_cfg.max), float(session.x0), float(x0_cfg.step))

    if r != session.r:
        session.set_parameter(r)
    if x0 != session.x0:
        session.set_initial_condition(x0)


def main():
    """Main Streamlit application."""
    init_session_state()

    st.title("📈 phaseline")
    st.markdown("**Equilibria, stability and trajectories of ẋ = f(x, r)**")

    sidebar_config()
    expression_input()

    session = st.session_state.analysis
    if not session.is_loaded:
        st.info("ℹ️ Enter an expression to start.")
        return

    st.latex(session.to_latex())
    parameter_sliders()

    state = session.state
    cols = st.columns(max(len(state.roots), 1))
    for col, root, label in zip(cols, state.roots, state.labels):
        col.metric(label.capitalize(), "none" if root is None else f"{root:.4g}")

    fig, _ = PhaseVisualizer(session).plot_all()
    st.pyplot(fig)
    plt.close(fig)

    with st.expander("📋 Sweep table"):
        df = session.to_dataframe()
        st.dataframe(df, use_container_width=True)
        st.download_button("📥 Download .csv", df.to_csv(index=False), "sweep.csv", "text/csv")


if __name__ == "__main__":
    main()
