"""
Streamlit Dashboard — Potential Energy Surface Plotter

Two-panel layout:
  A) Configuration — potential type, parameters and grid
  B) Plot — the latest generated surface, with image export

Sidebar: service status, grid summary, attempt history.
"""

from __future__ import annotations

import time

import streamlit as st

from api.client import PlotApiClient
from config import settings
from controller import Failed, GenerationController, Idle, InFlight, Success
from errors import ExportUnavailable, ProtocolError, ValidationError
from generator.params import FIELD_SLOTS, ParameterModel, PotentialType
from logging_config import setup_logging
from render.adapter import RenderAdapter

FIELD_LABELS = {
    "D": "D — dissociation energy",
    "q": "q — charge",
    "a": "a — width / softening",
    "r0": "r0 — equilibrium distance / center",
}

# ── Page Config ──────────────────────────────────────────────────────
st.set_page_config(
    page_title="Potential Plotter",
    page_icon="⚛️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ── Custom CSS ───────────────────────────────────────────────────────
st.markdown("""
<style>
    .main-header {
        background: linear-gradient(135deg, #0f0c29, #302b63, #24243e);
        padding: 1.5rem 2rem;
        border-radius: 12px;
        margin-bottom: 1.5rem;
        color: white;
    }

    .main-header h1 {
        margin: 0;
        font-size: 1.8rem;
        font-weight: 700;
    }

    .main-header p {
        margin: 0.3rem 0 0 0;
        color: #94a3b8;
        font-size: 0.9rem;
    }

    .panel-title {
        color: #cdd6f4;
        font-size: 0.85rem;
        font-weight: 600;
        text-transform: uppercase;
        letter-spacing: 0.05em;
        margin-bottom: 0.75rem;
    }

    .status-badge {
        display: inline-block;
        padding: 0.2rem 0.6rem;
        border-radius: 20px;
        font-size: 0.75rem;
        font-weight: 600;
    }

    .status-generating { background: #854d0e; color: #fbbf24; }
    .status-success { background: #166534; color: #4ade80; }
    .status-failed { background: #7f1d1d; color: #f87171; }
    .status-idle { background: #1e3a5f; color: #60a5fa; }
</style>
""", unsafe_allow_html=True)


# ── Session State Initialization ─────────────────────────────────────

def init_session_state():
    """Initialize all Streamlit session state variables."""
    if "controller" not in st.session_state:
        setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
        st.session_state.controller = GenerationController(client=PlotApiClient())
    defaults = {
        "model": ParameterModel.from_settings(settings),
        "renderer": RenderAdapter(),
        "error_message": None,
    }
    for key, val in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = val


init_session_state()

controller: GenerationController = st.session_state.controller
model: ParameterModel = st.session_state.model
renderer: RenderAdapter = st.session_state.renderer

try:
    renderer.sync(controller.state)
except ProtocolError as e:
    st.session_state.error_message = str(e)


# ── Header ───────────────────────────────────────────────────────────

st.markdown("""
<div class="main-header">
    <h1>⚛️ Potential Plotter</h1>
    <p>Interactive potential energy surfaces from the computation service</p>
</div>
""", unsafe_allow_html=True)


# ── Sidebar ──────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("### ⚙️ Status")

    state = controller.state
    if isinstance(state, InFlight):
        st.markdown('<span class="status-badge status-generating">● Generating</span>', unsafe_allow_html=True)
    elif isinstance(state, Success):
        st.markdown('<span class="status-badge status-success">✓ Ready</span>', unsafe_allow_html=True)
    elif isinstance(state, Failed):
        st.markdown('<span class="status-badge status-failed">✗ Failed</span>', unsafe_allow_html=True)
    else:
        st.markdown('<span class="status-badge status-idle">○ Idle</span>', unsafe_allow_html=True)

    st.caption(f"**Service:** `{controller.client.endpoint}`")
    timeout = settings.REQUEST_TIMEOUT
    st.caption(f"**Timeout:** {f'{timeout:g}s' if timeout else 'none'}")

    st.divider()

    st.markdown("### 📐 Grid")
    try:
        grid = model.grid
        st.caption(f"**Spacing:** {grid.spacing:.4g} a.u.")
        st.caption(f"**k range:** ±{grid.k_max:.4g}")
        st.caption(f"**Cutoff energy:** {grid.cutoff_energy:.4g} a.u.")
    except ValidationError as e:
        st.caption(f"⚠️ {e.message}")

    st.divider()

    st.markdown("### 📋 Attempts")
    if controller.history:
        for record in reversed(controller.history[-10:]):
            icon = {"success": "🟢", "failed": "🔴", "invalid": "🟠", "stale": "⚪"}.get(record.outcome, "⚪")
            st.caption(
                f"{icon} #{record.request_id} {record.plot_type} — {record.outcome}"
                + (f" ({record.duration_s:.2f}s)" if record.duration_s else "")
            )
    else:
        st.caption("No plots generated yet.")


# ── Main Content — Two Panels ────────────────────────────────────────

panel_a, panel_b = st.columns([1, 2])

# ── Panel A: Configuration ───────────────────────────────────────────
with panel_a:
    st.markdown('<div class="panel-title">🧪 Potential</div>', unsafe_allow_html=True)

    types = list(PotentialType)
    selected = st.selectbox(
        "Potential type",
        types,
        index=types.index(model.potential_type),
        format_func=lambda t: t.label,
    )
    if selected is not model.potential_type:
        model.set_potential_type(selected)

    for name in FIELD_SLOTS[model.potential_type]:
        text = st.text_input(
            FIELD_LABELS.get(name, name),
            value=f"{model.parameters[name]:g}",
            key=f"slot_{FIELD_SLOTS[model.potential_type][name]}",
        )
        model.set_field("parameters", name, text)

    st.markdown('<div class="panel-title" style="margin-top:1rem;">📏 Grid</div>', unsafe_allow_html=True)

    for key, value in model.grid.to_dict().items():
        text = st.text_input(key, value=f"{value:g}", key=f"grid_{key}")
        model.set_field("grid", key, text)

    generate_btn = st.button(
        "▶ Generate",
        use_container_width=True,
        type="primary",
    )

# ── Panel B: Plot ────────────────────────────────────────────────────
with panel_b:
    st.markdown('<div class="panel-title">📉 Potential Energy Surface</div>', unsafe_allow_html=True)

    shown = controller.displayed
    if isinstance(shown, Failed):
        st.error(f"⚠️ {shown.message}")
        if shown.detail:
            with st.expander("Technical details"):
                st.code(shown.detail)

    if renderer.figure is not None:
        st.plotly_chart(
            renderer.figure,
            use_container_width=True,
            config=renderer.spec["config"],
        )
    elif isinstance(shown, Idle):
        st.caption('Set the parameters and press "Generate" to plot a potential.')

    if controller.is_generating:
        st.caption("Generating…")

    prepare_col, download_col, format_col = st.columns([1, 1, 1])
    with format_col:
        export_format = st.selectbox(
            "Format", ["png", "svg", "jpeg", "pdf"],
            label_visibility="collapsed",
        )
    with prepare_col:
        prepare_btn = st.button(
            "🖼 Prepare Image",
            disabled=not renderer.can_export,
            use_container_width=True,
        )
    # The image engine runs only on a Prepare click; reruns read the cache
    if prepare_btn and renderer.can_export:
        try:
            renderer.export_image(format=export_format)
        except ExportUnavailable as e:
            st.caption(f"Export unavailable: {e}")
    with download_col:
        image = renderer.cached_image(format=export_format)
        st.download_button(
            "📥 Export Image",
            data=image or b"",
            file_name=f"{settings.EXPORT_FILENAME}.{export_format}",
            disabled=image is None,
            use_container_width=True,
        )


# ── Button Logic (after layout) ──────────────────────────────────────

if generate_btn:
    controller.generate_from(model)
    st.rerun()

# Show errors
if st.session_state.error_message:
    st.error(f"⚠️ {st.session_state.error_message}")
    st.session_state.error_message = None

# Poll while a request is outstanding
if controller.is_generating:
    time.sleep(0.3)
    st.rerun()
