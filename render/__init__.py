"""Rendering surface adapter — Plotly figures and image export."""

from render.adapter import RenderAdapter, to_figure_spec

__all__ = ["RenderAdapter", "to_figure_spec"]
