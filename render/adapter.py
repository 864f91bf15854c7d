"""
Render adapter — GenerationResult → Plotly figure.

Merges responsive sizing into the service layout without touching any key
the service already set, and exposes static image export through Plotly's
image engine (kaleido).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import plotly.graph_objects as go

from api.client import GenerationResult
from config import settings
from controller import GenerationState, Success
from errors import ExportUnavailable, ProtocolError

logger = logging.getLogger(__name__)


def to_figure_spec(
    result: GenerationResult,
    height: Optional[int] = None,
    export_format: Optional[str] = None,
    export_scale: Optional[int] = None,
) -> dict[str, Any]:
    """
    Build the figure input (traces, layout, config) for a result.

    The service layout wins over the sizing defaults; the result itself is
    not modified.
    """
    layout = dict(result.layout)
    layout.setdefault("autosize", True)
    layout.setdefault("height", height or settings.PLOT_HEIGHT)

    config = {
        "responsive": True,
        "displayModeBar": True,
        "displaylogo": False,
        "modeBarButtonsToRemove": list(settings.MODEBAR_BUTTONS_TO_REMOVE),
        "toImageButtonOptions": {
            "format": export_format or settings.EXPORT_FORMAT,
            "filename": settings.EXPORT_FILENAME,
            "width": settings.EXPORT_WIDTH,
            "height": settings.EXPORT_HEIGHT,
            "scale": export_scale or settings.EXPORT_SCALE,
        },
    }
    return {"data": list(result.data), "layout": layout, "config": config}


class RenderAdapter:
    """Holds the figure currently mounted on the rendering surface."""

    def __init__(
        self,
        height: Optional[int] = None,
        export_format: Optional[str] = None,
        export_scale: Optional[int] = None,
    ):
        self.height = height or settings.PLOT_HEIGHT
        self.export_format = export_format or settings.EXPORT_FORMAT
        self.export_scale = export_scale or settings.EXPORT_SCALE
        self.export_width = settings.EXPORT_WIDTH
        self.export_height = settings.EXPORT_HEIGHT
        self.figure: Optional[go.Figure] = None
        self.spec: Optional[dict[str, Any]] = None
        self.mounted_request_id: Optional[int] = None
        # (format, width, height) -> bytes, for the mounted figure only
        self._exports: dict[tuple[str, int, int], bytes] = {}

    @property
    def can_export(self) -> bool:
        return self.figure is not None

    def mount(self, result: GenerationResult, request_id: Optional[int] = None) -> go.Figure:
        """Build and keep the Plotly figure for a successful result."""
        spec = to_figure_spec(result, self.height, self.export_format, self.export_scale)
        try:
            figure = go.Figure(data=spec["data"], layout=spec["layout"])
        except ValueError as e:
            raise ProtocolError(f"Plot data is not renderable: {e}") from e

        self.figure = figure
        self.spec = spec
        self.mounted_request_id = request_id
        self._exports.clear()
        return figure

    def unmount(self) -> None:
        self.figure = None
        self.spec = None
        self.mounted_request_id = None
        self._exports.clear()

    def sync(self, state: GenerationState) -> Optional[go.Figure]:
        """
        Mount the result of a Success state; any other state keeps the
        current figure on screen.
        """
        if isinstance(state, Success) and state.request_id != self.mounted_request_id:
            self.mount(state.result, request_id=state.request_id)
        return self.figure

    def _export_key(
        self,
        format: Optional[str],
        width: Optional[int],
        height: Optional[int],
    ) -> tuple[str, int, int]:
        return (
            format or self.export_format,
            width or self.export_width,
            height or self.export_height,
        )

    def cached_image(
        self,
        format: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> Optional[bytes]:
        """Bytes of a previous export of the mounted figure, if any."""
        return self._exports.get(self._export_key(format, width, height))

    def export_image(
        self,
        format: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> bytes:
        """
        Export the mounted figure as an image. Sizes default to the
        configured export size; repeated exports reuse the first render.

        Raises:
            ExportUnavailable: if no figure is mounted or the image engine
                cannot produce one.
        """
        if self.figure is None:
            raise ExportUnavailable("No plot has been generated yet")

        key = self._export_key(format, width, height)
        if key in self._exports:
            return self._exports[key]

        fmt, export_width, export_height = key
        try:
            image = self.figure.to_image(
                format=fmt,
                width=export_width,
                height=export_height,
                scale=self.export_scale,
            )
        except Exception as e:
            logger.warning("Image export failed: %s", e)
            raise ExportUnavailable(f"Image export failed: {e}") from e

        self._exports[key] = image
        return image
