"""
Error taxonomy for the plot generation client.

Every failure the client can hit is one of these; the controller folds them
into a Failed state and the render adapter into a disabled export action.
"""

from __future__ import annotations

from typing import Optional


class PlotClientError(Exception):
    """Base class for all recoverable client errors."""


class ValidationError(PlotClientError):
    """Bad local input, detected before any network call."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class TransportError(PlotClientError):
    """Network failure or a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ProtocolError(PlotClientError):
    """The response body does not have the expected plot shape."""


class ExportUnavailable(PlotClientError):
    """There is no rendered figure to export an image from."""
