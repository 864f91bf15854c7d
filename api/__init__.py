"""Computation service client."""

from api.client import GenerationResult, PlotApiClient

__all__ = ["GenerationResult", "PlotApiClient"]
