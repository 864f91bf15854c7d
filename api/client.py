"""
Computation service API client.

Wraps the `POST <base>/plots/data` endpoint that turns a grid, a potential
type and its parameters into Plotly trace data. Uses a `requests.Session`
pointed at the configured base URL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from config import settings
from errors import ProtocolError, TransportError
from generator.request import GenerationRequest

logger = logging.getLogger(__name__)

PLOT_DATA_PATH = "/plots/data"


@dataclass
class GenerationResult:
    """Plot payload returned by the service, passed on unmodified."""
    data: list[dict[str, Any]]
    layout: dict[str, Any]
    status: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, body: Any) -> GenerationResult:
        """
        Validate a decoded response body.

        Raises:
            ProtocolError: if `data` is not a list or `layout` is not an object.
        """
        if not isinstance(body, dict):
            raise ProtocolError(
                f"Expected a JSON object, got {type(body).__name__}"
            )
        if "data" not in body:
            raise ProtocolError("Response is missing 'data'")
        if "layout" not in body:
            raise ProtocolError("Response is missing 'layout'")
        if not isinstance(body["data"], list):
            raise ProtocolError("'data' must be a list of traces")
        if not isinstance(body["layout"], dict):
            raise ProtocolError("'layout' must be an object")

        status = body.get("status")
        return cls(
            data=body["data"],
            layout=body["layout"],
            status=status if isinstance(status, str) else None,
            raw=body,
        )


class PlotApiClient:
    """
    Client for the plot computation service.

    Performs exactly one HTTP call per `send`; retrying is left to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return self.base_url + PLOT_DATA_PATH

    def send(self, request: GenerationRequest) -> GenerationResult:
        """
        POST the request and parse the plot payload.

        Args:
            request: A validated GenerationRequest.

        Returns:
            The parsed GenerationResult.

        Raises:
            TransportError: on connection failure or a non-2xx status.
            ProtocolError: if the body is not the expected plot shape.
        """
        payload = request.to_payload()
        logger.debug("POST %s plot_type=%s", self.endpoint, payload["plot_type"])

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Request to %s failed: %s", self.endpoint, e)
            raise TransportError(
                f"Could not reach the computation service at {self.base_url}",
                detail=str(e),
            ) from e

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Computation service returned HTTP %s for %s",
                response.status_code,
                payload["plot_type"],
            )
            raise TransportError(
                f"Computation service returned HTTP {response.status_code}",
                status_code=response.status_code,
                detail=(response.text or "").strip()[:500],
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProtocolError(f"Response body is not valid JSON: {e}") from e

        result = GenerationResult.from_response(body)
        logger.debug("Received %d trace(s)", len(result.data))
        return result
