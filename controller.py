"""
Generation controller — the plot request lifecycle.

Connects the request builder, the API client and whatever rendering surface
is listening, and owns the single GenerationState value.

Lifecycle:
1. The user presses Generate; the controller issues a new request id
2. The request is built and validated synchronously
3. The API call runs on a worker; the controller returns immediately
4. The outcome is applied only if its id is still the latest issued
   (last-request-wins); stale outcomes are dropped
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Optional, Union

from api.client import GenerationResult, PlotApiClient
from config import settings
from errors import PlotClientError, TransportError, ValidationError
from generator.params import GridSpec, ParameterModel, PotentialParameters, PotentialType
from generator.request import GenerationRequest, build_request

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Plot generation failed. See details for the cause."


# ── States ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Idle:
    """Nothing has been generated yet."""


@dataclass(frozen=True)
class Success:
    result: GenerationResult
    request_id: int = 0


@dataclass(frozen=True)
class Failed:
    message: str
    error: Optional[Exception] = None
    request_id: int = 0

    @property
    def detail(self) -> str:
        """Technical description of the cause, for a diagnostics panel."""
        if self.error is None:
            return ""
        parts = [f"{type(self.error).__name__}: {self.error}"]
        if isinstance(self.error, TransportError):
            if self.error.status_code is not None:
                parts.append(f"HTTP status: {self.error.status_code}")
            if self.error.detail:
                parts.append(self.error.detail)
        return "\n".join(parts)


@dataclass(frozen=True)
class InFlight:
    """An attempt is outstanding; `previous` stays on screen meanwhile."""
    request_id: int
    previous: Union[Idle, Success, Failed] = field(default_factory=Idle)


GenerationState = Union[Idle, InFlight, Success, Failed]
StateListener = Callable[[GenerationState], None]


@dataclass
class AttemptRecord:
    """One generation attempt, kept for the current session only."""
    request_id: int
    plot_type: str
    outcome: str  # "success" | "failed" | "invalid" | "stale"
    duration_s: float = 0.0
    message: str = ""


class GenerationController:
    """
    Owns the generation state machine.

    The API client is passed in so tests can substitute the transport.
    `executor` only needs `submit(fn, *args) -> Future`.
    """

    def __init__(
        self,
        client: PlotApiClient,
        executor: Optional[Executor] = None,
    ):
        self.client = client
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.MAX_CONCURRENT_REQUESTS,
            thread_name_prefix="plot-request",
        )
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._state: GenerationState = Idle()
        self._latest_id = 0
        self._outstanding: dict[int, Future] = {}
        self._listeners: list[StateListener] = []
        self.history: list[AttemptRecord] = []

    # ── Read side ────────────────────────────────────────────────────

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def displayed(self) -> Union[Idle, Success, Failed]:
        """The settled state the UI should keep showing."""
        state = self._state
        if isinstance(state, InFlight):
            return state.previous
        return state

    @property
    def latest_request_id(self) -> int:
        return self._latest_id

    @property
    def is_generating(self) -> bool:
        return isinstance(self._state, InFlight)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for applied transitions. Returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ── Generate ─────────────────────────────────────────────────────

    def generate(
        self,
        grid: GridSpec,
        plot_type: Union[str, PotentialType],
        params: PotentialParameters,
    ) -> int:
        """
        Start a new generation attempt and return its request id.

        Validation failures settle into Failed immediately without any
        network call. Otherwise the state becomes InFlight and the API call
        is handed to the executor.
        """
        with self._lock:
            self._latest_id += 1
            request_id = self._latest_id
            started = time.monotonic()
            self._cancel_queued()

            try:
                request = build_request(grid, plot_type, params)
            except ValidationError as e:
                logger.info("Request %d rejected: %s", request_id, e.message)
                self.history.append(AttemptRecord(
                    request_id=request_id,
                    plot_type=str(getattr(plot_type, "value", plot_type)),
                    outcome="invalid",
                    message=e.message,
                ))
                self._transition(Failed(
                    message=f"Invalid {e.field}: {e.message}",
                    error=e,
                    request_id=request_id,
                ))
                return request_id

            logger.info(
                "Request %d issued: %s on %d points",
                request_id,
                request.plot_type.label,
                int(request.grid.n_grid),
            )
            self._transition(InFlight(request_id=request_id, previous=self.displayed))

            future = self._executor.submit(self.client.send, request)
            self._outstanding[request_id] = future
            future.add_done_callback(partial(self._on_complete, request_id, request, started))
        return request_id

    def generate_from(self, model: ParameterModel) -> int:
        """Generate from the current snapshot of a parameter model."""
        return self.generate(*model.snapshot())

    def wait(self, timeout: Optional[float] = None) -> GenerationState:
        """
        Block until no attempt is in flight, or until `timeout` seconds pass.

        For headless callers; the dashboard polls `state` instead.
        """
        with self._changed:
            self._changed.wait_for(lambda: not isinstance(self._state, InFlight), timeout)
            return self._state

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # ── Completion ───────────────────────────────────────────────────

    def _on_complete(
        self,
        request_id: int,
        request: GenerationRequest,
        started: float,
        future: Future,
    ) -> None:
        duration = time.monotonic() - started
        if future.cancelled():
            with self._lock:
                self._outstanding.pop(request_id, None)
                logger.debug("Request %d cancelled before it started", request_id)
                self.history.append(AttemptRecord(
                    request_id=request_id,
                    plot_type=request.plot_type.value,
                    outcome="stale",
                    message="cancelled",
                ))
            return

        outcome: Union[Success, Failed]
        try:
            result = future.result()
        except PlotClientError as e:
            outcome = Failed(message=GENERIC_FAILURE_MESSAGE, error=e, request_id=request_id)
        except Exception as e:
            logger.exception("Unexpected error in request %d", request_id)
            outcome = Failed(message=GENERIC_FAILURE_MESSAGE, error=e, request_id=request_id)
        else:
            outcome = Success(result=result, request_id=request_id)

        with self._lock:
            self._outstanding.pop(request_id, None)
            if request_id != self._latest_id:
                logger.debug(
                    "Discarding stale outcome of request %d (latest is %d)",
                    request_id,
                    self._latest_id,
                )
                self.history.append(AttemptRecord(
                    request_id=request_id,
                    plot_type=request.plot_type.value,
                    outcome="stale",
                    duration_s=duration,
                ))
                return

            if isinstance(outcome, Success):
                logger.info("Request %d succeeded in %.2fs", request_id, duration)
                record = AttemptRecord(request_id, request.plot_type.value, "success", duration)
            else:
                logger.warning("Request %d failed: %s", request_id, outcome.error)
                record = AttemptRecord(
                    request_id, request.plot_type.value, "failed", duration, str(outcome.error)
                )
            self.history.append(record)
            self._transition(outcome)

    def _cancel_queued(self) -> None:
        """
        Cancel superseded attempts that have not reached the network yet.
        Calls already running are left to finish and are discarded as stale.
        Caller holds the lock.
        """
        for future in list(self._outstanding.values()):
            future.cancel()

    def _transition(self, new_state: GenerationState) -> None:
        """Apply a state change. Caller holds the lock."""
        self._state = new_state
        self._changed.notify_all()
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener %r raised", listener)
