"""Pluggable calculation backends.

This module provides:
- Abstract ComputeBackend interface for running calculations
- InlineBackend computing on the calling thread
- ProcessPoolBackend offloading to a worker process
- select_backend choosing a backend at startup based on platform support
- CalculationDispatcher: newest-request-wins submission with inline fallback
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ProcessPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from easelcalc.calculator import BorderCalculator, build_payload, init_worker, run_calculation
from easelcalc.config import CALCULATION_TIMEOUT_SECONDS
from easelcalc.validation import CalculationResult, CalculatorSettings

logger = logging.getLogger(__name__)


class ComputeBackend(ABC):
    """Abstract base class for calculation backends."""

    name = "abstract"

    @abstractmethod
    def submit(self, payload: dict[str, Any]) -> "Future[dict[str, Any]]":
        """Start a calculation.

        Args:
            payload: Job built by calculator.build_payload

        Returns:
            Future resolving to a CalculationResult dict
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources."""


class InlineBackend(ComputeBackend):
    """Backend computing synchronously with a local calculator."""

    name = "inline"

    def __init__(self, calculator: BorderCalculator | None = None) -> None:
        self.calculator = calculator or BorderCalculator()

    def submit(self, payload: dict[str, Any]) -> "Future[dict[str, Any]]":
        future: Future[dict[str, Any]] = Future()
        settings = CalculatorSettings.model_validate(payload["settings"])
        try:
            result = self.calculator.compute(settings, payload.get("last_valid_min_border"))
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result.model_dump())
        return future


class ProcessPoolBackend(ComputeBackend):
    """Backend running calculations in a single worker process."""

    name = "process"

    def __init__(self, viewport: tuple[int, int] | None = None) -> None:
        initargs = (tuple(viewport),) if viewport is not None else ()
        self.executor = ProcessPoolExecutor(max_workers=1, initializer=init_worker, initargs=initargs)
        logger.info("ProcessPoolBackend initialized")

    def submit(self, payload: dict[str, Any]) -> "Future[dict[str, Any]]":
        return self.executor.submit(run_calculation, payload)

    def close(self) -> None:
        self.executor.shutdown(wait=False, cancel_futures=True)


def select_backend(preference: str = "auto", calculator: BorderCalculator | None = None) -> ComputeBackend:
    """Choose a backend once at startup.

    Args:
        preference: "auto" | "process" | "inline"
        calculator: Calculator used by the inline backend

    Returns:
        ProcessPoolBackend when requested and available, otherwise InlineBackend

    Raises:
        ValueError: If preference is not recognised
    """
    if preference not in ("auto", "process", "inline"):
        raise ValueError(f"Unsupported backend: {preference}")

    if preference != "inline":
        viewport = calculator.viewport if calculator is not None else None
        try:
            return ProcessPoolBackend(viewport=viewport)
        except (OSError, NotImplementedError, ImportError) as e:
            logger.warning(f"Worker unavailable, falling back to inline calculation: {e}")

    return InlineBackend(calculator)


class CalculationDispatcher:
    """Submit calculations to a backend; only the newest request's result is kept.

    Stale results from superseded requests are discarded regardless of arrival
    order. Any backend failure is logged and replaced by an inline computation,
    which produces the same result.

    Args:
        backend: Where calculations run (inline by default)
        calculator: Calculator used for inline fallback
        timeout: Seconds calculate() waits for the backend before computing inline
    """

    def __init__(
        self,
        backend: ComputeBackend | None = None,
        calculator: BorderCalculator | None = None,
        timeout: float = CALCULATION_TIMEOUT_SECONDS,
    ) -> None:
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.calculator = calculator or BorderCalculator()
        self.backend = backend or InlineBackend(self.calculator)
        self.timeout = timeout
        self._request_id = 0
        self._pending: tuple[int, Future | None, CalculatorSettings, float | None] | None = None
        self._latest: tuple[int, CalculationResult] | None = None

    @property
    def request_id(self) -> int:
        """Identifier of the newest submitted request."""
        return self._request_id

    @property
    def latest(self) -> CalculationResult | None:
        """Result of the newest completed request, if any."""
        return self._latest[1] if self._latest else None

    def submit(self, settings: CalculatorSettings, last_valid_min_border: float | None = None) -> int:
        """Submit a calculation, superseding any in-flight one.

        Returns:
            Request identifier
        """
        self._request_id += 1
        request_id = self._request_id

        if self._pending is not None:
            superseded = self._pending[1]
            if superseded is not None and superseded.cancel():
                logger.debug(f"Cancelled superseded request {self._pending[0]}")

        payload = build_payload(settings, last_valid_min_border, self.calculator.viewport)
        try:
            future = self.backend.submit(payload)
        except Exception as e:
            logger.warning(f"Backend '{self.backend.name}' rejected request {request_id}: {e}")
            future = None

        self._pending = (request_id, future, settings, last_valid_min_border)
        return request_id

    def poll(self) -> CalculationResult | None:
        """Collect the newest result without blocking.

        Returns:
            The newest request's result once available, else None
        """
        pending = self._pending
        if pending is not None and (pending[1] is None or pending[1].done()):
            self._resolve(pending, timeout=0)
        return self.latest if self._latest and self._latest[0] == self._request_id else None

    def wait(self, timeout: float | None = None) -> CalculationResult:
        """Block until the newest request has a result.

        Args:
            timeout: Seconds to wait for the backend before computing inline

        Returns:
            Result of the newest request

        Raises:
            RuntimeError: If nothing has been submitted
        """
        if self._pending is not None:
            return self._resolve(self._pending, timeout=timeout)
        if self._latest is None:
            raise RuntimeError("No calculation submitted")
        return self._latest[1]

    def calculate(self, settings: CalculatorSettings, last_valid_min_border: float | None = None) -> CalculationResult:
        """Submit and wait in one step, falling back to inline after self.timeout seconds."""
        self.submit(settings, last_valid_min_border)
        return self.wait(timeout=self.timeout)

    def close(self) -> None:
        self.backend.close()

    def _resolve(
        self,
        pending: tuple[int, Future | None, CalculatorSettings, float | None],
        timeout: float | None,
    ) -> CalculationResult:
        request_id, future, settings, last_valid = pending

        result: CalculationResult | None = None
        if future is not None:
            try:
                result = CalculationResult.model_validate(future.result(timeout=timeout))
            except FutureTimeoutError:
                logger.warning(f"Request {request_id} timed out on '{self.backend.name}', computing inline")
            except Exception as e:
                logger.warning(f"Request {request_id} failed on '{self.backend.name}', computing inline: {e}")

        if result is None:
            result = self.calculator.compute(settings, last_valid)

        # Superseded requests never reach here: submit() replaces the pending entry
        self._pending = None
        self._latest = (request_id, result)
        return result
