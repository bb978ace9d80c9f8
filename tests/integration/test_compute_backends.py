"""Integration tests for calculation backends and request supersession."""

from concurrent.futures import Future
from typing import Any

import pytest

from easelcalc.calculator import BorderCalculator
from easelcalc.compute import (
    CalculationDispatcher,
    ComputeBackend,
    InlineBackend,
    ProcessPoolBackend,
    select_backend,
)
from easelcalc.controller import BorderCalculatorController
from easelcalc.validation import CalculatorSettings

SETTINGS = [
    CalculatorSettings(),
    CalculatorSettings(is_landscape=False, aspect_ratio="65:24"),
    CalculatorSettings(paper_size="custom", custom_paper_width=13, custom_paper_height=10, is_landscape=False),
    CalculatorSettings(enable_offset=True, ignore_min_border=True, horizontal_offset=-2, vertical_offset=0.3),
    CalculatorSettings(aspect_ratio="even-borders", paper_size="16x20", min_border=1.5),
    CalculatorSettings(min_border=9),
]


class ManualBackend(ComputeBackend):
    """Backend whose futures are resolved by the test."""

    name = "manual"

    def __init__(self) -> None:
        self.futures: list[Future] = []
        self.payloads: list[dict[str, Any]] = []

    def submit(self, payload: dict[str, Any]) -> Future:
        future: Future = Future()
        self.futures.append(future)
        self.payloads.append(payload)
        return future


class BrokenBackend(ComputeBackend):
    """Backend that fails on every request."""

    name = "broken"

    def submit(self, payload: dict[str, Any]) -> Future:
        raise RuntimeError("worker crashed")


class TestWorkerEquivalence:
    """Worker and inline paths must produce identical results."""

    def test_process_pool_matches_inline(self) -> None:
        backend = ProcessPoolBackend()
        try:
            worker = CalculationDispatcher(backend)
            inline = CalculationDispatcher(InlineBackend())
            for settings in SETTINGS:
                assert worker.calculate(settings, 0.5) == inline.calculate(settings, 0.5)
        finally:
            backend.close()

    def test_select_backend_inline(self) -> None:
        backend = select_backend("inline")
        assert backend.name == "inline"

    def test_select_backend_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unsupported backend"):
            select_backend("gpu")

    def test_select_backend_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a platform without process support still gets a backend."""

        def unavailable(*args: Any, **kwargs: Any) -> None:
            raise NotImplementedError("no sem_open")

        monkeypatch.setattr("easelcalc.compute.ProcessPoolBackend", unavailable)
        assert select_backend("auto").name == "inline"


class TestSupersession:
    """Newest request wins regardless of completion order."""

    def test_stale_result_discarded(self) -> None:
        backend = ManualBackend()
        calculator = BorderCalculator()
        dispatcher = CalculationDispatcher(backend, calculator)

        old = CalculatorSettings(min_border=0.25)
        new = CalculatorSettings(min_border=1.0)
        dispatcher.submit(old, None)
        second_id = dispatcher.submit(new, None)
        assert second_id == 2
        assert backend.futures[0].cancelled()

        # The superseded request completing late must not surface
        backend.futures[1].set_result(calculator.compute(new).model_dump())
        result = dispatcher.poll()
        assert result is not None
        assert result.left_border == pytest.approx(1.0)

    def test_poll_before_completion(self) -> None:
        backend = ManualBackend()
        dispatcher = CalculationDispatcher(backend)
        dispatcher.submit(CalculatorSettings(), None)
        assert dispatcher.poll() is None

    def test_wait_without_submit_raises(self) -> None:
        with pytest.raises(RuntimeError, match="No calculation submitted"):
            CalculationDispatcher().wait()

    def test_wait_returns_newest_not_previous(self) -> None:
        """Test wait never hands back an older result while a newer request is pending."""
        backend = ManualBackend()
        calculator = BorderCalculator()
        dispatcher = CalculationDispatcher(backend, calculator)
        old = CalculatorSettings(min_border=0.25)
        dispatcher.submit(old, None)
        backend.futures[0].set_result(calculator.compute(old).model_dump())
        assert dispatcher.wait().left_border == pytest.approx(0.25)

        dispatcher.submit(CalculatorSettings(min_border=1.0), None)
        result = dispatcher.wait(timeout=0.01)
        assert result.left_border == pytest.approx(1.0)

    def test_latest_kept_after_resolution(self) -> None:
        dispatcher = CalculationDispatcher()
        first = dispatcher.calculate(CalculatorSettings())
        assert dispatcher.wait() is first
        assert dispatcher.latest is first


class TestFallback:
    """Backend failures are replaced by inline computation."""

    def test_submit_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        dispatcher = CalculationDispatcher(BrokenBackend())
        result = dispatcher.calculate(CalculatorSettings())
        assert result == BorderCalculator().compute(CalculatorSettings())
        assert "worker crashed" in caplog.text

    def test_future_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        backend = ManualBackend()
        dispatcher = CalculationDispatcher(backend)
        dispatcher.submit(CalculatorSettings(), None)
        backend.futures[0].set_exception(OSError("pipe closed"))
        result = dispatcher.wait()
        assert result.print_width == pytest.approx(9)
        assert "pipe closed" in caplog.text

    def test_timeout_computes_inline(self) -> None:
        backend = ManualBackend()
        dispatcher = CalculationDispatcher(backend)
        dispatcher.submit(CalculatorSettings(), None)
        result = dispatcher.wait(timeout=0.01)
        assert result.print_width == pytest.approx(9)

    def test_calculate_does_not_block_on_stuck_worker(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a worker that never answers is replaced by inline computation."""
        dispatcher = CalculationDispatcher(ManualBackend(), timeout=0.01)
        result = dispatcher.calculate(CalculatorSettings())
        assert result == BorderCalculator().compute(CalculatorSettings())
        assert "timed out" in caplog.text

    def test_controller_with_stuck_worker(self) -> None:
        controller = BorderCalculatorController(dispatcher=CalculationDispatcher(ManualBackend(), timeout=0.01))
        controller.set_paper_size("16x20")
        assert controller.result.paper_width == 20

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_non_positive_timeout_rejected(self, timeout: float) -> None:
        with pytest.raises(ValueError, match="timeout must be positive"):
            CalculationDispatcher(timeout=timeout)

    def test_controller_with_broken_backend(self) -> None:
        """Test the controller keeps working when the worker is gone."""
        controller = BorderCalculatorController(dispatcher=CalculationDispatcher(BrokenBackend()))
        controller.set_paper_size("11x14")
        assert controller.result.paper_width == 14
