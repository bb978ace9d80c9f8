"""State/warning controller for the border calculator.

This module handles:
- Restoring persisted settings on start-up
- Turning user input into reducer actions
- Recomputing the CalculationResult after every state change
- Feeding warnings back through the debounce gates
- Scheduling debounced persistence of the settings subset
"""

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from easelcalc.compute import CalculationDispatcher
from easelcalc.config import (
    ASPECT_RATIO_MAP,
    CALC_STORAGE_KEY,
    PAPER_SIZE_MAP,
    PERSIST_DEBOUNCE_SECONDS,
    WARNING_DEBOUNCE_SECONDS,
)
from easelcalc.debounce import DebouncedWriter, WarningDebouncer
from easelcalc.dimensions import resolve_dimensions
from easelcalc.geometry import calculate_optimal_min_border, calculate_quarter_inch_min_border
from easelcalc.state import (
    WARNING_FIELDS,
    BatchUpdate,
    InternalUpdate,
    Reset,
    SetAspectRatio,
    SetField,
    SetPaperSize,
    initial_state,
    persistable,
    reducer,
    restorable,
    settings_from_state,
)
from easelcalc.storage import KeyValueStore
from easelcalc.validation import CalculationResult, CalculatorSettings, CalculatorState, parse_number

logger = logging.getLogger(__name__)

_CUSTOM_DIMENSION_FIELDS = {
    "custom_paper_width": "last_valid_custom_paper_width",
    "custom_paper_height": "last_valid_custom_paper_height",
    "custom_aspect_width": "last_valid_custom_aspect_width",
    "custom_aspect_height": "last_valid_custom_aspect_height",
}

_TOGGLE_FIELDS = (
    "enable_offset",
    "ignore_min_border",
    "show_blades",
    "show_blade_readings",
    "is_landscape",
    "is_ratio_flipped",
)


class BorderCalculatorController:
    """Owns calculator state and keeps the result, warnings and storage in step with it.

    Args:
        store: Durable key-value store; None disables persistence
        dispatcher: Calculation dispatcher (inline by default)
        clock: Monotonic time source in seconds
        warning_delay: Seconds a new or changed warning waits before becoming visible
        persist_delay: Seconds of quiet before settings are written
        storage_key: Key the settings blob is stored under

    Note:
        No timers run in the background. Call tick() regularly (or flush()
        before exiting) to let debounce deadlines expire.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        dispatcher: CalculationDispatcher | None = None,
        clock: Callable[[], float] = time.monotonic,
        warning_delay: float = WARNING_DEBOUNCE_SECONDS,
        persist_delay: float = PERSIST_DEBOUNCE_SECONDS,
        storage_key: str = CALC_STORAGE_KEY,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher or CalculationDispatcher()
        self.clock = clock
        self.storage_key = storage_key
        self.warnings = WarningDebouncer(WARNING_FIELDS, warning_delay)
        self.writer = DebouncedWriter(store, storage_key, persist_delay) if store is not None else None

        self.state: CalculatorState = initial_state()
        self._result: CalculationResult | None = None
        self._persisted: dict[str, Any] = persistable(self.state)

        self._restore()
        self._recompute()

    @property
    def settings(self) -> CalculatorSettings:
        """Settings as seen by the calculator (custom dimensions at their last valid values)."""
        return settings_from_state(self.state)

    @property
    def result(self) -> CalculationResult:
        """Result for the current state."""
        if self._result is None:
            raise RuntimeError("No result calculated yet")
        return self._result

    def dispatch(self, action: object) -> CalculationResult:
        """Apply an action, recompute, and schedule persistence.

        Returns:
            The fresh CalculationResult
        """
        self.state = reducer(self.state, action)
        self._recompute()
        return self.result

    def tick(self) -> dict[str, str | None]:
        """Let expired debounce deadlines fire.

        Returns:
            Warning fields that became visible
        """
        now = self.clock()
        changed = self.warnings.poll(now)
        if changed:
            self.state = reducer(self.state, InternalUpdate(changed))
        if self.writer is not None:
            self.writer.poll(now)
        return changed

    def flush(self) -> None:
        """Write pending settings now."""
        if self.writer is not None:
            self.writer.flush()

    def close(self) -> None:
        self.flush()
        self.dispatcher.close()

    # Input handlers

    def set_min_border(self, raw: str | float | int | None) -> bool:
        """Set the minimum border from typed or slider input.

        Empty or partial text ("", "-", ".") is ignored so typing can continue.
        Out-of-range numbers are accepted into state; the calculation falls
        back to the last valid border and raises a warning.

        Returns:
            True if the state changed
        """
        value = parse_number(raw)
        if value is None:
            logger.debug(f"Ignoring non-numeric min border input: {raw!r}")
            return False
        self.dispatch(SetField("min_border", value))
        return True

    def set_custom_dimension(self, key: str, raw: str | float | int | None) -> bool:
        """Set a custom paper or ratio dimension.

        The typed value is always kept; its last-valid counterpart, which the
        calculation uses, only follows positive values.

        Raises:
            KeyError: If key is not a custom dimension field
        """
        if key not in _CUSTOM_DIMENSION_FIELDS:
            raise KeyError(f"Not a custom dimension: {key}")
        value = parse_number(raw)
        if value is None:
            logger.debug(f"Ignoring non-numeric {key} input: {raw!r}")
            return False
        changes: dict[str, Any] = {key: value}
        if value > 0:
            changes[_CUSTOM_DIMENSION_FIELDS[key]] = value
        self.dispatch(BatchUpdate(changes))
        return True

    def set_custom_paper_width(self, raw: str | float | int | None) -> bool:
        return self.set_custom_dimension("custom_paper_width", raw)

    def set_custom_paper_height(self, raw: str | float | int | None) -> bool:
        return self.set_custom_dimension("custom_paper_height", raw)

    def set_custom_aspect_width(self, raw: str | float | int | None) -> bool:
        return self.set_custom_dimension("custom_aspect_width", raw)

    def set_custom_aspect_height(self, raw: str | float | int | None) -> bool:
        return self.set_custom_dimension("custom_aspect_height", raw)

    def set_paper_size(self, value: str) -> bool:
        if value not in PAPER_SIZE_MAP:
            logger.warning(f"Ignoring unknown paper size: {value}")
            return False
        self.dispatch(SetPaperSize(value))
        return True

    def set_aspect_ratio(self, value: str) -> bool:
        if value not in ASPECT_RATIO_MAP:
            logger.warning(f"Ignoring unknown aspect ratio: {value}")
            return False
        self.dispatch(SetAspectRatio(value))
        return True

    def set_offsets(self, horizontal: float | None = None, vertical: float | None = None) -> None:
        changes: dict[str, Any] = {}
        if horizontal is not None:
            changes["horizontal_offset"] = horizontal
        if vertical is not None:
            changes["vertical_offset"] = vertical
        if changes:
            self.dispatch(BatchUpdate(changes))

    def set_toggle(self, key: str, value: bool) -> None:
        """Set one of the boolean options.

        Raises:
            KeyError: If key is not a boolean option
        """
        if key not in _TOGGLE_FIELDS:
            raise KeyError(f"Not a toggle: {key}")
        self.dispatch(SetField(key, bool(value)))

    def toggle_landscape(self) -> None:
        self.set_toggle("is_landscape", not self.state.is_landscape)

    def toggle_ratio_flip(self) -> None:
        self.set_toggle("is_ratio_flipped", not self.state.is_ratio_flipped)

    def apply_preset(self, settings: CalculatorSettings) -> CalculationResult:
        """Replace all settings at once, e.g. from a shared preset."""
        changes: dict[str, Any] = settings.model_dump()
        for key, last_valid_key in _CUSTOM_DIMENSION_FIELDS.items():
            if changes[key] > 0:
                changes[last_valid_key] = changes[key]
        return self.dispatch(BatchUpdate(changes))

    def reset(self) -> CalculationResult:
        """Return to defaults; visible warnings are recomputed from scratch."""
        self.warnings.sync({})
        return self.dispatch(Reset())

    def shareable_settings(self) -> CalculatorSettings:
        """Settings for a share code, with a rejected minimum border replaced by the one in use."""
        settings = self.settings
        if self.result.min_border_warning is not None:
            settings = settings.model_copy(update={"min_border": self.result.last_valid_min_border})
        return settings

    def suggest_min_borders(self) -> dict[str, float | None]:
        """Minimum-border suggestions for the current settings.

        Returns:
            {"optimal": border with borders closest to the quarter-inch grid,
             "quarter_inch": border giving a whole-quarter-inch print, or None}
        """
        oriented = resolve_dimensions(self.settings)
        paper, ratio = oriented["paper"], oriented["ratio"]
        result = self.result
        min_border = result.last_valid_min_border
        quarter = None
        if result.has_valid_print:
            quarter = calculate_quarter_inch_min_border(
                paper["w"], paper["h"], ratio["w"], ratio["h"], min_border, result.print_width, result.print_height
            )
        return {
            "optimal": calculate_optimal_min_border(paper["w"], paper["h"], ratio["w"], ratio["h"], min_border),
            "quarter_inch": quarter,
        }

    # Internals

    def _restore(self) -> None:
        if self.store is None:
            return
        try:
            raw = self.store.get(self.storage_key)
        except OSError as e:
            logger.warning(f"Could not read persisted settings: {e}")
            return
        if raw is None:
            return

        try:
            blob = json.loads(raw)
            if not isinstance(blob, dict):
                raise ValueError("expected a JSON object")
            self.state = reducer(self.state, BatchUpdate(restorable(blob)))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Ignoring invalid persisted settings: {e}")
            return

        self._persisted = persistable(self.state)
        logger.info(f"Restored settings from '{self.storage_key}'")

    def _recompute(self) -> None:
        now = self.clock()
        result = self.dispatcher.calculate(self.settings, self.state.last_valid_min_border)
        self._result = result

        internal: dict[str, Any] = {}
        if result.last_valid_min_border != self.state.last_valid_min_border:
            internal["last_valid_min_border"] = result.last_valid_min_border
        internal.update(self.warnings.offer(result.warnings(), now))
        if internal:
            self.state = reducer(self.state, InternalUpdate(internal))

        self._schedule_persist(now)

    def _schedule_persist(self, now: float) -> None:
        if self.writer is None:
            return
        blob = persistable(self.state)
        if blob == self._persisted:
            return
        self._persisted = blob
        self.writer.schedule(blob, now)
