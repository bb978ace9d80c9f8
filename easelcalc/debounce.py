"""Clock-driven debouncing.

This module handles:
- Per-warning visibility state machine: show delayed, hide immediate
- Grouping the four warning gates of the calculator
- Debounced persistence writes that coalesce rapid edits

Nothing here starts timers or threads. Callers pass the current time in
(any monotonic clock in seconds) and call poll() to let deadlines expire.
"""

import json
import logging
from enum import Enum
from typing import Any

from easelcalc.config import CALC_STORAGE_KEY, PERSIST_DEBOUNCE_SECONDS, WARNING_DEBOUNCE_SECONDS
from easelcalc.storage import KeyValueStore

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    QUIET = "quiet"
    PENDING = "pending"
    SHOWN = "shown"


class WarningGate:
    """Visibility of one warning field.

    States:
        QUIET: nothing visible, nothing waiting
        PENDING: a value is waiting for its deadline (a previous value may still be visible)
        SHOWN: a value is visible, nothing waiting

    Transitions:
        offer(None)           -> QUIET immediately, whatever was visible or pending
        offer(v), v visible   -> SHOWN, any pending value dropped
        offer(v), v pending   -> unchanged, timer keeps running
        offer(v), otherwise   -> PENDING with a fresh deadline
        poll(now >= deadline) -> SHOWN with the pending value
    """

    def __init__(self, delay: float = WARNING_DEBOUNCE_SECONDS) -> None:
        self.delay = delay
        self.visible: str | None = None
        self.pending: str | None = None
        self.deadline: float | None = None

    @property
    def state(self) -> GateState:
        if self.pending is not None:
            return GateState.PENDING
        if self.visible is not None:
            return GateState.SHOWN
        return GateState.QUIET

    def offer(self, value: str | None, now: float) -> bool:
        """Feed the latest computed value.

        Returns:
            True if the visible value changed as a result
        """
        if value is None:
            self.pending = None
            self.deadline = None
            if self.visible is None:
                return False
            self.visible = None
            return True

        if value == self.visible:
            self.pending = None
            self.deadline = None
            return False

        if value == self.pending:
            return False

        if self.delay <= 0:
            self.pending = None
            self.deadline = None
            self.visible = value
            return True

        self.pending = value
        self.deadline = now + self.delay
        return False

    def poll(self, now: float) -> bool:
        """Promote the pending value once its deadline has passed.

        Returns:
            True if the visible value changed
        """
        if self.pending is None or self.deadline is None or now < self.deadline:
            return False
        self.visible = self.pending
        self.pending = None
        self.deadline = None
        return True

    def reset(self) -> None:
        self.visible = None
        self.pending = None
        self.deadline = None


class WarningDebouncer:
    """One WarningGate per warning field."""

    def __init__(self, fields: tuple[str, ...], delay: float = WARNING_DEBOUNCE_SECONDS) -> None:
        self.gates = {name: WarningGate(delay) for name in fields}

    def offer(self, warnings: dict[str, str | None], now: float) -> dict[str, str | None]:
        """Offer new warning values; returns the fields whose visible value changed right away."""
        changed: dict[str, str | None] = {}
        for name, value in warnings.items():
            gate = self.gates[name]
            if gate.offer(value, now):
                changed[name] = gate.visible
        return changed

    def poll(self, now: float) -> dict[str, str | None]:
        """Returns the fields whose pending value became visible."""
        return {name: gate.visible for name, gate in self.gates.items() if gate.poll(now)}

    def sync(self, visible: dict[str, str | None]) -> None:
        """Align gates with values already in state (e.g. after a reset), dropping anything pending."""
        for name, gate in self.gates.items():
            gate.reset()
            gate.visible = visible.get(name)

    def next_deadline(self) -> float | None:
        deadlines = [g.deadline for g in self.gates.values() if g.deadline is not None]
        return min(deadlines) if deadlines else None

    @property
    def visible(self) -> dict[str, str | None]:
        return {name: gate.visible for name, gate in self.gates.items()}


class DebouncedWriter:
    """Write a JSON blob to a key-value store after a quiet period.

    Each schedule() replaces the pending blob and restarts the delay, so a
    burst of edits results in one write. Failures are logged and the blob
    is dropped; in-memory state stays authoritative.

    Args:
        store: Destination store
        key: Storage key
        delay: Seconds of quiet before writing
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = CALC_STORAGE_KEY,
        delay: float = PERSIST_DEBOUNCE_SECONDS,
    ) -> None:
        self.store = store
        self.key = key
        self.delay = delay
        self._pending: dict[str, Any] | None = None
        self._deadline: float | None = None
        self.writes = 0

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def schedule(self, blob: dict[str, Any], now: float) -> None:
        self._pending = blob
        self._deadline = now + self.delay
        if self.delay <= 0:
            self.flush()

    def poll(self, now: float) -> bool:
        """Write if the deadline has passed. Returns True when a write was attempted."""
        if self._pending is None or self._deadline is None or now < self._deadline:
            return False
        self.flush()
        return True

    def flush(self) -> None:
        """Write any pending blob immediately."""
        if self._pending is None:
            return
        blob = self._pending
        self._pending = None
        self._deadline = None
        try:
            self.store.set(self.key, json.dumps(blob))
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to persist settings under '{self.key}': {e}")
            return
        self.writes += 1
        logger.debug(f"Persisted settings under '{self.key}'")

    def cancel(self) -> None:
        self._pending = None
        self._deadline = None
