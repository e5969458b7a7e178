"""
Telemetry Cache - Latest-value store between telemetry delivery and display
"""

import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from ..models.vehicle import Battery, Position, TelemetrySnapshot, Velocity

FIX_EPSILON_DEG = 1e-7

class TelemetryCache:
    """
    Thread-safe latest-value cache for position, velocity and battery.

    Each field group has its own lock; writers only copy a value in, readers
    only copy a value out, so a slow reader never stalls telemetry delivery.
    Groups are read under separate locks and may come from different samples.
    """

    FIELDS = ("position", "velocity", "battery")

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._values: Dict[str, Any] = {
            "position": Position(),
            "velocity": Velocity(),
            "battery": Battery(),
        }
        self._locks = {name: threading.Lock() for name in self.FIELDS}
        self._update_callbacks = []

    def update(self, field: str, value: Any):
        """Store the latest value of a field group"""
        lock = self._locks.get(field)
        if lock is None:
            raise ValueError(f"Unknown telemetry field: {field}")
        with lock:
            self._values[field] = value
        for callback in self._update_callbacks:
            try:
                callback(field)
            except Exception as e:
                self.logger.error(f"Telemetry update callback error: {e}")

    def update_position(self, position: Position):
        self.update("position", position)

    def update_velocity(self, velocity: Velocity):
        self.update("velocity", velocity)

    def update_battery(self, battery: Battery):
        self.update("battery", battery)

    def _get(self, field: str) -> Any:
        with self._locks[field]:
            return copy.copy(self._values[field])

    def position(self) -> Position:
        """Latest position sample"""
        return self._get("position")

    def read(self) -> TelemetrySnapshot:
        """Copy of every field group, one short critical section per group"""
        return TelemetrySnapshot(
            position=self._get("position"),
            velocity=self._get("velocity"),
            battery=self._get("battery"),
        )

    def register_update_callback(self, callback: Callable[[str], None]):
        """Register a callback invoked with the field name after each update"""
        self._update_callbacks.append(callback)

def wait_for_position(
    cache: TelemetryCache,
    timeout_sec: float = 10.0,
    poll_interval: float = 0.2,
    cancel: Optional[threading.Event] = None,
) -> bool:
    """
    Block until the cache holds a position fix.

    Returns True as soon as |lat| or |lon| exceeds FIX_EPSILON_DEG, False once
    timeout_sec elapses or the optional cancel event is set.
    """
    deadline = time.monotonic() + timeout_sec
    while True:
        if cache.position().has_fix(FIX_EPSILON_DEG):
            return True
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        delay = min(poll_interval, remaining)
        if cancel is not None:
            if cancel.wait(delay):
                return False
        else:
            time.sleep(delay)
