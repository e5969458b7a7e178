"""Shared fakes for the console tests"""

import threading
import time

from drone_console.core.telemetry_cache import TelemetryCache
from drone_console.models.config import ConsoleConfig, PatternConfig, TimeoutConfig
from drone_console.models.vehicle import LandedState, Position

HOME = Position(latitude=47.397742, longitude=8.545594, relative_altitude=10.0, absolute_altitude=498.0)

class FakeVehicleLink:
    """Records every command with the name of the thread that issued it"""

    def __init__(self, position: Position = HOME):
        self._lock = threading.Lock()
        self.calls = []
        self.gotos = []
        self.start_position = position

        self.arm_result = True
        self.disarm_result = True
        self.takeoff_result = True
        self.land_result = True
        self.goto_result = True
        self.in_air_value = True
        self.landed_value = LandedState.ON_GROUND

    def _record(self, name):
        with self._lock:
            self.calls.append(name)

    def arm(self):
        self._record("arm")
        return self.arm_result

    def disarm(self):
        self._record("disarm")
        return self.disarm_result

    def takeoff(self, altitude=None):
        self._record("takeoff")
        return self.takeoff_result

    def land(self):
        self._record("land")
        return self.land_result

    def goto_location(self, lat, lon, alt, yaw=0.0):
        with self._lock:
            self.calls.append("goto_location")
            self.gotos.append((threading.current_thread().name, lat, lon, alt))
        return self.goto_result

    def position(self):
        return self.start_position

    def in_air(self):
        self._record("in_air")
        return self.in_air_value

    def landed_state(self):
        self._record("landed_state")
        return self.landed_value

    def goto_count(self):
        with self._lock:
            return len(self.gotos)

    def goto_threads(self):
        with self._lock:
            return [g[0] for g in self.gotos]

class FakeKeyboard:
    """Feeds a fixed sequence of keys, one per poll"""

    def __init__(self, keys):
        self.keys = list(keys)

    def has_input(self):
        return bool(self.keys)

    def read_char(self):
        return self.keys.pop(0)

def fast_config() -> ConsoleConfig:
    """Default config with waits and cadences shortened for tests"""
    config = ConsoleConfig()
    config.timeouts = TimeoutConfig(position_fix=0.3, in_air=0.2, landed=0.2, poll_interval=0.01)
    config.patterns = PatternConfig(tick_interval=0.01, corner_dwell=0.02)
    config.input_poll_interval = 0.01
    return config

def cache_with_fix(position: Position = HOME) -> TelemetryCache:
    cache = TelemetryCache()
    cache.update_position(position)
    return cache

def wait_until(predicate, timeout=2.0, interval=0.005) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
