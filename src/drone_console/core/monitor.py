"""
Monitor Loop - Periodic status line
"""

import logging
import sys
import threading
from datetime import datetime
from typing import Callable, Optional, TextIO

from .telemetry_cache import TelemetryCache
from ..models.vehicle import TelemetrySnapshot
from ..utils.metrics import MetricsCollector

def render_status(snapshot: TelemetrySnapshot, mode_name: str, now: datetime) -> str:
    """Format one status line (without the leading carriage return)"""
    pos = snapshot.position
    return (
        f"[{now.strftime('%Y-%m-%d %H:%M:%S')}] "
        f"Lat:{pos.latitude:10.6f}° Lon:{pos.longitude:10.6f}° Alt:{pos.relative_altitude:7.2f} m"
        f" | Speed:{snapshot.velocity.speed:6.2f} m/s"
        f" | Bat:{snapshot.battery.remaining_percent:5.1f}%"
        f" | Mission:{mode_name:<10}"
    )

class MonitorLoop:
    """
    Reads the telemetry cache at a fixed rate and overwrites one status line.

    Purely observational: never issues vehicle commands.
    """

    def __init__(
        self,
        cache: TelemetryCache,
        mode_name: Callable[[], str],
        rate_hz: float = 5.0,
        stream: Optional[TextIO] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.cache = cache
        self.mode_name = mode_name
        self.interval = 1.0 / max(rate_hz, 0.1)
        self.stream = stream or sys.stdout
        self.metrics = metrics
        self.logger = logging.getLogger(__name__)
        self.ticks = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start the monitor thread"""
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="monitor", daemon=True)
        self._thread.start()
        self.logger.info(f"Monitor started at {1.0 / self.interval:.1f}Hz")

    def stop(self):
        """Stop the monitor thread"""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.logger.info("Monitor stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self):
        """Render one status line"""
        snapshot = self.cache.read()
        line = render_status(snapshot, self.mode_name(), datetime.now())
        self.stream.write("\r" + line)
        self.stream.flush()
        if self.metrics is not None:
            self.metrics.update_vehicle_metrics({
                'battery_percent': snapshot.battery.remaining_percent,
                'speed_mps': snapshot.velocity.speed,
                'altitude': snapshot.position.relative_altitude,
            })
        self.ticks += 1

    def _run(self):
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                self.logger.error(f"Monitor tick failed: {e}")
            self._stop_event.wait(self.interval)
