"""
Base classes for vehicle control tasks

A task is a cancellable handle: a stop flag plus the command helpers every
control path shares. Background missions add a worker thread that polls the
flag; stopping sets the flag and joins the thread. There is no preemptive
cancellation.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging
import threading
import uuid

from ..core.telemetry_cache import TelemetryCache, wait_for_position
from ..models.config import ConsoleConfig
from ..models.vehicle import Waypoint
from ..utils.logging import MissionLogAdapter
from ..utils.metrics import MetricsCollector

class ControlTask:
    """
    Owner of the vehicle's command path for one control mode

    Holds the stop flag, the position-fix gate and the goto helper. Runs in
    whichever thread drives it.
    """

    def __init__(
        self,
        link,
        cache: TelemetryCache,
        config: ConsoleConfig,
        name: str,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.link = link
        self.cache = cache
        self.config = config
        self.name = name
        self.mission_id = f"{name.lower()}-{uuid.uuid4().hex[:8]}"
        self.metrics = metrics
        self.logger = MissionLogAdapter(logging.getLogger(self.__class__.__name__), name, self.mission_id)
        self.commands_sent = 0

        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()

    def stop(self):
        """Request a stop; takes effect before the next command"""
        self._stop_event.set()

    def wait_for_fix(self) -> bool:
        """Position-fix gate; aborts early when the task is stopped"""
        timeouts = self.config.timeouts
        return wait_for_position(
            self.cache,
            timeout_sec=timeouts.position_fix,
            poll_interval=timeouts.poll_interval,
            cancel=self._stop_event,
        )

    def goto(self, waypoint: Waypoint) -> bool:
        """Send one waypoint; failures are reported, never raised"""
        ok = self.link.goto_location(waypoint.latitude, waypoint.longitude, waypoint.altitude, waypoint.yaw)
        self.commands_sent += 1
        if self.metrics is not None:
            self.metrics.record_command("goto_location", ok)
        if not ok:
            self.logger.warning(
                f"goto_location failed (lat={waypoint.latitude:.7f}, lon={waypoint.longitude:.7f}, alt={waypoint.altitude:.1f})"
            )
        return ok

class BaseMission(ControlTask, ABC):
    """
    Control task with its own worker thread

    To implement a new background task:
    1. Create a new class inheriting from BaseMission
    2. Implement execute() with the command loop, checking self.is_running
       and sleeping through self.wait(seconds) so a stop request is seen
       within one interval
    3. Return True if the task ended normally, False on failure
    """

    def __init__(
        self,
        link,
        cache: TelemetryCache,
        config: ConsoleConfig,
        name: str,
        metrics: Optional[MetricsCollector] = None,
        on_finished: Optional[Callable[['BaseMission'], None]] = None,
    ):
        super().__init__(link, cache, config, name, metrics=metrics)
        self.on_finished = on_finished
        self.result: Optional[bool] = None
        self._thread: Optional[threading.Thread] = None

    @abstractmethod
    def execute(self) -> bool:
        """
        Run the task until stopped

        Returns:
            True if the task ended normally, False otherwise
        """
        pass

    def start(self):
        """Spawn the worker thread"""
        if self._thread is not None:
            raise RuntimeError(f"Task {self.mission_id} already started")
        self._thread = threading.Thread(
            target=self._run, name=f"mission-{self.name.lower()}", daemon=True
        )
        self._thread.start()

    def _run(self):
        try:
            self.result = self.execute()
        except Exception:
            self.logger.exception("Task crashed")
            self.result = False
        finally:
            self._stop_event.set()
            if self.on_finished is not None:
                self.on_finished(self)

    def stop(self):
        """Request a cooperative stop and wait for the worker to exit"""
        super().stop()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def wait(self, seconds: float) -> bool:
        """Sleep up to seconds; returns True if a stop was requested meanwhile"""
        return self._stop_event.wait(seconds)
