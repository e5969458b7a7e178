"""
Mission Controller - Control mode state machine

Owns at most one active task and serializes every mode change:
stop and join the current task first, then start the next one. Arm/takeoff
and land/disarm run synchronously in the caller's thread.
"""

import logging
import threading
import time
from typing import Callable, Optional

from .telemetry_cache import TelemetryCache, wait_for_position
from ..models.config import ConsoleConfig
from ..models.mode import (
    ARM_TAKEOFF, IDLE, LANDING, MANUAL, ControlMode, MissionKind, ModeKind, mission_mode,
)
from ..models.vehicle import LandedState
from ..tasks.base import BaseMission, ControlTask
from ..tasks.manual import ManualController
from ..tasks.mission import PatternMission
from ..utils.metrics import MetricsCollector

def report(message: str):
    """Operator-facing message below the status line"""
    print(f"\n{message}", flush=True)

class MissionController:
    """
    Decides which control mode owns the vehicle

    Transitions are serialized by a re-entrant transition lock. The mode value
    has its own short lock so the monitor can read it at any time; a task is
    never joined while that lock is held.
    """

    def __init__(self, link, cache: TelemetryCache, config: ConsoleConfig,
                 metrics: Optional[MetricsCollector] = None):
        self.link = link
        self.cache = cache
        self.config = config
        self.metrics = metrics or MetricsCollector()
        self.logger = logging.getLogger(__name__)

        self._transition_lock = threading.RLock()
        self._mode_lock = threading.Lock()
        self._mode: ControlMode = IDLE
        self._task: Optional[ControlTask] = None

    # ---- state accessors ----

    @property
    def mode(self) -> ControlMode:
        with self._mode_lock:
            return self._mode

    @property
    def mode_name(self) -> str:
        return self.mode.name

    @property
    def active_task(self) -> Optional[ControlTask]:
        with self._mode_lock:
            return self._task

    def _set_mode(self, mode: ControlMode):
        with self._mode_lock:
            old_mode = self._mode
            self._mode = mode
        if old_mode != mode:
            self.logger.info(f"Mode changed: {old_mode.name} -> {mode.name}")
            self.metrics.record_mode(mode.name)

    def _clear_task(self, task: ControlTask) -> bool:
        with self._mode_lock:
            if self._task is not task:
                return False
            self._task = None
            return True

    def _stop_active(self):
        """Stop and join the active task, if any"""
        task = self.active_task
        if task is None:
            return
        self.logger.info(f"Stopping {task.name} ({task.mission_id})")
        task.stop()
        self._clear_task(task)

    def _task_finished(self, task: BaseMission):
        """Called from a mission thread as it exits"""
        # Clear and reset in one critical section; a newer task may be
        # installed as soon as the lock is released
        with self._mode_lock:
            if self._task is not task:
                return
            self._task = None
            old_mode = self._mode
            self._mode = IDLE
        self.logger.info(f"{task.name} ended on its own (result={task.result})")
        if old_mode != IDLE:
            self.logger.info(f"Mode changed: {old_mode.name} -> {IDLE.name}")
            self.metrics.record_mode(IDLE.name)

    # ---- task-spawning commands ----

    def start_mission(self, kind: MissionKind) -> bool:
        """Replace whatever is active with a pattern mission"""
        with self._transition_lock:
            self._stop_active()
            task = PatternMission(
                kind, self.link, self.cache, self.config,
                metrics=self.metrics, on_finished=self._task_finished,
            )
            with self._mode_lock:
                self._task = task
            self._set_mode(mission_mode(kind))
            task.start()
            self.logger.info(f"Started {kind.value} mission ({task.mission_id})")
            return True

    def enter_manual(self) -> bool:
        """Replace whatever is active with keyboard manual control"""
        with self._transition_lock:
            if self.mode.kind is ModeKind.MANUAL:
                return True
            self._stop_active()
            manual = ManualController(self.link, self.cache, self.config, metrics=self.metrics)
            with self._mode_lock:
                self._task = manual
            self._set_mode(MANUAL)
            if not manual.start():
                self._clear_task(manual)
                self._set_mode(IDLE)
                return False
            return True

    def manual_input(self, key: str) -> bool:
        """
        Forward a key to the active manual session

        Returns:
            True if the key was consumed by manual control
        """
        with self._transition_lock:
            task = self.active_task
            if not isinstance(task, ManualController):
                return False
            consumed = task.handle_key(key)
            if not task.is_running:
                self._clear_task(task)
                self._set_mode(IDLE)
                report("Manual control ended")
            return consumed

    def stop(self):
        """Stop the active task and return to Idle"""
        with self._transition_lock:
            self._stop_active()
            self._set_mode(IDLE)

    # ---- blocking commands ----

    def arm_and_takeoff(self) -> bool:
        """Arm, take off and wait until airborne; only allowed from Idle"""
        with self._transition_lock:
            current = self.mode
            if not current.is_idle:
                self.logger.warning(f"Arm/takeoff rejected while in {current.name}")
                report(f"Takeoff rejected: stop {current.name} first")
                return False
            self._set_mode(ARM_TAKEOFF)
            try:
                return self._arm_and_takeoff()
            finally:
                self._set_mode(IDLE)

    def _arm_and_takeoff(self) -> bool:
        timeouts = self.config.timeouts

        if not self._command("arm", self.link.arm):
            report("ARM failed")
            return False
        report("Drone ARMED")

        if not wait_for_position(self.cache, timeouts.position_fix, timeouts.poll_interval):
            self.logger.error("Takeoff aborted: no position fix")
            report("Takeoff aborted: no position fix")
            return False

        altitude = self.config.vehicle.takeoff_altitude
        if not self._command("takeoff", lambda: self.link.takeoff(altitude)):
            report("Takeoff command failed")
            return False

        if not self._poll(self.link.in_air, timeouts.in_air):
            self.logger.error(f"Takeoff failed: not in air after {timeouts.in_air:.0f}s")
            report("Takeoff failed: drone not in air")
            return False

        report("Drone TAKEOFF")
        return True

    def land_and_disarm(self) -> bool:
        """Stop any task, land, wait for touchdown, then disarm"""
        with self._transition_lock:
            self._stop_active()
            self._set_mode(LANDING)
            try:
                return self._land_and_disarm()
            finally:
                self._set_mode(IDLE)

    def _land_and_disarm(self) -> bool:
        timeouts = self.config.timeouts

        if not self._command("land", self.link.land):
            report("Landing command failed!")
            return False

        landed = self._poll(lambda: self.link.landed_state() == LandedState.ON_GROUND, timeouts.landed)
        if not landed:
            self.logger.error(f"Landing timeout after {timeouts.landed:.0f}s; not disarming")
            report("Timeout: drone did not land!")
            return False
        report("Drone LANDED")

        if not self._command("disarm", self.link.disarm):
            report("Disarm failed!")
            return False
        report("Drone DISARMED")
        return True

    def shutdown(self) -> bool:
        """Stop any task and land so nothing keeps flying unattended"""
        self.logger.info("Controller shutdown: stopping task and landing")
        with self._transition_lock:
            self._stop_active()
            return self.land_and_disarm()

    # ---- helpers ----

    def _command(self, name: str, action: Callable[[], bool]) -> bool:
        """Issue one vehicle command; never raises"""
        try:
            ok = bool(action())
        except Exception as e:
            self.logger.error(f"{name} raised: {e}")
            ok = False
        self.metrics.record_command(name, ok)
        if not ok:
            self.logger.error(f"{name} failed")
        return ok

    def _poll(self, predicate: Callable[[], bool], timeout: float) -> bool:
        """Poll predicate at the configured rate until True or timeout"""
        deadline = time.monotonic() + timeout
        while True:
            try:
                if predicate():
                    return True
            except Exception as e:
                self.logger.warning(f"State poll failed: {e}")
            if time.monotonic() >= deadline:
                return False
            time.sleep(self.config.timeouts.poll_interval)
