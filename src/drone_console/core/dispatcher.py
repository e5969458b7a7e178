"""
Command Dispatcher - Maps operator keypresses to controller actions
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict

from .mission_controller import MissionController
from ..models.mode import MissionKind

class CommandKind(Enum):
    """How a command interacts with the dispatch loop"""
    BLOCKING = "BLOCKING"  # runs to completion in the dispatch thread
    TASK = "TASK"          # replaces the active task and returns
    STOP = "STOP"
    QUIT = "QUIT"

@dataclass(frozen=True)
class Command:
    name: str
    kind: CommandKind
    action: Callable[[], object]

MENU = """
===== DRONE CONTROL MENU =====
T: Takeoff & Arm
L: Land & Disarm
C: Circle mission
S: Square mission
1: Triangle mission
2: Sine mission
M: Manual control (WASD/RF)
X: Stop current mission
Q: Quit
"""

class CommandDispatcher:
    """
    Single-threaded operator input loop

    Every mode change goes through handle_key(), one at a time, so transitions
    are totally ordered. While manual control is active its keys take
    precedence; anything it does not consume falls through to the menu.
    """

    def __init__(self, controller: MissionController, keyboard, poll_interval: float = 0.05):
        self.controller = controller
        self.keyboard = keyboard
        self.poll_interval = poll_interval
        self.logger = logging.getLogger(__name__)
        self._exit_event = threading.Event()
        self.commands = self._build_commands()

    def _build_commands(self) -> Dict[str, Command]:
        c = self.controller

        def mission(kind: MissionKind) -> Callable[[], bool]:
            return lambda: c.start_mission(kind)

        return {
            't': Command("arm_takeoff", CommandKind.BLOCKING, c.arm_and_takeoff),
            'l': Command("land_disarm", CommandKind.BLOCKING, c.land_and_disarm),
            'c': Command("circle", CommandKind.TASK, mission(MissionKind.CIRCLE)),
            's': Command("square", CommandKind.TASK, mission(MissionKind.SQUARE)),
            '1': Command("triangle", CommandKind.TASK, mission(MissionKind.TRIANGLE)),
            '2': Command("sine", CommandKind.TASK, mission(MissionKind.SINE)),
            'm': Command("manual", CommandKind.TASK, c.enter_manual),
            'x': Command("stop", CommandKind.STOP, c.stop),
            'q': Command("quit", CommandKind.QUIT, self.request_exit),
        }

    @property
    def is_running(self) -> bool:
        return not self._exit_event.is_set()

    def request_exit(self):
        """Ask the loop to finish (safe from any thread or signal handler)"""
        self._exit_event.set()

    def handle_key(self, key: str) -> bool:
        """
        Process one keypress

        Returns:
            False once the operator asked to quit, True otherwise
        """
        if not key:
            return self.is_running

        # Manual keys are lowercase only; uppercase always reaches the menu
        if self.controller.manual_input(key):
            return self.is_running

        command = self.commands.get(key.lower())
        if command is None:
            self.logger.debug(f"Ignoring key {key!r}")
            return self.is_running

        self.logger.info(f"Operator command: {command.name} ({command.kind.value})")
        try:
            command.action()
        except Exception as e:
            self.logger.error(f"Command {command.name} failed: {e}", exc_info=True)
        return self.is_running

    def run(self):
        """Poll the keyboard until quit"""
        print(MENU, flush=True)
        while self.is_running:
            if self.keyboard.has_input():
                self.handle_key(self.keyboard.read_char())
            self._exit_event.wait(self.poll_interval)
        self.logger.info("Dispatcher loop finished")
