"""
Control mode state values
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

class ModeKind(Enum):
    """Which source currently owns vehicle commands"""
    IDLE = "None"
    ARM_TAKEOFF = "ArmTakeoff"
    LANDING = "Landing"
    MISSION = "Mission"
    MANUAL = "Manual"

class MissionKind(Enum):
    """Autonomous flight patterns"""
    CIRCLE = "Circle"
    SQUARE = "Square"
    TRIANGLE = "Triangle"
    SINE = "Sine"

@dataclass(frozen=True)
class ControlMode:
    """Active control mode; mission is set only for ModeKind.MISSION"""
    kind: ModeKind = ModeKind.IDLE
    mission: Optional[MissionKind] = None

    def __post_init__(self):
        if (self.kind is ModeKind.MISSION) != (self.mission is not None):
            raise ValueError(f"Invalid control mode: {self.kind} with mission {self.mission}")

    @property
    def name(self) -> str:
        """Display name; Idle renders as "None" """
        if self.mission is not None:
            return self.mission.value
        return self.kind.value

    @property
    def is_idle(self) -> bool:
        return self.kind is ModeKind.IDLE

IDLE = ControlMode()
ARM_TAKEOFF = ControlMode(ModeKind.ARM_TAKEOFF)
LANDING = ControlMode(ModeKind.LANDING)
MANUAL = ControlMode(ModeKind.MANUAL)

def mission_mode(kind: MissionKind) -> ControlMode:
    return ControlMode(ModeKind.MISSION, kind)
