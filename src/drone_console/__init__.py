"""
Drone Operator Console

Interactive console for one PX4 vehicle: arm/takeoff/land, autonomous
flight patterns and keyboard manual control with a live telemetry line
"""

__version__ = "1.0.0"

from .core.mission_controller import MissionController
from .core.telemetry_cache import TelemetryCache
from .models.config import ConsoleConfig

__all__ = ["MissionController", "TelemetryCache", "ConsoleConfig"]
