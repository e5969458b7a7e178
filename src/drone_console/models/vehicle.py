"""
Vehicle telemetry and command models
"""

import math
from dataclasses import dataclass, field
from enum import Enum

class LandedState(Enum):
    """Landed state reported by the flight controller"""
    UNKNOWN = "UNKNOWN"
    ON_GROUND = "ON_GROUND"
    TAKING_OFF = "TAKING_OFF"
    IN_AIR = "IN_AIR"
    LANDING = "LANDING"

@dataclass
class Position:
    """GPS position data"""
    latitude: float = 0.0   # degrees
    longitude: float = 0.0  # degrees
    relative_altitude: float = 0.0  # meters AGL
    absolute_altitude: float = 0.0  # meters MSL

    def has_fix(self, epsilon: float = 1e-7) -> bool:
        """Zero lat/lon means no fix has been reported yet"""
        return abs(self.latitude) > epsilon or abs(self.longitude) > epsilon

@dataclass
class Velocity:
    """Velocity data in NED frame"""
    north: float = 0.0  # m/s
    east: float = 0.0   # m/s
    down: float = 0.0   # m/s

    @property
    def speed(self) -> float:
        return math.sqrt(self.north ** 2 + self.east ** 2 + self.down ** 2)

@dataclass
class Battery:
    """Battery status data"""
    remaining_percent: float = 0.0
    voltage: float = 0.0  # volts

@dataclass
class TelemetrySnapshot:
    """Latest value of each telemetry group; groups are not mutually consistent"""
    position: Position = field(default_factory=Position)
    velocity: Velocity = field(default_factory=Velocity)
    battery: Battery = field(default_factory=Battery)

    def to_dict(self):
        """Convert snapshot to dictionary"""
        return {
            "position": {
                "lat": self.position.latitude,
                "lon": self.position.longitude,
                "alt": self.position.relative_altitude,
                "abs_alt": self.position.absolute_altitude
            },
            "velocity": {
                "north": self.velocity.north,
                "east": self.velocity.east,
                "down": self.velocity.down
            },
            "speed_mps": self.velocity.speed,
            "battery": {
                "percent": self.battery.remaining_percent,
                "voltage": self.battery.voltage
            }
        }

@dataclass(frozen=True)
class Waypoint:
    """Single goto_location command target"""
    latitude: float
    longitude: float
    altitude: float  # meters relative to home
    yaw: float = 0.0  # degrees
