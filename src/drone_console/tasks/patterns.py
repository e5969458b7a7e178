"""
Waypoint generators for the autonomous flight patterns

Every generator is anchored to a LocalFrame fixed at the mission origin and
yields absolute waypoints from it; `period` is the time to wait between
commands.
"""

import math
from abc import ABC, abstractmethod
from typing import List, Tuple

from ..models.config import PatternConfig
from ..models.mode import MissionKind
from ..models.vehicle import Waypoint
from ..utils.geo import EPSILON, LocalFrame

TWO_PI = 2.0 * math.pi

class PatternGenerator(ABC):
    """Base class: produces successive waypoints at a fixed cadence"""

    def __init__(self, frame: LocalFrame, altitude: float, period: float):
        self.frame = frame
        self.altitude = altitude
        self.period = period

    @abstractmethod
    def next_waypoint(self) -> Waypoint:
        """Waypoint to command now; advances the generator"""
        pass

    def _waypoint(self, north_m: float, east_m: float) -> Waypoint:
        lat, lon = self.frame.to_global(north_m, east_m)
        return Waypoint(latitude=lat, longitude=lon, altitude=self.altitude, yaw=0.0)

class CircleGenerator(PatternGenerator):
    """Circle of fixed radius around the origin at constant linear speed"""

    def __init__(self, frame: LocalFrame, radius: float, altitude: float, speed: float, dt: float = 1.0):
        super().__init__(frame, altitude, dt)
        self.radius = radius
        self.speed = speed
        self.angle = 0.0

    @property
    def angular_step(self) -> float:
        return (self.speed / max(self.radius, EPSILON)) * self.period

    def next_waypoint(self) -> Waypoint:
        waypoint = self._waypoint(self.radius * math.cos(self.angle), self.radius * math.sin(self.angle))
        self.angle += self.angular_step
        if self.angle >= TWO_PI:
            self.angle = math.fmod(self.angle, TWO_PI)
        return waypoint

class PolygonGenerator(PatternGenerator):
    """Fixed vertex loop visited cyclically, holding each vertex for `period`"""

    def __init__(self, frame: LocalFrame, vertices: List[Tuple[float, float]], altitude: float, dwell: float):
        super().__init__(frame, altitude, dwell)
        # Computed once from the origin
        self.waypoints = [self._waypoint(north, east) for north, east in vertices]
        self.index = 0

    def next_waypoint(self) -> Waypoint:
        waypoint = self.waypoints[self.index]
        self.index = (self.index + 1) % len(self.waypoints)
        return waypoint

class SquareGenerator(PolygonGenerator):
    """North edge, east edge, back south, back to origin"""

    def __init__(self, frame: LocalFrame, edge: float, altitude: float, dwell: float = 5.0):
        vertices = [
            (edge, 0.0),
            (edge, edge),
            (0.0, edge),
            (0.0, 0.0),
        ]
        super().__init__(frame, vertices, altitude, dwell)

class TriangleGenerator(PolygonGenerator):
    """Equilateral triangle with its base along the east axis, apex to the north"""

    def __init__(self, frame: LocalFrame, edge: float, altitude: float, dwell: float = 5.0):
        height = edge * math.sqrt(3) / 2.0
        vertices = [
            (0.0, 0.0),
            (height, edge / 2.0),
            (0.0, edge),
            (0.0, 0.0),
        ]
        super().__init__(frame, vertices, altitude, dwell)

class SineGenerator(PatternGenerator):
    """
    Eastward traversal with a north-south sine oscillation.

    The traveled distance grows without bound; unlike the circle the pattern
    never wraps, it keeps heading east until stopped.
    """

    def __init__(self, frame: LocalFrame, amplitude: float, wavelength: float, altitude: float,
                 speed: float, dt: float = 1.0):
        super().__init__(frame, altitude, dt)
        self.amplitude = amplitude
        self.wavelength = wavelength
        self.speed = speed
        self.distance = 0.0

    def offset_at(self, x: float) -> float:
        """North offset in meters at eastward distance x"""
        return self.amplitude * math.sin(TWO_PI * x / max(self.wavelength, EPSILON))

    def next_waypoint(self) -> Waypoint:
        waypoint = self._waypoint(self.offset_at(self.distance), self.distance)
        self.distance += self.speed * self.period
        return waypoint

def build_generator(kind: MissionKind, frame: LocalFrame, patterns: PatternConfig) -> PatternGenerator:
    """Create the configured generator for a mission kind"""
    if kind is MissionKind.CIRCLE:
        return CircleGenerator(frame, patterns.circle_radius, patterns.circle_altitude,
                               patterns.circle_speed, dt=patterns.tick_interval)
    if kind is MissionKind.SQUARE:
        return SquareGenerator(frame, patterns.square_edge, patterns.square_altitude,
                               dwell=patterns.corner_dwell)
    if kind is MissionKind.TRIANGLE:
        return TriangleGenerator(frame, patterns.triangle_edge, patterns.triangle_altitude,
                                 dwell=patterns.corner_dwell)
    if kind is MissionKind.SINE:
        return SineGenerator(frame, patterns.sine_amplitude, patterns.sine_wavelength,
                             patterns.sine_altitude, patterns.sine_speed, dt=patterns.tick_interval)
    raise ValueError(f"Unknown mission kind: {kind}")
