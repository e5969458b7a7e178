"""
Autonomous pattern mission running on a background thread
"""

from .base import BaseMission
from .patterns import build_generator
from ..models.mode import MissionKind
from ..utils.geo import LocalFrame

class PatternMission(BaseMission):
    """
    Flies one of the pattern generators until stopped

    The origin is read once at start; every waypoint is computed from it, so
    the pattern stays put in absolute coordinates even if the vehicle drifts.
    Per-tick goto failures are reported and the loop moves on.
    """

    def __init__(self, kind: MissionKind, link, cache, config, **kwargs):
        super().__init__(link, cache, config, kind.value, **kwargs)
        self.kind = kind
        self.generator = None

    def execute(self) -> bool:
        self.logger.info("Waiting for position fix")
        if not self.wait_for_fix():
            if self.is_running:
                self.logger.error("Mission aborted: no position fix")
                print(f"\n{self.name} mission aborted: no position fix")
            return False

        try:
            start = self.link.position()
        except Exception as e:
            self.logger.error(f"Mission aborted: could not read start position: {e}")
            return False

        frame = LocalFrame(start.latitude, start.longitude)
        self.generator = build_generator(self.kind, frame, self.config.patterns)
        self.logger.info(
            f"Starting {self.name} pattern at origin lat={frame.lat0:.7f} lon={frame.lon0:.7f}, "
            f"period {self.generator.period:.1f}s"
        )

        while self.is_running:
            self.goto(self.generator.next_waypoint())
            if self.wait(self.generator.period):
                break

        self.logger.info(f"{self.name} pattern stopped after {self.commands_sent} commands")
        return True
