"""
Keyboard manual control
"""

from .base import ControlTask
from ..models.vehicle import Waypoint
from ..utils.geo import LocalFrame

# key -> (north, east, up) unit delta
MOVE_KEYS = {
    'w': (1, 0, 0),
    's': (-1, 0, 0),
    'a': (0, -1, 0),
    'd': (0, 1, 0),
    'r': (0, 0, 1),
    'f': (0, 0, -1),
}
EXIT_KEY = 'q'

class ManualController(ControlTask):
    """
    Translates keypresses into goto_location commands.

    Runs in the dispatcher's thread: the dispatcher hands each key to
    handle_key(). Deltas accumulate from the last commanded position, not the
    tracked one, so repeated presses add up even if the vehicle lags behind.
    """

    def __init__(self, link, cache, config, **kwargs):
        super().__init__(link, cache, config, "Manual", **kwargs)
        self.step = config.manual.step
        self.frame = None
        self.north = 0.0
        self.east = 0.0
        self.altitude = 0.0

    def start(self) -> bool:
        """Wait for a fix and seed the commanded position; False aborts manual mode"""
        if not self.wait_for_fix():
            self.logger.error("Manual control aborted: no position fix")
            print("\nManual control aborted: no position fix")
            self.stop()
            return False
        try:
            seed = self.link.position()
        except Exception as e:
            self.logger.error(f"Manual control aborted: could not read position: {e}")
            self.stop()
            return False

        self.frame = LocalFrame(seed.latitude, seed.longitude)
        self.altitude = seed.relative_altitude
        self.logger.info(f"Manual control from lat={seed.latitude:.7f} lon={seed.longitude:.7f} alt={self.altitude:.1f}")
        print("\nManual control: W/S north/south, A/D west/east, R/F up/down, Q exit")
        return True

    def handle_key(self, key: str) -> bool:
        """
        Apply one keypress

        Returns:
            True if the key belongs to manual control, False otherwise
        """
        if key == EXIT_KEY:
            self.logger.info("Manual control exit requested")
            self.stop()
            return True

        delta = MOVE_KEYS.get(key)
        if delta is None:
            return False
        if not self.is_running or self.frame is None:
            return False

        d_north, d_east, d_up = delta
        self.north += d_north * self.step
        self.east += d_east * self.step
        self.altitude = max(0.0, self.altitude + d_up * self.step)

        self.goto(self.current_waypoint())
        return True

    def current_waypoint(self) -> Waypoint:
        """Last commanded position"""
        lat, lon = self.frame.to_global(self.north, self.east)
        return Waypoint(latitude=lat, longitude=lon, altitude=self.altitude, yaw=0.0)
