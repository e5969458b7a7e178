import io
import unittest
from datetime import datetime

from drone_console.core.monitor import MonitorLoop, render_status
from drone_console.core.telemetry_cache import TelemetryCache
from drone_console.models.vehicle import Battery, Position, TelemetrySnapshot, Velocity
from drone_console.utils.metrics import MetricsCollector

from helpers import wait_until

class TestRenderStatus(unittest.TestCase):
    def test_line_contents(self):
        snapshot = TelemetrySnapshot(
            position=Position(latitude=47.397742, longitude=8.545594, relative_altitude=9.87),
            velocity=Velocity(north=3.0, east=4.0, down=0.0),
            battery=Battery(remaining_percent=87.5),
        )
        line = render_status(snapshot, "Circle", datetime(2024, 5, 1, 12, 30, 15))

        self.assertTrue(line.startswith("[2024-05-01 12:30:15] "))
        self.assertIn("Lat: 47.397742°", line)
        self.assertIn("Lon:  8.545594°", line)
        self.assertIn("Alt:   9.87 m", line)
        self.assertIn("Speed:  5.00 m/s", line)
        self.assertIn("Bat: 87.5%", line)
        self.assertIn("Mission:Circle", line)

    def test_speed_includes_vertical_component(self):
        snapshot = TelemetrySnapshot(velocity=Velocity(north=1.0, east=2.0, down=2.0))
        line = render_status(snapshot, "None", datetime(2024, 1, 1))
        self.assertIn("Speed:  3.00 m/s", line)

    def test_idle_before_any_telemetry(self):
        line = render_status(TelemetrySnapshot(), "None", datetime(2024, 1, 1))
        self.assertIn("Lat:  0.000000°", line)
        self.assertIn("Mission:None", line)

class TestMonitorLoop(unittest.TestCase):
    def setUp(self):
        self.cache = TelemetryCache()
        self.stream = io.StringIO()
        self.metrics = MetricsCollector()
        self.mode = "None"
        self.monitor = MonitorLoop(self.cache, lambda: self.mode, rate_hz=100.0,
                                   stream=self.stream, metrics=self.metrics)

    def tearDown(self):
        self.monitor.stop()

    def test_tick_overwrites_line(self):
        self.cache.update_battery(Battery(remaining_percent=55.0))
        self.monitor.tick()
        output = self.stream.getvalue()
        self.assertTrue(output.startswith("\r["))
        self.assertNotIn("\n", output)
        self.assertEqual(self.metrics.registry.get_sample_value('drone_console_battery_percent'), 55.0)

    def test_thread_reflects_mode_changes(self):
        self.monitor.start()
        self.assertTrue(self.monitor.is_running)
        self.assertTrue(wait_until(lambda: self.monitor.ticks >= 2))
        self.mode = "Square"
        self.assertTrue(wait_until(lambda: "Mission:Square" in self.stream.getvalue()))
        self.monitor.stop()
        self.assertFalse(self.monitor.is_running)

if __name__ == '__main__':
    unittest.main()
