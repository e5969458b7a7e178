import threading
import time
import unittest

from drone_console.core.telemetry_cache import TelemetryCache, wait_for_position
from drone_console.models.vehicle import Battery, Position, Velocity

class TestTelemetryCache(unittest.TestCase):
    def setUp(self):
        self.cache = TelemetryCache()

    def test_defaults_are_zero(self):
        """Before any update every group reads as zero"""
        snapshot = self.cache.read()
        self.assertEqual(snapshot.position, Position())
        self.assertEqual(snapshot.velocity, Velocity())
        self.assertEqual(snapshot.battery.remaining_percent, 0.0)
        self.assertFalse(snapshot.position.has_fix())

    def test_fields_update_independently(self):
        self.cache.update("position", Position(latitude=1.5, longitude=2.5, relative_altitude=3.0))
        self.cache.update_battery(Battery(remaining_percent=76.0, voltage=15.8))

        snapshot = self.cache.read()
        self.assertEqual(snapshot.position.latitude, 1.5)
        self.assertEqual(snapshot.battery.remaining_percent, 76.0)
        self.assertEqual(snapshot.velocity, Velocity())

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValueError):
            self.cache.update("attitude", object())

    def test_read_returns_copies(self):
        """Mutating a snapshot must not leak back into the cache"""
        self.cache.update_velocity(Velocity(north=1.0))
        snapshot = self.cache.read()
        snapshot.velocity.north = 99.0
        self.assertEqual(self.cache.read().velocity.north, 1.0)

    def test_update_callback_receives_field_name(self):
        seen = []
        self.cache.register_update_callback(seen.append)
        self.cache.update_velocity(Velocity(east=2.0))
        self.cache.update_position(Position(latitude=1.0))
        self.assertEqual(seen, ["velocity", "position"])

    def test_concurrent_writers_and_reader(self):
        """Readers always see a complete value written by some writer"""
        stop = threading.Event()
        errors = []

        def writer(value):
            while not stop.is_set():
                self.cache.update_velocity(Velocity(north=value, east=value, down=value))

        def reader():
            while not stop.is_set():
                v = self.cache.read().velocity
                if not (v.north == v.east == v.down):
                    errors.append(v)

        threads = [threading.Thread(target=writer, args=(float(i),)) for i in range(3)]
        threads.append(threading.Thread(target=reader))
        for t in threads:
            t.start()
        time.sleep(0.1)
        stop.set()
        for t in threads:
            t.join()
        self.assertEqual(errors, [])

class TestWaitForPosition(unittest.TestCase):
    def setUp(self):
        self.cache = TelemetryCache()

    def test_returns_immediately_with_fix(self):
        self.cache.update_position(Position(latitude=47.4, longitude=8.5))
        start = time.monotonic()
        self.assertTrue(wait_for_position(self.cache, timeout_sec=5.0, poll_interval=0.2))
        self.assertLess(time.monotonic() - start, 0.1)

    def test_fails_after_timeout_without_fix(self):
        start = time.monotonic()
        self.assertFalse(wait_for_position(self.cache, timeout_sec=0.2, poll_interval=0.05))
        self.assertGreaterEqual(time.monotonic() - start, 0.2)

    def test_near_zero_position_is_not_a_fix(self):
        self.cache.update_position(Position(latitude=1e-8, longitude=-1e-8))
        self.assertFalse(wait_for_position(self.cache, timeout_sec=0.1, poll_interval=0.02))

    def test_longitude_alone_is_a_fix(self):
        self.cache.update_position(Position(latitude=0.0, longitude=2e-7))
        self.assertTrue(wait_for_position(self.cache, timeout_sec=0.1, poll_interval=0.02))

    def test_succeeds_when_fix_arrives(self):
        timer = threading.Timer(0.1, self.cache.update_position, args=(Position(latitude=47.4, longitude=8.5),))
        timer.start()
        try:
            self.assertTrue(wait_for_position(self.cache, timeout_sec=2.0, poll_interval=0.02))
        finally:
            timer.cancel()

    def test_cancel_event_aborts_wait(self):
        cancel = threading.Event()
        threading.Timer(0.05, cancel.set).start()
        start = time.monotonic()
        self.assertFalse(wait_for_position(self.cache, timeout_sec=5.0, poll_interval=0.2, cancel=cancel))
        self.assertLess(time.monotonic() - start, 1.0)

if __name__ == '__main__':
    unittest.main()
