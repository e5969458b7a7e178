import asyncio
import time
import unittest
from unittest.mock import AsyncMock, MagicMock

from drone_console.connectors.mavsdk import VehicleLink
from drone_console.models.config import VehicleConfig

class TestVehicleLinkGoto(unittest.TestCase):
    def setUp(self):
        self.link = VehicleLink(VehicleConfig(goto_timeout=0.2, command_timeout=30.0))
        self.link.system = MagicMock()
        # AMSL of the home position
        self.link._altitude_offset = 488.0

    def tearDown(self):
        self.link.close()

    def test_relative_altitude_sent_as_amsl(self):
        self.link.system.action.goto_location = AsyncMock()
        self.assertTrue(self.link.goto_location(47.0, 8.0, 10.0))
        self.link.system.action.goto_location.assert_awaited_once_with(47.0, 8.0, 498.0, 0.0)

    def test_hung_goto_bounded_by_goto_timeout(self):
        async def never_acknowledged(*args):
            await asyncio.sleep(30)

        self.link.system.action.goto_location = never_acknowledged
        started = time.monotonic()
        self.assertFalse(self.link.goto_location(47.0, 8.0, 10.0))
        self.assertLess(time.monotonic() - started, 2.0)

    def test_transport_error_reported_as_false(self):
        self.link.system.action.goto_location = AsyncMock(side_effect=RuntimeError("link down"))
        self.assertFalse(self.link.goto_location(47.0, 8.0, 10.0))

if __name__ == '__main__':
    unittest.main()
