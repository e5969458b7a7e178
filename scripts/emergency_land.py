#!/usr/bin/env python3
"""
Emergency landing script to safely land a vehicle that's stuck in the air
"""

import argparse
import logging

from drone_console.connectors.mavsdk import VehicleLink
from drone_console.core.mission_controller import MissionController
from drone_console.core.telemetry_cache import TelemetryCache
from drone_console.models.config import ConsoleConfig

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

def emergency_land(connection: str) -> int:
    """Land and disarm if the vehicle reports being airborne"""
    config = ConsoleConfig()
    config.vehicle.connection_string = connection
    link = VehicleLink(config.vehicle)

    print("Connecting to vehicle...")
    if not link.connect():
        print("Connection failed")
        link.close()
        return 1

    try:
        if not link.in_air():
            print("Vehicle is not in the air - no emergency landing needed")
            return 0

        print("Vehicle is airborne - initiating emergency landing...")
        controller = MissionController(link, TelemetryCache(), config)
        landed = controller.land_and_disarm()
        print(f"Land result: {landed}, landed state: {link.landed_state().value}")
        return 0 if landed else 1
    finally:
        print("Disconnecting...")
        link.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Emergency land')
    parser.add_argument('--connection', default='udp://:14540', help='Vehicle connection string')
    raise SystemExit(emergency_land(parser.parse_args().connection))
