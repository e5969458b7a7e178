"""
MAVLink/MAVSDK vehicle link

MAVSDK-Python is asyncio based while the console runs plain threads. The link
owns a private event loop running in a daemon thread; every synchronous call
below submits a coroutine to that loop and waits for its result, and
subscription callbacks are invoked on the loop thread.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from typing import Any, Callable, List, Optional

from mavsdk import System
from mavsdk.action import ActionError
from mavsdk.telemetry import LandedState as MavLandedState

from ..models.config import VehicleConfig
from ..models.vehicle import Battery, LandedState, Position, Velocity

_LANDED_STATES = {
    MavLandedState.ON_GROUND: LandedState.ON_GROUND,
    MavLandedState.TAKING_OFF: LandedState.TAKING_OFF,
    MavLandedState.IN_AIR: LandedState.IN_AIR,
    MavLandedState.LANDING: LandedState.LANDING,
}

class VehicleLink:
    """
    Connector for vehicle flight control using MAVSDK-Python
    Supports both SITL and real hardware connections
    """

    def __init__(self, config: VehicleConfig):
        self.config = config
        self.logger = logging.getLogger("VehicleLink")

        if config.mavsdk_server_address:
            self.system = System(mavsdk_server_address=config.mavsdk_server_address, port=config.mavsdk_port)
        else:
            self.system = System()
        self.is_connected = False

        self._loop = asyncio.new_event_loop()
        self._thread: Optional[threading.Thread] = None
        self._subscriptions: List[Future] = []
        # AMSL minus relative altitude, from the latest position sample
        self._altitude_offset: Optional[float] = None

    # ---- event loop plumbing ----

    def _start_loop(self):
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop.run_forever, name="mavsdk-loop", daemon=True)
        self._thread.start()

    def _call(self, coro, timeout: Optional[float] = None) -> Any:
        """Run a coroutine on the link loop and wait for its result"""
        self._start_loop()
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout if timeout is not None else self.config.command_timeout)
        except FutureTimeoutError:
            future.cancel()
            raise

    # ---- connection ----

    def connect(self, endpoint: Optional[str] = None) -> bool:
        """Connect to the vehicle via MAVLink"""
        address = endpoint or self.config.connection_string
        try:
            self.logger.info(f"Connecting to vehicle at {address}")
            self._call(self._connect(address), timeout=self.config.connect_timeout)
            self.is_connected = True
            self.logger.info("Connected to vehicle")
            return True
        except Exception as e:
            self.logger.error(f"Failed to connect to vehicle: {e}")
            return False

    async def _connect(self, address: str):
        await self.system.connect(system_address=address)

        async for state in self.system.core.connection_state():
            if state.is_connected:
                break

        # Position and velocity drive the status line at 5Hz
        try:
            await self.system.telemetry.set_rate_position(5.0)
        except Exception as e:
            self.logger.debug(f"set_rate_position not supported: {e}")
        try:
            await self.system.telemetry.set_rate_velocity_ned(5.0)
        except Exception as e:
            self.logger.debug(f"set_rate_velocity_ned not supported: {e}")

    def close(self):
        """Cancel subscriptions and stop the link loop"""
        for future in self._subscriptions:
            future.cancel()
        self._subscriptions.clear()
        if self._thread is not None:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5.0)
            self._thread = None
        self.is_connected = False
        self.logger.info("Vehicle link closed")

    # ---- actions ----

    def _action(self, name: str, coro) -> bool:
        try:
            self._call(coro)
            self.logger.info(f"{name} accepted")
            return True
        except ActionError as e:
            self.logger.error(f"{name} rejected: {e}")
            return False
        except Exception as e:
            self.logger.error(f"{name} failed: {e}")
            return False

    def arm(self) -> bool:
        """Arm the vehicle"""
        return self._action("Arm", self.system.action.arm())

    def disarm(self) -> bool:
        """Disarm the vehicle"""
        return self._action("Disarm", self.system.action.disarm())

    def takeoff(self, altitude: Optional[float] = None) -> bool:
        """Command takeoff; does not wait for the vehicle to climb"""
        return self._action("Takeoff", self._takeoff(altitude))

    async def _takeoff(self, altitude: Optional[float]):
        if altitude is not None:
            await self.system.action.set_takeoff_altitude(altitude)
        await self.system.action.takeoff()

    def land(self) -> bool:
        """Command landing; does not wait for touchdown"""
        return self._action("Land", self.system.action.land())

    def goto_location(self, lat: float, lon: float, alt: float, yaw: float = 0.0) -> bool:
        """
        Command a goto to the given position

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            alt: Altitude in meters relative to home
            yaw: Heading in degrees
        """
        try:
            self._call(self._goto(lat, lon, alt, yaw), timeout=self.config.goto_timeout)
            self.logger.debug(f"goto_location lat={lat:.7f} lon={lon:.7f} alt={alt:.1f}")
            return True
        except ActionError as e:
            self.logger.warning(f"goto_location rejected: {e}")
            return False
        except Exception as e:
            self.logger.error(f"goto_location failed: {e}")
            return False

    async def _goto(self, lat: float, lon: float, alt: float, yaw: float):
        # goto_location expects AMSL; convert from relative altitude
        if self._altitude_offset is None:
            async for pos in self.system.telemetry.position():
                self._track_position(pos)
                break
        offset = self._altitude_offset if self._altitude_offset is not None else 0.0
        await self.system.action.goto_location(lat, lon, offset + float(alt), yaw)

    # ---- polled telemetry ----

    async def _first(self, stream):
        async for item in stream:
            return item
        return None

    def position(self) -> Position:
        """Current position (one sample)"""
        pos = self._call(self._first(self.system.telemetry.position()))
        if pos is None:
            return Position()
        self._track_position(pos)
        return self._to_position(pos)

    def in_air(self) -> bool:
        try:
            return bool(self._call(self._first(self.system.telemetry.in_air())))
        except Exception as e:
            self.logger.warning(f"in_air query failed: {e}")
            return False

    def landed_state(self) -> LandedState:
        try:
            state = self._call(self._first(self.system.telemetry.landed_state()))
        except Exception as e:
            self.logger.warning(f"landed_state query failed: {e}")
            return LandedState.UNKNOWN
        return _LANDED_STATES.get(state, LandedState.UNKNOWN)

    # ---- push subscriptions ----

    def subscribe_position(self, callback: Callable[[Position], None]):
        def on_position(pos):
            self._track_position(pos)
            return self._to_position(pos)
        self._subscribe("position", self.system.telemetry.position, on_position, callback)

    def subscribe_velocity(self, callback: Callable[[Velocity], None]):
        self._subscribe("velocity", self.system.telemetry.velocity_ned, self._to_velocity, callback)

    def subscribe_battery(self, callback: Callable[[Battery], None]):
        self._subscribe("battery", self.system.telemetry.battery, self._to_battery, callback)

    def _subscribe(self, name: str, stream_factory, convert, callback):
        self._start_loop()
        future = asyncio.run_coroutine_threadsafe(
            self._pump(name, stream_factory, convert, callback), self._loop
        )
        self._subscriptions.append(future)

    async def _pump(self, name: str, stream_factory, convert, callback):
        try:
            async for item in stream_factory():
                try:
                    callback(convert(item))
                except Exception as e:
                    self.logger.error(f"{name} callback error: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"{name} subscription ended: {e}")

    # ---- conversions ----

    def _track_position(self, pos):
        rel = float(getattr(pos, "relative_altitude_m", 0.0))
        absolute = float(getattr(pos, "absolute_altitude_m", 0.0))
        self._altitude_offset = absolute - rel

    @staticmethod
    def _to_position(pos) -> Position:
        return Position(
            latitude=float(getattr(pos, "latitude_deg", 0.0)),
            longitude=float(getattr(pos, "longitude_deg", 0.0)),
            relative_altitude=float(getattr(pos, "relative_altitude_m", 0.0)),
            absolute_altitude=float(getattr(pos, "absolute_altitude_m", 0.0)),
        )

    @staticmethod
    def _to_velocity(vel) -> Velocity:
        return Velocity(
            north=float(getattr(vel, "north_m_s", 0.0)),
            east=float(getattr(vel, "east_m_s", 0.0)),
            down=float(getattr(vel, "down_m_s", 0.0)),
        )

    @staticmethod
    def _to_battery(bat) -> Battery:
        # Older MAVSDK releases report remaining_percent as 0.0-1.0
        remaining = bat.remaining_percent
        if remaining is not None and remaining <= 1.0:
            remaining *= 100.0
        return Battery(
            remaining_percent=float(remaining or 0.0),
            voltage=float(getattr(bat, "voltage_v", 0.0)),
        )
