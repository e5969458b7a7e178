"""
Prometheus metrics collection for monitoring
"""

import time
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Info, start_http_server

class MetricsCollector:
    """Collects and exposes console metrics for Prometheus"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.logger = logging.getLogger(__name__)
        # Private registry so several collectors (e.g. in tests) never collide
        self.registry = registry if registry is not None else CollectorRegistry()

        # Mode metrics
        self.mode_transitions = Counter(
            name='drone_console_mode_transitions_total',
            documentation='Total number of control mode transitions',
            labelnames=['mode'],
            registry=self.registry
        )

        self.active_mode = Info(
            name='drone_console_active_mode',
            documentation='Currently active control mode',
            registry=self.registry
        )

        # Command metrics
        self.vehicle_commands = Counter(
            name='drone_console_vehicle_commands_total',
            documentation='Vehicle commands issued, by result',
            labelnames=['command', 'status'],
            registry=self.registry
        )

        # Telemetry metrics
        self.telemetry_updates = Counter(
            name='drone_console_telemetry_updates_total',
            documentation='Telemetry samples received',
            labelnames=['field'],
            registry=self.registry
        )

        # Vehicle state metrics
        self.battery_level = Gauge(
            name='drone_console_battery_percent',
            documentation='Battery remaining percentage',
            registry=self.registry
        )

        self.ground_speed = Gauge(
            name='drone_console_speed_mps',
            documentation='Vehicle speed magnitude in m/s',
            registry=self.registry
        )

        self.altitude = Gauge(
            name='drone_console_altitude_meters',
            documentation='Vehicle altitude in meters AGL',
            registry=self.registry
        )

        self.uptime = Gauge(
            name='drone_console_uptime_seconds',
            documentation='Console uptime in seconds',
            registry=self.registry
        )

        self._start_time = time.time()
        self.record_mode("None")

    def start_exporter(self, port: int):
        """Expose the registry over HTTP"""
        start_http_server(port, registry=self.registry)
        self.logger.info(f"Prometheus exporter listening on port {port}")

    def record_mode(self, mode_name: str):
        """Record a control mode transition"""
        self.mode_transitions.labels(mode=mode_name).inc()
        self.active_mode.info({
            'mode': mode_name,
            'since': datetime.now().isoformat()
        })

    def record_command(self, command: str, success: bool):
        """Record a vehicle command result"""
        self.vehicle_commands.labels(command=command, status="ok" if success else "failed").inc()

    def record_telemetry_update(self, field: str):
        """Record a telemetry sample"""
        self.telemetry_updates.labels(field=field).inc()

    def update_vehicle_metrics(self, metrics: Dict[str, Any]):
        """Update vehicle state gauges"""
        if 'battery_percent' in metrics:
            self.battery_level.set(metrics['battery_percent'])

        if 'speed_mps' in metrics:
            self.ground_speed.set(metrics['speed_mps'])

        if 'altitude' in metrics:
            self.altitude.set(metrics['altitude'])

        self.uptime.set(time.time() - self._start_time)

    def command_count(self, command: str, success: bool = True) -> float:
        """Current value of a command counter (for health checks and tests)"""
        value = self.registry.get_sample_value(
            'drone_console_vehicle_commands_total',
            {'command': command, 'status': "ok" if success else "failed"}
        )
        return value or 0.0
