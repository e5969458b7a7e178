"""
Drone Operator Console
Entry point: connects to the vehicle, starts the status monitor and runs the
operator command loop until quit
"""

import argparse
import logging
import os
import signal
import sys
from datetime import datetime
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .connectors.keyboard import KeyboardInput
from .connectors.mavsdk import VehicleLink
from .core.dispatcher import CommandDispatcher
from .core.mission_controller import MissionController
from .core.monitor import MonitorLoop
from .core.telemetry_cache import TelemetryCache
from .models.config import ConsoleConfig
from .utils.logging import setup_logging
from .utils.metrics import MetricsCollector

def load_config(path: str) -> ConsoleConfig:
    """Load YAML config file and convert to ConsoleConfig; a missing file means defaults"""
    config_path = Path(path)
    if not config_path.exists():
        return ConsoleConfig()
    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    # Ensure config_data is a dictionary before unpacking
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file must contain a dictionary, got {type(config_data)}")

    return ConsoleConfig.from_dict(config_data)

def main() -> int:
    """Main entry point for the operator console"""

    # Load environment variables from .env if present
    load_dotenv()

    parser = argparse.ArgumentParser(description='Drone Operator Console')
    parser.add_argument('--config', type=str, default='config/default.yaml',
                        help='Path to configuration file (default: config/default.yaml)')
    parser.add_argument('--connection', type=str, default=None,
                        help='Vehicle connection string, overrides the config (e.g. udp://:14540)')
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 1

    # Allow env override for log level and connection
    log_level = os.getenv("DRONE_LOG_LEVEL", config.log_level).upper()
    connection = args.connection or os.getenv("DRONE_CONNECTION") or config.vehicle.connection_string

    # Create a timestamp for the log filename
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = setup_logging(
        log_level,
        structured=config.structured_logs,
        log_file=str(Path(config.log_dir) / f"drone_console_{timestamp}.log"),
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Starting {config.service_name} - Logging to: {log_file}")
    print(f"Logging to: {log_file}")

    metrics = MetricsCollector()
    if config.metrics_port > 0:
        metrics.start_exporter(config.metrics_port)

    link = VehicleLink(config.vehicle)
    print(f"Connecting to {connection} ...", flush=True)
    if not link.connect(connection):
        logger.error("Connection failed")
        print("Connection failed", file=sys.stderr)
        link.close()
        return 1

    cache = TelemetryCache()
    cache.register_update_callback(metrics.record_telemetry_update)
    link.subscribe_position(cache.update_position)
    link.subscribe_velocity(cache.update_velocity)
    link.subscribe_battery(cache.update_battery)

    controller = MissionController(link, cache, config, metrics=metrics)
    monitor = MonitorLoop(cache, lambda: controller.mode_name, rate_hz=config.monitor_rate, metrics=metrics)

    keyboard = KeyboardInput()
    dispatcher = CommandDispatcher(controller, keyboard, poll_interval=config.input_poll_interval)

    # Setup graceful shutdown
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, stopping console...")
        dispatcher.request_exit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    monitor.start()
    try:
        with keyboard:
            dispatcher.run()
    except Exception as e:
        logger.error(f"Console failed: {e}", exc_info=True)
    finally:
        controller.shutdown()
        monitor.stop()
        link.close()
        print("\nExiting...")
        logger.info("Console stopped")
    return 0

def run():
    sys.exit(main())

if __name__ == "__main__":
    run()
