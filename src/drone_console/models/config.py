"""
Configuration models for the operator console
"""

from dataclasses import dataclass, field, fields
import os
from typing import Dict, Any, Optional

@dataclass
class VehicleConfig:
    """Vehicle connection configuration"""
    # Connection string (e.g., "udp://:14540" for SITL)
    connection_string: str = "udp://:14540"
    # External mavsdk_server; None lets MAVSDK spawn its embedded server
    mavsdk_server_address: Optional[str] = None
    mavsdk_port: int = 50051
    takeoff_altitude: float = 10.0  # meters AGL
    # Upper bound for any single synchronous call into the MAVSDK loop
    command_timeout: float = 30.0  # seconds
    # Per-waypoint bound; a hung goto must not hold a mission past a stop request
    goto_timeout: float = 3.0  # seconds
    connect_timeout: float = 60.0  # seconds

@dataclass
class TimeoutConfig:
    """Bounded waits for vehicle transitions"""
    position_fix: float = 10.0  # seconds
    in_air: float = 10.0        # seconds
    landed: float = 60.0        # seconds
    poll_interval: float = 0.2  # 5Hz

@dataclass
class PatternConfig:
    """Autonomous pattern parameters"""
    # Circle
    circle_radius: float = 10.0    # meters
    circle_altitude: float = 10.0  # meters AGL
    circle_speed: float = 1.0      # m/s
    # Square
    square_edge: float = 10.0
    square_altitude: float = 10.0
    # Triangle
    triangle_edge: float = 10.0
    triangle_altitude: float = 10.0
    # Sine
    sine_amplitude: float = 5.0
    sine_wavelength: float = 10.0
    sine_altitude: float = 10.0
    sine_speed: float = 1.0
    # Command cadence
    tick_interval: float = 1.0     # seconds between Circle/Sine commands
    corner_dwell: float = 5.0      # seconds held at each Square/Triangle vertex

@dataclass
class ManualConfig:
    """Keyboard manual control"""
    step: float = 2.0             # meters per keypress

@dataclass
class ConsoleConfig:
    """Main console configuration"""
    service_name: str = "drone-console"
    log_level: str = "INFO"
    log_dir: str = "logs"
    structured_logs: bool = False

    vehicle: VehicleConfig = field(default_factory=VehicleConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    patterns: PatternConfig = field(default_factory=PatternConfig)
    manual: ManualConfig = field(default_factory=ManualConfig)

    # Status line refresh rate (Hz)
    monitor_rate: float = 5.0
    # Operator key poll interval
    input_poll_interval: float = 0.05

    # Prometheus exporter port, 0 disables
    metrics_port: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConsoleConfig':
        """Create config from dictionary"""
        data = _substitute_env(data)

        nested = {
            'vehicle': VehicleConfig,
            'timeouts': TimeoutConfig,
            'patterns': PatternConfig,
            'manual': ManualConfig,
        }

        # Remove nested configs from data
        config_data = data.copy()
        sections = {}
        for key, section_cls in nested.items():
            section_data = config_data.pop(key, None) or {}
            if not isinstance(section_data, dict):
                raise ValueError(f"Configuration section '{key}' must be a dictionary")
            sections[key] = section_cls(**_coerce_fields(section_cls, section_data))

        known = {f.name for f in fields(cls)}
        unknown = set(config_data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        return cls(**sections, **_coerce_fields(cls, config_data))

def _substitute_env(value: Any) -> Any:
    """Replace "${VAR}" string values with the environment variable, recursively"""
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
        return os.getenv(value[2:-1], value)
    return value

_TRUE_STRINGS = ('1', 'true', 'yes', 'on')
_FALSE_STRINGS = ('0', 'false', 'no', 'off')

def _coerce_fields(cls, values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert string values (e.g. from "${VAR}") to the field's declared int/float/bool type"""
    types = {f.name: f.type for f in fields(cls)}
    coerced = dict(values)
    for key, value in values.items():
        target = types.get(key)
        if not isinstance(value, str) or target not in (int, float, bool):
            continue
        text = value.strip()
        if target is bool:
            if text.lower() in _TRUE_STRINGS:
                coerced[key] = True
            elif text.lower() in _FALSE_STRINGS:
                coerced[key] = False
            else:
                raise ValueError(f"Configuration key '{key}' expects a boolean, got {value!r}")
            continue
        try:
            coerced[key] = target(text)
        except ValueError:
            raise ValueError(f"Configuration key '{key}' expects {target.__name__}, got {value!r}") from None
    return coerced
