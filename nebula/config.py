# nebula/config.py
import json
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "NEBULA_CONFIG"


class ConfigError(ValueError):
    """Raised when a configuration file exists but cannot be used."""


@dataclass
class GestureSettings:
    # Palm movement below this (normalized units, both axes) is jitter
    rotate_deadzone: float = 0.005
    rotate_smoothing: float = 0.4
    zoom_out_below: float = 0.05
    zoom_in_above: float = 0.12


@dataclass
class CameraSettings:
    sensitivity: float = 20.0
    polar_margin: float = 0.1
    zoom_step: float = 0.5
    min_distance: float = 2.0
    max_distance: float = 100.0
    fov: float = 60.0
    start_position: Tuple[float, float, float] = (0.0, 0.0, 30.0)


@dataclass
class SelectorSettings:
    viewport_limit: float = 0.8
    max_alignment: float = 0.2
    tie_band: float = 0.1


@dataclass
class FocusSettings:
    rate: float = 4.0
    margin: float = 1.3
    restore_epsilon: float = 0.1


@dataclass
class CaptureSettings:
    camera_index: int = 0
    resolution: Tuple[int, int] = (640, 480)
    mirror: bool = True
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass
class AppConfig:
    gesture: GestureSettings = field(default_factory=GestureSettings)
    camera: CameraSettings = field(default_factory=CameraSettings)
    selector: SelectorSettings = field(default_factory=SelectorSettings)
    focus: FocusSettings = field(default_factory=FocusSettings)
    capture: CaptureSettings = field(default_factory=CaptureSettings)
    frame_interval_ms: int = 16


def _merge_section(section, values: dict, name: str):
    if not isinstance(values, dict):
        raise ConfigError(f"Section '{name}' must be an object, got {type(values).__name__}")

    known = {f.name: f for f in fields(section)}
    for key, value in values.items():
        if key not in known:
            log.warning("Unknown config key '%s.%s' ignored", name, key)
            continue
        current = getattr(section, key)
        # JSON has no tuples
        if isinstance(current, tuple):
            if not isinstance(value, (list, tuple)) or len(value) != len(current):
                raise ConfigError(f"'{name}.{key}' must be a list of {len(current)} numbers")
            value = tuple(value)
        elif isinstance(current, bool):
            if not isinstance(value, bool):
                raise ConfigError(f"'{name}.{key}' must be true or false")
        elif isinstance(current, (int, float)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"'{name}.{key}' must be a number")
            value = type(current)(value)
        setattr(section, key, value)


def config_from_dict(data: dict) -> AppConfig:
    cfg = AppConfig()
    for key, value in data.items():
        if key == "frame_interval_ms":
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError("'frame_interval_ms' must be a positive integer")
            cfg.frame_interval_ms = value
        elif key in ("gesture", "camera", "selector", "focus", "capture"):
            _merge_section(getattr(cfg, key), value, key)
        else:
            log.warning("Unknown config section '%s' ignored", key)
    return cfg


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Loads settings from a JSON file.

    The path falls back to the NEBULA_CONFIG environment variable. A missing
    file is not an error: defaults are used and a warning is logged.
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    if not path:
        return AppConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        log.warning("Config %s not found, using defaults", path)
        return AppConfig()
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be an object")

    cfg = config_from_dict(data)
    log.info("Loaded config from %s", path)
    return cfg
