"""Viewer configuration dataclass and JSON persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

from cosmozoom.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ConfigError", "ViewerConfig", "DEFAULT_CONFIG", "load_config", "save_config"]


class ConfigError(ValueError):
    """Raised when a configuration file cannot be interpreted."""


@dataclass(frozen=True)
class ViewerConfig:
    """Tunable viewer behaviour.

    Notes
    -----
    Zoom bounds are not configurable; they are an invariant of
    :class:`cosmozoom.viewport_state.ViewportState`.
    """

    zoom_step: float = 1.5
    wheel_zoom_step: float = 1.2
    default_pixel_scale: float = 0.031
    upload_pixel_scale: float = 0.1
    pixel_grid_threshold: float = 1000.0
    analysis_delay_scale: float = 1.0
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = ViewerConfig()


# Multiplicative steps must grow the zoom on zoom-in.
_STEP_FIELDS = ("zoom_step", "wheel_zoom_step")


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, str):
        if not isinstance(value, str):
            raise ConfigError(f"{name} must be a string, got {type(value).__name__}")
        if name == "log_level" and not isinstance(logging.getLevelName(value.upper()), int):
            raise ConfigError(f"Unknown log level: {value!r}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {type(value).__name__}")
    value = float(value)
    if name in _STEP_FIELDS and value <= 1:
        raise ConfigError(f"{name} must be greater than 1, got {value}")
    if value <= 0 and name != "analysis_delay_scale":
        raise ConfigError(f"{name} must be positive, got {value}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def config_from_dict(data: Dict[str, Any], base: ViewerConfig = DEFAULT_CONFIG) -> ViewerConfig:
    """Build a config from a mapping, starting from ``base``."""
    known = {f.name: getattr(base, f.name) for f in fields(ViewerConfig)}
    updates: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            LOGGER.warning("Ignoring unknown config key: %s", key)
            continue
        updates[key] = _coerce(key, value, known[key])
    return replace(base, **updates)


def load_config(path: Path) -> ViewerConfig:
    """Load a JSON config file; missing keys keep their defaults."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be an object")
    return config_from_dict(data)


def save_config(config: ViewerConfig, path: Path) -> None:
    """Write config as indented JSON."""
    Path(path).write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
