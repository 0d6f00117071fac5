"""
Centralized runtime configuration.

Defaults can be overridden through environment variables:
    TRAJOPT_POINTS_PER_INCH   path sampling density (default 3)
    TRAJOPT_OPTIMIZER_LAYERS  range-narrowing rounds per waypoint (default 4)
    TRAJOPT_HOST / TRAJOPT_PORT  server bind address (default 0.0.0.0:8000)
    TRAJOPT_LOG_LEVEL         logging level name (default INFO)
"""

import os


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from None


def get_points_per_inch() -> float:
    """Return the default discretization density in samples per inch."""
    value = _env_number("TRAJOPT_POINTS_PER_INCH", 3.0, float)
    if value <= 0:
        raise ValueError(f"TRAJOPT_POINTS_PER_INCH must be positive, got {value}")
    return value


def get_optimizer_layers() -> int:
    """Return the default number of optimizer narrowing layers."""
    value = _env_number("TRAJOPT_OPTIMIZER_LAYERS", 4, int)
    if value < 0:
        raise ValueError(f"TRAJOPT_OPTIMIZER_LAYERS must not be negative, got {value}")
    return value


def get_server_address() -> tuple[str, int]:
    """Return the (host, port) the HTTP server binds to."""
    host = os.environ.get("TRAJOPT_HOST") or "0.0.0.0"
    port = _env_number("TRAJOPT_PORT", 8000, int)
    return host, port


def get_log_level() -> str:
    return (os.environ.get("TRAJOPT_LOG_LEVEL") or "INFO").upper()
