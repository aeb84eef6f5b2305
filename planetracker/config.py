"""Configuration settings for the plane tracker."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from planetracker.models.geo import GeodeticPosition

logger = logging.getLogger("planetracker.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def parse_observer(raw: str | None) -> GeodeticPosition | None:
    """Parse ``"lat;lon;elevation_m"`` into a position."""

    if not raw:
        return None
    values = raw.split(";")
    if len(values) != 3:
        raise ValueError(f"expected lat;lon;elevation, got {raw!r}")
    lat, lon, elevation = (float(value) for value in values)
    return GeodeticPosition(lat=lat, lon=lon, elevation=elevation)


def _get_observer(env_var: str) -> GeodeticPosition:
    try:
        observer = parse_observer(os.getenv(env_var))
    except ValueError as exc:
        logger.warning("Invalid observer location in %s: %s", env_var, exc)
        observer = None
    return observer or GeodeticPosition(lat=0.0, lon=0.0, elevation=0.0)


@dataclass
class Settings:
    """Application configuration loaded from environment variables.

    Read once at startup; nothing in the tracker writes it back.
    """

    planetracker_env: str = os.getenv("PLANETRACKER_ENV", "local")
    log_level: str = os.getenv("PLANETRACKER_LOG_LEVEL", "INFO")

    observer: GeodeticPosition = field(
        default_factory=lambda: _get_observer("PLANETRACKER_OBSERVER")
    )

    # SBS feed
    server_address: str = os.getenv("PLANETRACKER_SERVER_ADDRESS", "localhost:30003")
    autoconnect: bool = _get_bool("PLANETRACKER_AUTOCONNECT", default=False)
    recording_dir: str = os.getenv("PLANETRACKER_RECORDING_DIR", "recordings")

    # Tracking behaviour
    filter_out_of_order: bool = _get_bool("PLANETRACKER_FILTER_OOO", default=True)
    interpolate_positions: bool = _get_bool("PLANETRACKER_INTERPOLATE", default=True)
    tick_interval: float = float(os.getenv("PLANETRACKER_TICK_INTERVAL", "0.25"))

    # Telemetry output; 0 disables the listener
    outbound_port: int = int(os.getenv("PLANETRACKER_OUTBOUND_PORT", "0"))


settings = Settings()

__all__ = ["settings", "Settings", "parse_observer"]
