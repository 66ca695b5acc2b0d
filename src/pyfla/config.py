"""Client and simulator configuration for pyfla."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfla._constants import BASE_URL, DEFAULT_VEHICLE_IDS, STREAMING_URL
from pyfla.exceptions import FlaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_ids(value: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in value.split(",") if part.strip())
    except ValueError as exc:
        raise FlaConfigError(f"Invalid vehicle id list: {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FlaConfig:
    """Client configuration.

    Parameters
    ----------
    access_token : str
        Bearer token supplied by the caller's authentication layer.
    base_url : str
        Owner API base URL including the ``/api/1`` prefix.
    streaming_url : str
        Websocket URL of the streaming endpoint.
    request_timeout : float
        Total timeout in seconds for a single REST request.
    """

    access_token: str = ""
    base_url: str = BASE_URL
    streaming_url: str = STREAMING_URL
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls, **overrides: Any) -> FlaConfig:
        """Create configuration from ``FLA_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        _ENV_CONFIG_MAP = {
            "FLA_ACCESS_TOKEN": "access_token",
            "FLA_BASE_URL": "base_url",
            "FLA_STREAMING_URL": "streaming_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("FLA_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)


@dataclasses.dataclass(frozen=True)
class SimulatorConfig:
    """Simulator configuration.

    Parameters
    ----------
    host, port : str, int
        Listen address of the simulator's HTTP server.
    vehicle_ids : tuple[int, ...]
        Vehicle ids the simulator answers for.  Any other id is unknown.
    tick_interval : float
        Seconds between background ticks.  ``0`` disables the scheduler;
        ticks must then be driven explicitly.
    charge_rate : float
        Battery percent gained per hour while charging.
    charge_power_kw : int
        Charger power reported while charging.
    idle_timeout : float
        Seconds an idle online vehicle waits before falling asleep.  ``0``
        disables autonomous sleep.
    drive_speed : float
        Speed (mph) reported while driving.
    drive_consumption : float
        Battery percent used per mile driven.
    stream_queue_size : int
        Frames buffered per streaming session before the oldest is dropped.
    connection_timeout : int
        Streaming connection timeout (ms) advertised to clients.
    require_token : bool
        Reject REST and streaming requests without a bearer token.
    """

    host: str = "127.0.0.1"
    port: int = 4080
    vehicle_ids: tuple[int, ...] = DEFAULT_VEHICLE_IDS
    tick_interval: float = 1.0
    charge_rate: float = 60.0
    charge_power_kw: int = 11
    idle_timeout: float = 60.0
    drive_speed: float = 60.0
    drive_consumption: float = 0.3
    stream_queue_size: int = 8
    connection_timeout: int = 30000
    require_token: bool = False

    def __post_init__(self) -> None:
        if not self.vehicle_ids:
            raise FlaConfigError("SimulatorConfig.vehicle_ids must not be empty")
        if self.tick_interval < 0 or self.idle_timeout < 0:
            raise FlaConfigError("tick_interval and idle_timeout must be non-negative")
        if self.stream_queue_size < 1:
            raise FlaConfigError("stream_queue_size must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> SimulatorConfig:
        """Create configuration from ``FLA_SIM_*`` environment variables."""
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        host = env.get("FLA_SIM_HOST")
        if host is not None:
            config_kwargs["host"] = host

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "FLA_SIM_PORT": ("port", int),
            "FLA_SIM_TICK_INTERVAL": ("tick_interval", float),
            "FLA_SIM_CHARGE_RATE": ("charge_rate", float),
            "FLA_SIM_IDLE_TIMEOUT": ("idle_timeout", float),
            "FLA_SIM_DRIVE_SPEED": ("drive_speed", float),
            "FLA_SIM_STREAM_QUEUE_SIZE": ("stream_queue_size", int),
        }
        for env_key, (field_name, caster) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = caster(val)

        ids_env = env.get("FLA_SIM_VEHICLE_IDS")
        if ids_env is not None and "vehicle_ids" not in overrides:
            config_kwargs["vehicle_ids"] = _env_ids(ids_env)

        if "require_token" not in overrides:
            config_kwargs["require_token"] = _env_bool(env.get("FLA_SIM_REQUIRE_TOKEN"), False)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
