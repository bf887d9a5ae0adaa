"""
Settings Service - startup configuration for wwand

Resolution order (later wins):
  1. built-in defaults
  2. optional JSON config file (deep-merged over the defaults)
  3. environment variables
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationError
from ..providers.base.network_interface import DEFAULT_ROUTE_METRIC, RouteMode
from ..providers.modem.mmcli import DEFAULT_LIST_TIMEOUT
from .connection_status import DEFAULT_PROBE_HOST
from .modem_reconciler import DEFAULT_INTERVAL

logger = logging.getLogger(__name__)

DEFAULT_API_PORT = 8080
DEFAULT_METRICS_PORT = 9000

# environment variable → (section, key)
ENV_OVERRIDES = {
    "WWAND_APN": ("modem", "apn"),
    "WWAND_DEVICE": ("modem", "device"),
    "WWAND_LIST_TIMEOUT": ("modem", "list_timeout"),
    "WWAND_INTERVAL": ("reconcile", "interval"),
    "WWAND_ROUTE_MODE": ("network", "route_mode"),
    "WWAND_ROUTE_METRIC": ("network", "route_metric"),
    "WWAND_PROBE_HOST": ("network", "probe_host"),
    "WWAND_LOG_LEVEL": ("logging", "level"),
    "PORT": ("api", "port"),
    "METRICS_PORT": ("metrics", "port"),
}


@dataclass(frozen=True)
class Settings:
    """Resolved daemon configuration."""

    apn: str
    device: Optional[str] = None
    list_timeout: float = DEFAULT_LIST_TIMEOUT
    interval: float = DEFAULT_INTERVAL
    route_mode: RouteMode = RouteMode.DEVICE
    route_metric: int = DEFAULT_ROUTE_METRIC
    probe_host: str = DEFAULT_PROBE_HOST
    api_host: str = "0.0.0.0"
    api_port: int = DEFAULT_API_PORT
    metrics_host: str = "0.0.0.0"
    metrics_port: int = DEFAULT_METRICS_PORT
    log_level: str = "INFO"


def default_settings() -> Dict[str, Any]:
    """Return default settings structure."""
    return {
        "modem": {"apn": "", "device": "", "list_timeout": DEFAULT_LIST_TIMEOUT},
        "reconcile": {"interval": DEFAULT_INTERVAL},
        "network": {
            "route_mode": RouteMode.DEVICE.value,
            "route_metric": DEFAULT_ROUTE_METRIC,
            "probe_host": DEFAULT_PROBE_HOST,
        },
        "api": {"host": "0.0.0.0", "port": DEFAULT_API_PORT},
        "metrics": {"host": "0.0.0.0", "port": DEFAULT_METRICS_PORT},
        "logging": {"level": "INFO"},
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base (modifies base in place)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _load_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"failed to load config file {path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"config file {path} must contain a JSON object")

    logger.info(f"Loaded settings from {path}")
    return loaded


def _parse_port(raw: Any, default: int, name: str) -> int:
    """Parse a TCP port, falling back to the default on bad input."""
    try:
        port = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Failed to parse {name} {raw!r}, using default port {default}")
        return default
    if not 0 < port < 65536:
        logger.warning(f"{name} {port} out of range, using default port {default}")
        return default
    return port


def _parse_positive(raw: Any, name: str, cast=float):
    try:
        value = cast(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid {name}: {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"invalid {name}: {raw!r} (must be positive)")
    return value


def load_settings(
    apn: Optional[str],
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Resolve settings for a daemon run.

    Args:
        apn: Access point name from the command line
        config_path: Optional JSON config file
        environ: Environment mapping (defaults to os.environ)

    Raises:
        ConfigurationError: no APN available or a value is invalid
    """
    environ = os.environ if environ is None else environ
    data = default_settings()
    if apn:
        data["modem"]["apn"] = apn

    if config_path:
        deep_merge(data, _load_file(config_path))

    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            if var == "WWAND_APN" and apn and value != apn:
                logger.warning(f"WWAND_APN overrides access point name {apn!r} with {value!r}")
            data.setdefault(section, {})[key] = value

    modem, network = data["modem"], data["network"]

    resolved_apn = str(modem.get("apn") or "").strip()
    if not resolved_apn:
        raise ConfigurationError("missing access point name")

    try:
        route_mode = RouteMode(str(network.get("route_mode", RouteMode.DEVICE.value)).lower())
    except ValueError as e:
        raise ConfigurationError(f"invalid route mode: {network.get('route_mode')!r}") from e

    log_level = str(data["logging"].get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"invalid log level: {log_level!r}")

    return Settings(
        apn=resolved_apn,
        device=modem.get("device") or None,
        list_timeout=_parse_positive(modem.get("list_timeout"), "list timeout"),
        interval=_parse_positive(data["reconcile"].get("interval"), "interval"),
        route_mode=route_mode,
        route_metric=_parse_positive(network.get("route_metric"), "route metric", int),
        probe_host=str(network.get("probe_host") or DEFAULT_PROBE_HOST),
        api_host=str(data["api"].get("host", "0.0.0.0")),
        api_port=_parse_port(data["api"].get("port"), DEFAULT_API_PORT, "PORT"),
        metrics_host=str(data["metrics"].get("host", "0.0.0.0")),
        metrics_port=_parse_port(data["metrics"].get("port"), DEFAULT_METRICS_PORT, "METRICS_PORT"),
        log_level=log_level,
    )
