"""
config_loader.py

Load configuration from a JSON config file and optional environment variable
overrides. The loader validates every value it understands and exposes a
merged configuration dictionary via as_dict().

Classes:
    ConfigLoader

Usage:
    loader = ConfigLoader(logger)
    config = loader.as_dict()
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from barometer_service.exceptions import (
    ConfigFileNotFoundError,
    InvalidConfigValueError,
    MissingConfigKeyError,
)
from barometer_service.outputs.transport.socket_transport import FAMILIES

ETC_CONFIG_PATH = Path("/etc/barometer_service/config.json")
DEFAULT_CONFIG_FILENAME = "config.json"

DEFAULT_TICK_INTERVAL_MS = 1000
DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _safe_log(logger, level: str, msg: str) -> None:
    """
    Log a message using the provided logger while safely handling missing or
    nonstandard logger implementations.
    """

    if logger is None:
        return
    fn = getattr(logger, level.lower(), None)
    if callable(fn):
        fn(msg)


def _load_json_config(path: Optional[Path], logger=None) -> Dict[str, Any]:
    """
    Load JSON configuration from the given file path.

    Raises:
        ConfigFileNotFoundError: If the file cannot be read or parsed.
    """
    if not path:
        raise ConfigFileNotFoundError("ConfigLoader: config path was not resolved")
    try:
        with open(path, "r") as file:  # <- use builtins.open so tests can mock it
            data = json.load(file)
    except (OSError, ValueError) as e:
        _safe_log(logger, "error", f"ConfigLoader: failed reading {path}: {e}")
        raise ConfigFileNotFoundError(f"ConfigLoader: failed reading {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidConfigValueError(f"ConfigLoader: {path} must contain a JSON object")
    return data


class ConfigLoader:
    """
    Load and validate configuration from a JSON config file, with optional
    environment variable overrides.

    Environment variables:
        CONFIG_PATH          explicit path to config.json
        BAROMETER_TRANSPORT  overrides transport.family ("rfcomm" or "tcp")
        BAROMETER_LOG_LEVEL  overrides log_level

    JSON keys:
      - transport (object, required): family plus family-specific settings
      - tick_interval_ms (int ≥ 1, default 1000)
      - log_level (str, default "INFO")
      - sensor (object, optional): type, driver kwargs, sample_period,
        calibration, range
    """

    def __init__(self, logger):
        """
        Initialize the loader, resolve and read the JSON config file, apply
        environment overrides and parse core configuration fields.

        Args:
            logger (Logger): Logger instance for diagnostic output.
        """

        self.logger = logger

        self.config_path = self._resolve_config_path()
        self.config = _load_json_config(self.config_path, self.logger)

        self.transport = self._get_transport()
        self.tick_interval_ms = self._get_tick_interval_ms()
        self.log_level = self._get_log_level()
        self.sensor = self._get_sensor()

    def as_dict(self) -> Dict[str, Any]:
        """
        Return the merged configuration dictionary with validated values
        taking precedence over raw JSON values.
        """
        merged: Dict[str, Any] = {
            "transport": self.transport,
            "tick_interval_ms": self.tick_interval_ms,
            "log_level": self.log_level,
            "sensor": self.sensor,
        }

        for key, value in self.config.items():
            if key not in merged:
                merged[key] = value

        _safe_log(self.logger, "info", f"ConfigLoader: keys loaded: {list(merged.keys())}")
        _safe_log(self.logger, "info", f"ConfigLoader: sensor present: {merged['sensor'] is not None}")

        return merged

    def _resolve_config_path(self) -> Path:
        env_path = os.getenv("CONFIG_PATH")
        if env_path:
            path = Path(env_path).expanduser().resolve()
            if path.is_file():
                _safe_log(self.logger, "info", f"ConfigLoader: using config from CONFIG_PATH env var: {path}")
                return path
            raise ConfigFileNotFoundError(f"CONFIG_PATH set but file does not exist: {path}")

        if ETC_CONFIG_PATH.is_file():
            _safe_log(self.logger, "info", f"ConfigLoader: using config from {ETC_CONFIG_PATH}")
            return ETC_CONFIG_PATH

        local_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if local_path.is_file():
            _safe_log(self.logger, "warning", f"ConfigLoader: using local dev config at {local_path} (NOT /etc)")
            return local_path

        raise ConfigFileNotFoundError(
            "ConfigLoader: no config.json found via CONFIG_PATH, /etc, or project directory"
        )

    def _get_transport(self) -> Dict[str, Any]:
        """
        Retrieve and validate the transport section.

        Returns:
            dict: Transport settings with a valid "family".

        Raises:
            MissingConfigKeyError: If the transport section is missing.
            InvalidConfigValueError: If the section or its family is invalid.
        """
        if "transport" not in self.config:
            _safe_log(self.logger, "error", "Missing required config: transport")
            raise MissingConfigKeyError("Missing required config: transport")

        value = self.config["transport"]
        if not isinstance(value, dict):
            raise InvalidConfigValueError("transport must be a JSON object")
        transport = dict(value)

        env_family = os.getenv("BAROMETER_TRANSPORT")
        if env_family:
            _safe_log(self.logger, "info", f"ConfigLoader: transport family overridden by env: {env_family}")
            transport["family"] = env_family

        family = transport.get("family")
        if family not in FAMILIES:
            msg = f"Invalid transport family: {family!r} (expected one of {', '.join(FAMILIES)})"
            _safe_log(self.logger, "error", msg)
            raise InvalidConfigValueError(msg)

        for key in ("channel", "port"):
            if key in transport:
                raw = transport[key]
                if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
                    raise InvalidConfigValueError(f"transport.{key} must be a non-negative integer: {raw!r}")

        for key in ("accept_poll_s", "write_timeout_s"):
            if key in transport:
                raw = transport[key]
                if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw <= 0:
                    raise InvalidConfigValueError(f"transport.{key} must be a number > 0: {raw!r}")

        return transport

    def _get_tick_interval_ms(self) -> int:
        """
        Parse and return tick_interval_ms.

        Returns:
            int: Milliseconds between sentences.

        Raises:
            InvalidConfigValueError: If the value is not an integer ≥ 1.
        """
        raw_value = self.config.get("tick_interval_ms", DEFAULT_TICK_INTERVAL_MS)
        try:
            if isinstance(raw_value, bool):
                raise TypeError("booleans are not intervals")
            interval = int(raw_value)
        except (ValueError, TypeError) as e:
            _safe_log(self.logger, "error", f"Invalid tick_interval_ms: {raw_value} ({e})")
            raise InvalidConfigValueError(f"Invalid tick_interval_ms: {raw_value}") from e
        if interval < 1:
            _safe_log(self.logger, "error", f"Invalid tick_interval_ms: {raw_value}")
            raise InvalidConfigValueError("tick_interval_ms must be ≥ 1")
        return interval

    def _get_log_level(self) -> str:
        """
        Retrieve the log_level from the environment or JSON config, default
        "INFO".

        Returns:
            str: The configured logging level name in upper case.
        """
        value = os.getenv("BAROMETER_LOG_LEVEL") or self.config.get("log_level", DEFAULT_LOG_LEVEL)
        level = str(value).upper()
        if level not in VALID_LOG_LEVELS:
            _safe_log(self.logger, "error", f"Invalid log_level: {value}")
            raise InvalidConfigValueError(f"Invalid log_level: {value}")
        return level

    def _get_sensor(self) -> Optional[Dict[str, Any]]:
        """
        Retrieve the optional sensor section. Detailed validation happens in
        SensorFactory.

        Returns:
            dict | None: Sensor configuration, or None if not configured.
        """
        value = self.config.get("sensor")
        if value is None:
            _safe_log(self.logger, "warning", "ConfigLoader: no sensor configured")
            return None
        if not isinstance(value, dict):
            raise InvalidConfigValueError("sensor must be a JSON object")
        return value
