"""
sensor_feed.py

Provides the SensorFeed class, which turns a polled sensor driver into a
stream of asynchronous reading callbacks.

The feed owns its own thread. On each sample it reads the driver, picks the
configured pressure key, applies linear calibration and range filtering, and
calls on_reading(value). A failed read is logged and skipped; the feed keeps
running.
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, Optional

from barometer_service import PACKAGE_LOGGER_NAME
from barometer_service.exceptions import SensorDataOutOfRangeError, SensorReadError
from barometer_service.inputs.sensors.factory import SensorBundle

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.sensor_feed")


class SensorFeed:
    """
    Deliver readings from a SensorBundle to a callback on a background thread.

    Args:
        bundle: Driver plus key, calibration, range and sample period.
        on_reading: Called with each accepted pressure value in hPa.
    """

    def __init__(self, bundle: SensorBundle, on_reading: Callable[[float], None]) -> None:
        self._bundle = bundle
        self._on_reading = on_reading
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.consecutive_failures = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _extract(self, raw: Mapping[str, Any]) -> float:
        """
        Return the calibrated pressure value from a raw driver reading.

        Raises:
            SensorReadError: If the key is missing or the value is not numeric.
            SensorDataOutOfRangeError: If the value falls outside the range.
        """
        key = self._bundle.key
        if key not in raw:
            raise SensorReadError(f"Reading from {self._bundle.driver.name} has no '{key}' value")

        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SensorReadError(f"Non-numeric '{key}' value: {value!r}")

        calibration = self._bundle.calibration
        if calibration:
            value = (value * calibration["slope"]) + calibration["offset"]

        limits = self._bundle.range
        if limits and not (limits["min"] <= value <= limits["max"]):
            raise SensorDataOutOfRangeError(
                f"{key}={value} outside [{limits['min']}, {limits['max']}]"
            )
        return float(value)

    def sample(self) -> Optional[float]:
        """
        Take one sample and deliver it.

        Returns:
            The delivered value, or None if the sample was skipped.
        """
        driver = self._bundle.driver
        try:
            value = self._extract(driver.read())
        except SensorDataOutOfRangeError as e:
            logger.warning(f"Discarding reading from {driver.name}: {e}")
            return None
        except Exception as e:
            self.consecutive_failures += 1
            logger.warning(f"Read failed for {driver.name} ({self.consecutive_failures} in a row): {e}")
            return None

        self.consecutive_failures = 0
        self._on_reading(value)
        return value

    def start(self) -> None:
        """
        Start sampling on a background thread.

        Raises:
            RuntimeError: If the feed was already started.
        """
        if self._thread is not None:
            raise RuntimeError("SensorFeed already started")
        self._thread = threading.Thread(target=self._run, name="sensor-feed", daemon=True)
        self._thread.start()
        logger.info(
            f"Sampling {self._bundle.driver.name} every {self._bundle.sample_period}s"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop sampling and release the driver.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        try:
            self._bundle.driver.close()
        except Exception:
            logger.warning("Error closing sensor driver", exc_info=True)

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.sample()
            except Exception:
                logger.exception("Reading callback failed")
            self._stop_event.wait(self._bundle.sample_period)
