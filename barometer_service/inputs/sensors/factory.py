"""
factory.py

Provides the SensorFactory and SensorBundle abstractions. The factory constructs
a sensor driver from configuration data, validates associated metadata, and
returns a SensorBundle that the sensor feed can consume without knowledge of
driver internals.
"""


from dataclasses import dataclass
from typing import Optional

from barometer_service.inputs.sensors import bmp280, simulated
from barometer_service.inputs.sensors.base import BaseSensor
from barometer_service.exceptions import InvalidSensorConfigError, UnknownSensorTypeError

# Set up logging
from barometer_service import PACKAGE_LOGGER_NAME
import logging
logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{__name__.split('.')[-1]}")

DEFAULT_SAMPLE_PERIOD = 0.2


@dataclass
class SensorBundle:
    """
    Container object holding a sensor driver and its associated metadata.

    A SensorBundle combines the constructed driver instance with the settings
    used by the sensor feed: which driver key carries pressure, linear
    calibration, accepted range and sampling period.
    """
    # The constructed driver (e.g., BMP280Sensor())
    driver: BaseSensor
    # Driver output key holding the pressure reading
    key: str = "pressure"
    # {"offset": float, "slope": float}
    calibration: Optional[dict[str, float]] = None
    # {"min": float, "max": float}
    range: Optional[dict[str, float]] = None
    # Seconds between driver reads
    sample_period: float = DEFAULT_SAMPLE_PERIOD


class SensorFactory:
    """
    Construct sensor drivers from configuration and return SensorBundle objects.

    The factory maintains a registry mapping sensor type strings to driver
    classes, validates configuration data, and instantiates drivers with only
    the parameters they accept.
    """
    def __init__(self, registry: dict[str, type[BaseSensor]] | None = None):
        if registry is None:
            self._registry = {
                "bmp280": bmp280.BMP280Sensor,
                "simulated": simulated.SimulatedPressureSensor,
            }
        else:
            self._registry = registry

    @property
    def known_types(self) -> list[str]:
        return sorted(self._registry)

    def register(self, sensor_type: str, driver_class: type[BaseSensor]):
        """
        Register or override a sensor driver class for a given sensor type.

        Args:
            sensor_type (str): Sensor type identifier used in configuration.
            driver_class (type[BaseSensor]): Driver class implementing the sensor.
        """
        if not isinstance(sensor_type, str):
            raise InvalidSensorConfigError("sensor_type must be a string")

        sensor_type = sensor_type.strip().lower()
        if not sensor_type:
            raise InvalidSensorConfigError("sensor_type cannot be empty or whitespace")

        if not isinstance(driver_class, type) or not issubclass(driver_class, BaseSensor):
            raise InvalidSensorConfigError("driver_class must be a subclass of BaseSensor")

        old_driver = self._registry.get(sensor_type)
        if old_driver is not None:
            logger.warning(
                f"Overriding driver for '{sensor_type}': "
                f"{old_driver.__name__} → {driver_class.__name__}"
            )

        self._registry[sensor_type] = driver_class

    @staticmethod
    def _validate_calibration(calibration) -> Optional[dict[str, float]]:
        if calibration is None:
            return None
        if not isinstance(calibration, dict):
            raise InvalidSensorConfigError("Calibration must be a dict with 'offset' and 'slope'")
        if "offset" not in calibration or "slope" not in calibration:
            raise InvalidSensorConfigError("Calibration must include 'offset' and 'slope'")
        offset, slope = calibration["offset"], calibration["slope"]
        if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in (offset, slope)):
            raise InvalidSensorConfigError("Calibration values must be numeric")
        return {"offset": float(offset), "slope": float(slope)}

    @staticmethod
    def _validate_range(limits) -> Optional[dict[str, float]]:
        if limits is None:
            return None
        if not isinstance(limits, dict):
            raise InvalidSensorConfigError("Range must be a dict with 'min' and 'max'")
        if "min" not in limits or "max" not in limits:
            raise InvalidSensorConfigError("Range must include 'min' and 'max'")

        low = limits["min"]
        high = limits["max"]

        if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in (low, high)):
            raise InvalidSensorConfigError("Range values must be numeric")
        if low >= high:
            raise InvalidSensorConfigError(f"Invalid range: min ({low}) must be less than max ({high})")
        return {"min": float(low), "max": float(high)}

    def build(self, sensor_config) -> SensorBundle:
        """
        Build a SensorBundle from a sensor configuration dictionary.

        The configuration is validated, the appropriate driver class is resolved
        from the registry, and the driver is instantiated with accepted and
        coerced parameters. Key, calibration, range and sample period are
        validated and attached to the resulting bundle.

        Returns:
            SensorBundle: A fully constructed sensor bundle.
        """
        if not isinstance(sensor_config, dict):
            raise InvalidSensorConfigError("Sensor configuration must be a dict")

        sensor_type = sensor_config.get("type")
        if not isinstance(sensor_type, str) or not sensor_type.strip():
            raise InvalidSensorConfigError("Missing or invalid 'type' in sensor configuration")
        sensor_type = sensor_type.strip().lower()
        sensor_id = sensor_config.get("id")

        key = sensor_config.get("key", "pressure")
        if not isinstance(key, str) or not key.strip():
            raise InvalidSensorConfigError("'key' must be a non-empty string", sensor_type=sensor_type, sensor_id=sensor_id)

        calibration = self._validate_calibration(sensor_config.get("calibration"))
        limits = self._validate_range(sensor_config.get("range"))

        sample_period = sensor_config.get("sample_period", DEFAULT_SAMPLE_PERIOD)
        if isinstance(sample_period, bool) or not isinstance(sample_period, (int, float)) or sample_period <= 0:
            raise InvalidSensorConfigError(
                "'sample_period' must be a number > 0", sensor_type=sensor_type, sensor_id=sensor_id
            )

        driver_class = self._registry.get(sensor_type)
        if driver_class is None:
            raise UnknownSensorTypeError(
                unknown_type=sensor_type,
                known_types=list(self._registry.keys()),
                sensor_id=sensor_id,
            )

        required_kwargs = getattr(driver_class, "REQUIRED_KWARGS", [])
        accepted_kwargs = getattr(driver_class, "ACCEPTED_KWARGS", [])
        coercers = getattr(driver_class, "COERCERS", {})

        not_accepted = set(required_kwargs) - set(accepted_kwargs)
        if not_accepted:
            raise InvalidSensorConfigError(
                f"Driver {driver_class.__name__} misconfigured: REQUIRED_KWARGS {sorted(required_kwargs)} "
                f"must be included in ACCEPTED_KWARGS (missing: {sorted(not_accepted)})"
            )

        filtered_kwargs: dict[str, object] = {}
        for name, value in sensor_config.items():
            if name in accepted_kwargs:
                filtered_kwargs[name] = value

        for field_name, cast in coercers.items():
            if field_name in filtered_kwargs:
                try:
                    filtered_kwargs[field_name] = cast(filtered_kwargs[field_name])
                except Exception as e:
                    raise InvalidSensorConfigError(
                        f"Invalid type for '{field_name}' in {driver_class.__name__}: expected {getattr(cast, '__name__', str(cast))}",
                        sensor_type=sensor_type,
                        sensor_id=sensor_id,
                    ) from e

        missing = sorted(
            required_key for required_key in required_kwargs
            if filtered_kwargs.get(required_key) in (None, "", [])
        )
        if missing:
            raise InvalidSensorConfigError(
                f"{driver_class.__name__} requires fields: {sorted(required_kwargs)}, missing: {missing}",
                sensor_type=sensor_type,
                sensor_id=sensor_id,
            )

        try:
            driver = driver_class(**filtered_kwargs)
        except Exception as e:
            raise InvalidSensorConfigError(
                f"Failed to instantiate {driver_class.__name__}: {e}",
                sensor_type=sensor_type,
                sensor_id=sensor_id,
                cause=e,
            ) from e

        logger.info("Built %s sensor (id=%s)", driver.name, sensor_id)
        return SensorBundle(
            driver=driver,
            key=key,
            calibration=calibration,
            range=limits,
            sample_period=float(sample_period),
        )
