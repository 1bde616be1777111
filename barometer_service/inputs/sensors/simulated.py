"""
simulated.py

Provides a software pressure source for development machines and tests
where no barometer is attached. Readings follow a bounded random walk
around a base pressure.
"""

import random

from barometer_service.exceptions.sensors import SensorValueError
from barometer_service.inputs.sensors.base import BaseSensor


class SimulatedPressureValueError(SensorValueError):
    """
    Raised when the simulated sensor is given invalid parameters.
    """


class SimulatedPressureSensor(BaseSensor):
    """
    Pressure sensor that needs no hardware.

    Each read() moves the value by at most `step` hPa and keeps it within
    `spread` hPa of `base`.
    """
    REQUIRED_KWARGS = []
    ACCEPTED_KWARGS = ["id", "base", "step", "spread", "seed"]
    COERCERS = {"base": float, "step": float, "spread": float}

    def __init__(
        self,
        *,
        id: str | None = None,
        base: float = 1013.25,
        step: float = 0.05,
        spread: float = 5.0,
        seed: int | None = None,
        kind: str = "Pressure",
        units: str = "hPa",
    ):
        self.sensor_name = "SimulatedPressure"
        self.sensor_kind = kind
        self.sensor_units = units

        self.sensor_id: str | None = id
        self.id = self.sensor_id

        if step < 0 or spread < 0:
            raise SimulatedPressureValueError("step and spread must be >= 0")

        self.base = float(base)
        self.step = float(step)
        self.spread = float(spread)
        self._random = random.Random(seed)
        self._value = self.base

    @property
    def name(self) -> str:
        return self.sensor_name

    @property
    def kind(self) -> str:
        return self.sensor_kind

    @property
    def units(self) -> str:
        return self.sensor_units

    def read(self):
        self._value += self._random.uniform(-self.step, self.step)
        low = self.base - self.spread
        high = self.base + self.spread
        self._value = min(max(self._value, low), high)
        return {"pressure": self._value}
