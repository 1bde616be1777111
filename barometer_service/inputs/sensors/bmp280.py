"""
bmp280.py

Provides an I2C sensor driver for the Bosch BMP280 (and the pressure part of
the BME280) barometric pressure sensor.

The driver verifies the chip id, reads the factory trimming parameters once,
puts the sensor into normal mode and converts raw readings with the
floating-point compensation formulas from the Bosch datasheet.
"""

import struct

from smbus3 import SMBus

from barometer_service.exceptions.sensors import (
    SensorInitError,
    SensorReadError,
    SensorStopError,
    SensorValueError,
)
from barometer_service.inputs.sensors.base import BaseSensor

REG_CALIBRATION = 0x88
REG_CHIP_ID = 0xD0
REG_CTRL_MEAS = 0xF4
REG_CONFIG = 0xF5
REG_DATA = 0xF7

CALIBRATION_LENGTH = 24
DATA_LENGTH = 6

CHIP_ID_BMP280 = 0x58
CHIP_ID_BME280 = 0x60
KNOWN_CHIP_IDS = (CHIP_ID_BMP280, CHIP_ID_BME280)

# osrs_t x1, osrs_p x4, normal mode
CTRL_MEAS_NORMAL = 0x2F
# standby 125 ms, IIR filter x4
CONFIG_DEFAULT = 0x48

VALID_ADDRESSES = (0x76, 0x77)


class BMP280InitError(SensorInitError):
    """
    Raised when the BMP280 sensor cannot be initialised.
    """


class BMP280ValueError(SensorValueError):
    """
    Raised when the BMP280 sensor is misconfigured or given invalid values.
    """


class BMP280ReadError(SensorReadError):
    """
    Raised when reading data from the BMP280 sensor fails.
    """


class BMP280StopError(SensorStopError):
    """
    Raised when the I2C bus cannot be released.
    """


def _coerce_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise BMP280ValueError(f"Unsupported type for {name}: bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError as e:
            raise BMP280ValueError(f"Invalid {name} string: {value}") from e
    raise BMP280ValueError(f"Unsupported type for {name}: {type(value).__name__}")


class BMP280Sensor(BaseSensor):
    """
    I2C driver for the BMP280 barometric pressure sensor.

    Returns pressure in hPa and temperature in degrees C.

    Lifecycle:
        - the bus is opened and the sensor configured during construction
        - read() returns the latest measurement from normal mode
        - close() releases the bus
    """
    # Factory uses these for validation + filtering.
    REQUIRED_KWARGS = ["id"]
    ACCEPTED_KWARGS = ["id", "bus", "address"]
    COERCERS = {}

    def __init__(
        self,
        *,
        id: str | None = None,
        bus: int | str = 1,
        address: int | str = 0x76,
        kind: str = "Pressure",
        units: str = "hPa",
    ):
        self.sensor_name = "BMP280"
        self.sensor_kind = kind
        self.sensor_units = units

        self.sensor_id: str | None = id
        self.id = self.sensor_id

        self.bus = _coerce_int(bus, "I2C bus")
        if self.bus < 0:
            raise BMP280ValueError(f"I2C bus {self.bus} must be >= 0")

        self.address = _coerce_int(address, "I2C address")
        if self.address not in VALID_ADDRESSES:
            raise BMP280ValueError(
                f"I2C address {hex(self.address)} is not a BMP280 address "
                f"({', '.join(hex(a) for a in VALID_ADDRESSES)})"
            )

        self._smbus: SMBus | None = None
        self.chip_id: int | None = None
        self._calibration: tuple[int, ...] = ()

        self._open_bus()
        self._check_chip_id()
        self._load_calibration()
        self._configure()

    # --- Properties ---------------------------------------------------------

    @property
    def name(self) -> str:
        return self.sensor_name

    @property
    def kind(self) -> str:
        return self.sensor_kind

    @property
    def units(self) -> str:
        return self.sensor_units

    # --- Internals ----------------------------------------------------------

    def _open_bus(self) -> None:
        """
        Open /dev/i2c-{bus} and keep the handle for reuse.
        """
        try:
            self._smbus = SMBus(self.bus)
        except FileNotFoundError as e:
            raise BMP280InitError(f"I2C bus {self.bus} not found (no /dev/i2c-{self.bus})") from e
        except PermissionError as e:
            raise BMP280InitError(f"Permission denied opening I2C bus {self.bus}") from e
        except OSError as e:
            raise BMP280InitError(f"Failed to open I2C bus {self.bus}: {e}") from e

    def _check_chip_id(self) -> None:
        try:
            chip_id = self._smbus.read_byte_data(self.address, REG_CHIP_ID)
        except OSError as e:
            raise BMP280InitError(f"No response from {hex(self.address)} on bus {self.bus}: {e}") from e

        if chip_id not in KNOWN_CHIP_IDS:
            raise BMP280InitError(f"Unexpected chip id {hex(chip_id)} at {hex(self.address)}")
        self.chip_id = chip_id

    def _load_calibration(self) -> None:
        """
        Read dig_T1..dig_T3 and dig_P1..dig_P9 from the trimming registers.
        """
        try:
            block = self._smbus.read_i2c_block_data(self.address, REG_CALIBRATION, CALIBRATION_LENGTH)
        except OSError as e:
            raise BMP280InitError(f"Failed reading calibration data: {e}") from e
        self._calibration = struct.unpack("<HhhHhhhhhhhh", bytes(block))

    def _configure(self) -> None:
        try:
            self._smbus.write_byte_data(self.address, REG_CONFIG, CONFIG_DEFAULT)
            self._smbus.write_byte_data(self.address, REG_CTRL_MEAS, CTRL_MEAS_NORMAL)
        except OSError as e:
            raise BMP280InitError(f"Failed configuring sensor: {e}") from e

    def _compensate(self, adc_t: int, adc_p: int) -> tuple[float, float]:
        """
        Return (temperature_c, pressure_pa) for raw 20-bit readings.
        """
        t1, t2, t3, p1, p2, p3, p4, p5, p6, p7, p8, p9 = self._calibration

        var1 = (adc_t / 16384.0 - t1 / 1024.0) * t2
        var2 = ((adc_t / 131072.0 - t1 / 8192.0) ** 2) * t3
        t_fine = var1 + var2
        temperature = t_fine / 5120.0

        var1 = t_fine / 2.0 - 64000.0
        var2 = var1 * var1 * p6 / 32768.0
        var2 = var2 + var1 * p5 * 2.0
        var2 = var2 / 4.0 + p4 * 65536.0
        var1 = (p3 * var1 * var1 / 524288.0 + p2 * var1) / 524288.0
        var1 = (1.0 + var1 / 32768.0) * p1
        if var1 == 0:
            raise BMP280ReadError("Invalid calibration data (division by zero)")

        pressure = 1048576.0 - adc_p
        pressure = (pressure - var2 / 4096.0) * 6250.0 / var1
        var1 = p9 * pressure * pressure / 2147483648.0
        var2 = pressure * p8 / 32768.0
        pressure = pressure + (var1 + var2 + p7) / 16.0

        return temperature, pressure

    # --- Public API ---------------------------------------------------------

    def read(self):
        """
        Read the latest pressure and temperature values.

        Returns:
            dict: {"pressure": hPa, "temperature": C}
        """
        if self._smbus is None:
            raise BMP280ReadError("I2C bus is closed")

        try:
            data = self._smbus.read_i2c_block_data(self.address, REG_DATA, DATA_LENGTH)
        except OSError as e:
            raise BMP280ReadError(f"Failed to read BMP280 data registers: {e}") from e

        adc_p = (data[0] << 12) | (data[1] << 4) | (data[2] >> 4)
        adc_t = (data[3] << 12) | (data[4] << 4) | (data[5] >> 4)
        if adc_p == 0x80000 or adc_t == 0x80000:
            raise BMP280ReadError("Measurement not ready (skipped value)")

        temperature, pressure_pa = self._compensate(adc_t, adc_p)

        return {
            "pressure": pressure_pa / 100.0,
            "temperature": temperature,
        }

    def close(self) -> None:
        """
        Release the I2C bus. Safe to call multiple times.
        """
        if self._smbus is None:
            return
        try:
            self._smbus.close()
        except OSError as e:
            raise BMP280StopError(f"Error closing I2C bus {self.bus}: {e}") from e
        finally:
            self._smbus = None
