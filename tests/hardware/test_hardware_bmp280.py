# test_hardware_bmp280.py

import os
import platform
import pytest

from barometer_service.inputs.sensor_feed import SensorFeed
from barometer_service.inputs.sensors import SensorFactory

pytestmark = pytest.mark.skipif(
    not any(platform.machine().startswith(arch) for arch in ("arm", "aarch64")),
    reason="Hardware tests only run on Raspberry Pi"
)


@pytest.mark.hardware
def test_bmp280_hardware_read_via_factory():
    """
    Build a BMP280 bundle via SensorFactory, take one sample through
    SensorFeed and assert a plausible surface pressure in hPa.
    """
    if not os.path.exists("/dev/i2c-1"):
        pytest.skip("I2C bus 1 is not enabled (/dev/i2c-1 missing)")

    address = int(os.getenv("BMP280_ADDRESS", "0x76"), 0)
    bundle = SensorFactory().build({
        "type": "bmp280",
        "id": "bmp280_hw",
        "bus": 1,
        "address": address,
        "range": {"min": 300.0, "max": 1100.0},
    })

    received = []
    feed = SensorFeed(bundle=bundle, on_reading=received.append)
    try:
        value = feed.sample()
    finally:
        feed.stop()

    assert value is not None, "BMP280 read failed or was out of range"
    assert received == [value]
    assert 300.0 <= value <= 1100.0
