"""
main.py

Bootstrap entry point for the barometer service. Loads configuration, sets up
logging, builds the transport and the sensor feed, and runs the supervisor
until SIGTERM or Ctrl+C.
"""

import logging
import signal
import threading
from typing import Any, Callable, Mapping, Optional

from barometer_service.__version__ import __version__
from barometer_service.config_loader import ConfigLoader
from barometer_service.exceptions import FactoryError, TransportSetupError
from barometer_service.inputs.sensor_feed import SensorFeed
from barometer_service.inputs.sensors.factory import SensorFactory
from barometer_service.logging_setup import setup_logging
from barometer_service.outputs.transport.factory import build_transport
from barometer_service.supervisor import Supervisor


def build_sensor_feed(
    sensor_config: Optional[Mapping[str, Any]],
    on_reading: Callable[[float], None],
    logger: logging.Logger,
) -> Optional[SensorFeed]:
    """
    Build the sensor feed, or return None if no sensor is available.

    A missing or broken sensor is not fatal: the service keeps sending the
    last known value (initially 0.00).
    """
    if not sensor_config:
        logger.warning("No sensor configured. Sentences will carry the initial value.")
        return None

    try:
        bundle = SensorFactory().build(dict(sensor_config))
    except FactoryError as e:
        logger.error(f"Barometer sensor not available: {e}")
        return None

    return SensorFeed(bundle=bundle, on_reading=on_reading)


def _log_transport_error(logger: logging.Logger) -> Callable[[TransportSetupError], None]:
    def report(error: TransportSetupError) -> None:
        logger.error(f"Transport unavailable, no peer will be accepted: {error}")
    return report


def main():
    """
    Initialize and run the barometer service.

    Loads configuration, configures logging, builds the transport, the
    supervisor and the sensor feed, then blocks until shutdown is requested.
    """
    bootstrap_logger = logging.getLogger("bootstrap")
    bootstrap_logger.setLevel(logging.INFO)
    bootstrap_logger.addHandler(logging.StreamHandler())

    bootstrap_logger.info(f"Barometer Service v{__version__}")

    config = ConfigLoader(logger=bootstrap_logger).as_dict()

    logger = setup_logging(
        log_dir="log",
        log_file_name="barometer_service.log",
        log_level=config["log_level"],
    )

    transport = build_transport(config["transport"], logger)

    supervisor = Supervisor(
        logger=logger,
        transport=transport,
        tick_interval_s=config["tick_interval_ms"] / 1000.0,
        on_transport_error=_log_transport_error(logger),
    )

    feed = build_sensor_feed(config["sensor"], supervisor.on_sensor_update, logger)

    shutdown = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: shutdown.set())

    supervisor.start()
    if feed is not None:
        feed.start()

    try:
        while not shutdown.wait(timeout=1.0):
            pass
        logger.info("Shutdown requested by SIGTERM.")
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
    finally:
        if feed is not None:
            feed.stop(timeout=2.0)
        supervisor.stop()


if __name__ == "__main__":
    main()
