from .config_exceptions import (
    ConfigurationError,
    InvalidConfigValueError,
    MissingConfigKeyError,
    ConfigFileNotFoundError,
)
from .factory_exceptions import FactoryError, UnknownSensorTypeError, InvalidSensorConfigError
from .sensors import (
    SensorInitError,
    SensorReadError,
    SensorValueError,
    SensorStopError,
    SensorDataOutOfRangeError,
)
from .transport import TransportError, TransportSetupError, SendError

__all__ = [
    "ConfigurationError",
    "InvalidConfigValueError",
    "MissingConfigKeyError",
    "ConfigFileNotFoundError",
    "FactoryError",
    "UnknownSensorTypeError",
    "InvalidSensorConfigError",
    "SensorInitError",
    "SensorReadError",
    "SensorValueError",
    "SensorStopError",
    "SensorDataOutOfRangeError",
    "TransportError",
    "TransportSetupError",
    "SendError",
]
