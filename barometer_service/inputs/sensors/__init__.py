from .base import BaseSensor
from .factory import SensorBundle, SensorFactory

__all__ = ["BaseSensor", "SensorBundle", "SensorFactory"]
