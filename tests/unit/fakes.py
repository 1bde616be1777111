"""
fakes.py

In-memory transport fakes and small helpers shared by the unit tests.
"""

import threading
import time

from barometer_service.inputs.sensors.base import BaseSensor
from barometer_service.outputs.transport.base import (
    BaseConnection,
    BaseListenHandle,
    BaseTransport,
)


def wait_until(predicate, timeout=2.0, interval=0.01):
    """Poll predicate until it returns True or timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class FakeConnection(BaseConnection):
    def __init__(self, peer="fake-peer", fail_with=None):
        self._peer = peer
        self.fail_with = fail_with
        self.writes = []
        self.write_calls = 0
        self.close_calls = 0

    @property
    def peer(self):
        return self._peer

    def write(self, data):
        self.write_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.writes.append(bytes(data))

    def close(self):
        self.close_calls += 1


class FakeListenHandle(BaseListenHandle):
    """
    accept() blocks until connect() is called or the handle is closed.
    """

    def __init__(self, connection=None, error=None, connected=False):
        self.connection = connection if connection is not None else FakeConnection()
        self.error = error
        self.accept_entered = threading.Event()
        self.close_calls = 0
        self._connected = threading.Event()
        self._closed = threading.Event()
        if connected:
            self._connected.set()

    def connect(self):
        self._connected.set()

    def accept(self):
        self.accept_entered.set()
        while True:
            if self._closed.is_set():
                raise OSError("listen handle closed")
            if self._connected.wait(0.01):
                if self.error is not None:
                    raise self.error
                return self.connection

    def close(self):
        self.close_calls += 1
        self._closed.set()


class FakeTransport(BaseTransport):
    def __init__(self, handle=None, error=None):
        self.handle = handle if handle is not None else FakeListenHandle()
        self.error = error
        self.listen_calls = 0

    def listen(self):
        self.listen_calls += 1
        if self.error is not None:
            raise self.error
        return self.handle


class FakePressureSensor(BaseSensor):
    """Returns scripted readings; an Exception instance in the script is raised."""

    def __init__(self, readings=None):
        self._readings = list(readings or [])
        self.read_calls = 0
        self.close_calls = 0

    @property
    def name(self):
        return "FakePressure"

    @property
    def kind(self):
        return "Pressure"

    @property
    def units(self):
        return "hPa"

    def read(self):
        self.read_calls += 1
        if self._readings:
            item = self._readings.pop(0)
        else:
            item = {"pressure": 1000.0}
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.close_calls += 1
