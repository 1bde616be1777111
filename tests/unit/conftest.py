"""
conftest.py

Shared fixtures for unit tests.
"""

import logging
from unittest.mock import MagicMock

import pytest

from fakes import FakeConnection, FakeListenHandle, FakeTransport


@pytest.fixture
def logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def listen_handle(connection):
    return FakeListenHandle(connection=connection)


@pytest.fixture
def transport(listen_handle):
    return FakeTransport(handle=listen_handle)
