# test_hardware_rfcomm.py

import logging
import socket
import time
import pytest
from unittest.mock import MagicMock

from barometer_service.outputs.transport import SocketTransport
from barometer_service.supervisor import Supervisor, SupervisorState

pytestmark = pytest.mark.skipif(
    not hasattr(socket, "AF_BLUETOOTH"),
    reason="Hardware tests need Bluetooth socket support"
)


@pytest.mark.hardware
def test_rfcomm_listen_and_cancel():
    """
    Open a real RFCOMM listen socket through the supervisor and check that
    stop() releases it promptly while no peer is connected.
    """
    transport = SocketTransport(family="rfcomm", channel=1, accept_poll_s=0.2)
    logger = MagicMock(spec=logging.Logger)
    supervisor = Supervisor(logger=logger, transport=transport, tick_interval_s=0.5)

    supervisor.start()
    if not supervisor.acceptor.is_listening:
        supervisor.stop()
        pytest.skip("Could not open an RFCOMM listen socket (adapter down or channel in use)")

    started = time.monotonic()
    supervisor.stop()

    assert supervisor.state is SupervisorState.STOPPED
    assert time.monotonic() - started < 2.0
    assert not supervisor.acceptor.is_listening
