import threading
import time

import pytest

from barometer_service.exceptions import SendError
from barometer_service.outputs.session import Session

from fakes import FakeConnection


def test_new_session_is_live(connection, logger):
    session = Session(connection, logger)
    assert session.is_live
    assert session.peer == "fake-peer"


def test_send_writes_bytes(connection, logger):
    session = Session(connection, logger)
    session.send(b"$PBARO,1013.25,hPa*3D\r\n")
    assert connection.writes == [b"$PBARO,1013.25,hPa*3D\r\n"]
    assert session.is_live


def test_failed_send_marks_dead_and_raises(logger):
    cause = BrokenPipeError("broken pipe")
    connection = FakeConnection(fail_with=cause)
    session = Session(connection, logger)

    with pytest.raises(SendError) as exc_info:
        session.send(b"x")

    assert exc_info.value.__cause__ is cause
    assert exc_info.value.peer == "fake-peer"
    assert not session.is_live


def test_failed_send_releases_connection_once(logger):
    connection = FakeConnection(fail_with=OSError("gone"))
    session = Session(connection, logger)

    with pytest.raises(SendError):
        session.send(b"x")
    session.close()
    session.close()

    assert connection.close_calls == 1


def test_send_on_dead_session_does_not_touch_connection(logger):
    connection = FakeConnection(fail_with=OSError("gone"))
    session = Session(connection, logger)
    with pytest.raises(SendError):
        session.send(b"x")

    with pytest.raises(SendError):
        session.send(b"y")
    assert connection.write_calls == 1


def test_close_is_idempotent(connection, logger):
    session = Session(connection, logger)
    session.close()
    session.close()
    session.close()
    assert connection.close_calls == 1
    assert not session.is_live


def test_send_after_close_raises(connection, logger):
    session = Session(connection, logger)
    session.close()
    with pytest.raises(SendError):
        session.send(b"x")
    assert connection.writes == []


def test_close_error_is_logged_not_raised(logger):
    connection = FakeConnection()

    def failing_close():
        raise OSError("already closed")

    connection.close = failing_close
    session = Session(connection, logger)
    session.close()

    logger.warning.assert_called_once()
    assert not session.is_live


class _SlowConnection(FakeConnection):
    """Writes byte by byte and records overlapping writers."""

    def __init__(self):
        super().__init__()
        self.active = 0
        self.max_active = 0
        self.stream = bytearray()
        self._lock = threading.Lock()

    def write(self, data):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        for byte in data:
            self.stream.append(byte)
            time.sleep(0.0005)
        with self._lock:
            self.active -= 1


def test_concurrent_sends_do_not_interleave(logger):
    connection = _SlowConnection()
    session = Session(connection, logger)
    lines = [b"$AAAA*00\r\n", b"$BBBB*00\r\n", b"$CCCC*00\r\n", b"$DDDD*00\r\n"]

    threads = [threading.Thread(target=session.send, args=(line,)) for line in lines]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert connection.max_active == 1
    received = bytes(connection.stream).split(b"\r\n")[:-1]
    assert sorted(r + b"\r\n" for r in received) == sorted(lines)


def test_close_during_in_flight_send_does_not_block(logger):
    release = threading.Event()

    class _BlockingConnection(FakeConnection):
        def write(self, data):
            release.wait(2.0)
            raise OSError("connection closed")

        def close(self):
            super().close()
            release.set()

    connection = _BlockingConnection()
    session = Session(connection, logger)
    errors = []

    def sender():
        try:
            session.send(b"x")
        except SendError as e:
            errors.append(e)

    t = threading.Thread(target=sender)
    t.start()
    time.sleep(0.05)
    session.close()
    t.join(2.0)

    assert not t.is_alive()
    assert len(errors) == 1
    assert connection.close_calls == 1
    assert not session.is_live
