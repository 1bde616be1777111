"""
session.py

Defines the Session class, the live binding between the service and one
connected peer.

A Session owns its connection exclusively. Writes are serialized so two
sentences can never interleave on the wire, and a failed write marks the
session dead without retrying.

Classes:
    Session

Usage:
    session = Session(connection, logger)
    session.send(encode(1013.25))
    session.close()
"""

import logging
import threading

from barometer_service.exceptions import SendError
from barometer_service.outputs.transport.base import BaseConnection


class Session:
    """
    Streaming session over one established transport connection.

    Args:
        connection: Accepted connection. The session takes ownership.
        logger: Logger instance.
    """

    def __init__(self, connection: BaseConnection, logger: logging.Logger) -> None:
        self._connection = connection
        self._logger = logger
        self._peer = connection.peer
        self._send_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._live = True
        self._closed = False

    def __repr__(self) -> str:
        return f"Session(peer={self._peer!r}, live={self._live})"

    @property
    def peer(self) -> str:
        return self._peer

    @property
    def is_live(self) -> bool:
        """True until a send fails or the session is closed."""
        return self._live

    def send(self, data: bytes) -> None:
        """
        Write data to the peer.

        Only one send runs at a time per session.

        Raises:
            SendError: If the session is dead or the write fails. The session
                is dead afterwards.
        """
        with self._send_lock:
            if not self._live:
                raise SendError("Session is not live", peer=self._peer)
            try:
                self._connection.write(data)
            except OSError as e:
                self._live = False
                self._release()
                raise SendError(f"Write failed: {e}", peer=self._peer, cause=e) from e

    def close(self) -> None:
        """
        Mark the session dead and release the connection.

        Idempotent. Does not wait for an in-flight send; closing the
        connection makes that send fail and return.
        """
        self._live = False
        self._release()

    def _release(self) -> None:
        """Close the connection exactly once."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True

        try:
            self._connection.close()
            self._logger.info("Session with %s closed.", self._peer)
        except OSError:
            self._logger.warning("Error closing session with %s", self._peer, exc_info=True)
