"""
acceptor.py

Defines the ConnectionAcceptor class, which waits for exactly one peer on a
dedicated thread and hands the resulting Session to its owner.

The acceptor is single shot. After one successful accept, one accept error,
or cancel(), the listen handle is closed and the thread exits. There is no
retry on accept failure.

Classes:
    ConnectionAcceptor
"""

import logging
import threading
from typing import Callable, Optional

from barometer_service.exceptions import TransportSetupError
from barometer_service.outputs.session import Session
from barometer_service.outputs.transport.base import BaseListenHandle


class ConnectionAcceptor:
    """
    Accept one inbound connection without blocking the caller.

    Args:
        logger: Logger instance.
        on_session: Called on the accept thread with the new Session.
        on_error: Called on the accept thread with a TransportSetupError when
            accept fails. Never called after cancel().
    """

    def __init__(
        self,
        logger: logging.Logger,
        on_session: Callable[[Session], None],
        on_error: Optional[Callable[[TransportSetupError], None]] = None,
    ) -> None:
        self._logger = logger
        self._on_session = on_session
        self._on_error = on_error
        self._listen_handle: Optional[BaseListenHandle] = None
        self._thread: Optional[threading.Thread] = None
        self._cancelled = threading.Event()

    @property
    def is_listening(self) -> bool:
        """True while the accept thread is waiting for a peer."""
        return self._thread is not None and self._thread.is_alive()

    def start(self, listen_handle: BaseListenHandle) -> None:
        """
        Start the accept thread on listen_handle. The acceptor owns the
        handle from here on.

        Raises:
            RuntimeError: If the acceptor was already started.
        """
        if self._thread is not None:
            raise RuntimeError("ConnectionAcceptor already started")

        self._listen_handle = listen_handle
        self._thread = threading.Thread(
            target=self._run,
            name="connection-acceptor",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        """
        Close the listen handle to unblock a pending accept. Safe to call at
        any time and more than once.
        """
        self._cancelled.set()
        self._close_listen_handle()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the accept thread to finish.

        Returns:
            bool: True if the thread has finished (or never started).
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        if self._cancelled.is_set():
            self._close_listen_handle()
            return

        self._logger.info("Waiting for connection...")
        try:
            connection = self._listen_handle.accept()
        except OSError as e:
            self._close_listen_handle()
            if self._cancelled.is_set():
                self._logger.debug("Accept ended by cancel: %s", e)
                return
            self._logger.error("accept() failed, no longer listening: %s", e)
            if self._on_error is not None:
                error = TransportSetupError(f"accept() failed: {e}")
                error.__cause__ = e
                self._on_error(error)
            return

        if self._cancelled.is_set():
            self._logger.info("Connection from %s arrived after cancel, dropping it.", connection.peer)
            connection.close()
            return

        self._logger.info("Connection accepted from %s", connection.peer)
        session = Session(connection, self._logger)
        try:
            self._on_session(session)
        finally:
            self._close_listen_handle()

    def _close_listen_handle(self) -> None:
        handle = self._listen_handle
        if handle is None:
            return
        try:
            handle.close()
        except OSError:
            self._logger.warning("Could not close the listen handle", exc_info=True)
