"""
supervisor.py

Defines the Supervisor class, which wires the latest-value store, the
connection acceptor and the ticker together and owns their lifecycles.

The Supervisor is the only object the entry point talks to:

    supervisor = Supervisor(logger, transport)
    supervisor.start()
    feed = SensorFeed(..., on_reading=supervisor.on_sensor_update)
    ...
    supervisor.stop()

States:
    idle -> running -> stopped (terminal)
"""

import enum
import logging
import threading
from typing import Callable, Optional

from barometer_service.exceptions import TransportSetupError
from barometer_service.inputs.latest_value import LatestValueStore
from barometer_service.outputs.acceptor import ConnectionAcceptor
from barometer_service.outputs.session import Session
from barometer_service.outputs.transport.base import BaseTransport
from barometer_service.ticker import Ticker


class SupervisorState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Supervisor:
    """
    Owns the session slot and the acceptor and ticker threads.

    Args:
        logger: Logger instance.
        transport: Transport used to listen for the single peer.
        tick_interval_s: Seconds between sentences.
        stop_timeout_s: Upper bound on waiting for each thread during stop().
        on_transport_error: Optional callback for listen/accept failures.
    """

    def __init__(
        self,
        logger: logging.Logger,
        transport: BaseTransport,
        tick_interval_s: float = 1.0,
        stop_timeout_s: float = 2.0,
        on_transport_error: Optional[Callable[[TransportSetupError], None]] = None,
    ) -> None:
        self._logger = logger
        self._transport = transport
        self._stop_timeout_s = stop_timeout_s
        self._on_transport_error = on_transport_error

        self._state = SupervisorState.IDLE
        self._state_lock = threading.Lock()

        self._session: Optional[Session] = None
        self._session_lock = threading.Lock()

        self._store = LatestValueStore()
        self._acceptor = ConnectionAcceptor(
            logger=logger,
            on_session=self.install_session,
            on_error=self._report_transport_error,
        )
        self._ticker = Ticker(
            logger=logger,
            store=self._store,
            session_provider=lambda: self.current_session,
            interval_s=tick_interval_s,
        )

    # --- Properties ---------------------------------------------------------

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def store(self) -> LatestValueStore:
        return self._store

    @property
    def acceptor(self) -> ConnectionAcceptor:
        return self._acceptor

    @property
    def ticker(self) -> Ticker:
        return self._ticker

    @property
    def current_session(self) -> Optional[Session]:
        with self._session_lock:
            return self._session

    # --- Lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """
        Start listening for a peer and start ticking.

        A listen failure is logged and reported but does not stop the ticker;
        sentences are then generated and discarded.

        Raises:
            RuntimeError: If the supervisor is not idle.
        """
        with self._state_lock:
            if self._state is not SupervisorState.IDLE:
                raise RuntimeError(f"Cannot start supervisor in state '{self._state.value}'")
            self._state = SupervisorState.RUNNING

        self._logger.info("Supervisor starting.")
        try:
            listen_handle = self._transport.listen()
        except OSError as e:
            self._logger.error("Could not open listen socket: %s", e)
            error = TransportSetupError(f"listen() failed: {e}")
            error.__cause__ = e
            self._report_transport_error(error)
        else:
            self._acceptor.start(listen_handle)

        self._ticker.start()

    def stop(self) -> None:
        """
        Stop ticking, cancel the acceptor and close the current session.

        No-op unless running.
        """
        with self._state_lock:
            if self._state is not SupervisorState.RUNNING:
                return
            self._state = SupervisorState.STOPPED

        self._logger.info("Supervisor stopping.")
        self._ticker.stop(timeout=self._stop_timeout_s)
        self._acceptor.cancel()
        if not self._acceptor.join(timeout=self._stop_timeout_s):
            self._logger.warning("Acceptor thread did not finish within %.1fs", self._stop_timeout_s)

        with self._session_lock:
            session, self._session = self._session, None
        if session is not None:
            session.close()
        self._logger.info("Supervisor stopped.")

    # --- Data path ----------------------------------------------------------

    def on_sensor_update(self, value: float) -> None:
        """Record a new pressure reading. Valid in any state."""
        self._store.set(value)

    def install_session(self, session: Session) -> None:
        """
        Make session the current session, closing the one it replaces.

        A session arriving after stop() is closed immediately.
        """
        with self._state_lock:
            accepting = self._state is SupervisorState.RUNNING
            if accepting:
                with self._session_lock:
                    previous, self._session = self._session, session
        if not accepting:
            self._logger.info("Supervisor not running, closing session with %s", session.peer)
            session.close()
            return

        self._logger.info("Session installed for %s", session.peer)

        if previous is not None:
            previous.close()

    def _report_transport_error(self, error: TransportSetupError) -> None:
        if self._on_transport_error is None:
            return
        try:
            self._on_transport_error(error)
        except Exception:
            self._logger.exception("Transport error callback failed")
