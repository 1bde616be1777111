"""
ticker.py

Defines the Ticker class, which produces one PBARO sentence per period and
sends it to the current session if one is live.

Ticks run on a single thread, so they never overlap. A slow send delays the
next tick. Periods missed while a send was blocked are dropped, not replayed.
Sentences are generated whether or not a peer is connected; without a live
session they are discarded.

Classes:
    Ticker

Usage:
    ticker = Ticker(logger, store, supervisor_session_getter, interval_s=1.0)
    ticker.start()   # first tick fires immediately
    ticker.stop()
"""

import logging
import threading
import time
from typing import Callable, Optional

from barometer_service.exceptions import SendError
from barometer_service.inputs.latest_value import LatestValueStore
from barometer_service.outputs.sentence import encode
from barometer_service.outputs.session import Session


class Ticker:
    """
    Fixed-period sentence generator.

    Args:
        logger: Logger instance.
        store: Source of the latest pressure reading.
        session_provider: Returns the current Session, or None.
        interval_s: Seconds between ticks.
    """

    def __init__(
        self,
        logger: logging.Logger,
        store: LatestValueStore,
        session_provider: Callable[[], Optional[Session]],
        interval_s: float = 1.0,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._logger = logger
        self._store = store
        self._session_provider = session_provider
        self._interval_s = float(interval_s)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks_fired = 0
        self.sentences_sent = 0

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Start ticking on a background thread.

        Raises:
            RuntimeError: If the ticker was already started.
        """
        if self._thread is not None:
            raise RuntimeError("Ticker already started")

        self._thread = threading.Thread(target=self._run, name="ticker", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop future ticks. A tick already in flight may finish; this waits at
        most timeout seconds for it.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
            if self._thread.is_alive():
                self._logger.warning("Ticker thread still finishing its last send.")

    def tick(self) -> None:
        """
        Run one tick: sample, encode and send if a live session exists.
        """
        line = encode(self._store.get())
        self.ticks_fired += 1

        session = self._session_provider()
        if session is None or not session.is_live:
            self._logger.debug("No live session. Skipping sentence send.")
            return

        try:
            session.send(line)
        except SendError as e:
            self._logger.warning("Sentence send failed, session is dead: %s", e)
            return

        self.sentences_sent += 1
        self._logger.debug("Sent sentence: %r", line)

    def _run(self) -> None:
        self._logger.info("Ticker started, interval %.3fs.", self._interval_s)
        next_tick = time.monotonic()
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                self._logger.exception("Unexpected error during tick")

            next_tick += self._interval_s
            now = time.monotonic()
            if next_tick < now:
                next_tick = now
            self._stop_event.wait(next_tick - now)
        self._logger.info("Ticker stopped.")
