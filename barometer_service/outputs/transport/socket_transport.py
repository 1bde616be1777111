"""
socket_transport.py

Stream-socket transport for Bluetooth RFCOMM (serial port profile) and TCP.

RFCOMM uses the kernel Bluetooth stack through AF_BLUETOOTH sockets, so a
paired client sees the service as a serial port on the configured channel.
No SDP service record is registered for the listener, so clients cannot
discover the channel by the serial port profile UUID
(00001101-0000-1000-8000-00805F9B34FB). They must be configured with the
channel number, which listen() logs at INFO.

TCP serves the same sentences on a network port for development and for
NMEA-over-TCP consumers.

Classes:
    SocketTransport
    SocketListenHandle
    SocketConnection
"""

import logging
import socket
import threading
from typing import Any

from barometer_service import PACKAGE_LOGGER_NAME
from barometer_service.outputs.transport.base import (
    BaseConnection,
    BaseListenHandle,
    BaseTransport,
)

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.transport")

FAMILY_RFCOMM = "rfcomm"
FAMILY_TCP = "tcp"
FAMILIES = (FAMILY_RFCOMM, FAMILY_TCP)

BDADDR_ANY = "00:00:00:00:00:00"
DEFAULT_RFCOMM_CHANNEL = 1
DEFAULT_TCP_HOST = "0.0.0.0"
DEFAULT_TCP_PORT = 10110


def _describe(address: Any) -> str:
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


class SocketConnection(BaseConnection):
    """
    Wraps an accepted stream socket.

    Writes use sendall() with a bounded timeout so a stalled peer surfaces as
    an OSError instead of blocking the caller indefinitely.
    """

    def __init__(self, sock: socket.socket, peer: str, write_timeout_s: float | None = 5.0):
        self._sock = sock
        self._peer = peer
        self._sock.settimeout(write_timeout_s)

    @property
    def peer(self) -> str:
        return self._peer

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone; close() below still releases the descriptor.
            pass
        self._sock.close()


class SocketListenHandle(BaseListenHandle):
    """
    A bound, listening socket.

    accept() waits in slices of accept_poll_s so that close() from another
    thread unblocks it within one slice on every platform.
    """

    def __init__(
        self,
        sock: socket.socket,
        *,
        accept_poll_s: float = 0.5,
        write_timeout_s: float | None = 5.0,
    ):
        self._sock = sock
        self._accept_poll_s = accept_poll_s
        self._write_timeout_s = write_timeout_s
        self._closed = threading.Event()
        self._sock.settimeout(accept_poll_s)

    @property
    def address(self) -> Any:
        """Locally bound address, e.g. ("127.0.0.1", 10110)."""
        return self._sock.getsockname()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def accept(self) -> SocketConnection:
        while True:
            if self._closed.is_set():
                raise OSError("listen handle closed")
            try:
                conn, address = self._sock.accept()
            except socket.timeout:
                continue
            return SocketConnection(conn, _describe(address), self._write_timeout_s)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._sock.close()


class SocketTransport(BaseTransport):
    """
    Opens listening stream sockets for the configured family.

    Args:
        family: "rfcomm" or "tcp".
        adapter_address: Local Bluetooth adapter address (rfcomm only).
        channel: RFCOMM channel to bind (rfcomm only).
        host: Interface to bind (tcp only).
        port: TCP port to bind; 0 picks a free port (tcp only).
        accept_poll_s: Slice length used while waiting in accept().
        write_timeout_s: Upper bound on a single sentence write.
    """

    def __init__(
        self,
        *,
        family: str = FAMILY_RFCOMM,
        adapter_address: str = BDADDR_ANY,
        channel: int = DEFAULT_RFCOMM_CHANNEL,
        host: str = DEFAULT_TCP_HOST,
        port: int = DEFAULT_TCP_PORT,
        accept_poll_s: float = 0.5,
        write_timeout_s: float | None = 5.0,
    ):
        if family not in FAMILIES:
            raise ValueError(f"Unsupported transport family '{family}'. Known families: {', '.join(FAMILIES)}")
        if accept_poll_s <= 0:
            raise ValueError("accept_poll_s must be > 0")

        self.family = family
        self.adapter_address = adapter_address
        self.channel = int(channel)
        self.host = host
        self.port = int(port)
        self.accept_poll_s = float(accept_poll_s)
        self.write_timeout_s = write_timeout_s

    def __repr__(self) -> str:
        if self.family == FAMILY_RFCOMM:
            return f"SocketTransport(rfcomm {self.adapter_address} channel {self.channel})"
        return f"SocketTransport(tcp {self.host}:{self.port})"

    def _create_socket(self) -> tuple[socket.socket, tuple]:
        if self.family == FAMILY_RFCOMM:
            if not hasattr(socket, "AF_BLUETOOTH") or not hasattr(socket, "BTPROTO_RFCOMM"):
                raise OSError("Bluetooth RFCOMM sockets are not supported on this platform")
            sock = socket.socket(socket.AF_BLUETOOTH, socket.SOCK_STREAM, socket.BTPROTO_RFCOMM)
            return sock, (self.adapter_address, self.channel)

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return sock, (self.host, self.port)

    def listen(self) -> SocketListenHandle:
        sock, bind_address = self._create_socket()
        try:
            sock.bind(bind_address)
            sock.listen(1)
        except OSError:
            sock.close()
            raise

        handle = SocketListenHandle(
            sock,
            accept_poll_s=self.accept_poll_s,
            write_timeout_s=self.write_timeout_s,
        )
        logger.info("Listening on %s (%s)", _describe(handle.address), self.family)
        if self.family == FAMILY_RFCOMM:
            logger.info(
                "No SDP record registered; RFCOMM clients must connect to channel %d directly.",
                self.channel,
            )
        return handle
