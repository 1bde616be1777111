"""
base.py

Defines the abstract transport contract used by the acceptor and sessions.

A transport opens a listen handle; a listen handle blocks in accept() until a
peer connects or the handle is closed from another thread; a connection
writes bytes and can be closed.
"""

from abc import ABC, abstractmethod


class BaseConnection(ABC):
    """An established, connection-oriented stream to one peer."""

    @property
    @abstractmethod
    def peer(self) -> str:
        """Human-readable description of the remote end."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write all of data to the stream.

        Raises:
            OSError: If the write fails.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""


class BaseListenHandle(ABC):
    """A bound, listening endpoint that yields connections."""

    @abstractmethod
    def accept(self) -> BaseConnection:
        """
        Block until a peer connects.

        Raises:
            OSError: If accepting fails or the handle was closed.
        """

    @abstractmethod
    def close(self) -> None:
        """
        Close the handle. Safe to call from another thread while accept() is
        blocked, and safe to call more than once.
        """


class BaseTransport(ABC):
    """Factory for listen handles."""

    @abstractmethod
    def listen(self) -> BaseListenHandle:
        """
        Open a listening endpoint.

        Raises:
            OSError: If the endpoint cannot be opened.
        """
