"""
transport.py

Exceptions raised at the transport boundary.

TransportSetupError is fatal to the accept thread only: the service keeps
sampling and encoding without a peer. SendError is recovered locally by
marking the session dead.
"""

from typing import Optional


class TransportError(Exception):
    """Base class for all transport-related errors."""


class TransportSetupError(TransportError):
    """Raised when a listen socket cannot be opened or accept() fails."""


class SendError(TransportError):
    """
    Raised when writing a sentence to an established connection fails.

    Carries the peer description and the underlying transport error.
    """
    def __init__(
        self,
        message: str,
        *,
        peer: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.peer = peer
        self.__cause__ = cause

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (peer={self.peer})" if self.peer else base
