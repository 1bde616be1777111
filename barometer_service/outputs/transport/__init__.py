from .base import BaseConnection, BaseListenHandle, BaseTransport
from .factory import build_transport
from .socket_transport import SocketTransport

__all__ = [
    "BaseConnection",
    "BaseListenHandle",
    "BaseTransport",
    "SocketTransport",
    "build_transport",
]
