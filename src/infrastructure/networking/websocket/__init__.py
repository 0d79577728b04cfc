from .structs import ConnectionState, TransportPair, WriterHalf, ReaderHalf
from .transport import TransportManager
from .ws_manager import WebSocketManager, MAX_SEND_ATTEMPTS

__all__ = [
    "ConnectionState",
    "TransportPair",
    "WriterHalf",
    "ReaderHalf",
    "TransportManager",
    "WebSocketManager",
    "MAX_SEND_ATTEMPTS",
]
