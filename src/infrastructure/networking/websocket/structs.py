import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ConnectionState(Enum):
    """WebSocket connection states"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    AUTHENTICATING = "authenticating"
    READY = "ready"


@dataclass(frozen=True)
class WriterHalf:
    """Send side of one live connection."""
    connection: Any
    generation: int

    async def send(self, payload: Union[str, bytes]) -> None:
        await self.connection.send(payload)


@dataclass(frozen=True)
class ReaderHalf:
    """Receive side of one live connection."""
    connection: Any
    generation: int

    async def recv(self) -> Union[str, bytes]:
        return await self.connection.recv()


@dataclass(frozen=True)
class TransportPair:
    """Writer and reader halves split from the same connection."""
    writer: WriterHalf
    reader: ReaderHalf

    @classmethod
    def split(cls, connection: Any, generation: int) -> "TransportPair":
        return cls(
            writer=WriterHalf(connection, generation),
            reader=ReaderHalf(connection, generation),
        )

    @staticmethod
    def reunite(writer: Optional[WriterHalf], reader: Optional[ReaderHalf]) -> Optional[Any]:
        """Recombine two halves into their underlying connection."""
        if writer is None and reader is None:
            return None
        if writer is not None and reader is not None and writer.connection is not reader.connection:
            raise ValueError("Transport halves belong to different connections")
        return (writer or reader).connection


@dataclass
class PerformanceMetrics:
    """Counters for the send path and the receive loop."""
    messages_received: int = 0
    messages_delivered: int = 0
    decode_errors: int = 0
    delivery_errors: int = 0
    messages_sent: int = 0
    send_retries: int = 0
    reconnection_count: int = 0
    error_count: int = 0
    last_message_time: float = 0.0

    def record_delivery(self) -> None:
        self.messages_delivered += 1
        self.last_message_time = time.perf_counter()
