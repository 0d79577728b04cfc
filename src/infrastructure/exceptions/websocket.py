"""
WebSocket transport error hierarchy.

Closed-class errors (TransportClosedError) are the only ones the send path
and the receive loop answer with a reconnect. Everything else is either
surfaced (send path) or logged and skipped (receive loop).
"""

from typing import Optional

from .exchange import BaseExchangeError


class WebSocketError(BaseExchangeError):
    """Base class for streaming transport failures."""
    pass


class WebSocketConnectionError(WebSocketError):
    """Opening the duplex channel failed."""
    pass


class ConnectionNotEstablishedError(WebSocketError):
    """No transport pair exists - nothing to send on or read from."""

    def __init__(self, message: str = "Connection not established"):
        super().__init__(message)


class TransportClosedError(WebSocketError):
    """Connection closed / already closed on the transport pair of `generation`."""

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 generation: Optional[int] = None):
        self.cause = cause
        self.generation = generation
        super().__init__(message)


class WebSocketSendError(WebSocketError):
    """Write failed for a reason other than a closed connection."""
    pass


class SendExhaustedError(WebSocketError):
    """Send failed on every attempt, including the one after reconnecting."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed to send message after maximum attempts ({attempts}): {last_error}")


class MessageDecodeError(WebSocketError):
    """Inbound frame did not match any known response shape."""

    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message)
