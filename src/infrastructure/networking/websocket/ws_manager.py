"""
WebSocket Manager

Send path and receive loop on top of TransportManager.

Send: one reconnect and one retry on a closed connection, then
SendExhaustedError. Any other failure surfaces as WebSocketSendError.

Receive: frames are decoded by the injected message parser and delivered to
a consumer queue. Undecodable frames are logged and skipped, a closed
connection triggers one reconnect, and the loop keeps going until it is
cancelled or the transport is closed with close().
"""

import asyncio
from typing import Any, Callable, Optional, Union

import msgspec
from websockets.exceptions import ConnectionClosed

from infrastructure.exceptions.websocket import (
    ConnectionNotEstablishedError,
    MessageDecodeError,
    SendExhaustedError,
    TransportClosedError,
    WebSocketConnectionError,
    WebSocketSendError,
)
from infrastructure.logging import get_logger
from .structs import PerformanceMetrics
from .transport import TransportManager

MAX_SEND_ATTEMPTS = 2

_CLOSED_ERRORS = (ConnectionClosed, TransportClosedError)

# asyncio.QueueShutDown only exists on Python 3.13+
_DELIVERY_ERRORS = tuple(
    exc for exc in (asyncio.QueueFull, getattr(asyncio, 'QueueShutDown', None)) if exc is not None
)


class WebSocketManager:
    """Retrying send path and resilient receive loop for one transport."""

    def __init__(
        self,
        transport: TransportManager,
        message_parser: Callable[[Union[str, bytes]], Any],
        logger=None,
    ):
        self.transport = transport
        self.message_parser = message_parser
        self.logger = logger or get_logger('ws.manager')
        self.metrics = PerformanceMetrics()

    async def send(self, message: Any) -> None:
        """
        Serialize and send a message.

        Raises:
            ConnectionNotEstablishedError: No connection to send on
            SendExhaustedError: Closed connection on both attempts
            WebSocketSendError: Any other write failure
            WebSocketConnectionError: The reconnect between attempts failed
        """
        payload = message if isinstance(message, (str, bytes)) else msgspec.json.encode(message).decode("utf-8")

        last_error: Optional[BaseException] = None
        for attempt in range(1, MAX_SEND_ATTEMPTS + 1):
            try:
                await self.transport.write(payload)
            except ConnectionNotEstablishedError:
                raise
            except _CLOSED_ERRORS as e:
                last_error = e
                self.logger.warning("Send failed on closed connection",
                                    attempt=attempt, max_attempts=MAX_SEND_ATTEMPTS,
                                    error_message=str(e))
                if attempt < MAX_SEND_ATTEMPTS:
                    self.metrics.send_retries += 1
                    await self.transport.reconnect(observed_generation=getattr(e, 'generation', None))
                continue
            except Exception as e:
                self.metrics.error_count += 1
                self.logger.error("Failed to send message",
                                  error_type=type(e).__name__, error_message=str(e))
                raise WebSocketSendError(f"Message send failed: {e}") from e

            self.metrics.messages_sent += 1
            self.logger.metric("ws_send_attempts", attempt)
            return

        self.metrics.error_count += 1
        self.logger.error("Send exhausted", attempts=MAX_SEND_ATTEMPTS,
                          error_message=str(last_error))
        raise SendExhaustedError(MAX_SEND_ATTEMPTS, last_error)

    async def read_messages(self, queue: asyncio.Queue) -> None:
        """
        Read, decode and enqueue frames until cancelled or the transport is closed.

        Raises:
            ConnectionNotEstablishedError: The transport was never opened
        """
        if self.transport.generation == 0:
            raise ConnectionNotEstablishedError()

        self.logger.info("Receive loop started", generation=self.transport.generation)
        try:
            while True:
                try:
                    raw_message, _ = await self.transport.read()
                except ConnectionNotEstablishedError:
                    raise
                except _CLOSED_ERRORS as e:
                    if self.transport.closed_by_user:
                        self.logger.info("Receive loop stopped: connection closed")
                        return
                    self.logger.warning("Connection closed while reading", error_message=str(e))
                    await self._reconnect_after_read_failure(getattr(e, 'generation', None))
                    continue
                except Exception as e:
                    self.metrics.error_count += 1
                    self.logger.error("Error reading frame",
                                      error_type=type(e).__name__, error_message=str(e))
                    await asyncio.sleep(0)
                    continue

                self.metrics.messages_received += 1
                self._deliver(raw_message, queue)
        except asyncio.CancelledError:
            self.logger.info("Receive loop cancelled")
            raise

    def _deliver(self, raw_message: Union[str, bytes], queue: asyncio.Queue) -> None:
        try:
            response = self.message_parser(raw_message)
        except MessageDecodeError as e:
            self.metrics.decode_errors += 1
            self.logger.warning("Dropping undecodable frame", error_message=str(e))
            return

        try:
            queue.put_nowait(response)
        except _DELIVERY_ERRORS as e:
            self.metrics.delivery_errors += 1
            self.logger.error("Failed to deliver message to consumer",
                              error_type=type(e).__name__, queue_size=queue.qsize())
            return
        self.metrics.record_delivery()

    async def _reconnect_after_read_failure(self, observed_generation: Optional[int]) -> None:
        try:
            if await self.transport.reconnect(observed_generation=observed_generation):
                self.metrics.reconnection_count += 1
        except WebSocketConnectionError as e:
            self.logger.error("Reconnect from receive loop failed",
                              error_message=str(e), retry_in=self.transport.config.reconnect_delay)
            await asyncio.sleep(self.transport.config.reconnect_delay)
