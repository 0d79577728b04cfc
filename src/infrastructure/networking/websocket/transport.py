"""
WebSocket Transport Manager

Owns the single live connection as a writer half and a reader half, each in
its own slot behind its own asyncio.Lock so a parked recv() never blocks a
send. Reconnects are serialized by a reconnect lock that is always taken
before the half locks.

Every successful open bumps `generation`. Errors carry the generation they
were observed on, and reconnect(observed_generation=g) is a no-op once the
pair has already been replaced, so concurrent failures collapse into one
reconnect.

After close() the automatic reconnects (those passing observed_generation)
are refused until open() or a plain reconnect() runs.

Retry policy lives in WebSocketManager; this layer only connects, closes,
reads and writes.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from websockets import connect
from websockets.exceptions import ConnectionClosed

from config.structs import WebSocketConfig
from infrastructure.exceptions.websocket import (
    ConnectionNotEstablishedError,
    TransportClosedError,
    WebSocketConnectionError,
)
from infrastructure.logging import get_logger, LoggingTimer
from utils.task_utils import safe_close_connection
from .structs import ConnectionState, ReaderHalf, TransportPair, WriterHalf


class TransportManager:
    """Connection lifecycle for one streaming endpoint."""

    def __init__(
        self,
        url: str,
        config: Optional[WebSocketConfig] = None,
        connect_method: Optional[Callable[[], Awaitable[Any]]] = None,
        auth_message: Optional[Callable[[], Union[str, bytes]]] = None,
        connection_handler: Optional[Callable[[ConnectionState], Awaitable[None]]] = None,
        logger=None,
    ):
        self.url = url
        self.config = config or WebSocketConfig()
        self.connect_method = connect_method or self._default_connect
        self.auth_message = auth_message
        self.connection_handler = connection_handler

        self.logger = logger or get_logger('ws.transport')

        self._writer: Optional[WriterHalf] = None
        self._reader: Optional[ReaderHalf] = None
        self._writer_lock = asyncio.Lock()
        self._reader_lock = asyncio.Lock()
        self._reconnect_lock = asyncio.Lock()

        self._generation = 0
        self._closed_by_user = False
        self.connection_state = ConnectionState.DISCONNECTED

    @property
    def generation(self) -> int:
        """Number of successful opens so far; 0 means never connected."""
        return self._generation

    @property
    def closed_by_user(self) -> bool:
        """True between close() and the next open() or explicit reconnect()."""
        return self._closed_by_user

    @property
    def is_connected(self) -> bool:
        return self._writer is not None and self.connection_state == ConnectionState.READY

    async def _default_connect(self) -> Any:
        return await connect(
            self.url,
            open_timeout=self.config.connect_timeout,
            ping_interval=self.config.ping_interval,
            ping_timeout=self.config.ping_timeout,
            close_timeout=self.config.close_timeout,
            max_size=self.config.max_message_size,
            max_queue=self.config.max_queue_size,
            compression=None,
        )

    async def open(self) -> None:
        """Connect and authenticate; no-op when a pair is already installed."""
        async with self._reconnect_lock:
            if self._writer is not None:
                self.logger.debug("Open requested on live connection", generation=self._generation)
                return
            self._closed_by_user = False
            await self._open_locked()

    async def close(self) -> None:
        """Close the live connection and clear both slots. Idempotent."""
        async with self._reconnect_lock:
            self._closed_by_user = True
            await self._close_locked()

    async def reconnect(self, observed_generation: Optional[int] = None) -> bool:
        """
        Replace the live pair with a fresh connection.

        Args:
            observed_generation: Generation on which the caller saw a failure.
                When the pair has been replaced since, nothing happens.

        Returns:
            True if a new connection was opened, False if the call collapsed
            into an earlier reconnect or close() ran in the meantime.

        Raises:
            WebSocketConnectionError: If the new connection cannot be opened
        """
        async with self._reconnect_lock:
            if observed_generation is not None and self._generation > observed_generation:
                self.logger.debug("Reconnect already done by another caller",
                                  observed_generation=observed_generation,
                                  generation=self._generation)
                return False

            if observed_generation is not None and self._closed_by_user:
                self.logger.debug("Reconnect skipped: connection closed by user",
                                  observed_generation=observed_generation)
                return False

            self._closed_by_user = False
            self.logger.warning("Reconnecting", url=self.url, generation=self._generation)
            self.logger.counter("ws_reconnects")
            await self._close_locked()
            await self._open_locked()
            return True

    async def _open_locked(self) -> None:
        await self._update_state(ConnectionState.CONNECTING)
        try:
            with LoggingTimer(self.logger, "ws_connect") as timer:
                connection = await self.connect_method()
        except Exception as e:
            await self._update_state(ConnectionState.DISCONNECTED)
            self.logger.error("Failed to connect", url=self.url,
                              error_type=type(e).__name__, error_message=str(e))
            raise WebSocketConnectionError(f"WebSocket connection failed: {e}") from e

        self._generation += 1
        pair = TransportPair.split(connection, self._generation)
        async with self._writer_lock:
            async with self._reader_lock:
                self._writer = pair.writer
                self._reader = pair.reader
        await self._update_state(ConnectionState.CONNECTED)
        self.logger.info("WebSocket connected", url=self.url, generation=self._generation,
                         connect_time_ms=timer.elapsed_ms)

        if self.auth_message is not None:
            await self._update_state(ConnectionState.AUTHENTICATING)
            await self._send_auth(pair.writer)

        await self._update_state(ConnectionState.READY)

    async def _send_auth(self, writer: WriterHalf) -> None:
        """Send the auth frame once; the acknowledgement arrives on the read stream."""
        try:
            async with self._writer_lock:
                await writer.send(self.auth_message())
        except Exception as e:
            self.logger.error("Failed to send auth request",
                              error_type=type(e).__name__, error_message=str(e))
            await self._close_locked()
            raise WebSocketConnectionError(f"WebSocket authentication send failed: {e}") from e
        self.logger.debug("Auth request sent", generation=writer.generation)

    async def _close_locked(self) -> None:
        connection = TransportPair.reunite(self._writer, self._reader)
        if connection is None:
            await self._update_state(ConnectionState.DISCONNECTED)
            return

        # Closing first wakes a reader parked in recv() so its lock frees up
        await safe_close_connection(connection, timeout=self.config.close_timeout, logger=self.logger)

        async with self._writer_lock:
            async with self._reader_lock:
                self._writer = None
                self._reader = None
        await self._update_state(ConnectionState.DISCONNECTED)
        self.logger.info("WebSocket closed", url=self.url, generation=self._generation)

    async def write(self, payload: Union[str, bytes]) -> None:
        """
        Write one frame on the current writer half.

        Raises:
            ConnectionNotEstablishedError: Never connected, or closed by close()
            TransportClosedError: Connection closed, or slots cleared by a reconnect
        """
        async with self._writer_lock:
            writer = self._writer
            if writer is None:
                if self._generation == 0:
                    raise ConnectionNotEstablishedError()
                if self._closed_by_user:
                    raise ConnectionNotEstablishedError("Connection closed")
                raise TransportClosedError("Connection closed", generation=self._generation)
            try:
                await writer.send(payload)
            except ConnectionClosed as e:
                await self._mark_disconnected(writer.generation)
                raise TransportClosedError(f"Connection closed: {e}", cause=e,
                                           generation=writer.generation) from e

    async def read(self) -> Tuple[Union[str, bytes], int]:
        """
        Read one frame from the current reader half.

        Returns:
            (frame, generation the frame was read on)

        Raises:
            ConnectionNotEstablishedError: Never connected
            TransportClosedError: Connection closed, or slots cleared after a close
        """
        async with self._reader_lock:
            reader = self._reader
            if reader is None:
                if self._generation == 0:
                    raise ConnectionNotEstablishedError()
                raise TransportClosedError("Connection closed", generation=self._generation)
            try:
                return await reader.recv(), reader.generation
            except ConnectionClosed as e:
                await self._mark_disconnected(reader.generation)
                raise TransportClosedError(f"Connection closed: {e}", cause=e,
                                           generation=reader.generation) from e

    async def _mark_disconnected(self, generation: int) -> None:
        if generation == self._generation:
            await self._update_state(ConnectionState.DISCONNECTED)

    async def _update_state(self, state: ConnectionState) -> None:
        """Update connection state and notify handlers."""
        previous_state = self.connection_state
        self.connection_state = state

        if previous_state != state:
            self.logger.debug("Connection state changed",
                              previous_state=previous_state.name,
                              new_state=state.name)

            if self.connection_handler:
                try:
                    await self.connection_handler(state)
                except Exception as e:
                    self.logger.error("Error in state change handler",
                                      error_type=type(e).__name__,
                                      error_message=str(e))
