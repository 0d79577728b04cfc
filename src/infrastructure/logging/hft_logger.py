"""
Structured Logger Implementation

Main logger with keyword context, metrics helpers and two dispatch paths:
synchronous backends (console) are written inline, async-only backends
(file) are fed from a ring buffer by a background dispatch task.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Any
import weakref

from common.ring_buffer import RingBuffer
from .interfaces import (
    HFTLoggerInterface, LogBackend, LogRecord,
    LogLevel, LogType
)
from .structs import PerformanceConfig


class HFTLogger(HFTLoggerInterface):
    """
    Structured logger with multiple backends.

    Key features:
    - Keyword context rendered by backends
    - Ring buffer + async dispatch for backends that do I/O
    - Persistent context (set_context)
    - Python logging compatibility (isEnabledFor / log)
    """

    # Class-level registry for cleanup
    _instances = weakref.WeakSet()

    def __init__(self, name: str, backends: List[LogBackend], config: PerformanceConfig,
                 default_context: Optional[Dict[str, Any]] = None):
        if not isinstance(config, PerformanceConfig):
            raise TypeError(f"Expected PerformanceConfig, got {type(config)}")

        self.name = name
        self.backends = backends
        self.perf_config = config
        self.batch_size = config.batch_size
        self.dispatch_interval = config.dispatch_interval

        # Persistent context for all log messages
        self.context: Dict[str, Any] = dict(default_context or {})

        self._buffer: RingBuffer[LogRecord] = RingBuffer(config.buffer_size)
        self._dispatch_task: Optional[asyncio.Task] = None

        HFTLogger._instances.add(self)

    @property
    def _async_backends(self) -> List[LogBackend]:
        return [b for b in self.backends if not b.is_sync]

    def _ensure_dispatch_task(self) -> None:
        """Start the async dispatch task if an event loop is running."""
        if self._dispatch_task is not None and not self._dispatch_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: records stay buffered until flush() or the next async log call
            return
        self._dispatch_task = loop.create_task(self._dispatch_loop())

    async def _dispatch_loop(self) -> None:
        """Drain buffered records into async backends until cancelled."""
        try:
            while True:
                batch = self._buffer.get_batch(self.batch_size)
                if batch:
                    await self._process_batch(batch)
                else:
                    await asyncio.sleep(self.dispatch_interval)
        except asyncio.CancelledError:
            pass

    async def _process_batch(self, batch: List[LogRecord]) -> None:
        for record in batch:
            for backend in self._async_backends:
                if backend.enabled and backend.should_handle(record):
                    try:
                        await backend.write(record)
                    except Exception as e:
                        backend._handle_error(e)

    def _emit(self, record: LogRecord) -> None:
        needs_async = False
        for backend in self.backends:
            if not backend.enabled or not backend.should_handle(record):
                continue
            if backend.is_sync:
                try:
                    backend.write_sync(record)
                except Exception as e:
                    backend._handle_error(e)
            else:
                needs_async = True

        if needs_async:
            if not self._buffer.put_nowait(record):
                print(f"HFTLogger buffer full, dropped message: {record.message[:50]}")
            self._ensure_dispatch_task()

    def _log(self, level: LogLevel, msg: str, log_type: LogType = LogType.TEXT, **context) -> None:
        full_context = {**self.context, **context}
        correlation_id = full_context.pop('correlation_id', None)
        exchange = full_context.pop('exchange', None)

        record = LogRecord(
            timestamp=time.time(),
            level=level,
            log_type=log_type,
            logger_name=self.name,
            message=str(msg),
            context=full_context,
            correlation_id=correlation_id,
            exchange=exchange
        )
        self._emit(record)

    # Standard logging methods
    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    def metric(self, name: str, value: float, **tags) -> None:
        """Log metric value."""
        full_tags = {**self.context, **tags}
        record = LogRecord.create_metric(self.name, name, value, **full_tags)
        self._emit(record)

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", duration_ms, **tags)

    def counter(self, name: str, value: int = 1, **tags) -> None:
        self.metric(f"{name}_count", float(value), **tags)

    def audit(self, event: str, **context) -> None:
        self._log(LogLevel.INFO, event, LogType.AUDIT, **context)

    def set_context(self, **context) -> None:
        self.context.update(context)

    async def flush(self) -> None:
        """Dispatch everything still buffered and flush every backend."""
        remaining = self._buffer.get_batch(self._buffer.size())
        if remaining:
            await self._process_batch(remaining)
        for backend in self.backends:
            try:
                await backend.flush()
            except Exception as e:
                print(f"Backend {backend.name} flush error: {e}")

    # Python logging compatibility
    def isEnabledFor(self, level: int) -> bool:
        our_level = self._convert_py_level(level)
        return any(b.enabled and our_level >= b.min_level for b in self.backends)

    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        if args:
            try:
                msg = msg % args
            except (TypeError, ValueError):
                pass
        self._log(self._convert_py_level(level), msg, **kwargs)

    @staticmethod
    def _convert_py_level(py_level: int) -> LogLevel:
        if py_level >= logging.CRITICAL:
            return LogLevel.CRITICAL
        elif py_level >= logging.ERROR:
            return LogLevel.ERROR
        elif py_level >= logging.WARNING:
            return LogLevel.WARNING
        elif py_level >= logging.INFO:
            return LogLevel.INFO
        return LogLevel.DEBUG

    def get_stats(self) -> Dict[str, Any]:
        return {
            "buffer_size": self._buffer.size(),
            "buffer_dropped": self._buffer.dropped_count(),
            "dispatch_task_running": self._dispatch_task is not None and not self._dispatch_task.done(),
            "backends_enabled": sum(1 for b in self.backends if b.enabled),
            "backends_total": len(self.backends)
        }

    async def shutdown(self) -> None:
        """Stop the dispatch task and flush what is left."""
        if self._dispatch_task and not self._dispatch_task.done():
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass
        await self.flush()

    @classmethod
    async def shutdown_all(cls) -> None:
        """Shutdown all logger instances."""
        loggers = list(cls._instances)
        if loggers:
            await asyncio.gather(*(lg.shutdown() for lg in loggers), return_exceptions=True)


class LoggingTimer:
    """Context manager for timing operations with automatic logging."""

    def __init__(self, logger: HFTLoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.end_time = time.perf_counter()
            duration_ms = (self.end_time - self.start_time) * 1000
            self.logger.latency(self.operation, duration_ms, **self.tags)

        if exc_type is not None:
            self.logger.error(f"{self.operation} failed",
                              error_type=exc_type.__name__,
                              **self.tags)

    @property
    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        if self.start_time is None:
            return 0.0
        end_time = self.end_time or time.perf_counter()
        return (end_time - self.start_time) * 1000
