"""
Structured Logging System

Usage:
    from infrastructure.logging import get_logger

    # Component logger
    logger = get_logger('ws.transport')
    logger.info("Connected", url="wss://ws.aevo.xyz", generation=3)

    # Exchange logger with context
    logger = get_exchange_logger('aevo', 'ws.private')
    logger.warning("Reconnecting", reason="connection closed")

    # Metrics logging
    logger.metric("ws_send_attempts", 2, op="create_order")
"""

from .interfaces import (
    LogLevel,
    LogType,
    LogRecord,
    LogBackend,
    HFTLoggerInterface
)

from .hft_logger import HFTLogger, LoggingTimer

from .factory import (
    LoggerFactory,
    get_logger,
    get_exchange_logger,
    configure_logging,
)

from .structs import (
    LoggingConfig,
    ConsoleBackendConfig,
    FileBackendConfig,
    PerformanceConfig,
    BackendConfig
)

from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend

__all__ = [
    'LogLevel',
    'LogType',
    'LogRecord',
    'LogBackend',
    'HFTLoggerInterface',

    'HFTLogger',
    'LoggingTimer',

    'LoggerFactory',
    'get_logger',
    'get_exchange_logger',
    'configure_logging',

    'LoggingConfig',
    'ConsoleBackendConfig',
    'FileBackendConfig',
    'PerformanceConfig',
    'BackendConfig',

    'ConsoleBackend',
    'ColorConsoleBackend',
    'FileBackend',
]
