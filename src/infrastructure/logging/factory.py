"""
Logging Factory

Creates and caches logger instances from struct-based configuration.
Components call get_logger('<dotted.component>') and keep the result as
self.logger.
"""

import os
from typing import Dict, List, Optional

from .interfaces import HFTLoggerInterface, LogBackend, LogLevel
from .hft_logger import HFTLogger
from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend
from .structs import LoggingConfig, PerformanceConfig


class LoggerFactory:
    """Logging factory - trust config, fail fast."""

    _cached_loggers: Dict[str, HFTLogger] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> HFTLoggerInterface:
        """Create (or return the cached) logger instance."""
        if name in cls._cached_loggers:
            return cls._cached_loggers[name]

        config = config or cls._get_default_config()
        logger = HFTLogger(
            name=name,
            backends=cls._create_backends(config),
            config=config.performance or PerformanceConfig(),
            default_context=config.default_context
        )
        cls._cached_loggers[name] = logger
        return logger

    @staticmethod
    def _create_backends(config: LoggingConfig) -> List[LogBackend]:
        backends: List[LogBackend] = []
        if config.console and config.console.enabled:
            backend_class = ColorConsoleBackend if config.console.color else ConsoleBackend
            backends.append(backend_class(config.console, 'console'))
        if config.file and config.file.enabled:
            backends.append(FileBackend(config.file, 'file'))
        return backends

    @classmethod
    def configure(cls, config: LoggingConfig) -> None:
        """Install a new default configuration and drop cached loggers."""
        config.validate()
        cls.clear_cache()
        cls._default_config = config

    @classmethod
    def override_logger(cls, name: str, min_level: Optional[str] = None, enabled: Optional[bool] = None) -> bool:
        """
        Override a cached logger at runtime.

        Example:
            # Suppress noisy transport logs
            LoggerFactory.override_logger("ws.transport", min_level="ERROR")
        """
        logger = cls._cached_loggers.get(name)
        if logger is None:
            return False

        for backend in logger.backends:
            if min_level is not None:
                backend.min_level = LogLevel[min_level.upper()]
            if enabled is not None:
                backend.enabled = enabled
        return True

    @classmethod
    def clear_cache(cls) -> None:
        cls._cached_loggers.clear()
        cls._default_config = None

    @classmethod
    def _get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            environment = os.getenv('ENVIRONMENT', 'dev').lower()
            if environment == 'prod':
                cls._default_config = LoggingConfig.default_production()
            elif environment == 'test':
                cls._default_config = LoggingConfig.default_test()
            else:
                cls._default_config = LoggingConfig.default_development()
        return cls._default_config


def get_logger(name: str) -> HFTLoggerInterface:
    """Get logger instance."""
    return LoggerFactory.create_logger(name)


def get_exchange_logger(exchange: str, component: str = None) -> HFTLoggerInterface:
    """Get exchange logger with optional component, e.g. ('aevo', 'ws.private')."""
    name = f"{exchange}.{component}" if component else exchange
    logger = get_logger(name)
    logger.set_context(exchange=exchange)
    return logger


def configure_logging(config: LoggingConfig) -> None:
    """Configure the logging system from a LoggingConfig struct."""
    LoggerFactory.configure(config)
