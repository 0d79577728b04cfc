"""
Console Backend

Writes records through the standard library `logging` module so that
pytest capture, handlers installed by the host application and stderr all
keep working. Metrics are only shown at DEBUG.
"""

import logging
from datetime import datetime

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType
from ..structs import ConsoleBackendConfig


class ConsoleBackend(LogBackend):
    """Plain-text console backend."""

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        if not isinstance(config, ConsoleBackendConfig):
            raise TypeError(f"Expected ConsoleBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.enabled = config.enabled
        self.min_level = LogLevel[config.min_level.upper()]
        self.include_context = config.include_context
        self.max_message_length = config.max_message_length

    def should_handle(self, record: LogRecord) -> bool:
        if record.log_type == LogType.METRIC:
            return self.min_level <= LogLevel.DEBUG
        return record.level >= self.min_level

    def write_sync(self, record: LogRecord) -> None:
        py_logger = logging.getLogger(record.logger_name)
        py_logger.log(int(record.level), self._format(record))

    async def write(self, record: LogRecord) -> None:
        self.write_sync(record)

    async def flush(self) -> None:
        pass

    def _format(self, record: LogRecord) -> str:
        if record.log_type == LogType.METRIC:
            tags = ", ".join(f"{k}={v}" for k, v in (record.metric_tags or {}).items())
            message = f"metric {record.metric_name}={record.metric_value}"
            return f"{message} | {tags}" if tags else message

        message = record.message
        if len(message) > self.max_message_length:
            message = message[:self.max_message_length] + "..."

        if self.include_context:
            parts = [f"{k}={v}" for k, v in record.context.items()]
            if record.correlation_id:
                parts.append(f"correlation_id={record.correlation_id}")
            if record.exchange:
                parts.append(f"exchange={record.exchange}")
            if parts:
                message += f" | {', '.join(parts)}"
        return message


class ColorConsoleBackend(ConsoleBackend):
    """Console backend with ANSI level colors and its own timestamped line format."""

    COLORS = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def write_sync(self, record: LogRecord) -> None:
        color = self.COLORS.get(record.level, "")
        ts = datetime.fromtimestamp(record.timestamp).strftime("%H:%M:%S.%f")[:-3]
        print(f"{color}{ts} {record.level.name:<8}{self.RESET} {record.logger_name}: {self._format(record)}")
