"""
File Backend for Persistent Logging

Buffered file logging with async I/O, size-based rotation and text/JSON
formats. Handles warnings, errors and audit records (signed actions,
withdrawals) with full context preservation.
"""

import asyncio
import time
from datetime import datetime
from pathlib import Path

import aiofiles
import aiofiles.os
import msgspec

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType
from ..structs import FileBackendConfig


class FileBackend(LogBackend):
    """
    File logging backend.

    Features:
    - Async I/O for non-blocking writes
    - Configurable format (text/JSON)
    - Automatic directory creation
    - File rotation support
    """

    def __init__(self, config: FileBackendConfig, name: str = "file"):
        if not isinstance(config, FileBackendConfig):
            raise TypeError(f"Expected FileBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.file_path = Path(config.path)
        self.format_type = config.format
        self.min_level = LogLevel[config.min_level.upper()]
        self.max_file_size = config.max_size_mb * 1024 * 1024
        self.backup_count = config.backup_count
        self.buffer_size = config.buffer_size
        self.flush_interval = config.flush_interval
        self.enabled = config.enabled

        if self.enabled:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

        self._write_buffer = []
        self._last_flush = time.time()
        self._lock = asyncio.Lock()

    def should_handle(self, record: LogRecord) -> bool:
        if record.log_type == LogType.METRIC:
            return False
        if record.log_type == LogType.AUDIT:
            return True
        return record.level >= self.min_level

    async def write(self, record: LogRecord) -> None:
        """Buffer the formatted record, write out when full or stale."""
        async with self._lock:
            if self.format_type == 'json':
                formatted = self._format_json(record)
            else:
                formatted = self._format_text(record)
            self._write_buffer.append(formatted)

            if (len(self._write_buffer) >= self.buffer_size or
                    (time.time() - self._last_flush) >= self.flush_interval):
                await self._flush_buffer()

    async def flush(self) -> None:
        async with self._lock:
            await self._flush_buffer()

    async def _flush_buffer(self) -> None:
        if not self._write_buffer:
            return

        await self._check_rotation()
        async with aiofiles.open(self.file_path, 'a', encoding='utf-8') as f:
            await f.write('\n'.join(self._write_buffer) + '\n')

        self._write_buffer.clear()
        self._last_flush = time.time()

    async def _check_rotation(self) -> None:
        if not await aiofiles.os.path.exists(self.file_path):
            return
        if await aiofiles.os.path.getsize(self.file_path) >= self.max_file_size:
            self._rotate_file()

    def _rotate_file(self) -> None:
        """Shift aevo.log -> aevo.log.1 -> aevo.log.2 ..., dropping the oldest."""
        for i in range(self.backup_count - 1, 0, -1):
            old_file = self.file_path.with_name(f"{self.file_path.name}.{i}")
            new_file = self.file_path.with_name(f"{self.file_path.name}.{i + 1}")
            if old_file.exists():
                old_file.replace(new_file)
        if self.backup_count > 0:
            self.file_path.replace(self.file_path.with_name(f"{self.file_path.name}.1"))
        else:
            self.file_path.unlink()

    def _format_text(self, record: LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.timestamp).isoformat()
        message = f"[{timestamp}] {record.level.name} {record.logger_name}: {record.message}"

        parts = [f"{k}={v}" for k, v in record.context.items()]
        if record.correlation_id:
            parts.append(f"correlation_id={record.correlation_id}")
        if record.exchange:
            parts.append(f"exchange={record.exchange}")
        if parts:
            message += f" | {', '.join(parts)}"
        return message

    def _format_json(self, record: LogRecord) -> str:
        data = {
            'timestamp': record.timestamp,
            'level': record.level.name,
            'type': record.log_type.name,
            'logger': record.logger_name,
            'message': record.message
        }
        if record.context:
            data['context'] = record.context
        if record.correlation_id:
            data['correlation_id'] = record.correlation_id
        if record.exchange:
            data['exchange'] = record.exchange
        return msgspec.json.encode(data, enc_hook=str).decode('utf-8')
