"""
Logging Configuration Structures

Provides structured configuration for the connector logging system using
msgspec.Struct for type safety and cheap construction.
"""

from typing import Optional, Dict, Any, List
from msgspec import Struct
import msgspec

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class BackendConfig(Struct, frozen=True):
    """
    Base configuration for all logging backends.

    Attributes:
        enabled: Whether this backend is active
        min_level: Minimum log level to process (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    enabled: bool = True
    min_level: str = "INFO"

    def validate(self) -> None:
        """Validate backend configuration."""
        if self.min_level.upper() not in _VALID_LEVELS:
            raise ValueError(f"Invalid log level: {self.min_level}")


class ConsoleBackendConfig(BackendConfig, frozen=True):
    """
    Console backend configuration.

    Attributes:
        color: Enable colored output
        include_context: Include context information
        max_message_length: Maximum message length before truncation
    """
    color: bool = True
    include_context: bool = True
    max_message_length: int = 1000


class FileBackendConfig(BackendConfig, frozen=True):
    """
    File backend configuration.

    Attributes:
        path: Log file path
        format: Output format (text or json)
        max_size_mb: Maximum file size in MB before rotation
        backup_count: Number of backup files to keep
        buffer_size: Number of formatted lines kept before a write
        flush_interval: Flush interval in seconds
    """
    path: str = "logs/aevo.log"
    format: str = "text"
    max_size_mb: int = 100
    backup_count: int = 5
    buffer_size: int = 256
    flush_interval: float = 1.0

    def validate(self) -> None:
        """Validate file backend configuration."""
        super().validate()
        if self.format not in {"text", "json"}:
            raise ValueError(f"Invalid format: {self.format}")
        if self.max_size_mb <= 0:
            raise ValueError("max_size_mb must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count cannot be negative")


class PerformanceConfig(Struct, frozen=True):
    """
    Dispatch tuning for the logger.

    Attributes:
        buffer_size: Ring buffer size for records waiting on async backends
        batch_size: Batch size for backend dispatch
        dispatch_interval: Sleep between empty dispatch polls, in seconds
    """
    buffer_size: int = 10000
    batch_size: int = 50
    dispatch_interval: float = 0.01

    def validate(self) -> None:
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.dispatch_interval <= 0:
            raise ValueError("dispatch_interval must be positive")


class LoggingConfig(Struct, frozen=True):
    """
    Complete logging configuration.

    Attributes:
        environment: Environment name (dev, prod, test)
        console: Console backend configuration
        file: File backend configuration
        performance: Dispatch settings
        default_context: Context merged into every record
    """
    environment: str = "dev"
    console: Optional[ConsoleBackendConfig] = None
    file: Optional[FileBackendConfig] = None
    performance: Optional[PerformanceConfig] = None
    default_context: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        """Validate complete configuration."""
        if self.environment not in {"dev", "prod", "test"}:
            raise ValueError(f"Invalid environment: {self.environment}")
        if self.console:
            self.console.validate()
        if self.file:
            self.file.validate()
        if self.performance:
            self.performance.validate()

    def get_enabled_backends(self) -> List[str]:
        """Get list of enabled backend names."""
        enabled = []
        if self.console and self.console.enabled:
            enabled.append("console")
        if self.file and self.file.enabled:
            enabled.append("file")
        return enabled

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Create from a plain dictionary (e.g. the `logging` block of config.yaml)."""
        return msgspec.convert(data, type=cls)

    @classmethod
    def default_development(cls) -> "LoggingConfig":
        """Get default development configuration."""
        return cls(
            environment="dev",
            console=ConsoleBackendConfig(enabled=True, min_level="DEBUG", color=True),
            file=FileBackendConfig(enabled=True, min_level="INFO", path="logs/dev.log"),
            performance=PerformanceConfig(),
        )

    @classmethod
    def default_production(cls) -> "LoggingConfig":
        """Get default production configuration."""
        return cls(
            environment="prod",
            console=ConsoleBackendConfig(enabled=True, min_level="WARNING", color=False),
            file=FileBackendConfig(
                enabled=True,
                min_level="INFO",
                path="logs/production.log",
                format="json",
                max_size_mb=500,
                backup_count=10
            ),
            performance=PerformanceConfig(buffer_size=50000, batch_size=100),
        )

    @classmethod
    def default_test(cls) -> "LoggingConfig":
        """Quiet console-only configuration for test runs."""
        return cls(
            environment="test",
            console=ConsoleBackendConfig(enabled=True, min_level="WARNING", color=False),
            performance=PerformanceConfig(buffer_size=100, batch_size=1),
        )
