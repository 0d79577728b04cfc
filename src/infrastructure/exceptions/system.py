from typing import Optional

from .exchange import BaseExchangeError


class ConfigurationError(BaseExchangeError):
    """Configuration-specific exception for setup errors."""

    def __init__(self, message: str, setting_name: Optional[str] = None):
        self.setting_name = setting_name
        super().__init__(message)


class SigningError(ConfigurationError):
    """Signing refused: missing signing key / wallet address or unparsable address."""
    pass
