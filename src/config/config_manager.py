"""
Aevo Configuration Management Module

YAML-based configuration for the Aevo connector.

Key Features:
- config.yaml discovered in project root / src / cwd / home
- ${VAR} and ${VAR:default} environment variable substitution
- .env loading via python-dotenv
- AEVO_* environment variables when no config file exists
- Typed msgspec structs for every section

Usage:
    from config import get_config

    config = get_config()
    credentials = config.get_credentials()            # AevoCredentials
    env_config = config.get_environment_config()      # EnvironmentConfig
    websocket_config = config.get_websocket_config()  # WebSocketConfig
"""

import os
import re
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import msgspec
import yaml
from dotenv import load_dotenv

from infrastructure.exceptions.system import ConfigurationError
from infrastructure.logging.structs import LoggingConfig
from .environments import AevoEnvironment, get_environment_config, parse_environment
from .structs import AevoCredentials, EnvironmentConfig, NetworkConfig, WebSocketConfig

# Environment variables consulted when config.yaml leaves a credential empty
CREDENTIAL_ENV_VARS = {
    'signing_key': 'AEVO_SIGNING_KEY',
    'wallet_address': 'AEVO_WALLET_ADDRESS',
    'api_key': 'AEVO_API_KEY',
    'api_secret': 'AEVO_API_SECRET',
}
ENVIRONMENT_ENV_VAR = 'AEVO_ENVIRONMENT'

_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


def guess_file_paths(file_name: str) -> List[Path]:
    """
    Returns a list of possible config file locations to search.
    """
    return [
        Path(__file__).parent.parent.parent / file_name,  # Project root
        Path(__file__).parent.parent / file_name,         # src directory
        Path.cwd() / file_name,                           # Current working directory
        Path.home() / file_name,                          # User home directory (fallback)
    ]


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports syntax:
    - ${VAR_NAME} - environment variable, empty when unset
    - ${VAR_NAME:default} - optional with default value
    """
    def replace_var(match):
        var_expr = match.group(1)
        if ':' in var_expr:
            var_name, default_value = var_expr.split(':', 1)
            env_value = os.getenv(var_name.strip())
            return default_value if env_value is None else env_value
        return os.getenv(var_expr.strip(), "")

    return _ENV_VAR_PATTERN.sub(replace_var, content)


class AevoConfig:
    """
    Connector configuration loaded from config.yaml and the environment.

    Sections: environment, credentials, network, websocket, logging. Every
    section is optional; missing values fall back to struct defaults and
    AEVO_* environment variables.
    """

    def __init__(self, config_path: Optional[Path] = None, load_env: bool = True):
        self._logger = logging.getLogger(__name__)
        self.config_path: Optional[Path] = None

        if load_env:
            self._load_env_file()

        self._config_data = self._load_yaml_config(config_path)
        self._parse_sections()

        self._logger.info(f"Aevo configuration initialized for environment: {self.environment.value}")

    def _load_env_file(self) -> None:
        """Load the first .env file found; never overrides variables already set."""
        for env_path in guess_file_paths('.env'):
            if env_path.exists():
                load_dotenv(dotenv_path=env_path, override=False)
                self._logger.info(f"Loaded environment variables from: {env_path}")
                return
        self._logger.debug("No .env file found - using system environment variables only")

    def _load_yaml_config(self, config_path: Optional[Path]) -> Dict[str, Any]:
        """Load configuration from YAML file with environment variable substitution."""
        if config_path is not None:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            candidates = [config_path]
        else:
            candidates = [p for p in guess_file_paths('config.yaml') if p.exists()]

        for path in candidates:
            try:
                with open(path, 'r') as f:
                    raw_content = f.read()
                data = yaml.safe_load(substitute_env_vars(raw_content)) or {}
            except (OSError, yaml.YAMLError) as e:
                if config_path is not None:
                    raise ConfigurationError(f"Failed to load config from {path}: {e}") from e
                self._logger.warning(f"Failed to load config from {path}: {e}")
                continue

            if not isinstance(data, dict):
                raise ConfigurationError(f"Config file {path} must contain a mapping")
            self.config_path = path
            self._logger.info(f"Configuration loaded from: {path}")
            return data

        self._logger.info("No config.yaml found - using defaults and AEVO_* environment variables")
        return {}

    def _parse_sections(self) -> None:
        data = self._config_data

        env_value = data.get('environment') or os.getenv(ENVIRONMENT_ENV_VAR) or AevoEnvironment.TESTNET.value
        if isinstance(env_value, dict):
            env_value = env_value.get('name', AevoEnvironment.TESTNET.value)
        self.environment = parse_environment(env_value)

        credentials = data.get('credentials') or {}
        values = {}
        for field, env_var in CREDENTIAL_ENV_VARS.items():
            value = credentials.get(field) or os.getenv(env_var)
            if value is not None and not isinstance(value, str):
                # Unquoted 0x... is read by YAML as an integer
                raise ConfigurationError(f"Credential '{field}' must be a quoted string", field)
            values[field] = value or None
        self._credentials = AevoCredentials(**values)

        self._network_config = self._convert_section('network', NetworkConfig)
        self._websocket_config = self._convert_section('websocket', WebSocketConfig)
        self._logging_config = self._convert_section('logging', LoggingConfig, default=None)

    def _convert_section(self, name: str, struct_type, default: Any = ...):
        section = self._config_data.get(name)
        if section is None:
            return struct_type() if default is ... else default
        try:
            # YAML values arrive as strings after substitution
            result = msgspec.convert(section, type=struct_type, strict=False)
            result.validate()
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid '{name}' section: {e}", name) from e
        return result

    def get_credentials(self) -> AevoCredentials:
        return self._credentials

    def get_environment_config(self) -> EnvironmentConfig:
        return get_environment_config(self.environment)

    def get_network_config(self) -> NetworkConfig:
        return self._network_config

    def get_websocket_config(self) -> WebSocketConfig:
        return self._websocket_config

    def get_logging_config(self) -> Optional[LoggingConfig]:
        """Logging section, or None to keep the logging factory's defaults."""
        return self._logging_config


_config: Optional[AevoConfig] = None


def get_config() -> AevoConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = AevoConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None
