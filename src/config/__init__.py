from .structs import (
    AevoCredentials,
    NetworkConfig,
    WebSocketConfig,
    SigningDomain,
    ContractAddresses,
    EnvironmentConfig,
)
from .environments import AevoEnvironment, get_environment_config, parse_environment
from .config_manager import AevoConfig, get_config, reset_config

__all__ = [
    'AevoCredentials',
    'NetworkConfig',
    'WebSocketConfig',
    'SigningDomain',
    'ContractAddresses',
    'EnvironmentConfig',
    'AevoEnvironment',
    'get_environment_config',
    'parse_environment',
    'AevoConfig',
    'get_config',
    'reset_config',
]
