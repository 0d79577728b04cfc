from typing import Optional
from msgspec import Struct


class AevoCredentials(Struct, frozen=True):
    """
    Aevo account credentials.

    Two independent pairs: the signing pair (private key + wallet address)
    authorizes orders and withdrawals, the API pair authenticates the
    streaming channel and private REST endpoints.

    Attributes:
        signing_key: Hex private key of the signing wallet
        wallet_address: Maker / account address
        api_key: API key sent as AEVO-KEY
        api_secret: API secret sent as AEVO-SECRET
    """
    signing_key: Optional[str] = None
    wallet_address: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None

    def has_api_credentials(self) -> bool:
        """Check if API key and secret are both present."""
        return bool(self.api_key) and bool(self.api_secret)

    def has_signing_credentials(self) -> bool:
        """Check if signing key and wallet address are both present."""
        return bool(self.signing_key) and bool(self.wallet_address)

    def get_preview(self) -> str:
        """Safe preview of the API key for logging."""
        if not self.api_key:
            return "none"
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "***"


class NetworkConfig(Struct, frozen=True):
    """
    Network configuration settings.

    Attributes:
        request_timeout: HTTP request timeout in seconds
        connect_timeout: Connection timeout in seconds
        max_retries: Maximum number of retry attempts
        retry_delay: Delay between retries in seconds
    """
    request_timeout: float = 10.0
    connect_timeout: float = 5.0
    max_retries: int = 3
    retry_delay: float = 1.0

    def validate(self) -> None:
        """Validate network configuration."""
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay cannot be negative")


class WebSocketConfig(Struct, frozen=True):
    """
    WebSocket connection settings passed to websockets.connect.

    Attributes:
        connect_timeout: Opening handshake timeout in seconds
        ping_interval: Keepalive ping interval in seconds (None disables)
        ping_timeout: Keepalive pong timeout in seconds
        close_timeout: Close handshake timeout in seconds
        max_message_size: Maximum inbound frame size in bytes
        max_queue_size: Maximum number of buffered inbound frames
        reconnect_delay: Pause before the receive loop retries a failed reconnect
    """
    connect_timeout: float = 10.0
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 20.0
    close_timeout: float = 5.0
    max_message_size: int = 1048576  # 1MB
    max_queue_size: int = 1000
    reconnect_delay: float = 1.0

    def validate(self) -> None:
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.reconnect_delay < 0:
            raise ValueError("reconnect_delay cannot be negative")
        if self.close_timeout <= 0:
            raise ValueError("close_timeout must be positive")
        if self.max_message_size <= 0:
            raise ValueError("max_message_size must be positive")
        if self.max_queue_size <= 0:
            raise ValueError("max_queue_size must be positive")


class SigningDomain(Struct, frozen=True):
    """EIP-712 domain: name, version and chain id, no verifying contract."""
    name: str
    version: str
    chain_id: int


class ContractAddresses(Struct, frozen=True):
    """Bridge and collateral contract addresses on L1 and L2."""
    l1_bridge: str
    l1_usdc: str
    l2_withdraw_proxy: str
    l2_usdc: str


class EnvironmentConfig(Struct, frozen=True):
    """
    Everything that differs between mainnet and testnet.

    Attributes:
        name: Environment name (mainnet / testnet)
        rest_url: REST API base URL
        ws_url: Streaming gateway URL
        signing_domain: EIP-712 domain for order and withdrawal signatures
        addresses: Contract address table
    """
    name: str
    rest_url: str
    ws_url: str
    signing_domain: SigningDomain
    addresses: ContractAddresses
