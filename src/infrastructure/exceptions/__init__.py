from .exchange import (
    BaseExchangeError,
    ExchangeRestError,
    ExchangeConnectionRestError,
    ExchangeServerError,
    RateLimitErrorRest,
    AuthenticationError,
    InvalidParameterError,
    OrderNotFoundError,
)
from .system import ConfigurationError, SigningError
from .websocket import (
    WebSocketError,
    WebSocketConnectionError,
    ConnectionNotEstablishedError,
    TransportClosedError,
    WebSocketSendError,
    SendExhaustedError,
    MessageDecodeError,
)

__all__ = [
    'BaseExchangeError',
    'ExchangeRestError',
    'ExchangeConnectionRestError',
    'ExchangeServerError',
    'RateLimitErrorRest',
    'AuthenticationError',
    'InvalidParameterError',
    'OrderNotFoundError',
    'ConfigurationError',
    'SigningError',
    'WebSocketError',
    'WebSocketConnectionError',
    'ConnectionNotEstablishedError',
    'TransportClosedError',
    'WebSocketSendError',
    'SendExhaustedError',
    'MessageDecodeError',
]
