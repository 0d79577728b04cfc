"""
Aevo exchange connector.

- AevoClient: streaming connection, subscriptions, signed orders, REST, withdrawals
- AevoSigner: EIP-712 order / withdrawal signing
- AevoRestClient: typed REST endpoints
- AevoMessageParser: inbound frame decoding
"""

from .aevo_client import AevoClient
from .signing import AevoSigner, SignedIntent, generate_salt
from .rest import AevoRestClient
from .ws import AevoMessageParser, Channels
from .structs import SubscriptionPush, CorrelatedReply, ErrorReply, WsResponse

__all__ = [
    'AevoClient',
    'AevoSigner',
    'SignedIntent',
    'generate_salt',
    'AevoRestClient',
    'AevoMessageParser',
    'Channels',
    'SubscriptionPush',
    'CorrelatedReply',
    'ErrorReply',
    'WsResponse',
]
