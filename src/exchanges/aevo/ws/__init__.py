from .message_parser import AevoMessageParser, CHANNEL_PAYLOADS, REPLY_PAYLOADS
from .requests import (
    AUTH_REQUEST_ID,
    Channels,
    WsOp,
    auth_request,
    subscribe_request,
    unsubscribe_request,
    create_order_request,
    edit_order_request,
    cancel_order_request,
    cancel_all_orders_request,
    encode_request,
    decode_request,
)

__all__ = [
    'AevoMessageParser',
    'CHANNEL_PAYLOADS',
    'REPLY_PAYLOADS',
    'AUTH_REQUEST_ID',
    'Channels',
    'WsOp',
    'auth_request',
    'subscribe_request',
    'unsubscribe_request',
    'create_order_request',
    'edit_order_request',
    'cancel_order_request',
    'cancel_all_orders_request',
    'encode_request',
    'decode_request',
]
