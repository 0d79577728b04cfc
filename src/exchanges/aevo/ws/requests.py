"""
Streaming request builders.

Each builder returns a WsRequest; encode_request() produces the JSON frame.
"""

from typing import List, Optional, Sequence, Union

import msgspec

from ..structs import (
    AuthData,
    CancelAllOrdersData,
    CancelOrderData,
    EditOrderData,
    OrderData,
    WsRequest,
)

AUTH_REQUEST_ID = 1


class WsOp:
    AUTH = "auth"
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"
    CREATE_ORDER = "create_order"
    EDIT_ORDER = "edit_order"
    CANCEL_ORDER = "cancel_order"
    CANCEL_ALL_ORDERS = "cancel_all_orders"


class Channels:
    """Channel name builders."""

    @staticmethod
    def tickers(asset: str) -> str:
        return f"ticker:{asset}:OPTION"

    @staticmethod
    def markprice(asset: str) -> str:
        return f"markprice:{asset}:OPTION"

    @staticmethod
    def orderbook(instrument_name: str) -> str:
        return f"orderbook:{instrument_name}"

    @staticmethod
    def trades(instrument_name: str) -> str:
        return f"trades:{instrument_name}"

    @staticmethod
    def index(asset: str) -> str:
        return f"index:{asset}"

    ORDERS = "orders"
    FILLS = "fills"
    POSITIONS = "positions"


def auth_request(api_key: str, api_secret: str) -> WsRequest:
    return WsRequest(op=WsOp.AUTH, data=AuthData(key=api_key, secret=api_secret), id=AUTH_REQUEST_ID)


def subscribe_request(channels: Union[str, Sequence[str]], request_id: Optional[int] = None) -> WsRequest:
    return WsRequest(op=WsOp.SUBSCRIBE, data=_channel_list(channels), id=request_id)


def unsubscribe_request(channels: Union[str, Sequence[str]], request_id: Optional[int] = None) -> WsRequest:
    return WsRequest(op=WsOp.UNSUBSCRIBE, data=_channel_list(channels), id=request_id)


def create_order_request(order: OrderData, request_id: Optional[int] = None) -> WsRequest:
    return WsRequest(op=WsOp.CREATE_ORDER, data=order, id=request_id)


def edit_order_request(order: EditOrderData, request_id: Optional[int] = None) -> WsRequest:
    return WsRequest(op=WsOp.EDIT_ORDER, data=order, id=request_id)


def cancel_order_request(order_id: str, request_id: Optional[int] = None) -> WsRequest:
    return WsRequest(op=WsOp.CANCEL_ORDER, data=CancelOrderData(order_id=order_id), id=request_id)


def cancel_all_orders_request(request_id: Optional[int] = None) -> WsRequest:
    return WsRequest(op=WsOp.CANCEL_ALL_ORDERS, data=CancelAllOrdersData(), id=request_id)


def encode_request(request: WsRequest) -> str:
    return msgspec.json.encode(request).decode('utf-8')


def decode_request(raw: Union[str, bytes]) -> WsRequest:
    """Decode an outbound frame back into its envelope; data stays as plain JSON values."""
    return msgspec.json.decode(raw, type=WsRequest)


def _channel_list(channels: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(channels, str):
        return [channels]
    channels = list(channels)
    if not channels:
        raise ValueError("At least one channel is required")
    return channels
