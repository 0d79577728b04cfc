"""
Inbound frame parser.

Every frame becomes exactly one of SubscriptionPush, CorrelatedReply or
ErrorReply, discriminated by which key it carries:

    {"error": ...}            -> ErrorReply
    {"channel": ..., "data"}  -> SubscriptionPush, data typed by channel prefix
    {"id"?, "data": ...}      -> CorrelatedReply, data typed by the recorded op

Frames that are not JSON objects, or whose data does not fit the expected
record, raise MessageDecodeError.
"""

from typing import Any, Dict, List, Optional, Type, Union

import msgspec

from infrastructure.exceptions.websocket import MessageDecodeError
from infrastructure.logging import get_logger
from ..structs import (
    AuthResult,
    CancelAllOrdersResult,
    CancelOrderResult,
    CorrelatedReply,
    ErrorReply,
    FillsData,
    IndexData,
    MarkPriceData,
    OrderbookData,
    OrderInfo,
    OrdersData,
    PositionsData,
    SubscriptionPush,
    TickerData,
    TradeData,
    WsResponse,
)
from .requests import AUTH_REQUEST_ID, WsOp

CHANNEL_PAYLOADS: Dict[str, Type] = {
    "orderbook": OrderbookData,
    "ticker": TickerData,
    "markprice": MarkPriceData,
    "index": IndexData,
    "trades": TradeData,
    "orders": OrdersData,
    "fills": FillsData,
    "positions": PositionsData,
}

REPLY_PAYLOADS: Dict[str, Any] = {
    WsOp.AUTH: AuthResult,
    WsOp.SUBSCRIBE: List[str],
    WsOp.UNSUBSCRIBE: List[str],
    WsOp.CREATE_ORDER: OrderInfo,
    WsOp.EDIT_ORDER: OrderInfo,
    WsOp.CANCEL_ORDER: CancelOrderResult,
    WsOp.CANCEL_ALL_ORDERS: CancelAllOrdersResult,
}

_AUTH_KEY = str(AUTH_REQUEST_ID)


class AevoMessageParser:
    """
    Decodes raw frames into WsResponse records.

    Replies carry only an id, so the op of every request sent with an id is
    recorded via register_request() to type the reply's data. Replies to
    unknown ids keep their data as plain JSON values.

    AUTH_REQUEST_ID is reserved: every (re)connect sends its auth frame with
    that id, so its replies are always typed as auth.
    """

    def __init__(self, logger=None):
        self.logger = logger or get_logger('aevo.ws.parser')
        self._pending_ops: Dict[str, str] = {}

    def register_request(self, request_id: Optional[Union[int, str]], op: str) -> None:
        """
        Raises:
            ValueError: request_id is the id reserved for auth
        """
        if request_id is None:
            return
        if str(request_id) == _AUTH_KEY:
            if op == WsOp.AUTH:
                return
            raise ValueError(f"Request id {AUTH_REQUEST_ID} is reserved for auth")
        self._pending_ops[str(request_id)] = op

    def unregister_request(self, request_id: Optional[Union[int, str]]) -> None:
        """Forget a request that was never sent."""
        if request_id is not None:
            self._pending_ops.pop(str(request_id), None)

    @property
    def pending_count(self) -> int:
        return len(self._pending_ops)

    def _take_op(self, request_id: Any) -> Optional[str]:
        if request_id is None:
            return None
        if str(request_id) == _AUTH_KEY:
            return WsOp.AUTH
        return self._pending_ops.pop(str(request_id), None)

    def __call__(self, raw_message: Union[str, bytes]) -> WsResponse:
        return self.parse(raw_message)

    def parse(self, raw_message: Union[str, bytes]) -> WsResponse:
        """
        Raises:
            MessageDecodeError: Frame is not a JSON object, or its data does not match
        """
        raw_text = raw_message.decode('utf-8', errors='replace') if isinstance(raw_message, bytes) else raw_message
        try:
            message = msgspec.json.decode(raw_message)
        except msgspec.DecodeError as e:
            raise MessageDecodeError(f"Invalid JSON frame: {e}", raw_text) from e

        if not isinstance(message, dict):
            raise MessageDecodeError(f"Expected JSON object, got {type(message).__name__}", raw_text)

        request_id = message.get("id")

        if "error" in message:
            self._take_op(request_id)
            self.logger.warning("Error reply received", request_id=request_id, error=str(message["error"]))
            return ErrorReply(id=request_id, error=message["error"])

        if "channel" in message:
            channel = message["channel"]
            if not isinstance(channel, str):
                raise MessageDecodeError(f"Channel must be a string, got {type(channel).__name__}", raw_text)
            payload_type = CHANNEL_PAYLOADS.get(channel.split(":", 1)[0])
            data = self._convert(message.get("data"), payload_type, raw_text)
            return SubscriptionPush(channel=channel, data=data)

        if "data" in message:
            op = self._take_op(request_id)
            data = self._convert(message["data"], REPLY_PAYLOADS.get(op), raw_text)
            return CorrelatedReply(id=request_id, data=data, op=op)

        raise MessageDecodeError("Frame matches no known response shape", raw_text)

    @staticmethod
    def _convert(data: Any, payload_type: Optional[Any], raw_text: str) -> Any:
        if payload_type is None:
            return data
        try:
            return msgspec.convert(data, payload_type)
        except msgspec.ValidationError as e:
            raise MessageDecodeError(f"Unexpected payload shape: {e}", raw_text) from e
