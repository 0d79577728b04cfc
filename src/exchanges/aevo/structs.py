"""
Aevo wire records.

Outbound streaming requests, REST request bodies, and the typed payloads of
REST responses, streaming replies and channel pushes. All numeric values
travel as decimal strings.
"""

from typing import Any, List, Optional, Union

import msgspec
from msgspec import Struct


# Outbound streaming requests

class WsRequest(Struct, omit_defaults=True):
    """Streaming request envelope: {op, data, id?}."""
    op: str
    data: Any
    id: Optional[int] = None


class AuthData(Struct, frozen=True):
    key: str
    secret: str


class OrderData(Struct, frozen=True, kw_only=True):
    """Signed order as sent on create_order."""
    maker: str
    is_buy: bool
    instrument: str
    limit_price: str
    amount: str
    salt: str
    signature: str
    post_only: bool
    mmp: bool
    timestamp: str


class EditOrderData(OrderData, frozen=True, kw_only=True):
    """Signed replacement order; order_id names the order being replaced."""
    order_id: str


class CancelOrderData(Struct, frozen=True):
    order_id: str


class CancelAllOrdersData(Struct, frozen=True):
    pass


# REST request bodies

class RestOrder(Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Signed order body for POST /orders and POST /orders/{id}."""
    maker: str
    is_buy: bool
    instrument: str
    limit_price: str
    amount: str
    salt: str
    signature: str
    post_only: bool
    reduce_only: bool
    close_position: bool
    timestamp: str
    trigger: Optional[str] = None
    stop: Optional[str] = None


class RestWithdraw(Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Signed withdrawal body for POST /withdraw."""
    account: str
    collateral: str
    to: str
    amount: str
    salt: str
    signature: str
    data: Optional[str] = None


class RestCancelAllOrders(Struct, frozen=True, omit_defaults=True):
    instrument_type: Optional[str] = None
    asset: Optional[str] = None


# Shared response records

class Greeks(Struct, frozen=True, kw_only=True):
    delta: Optional[str] = None
    theta: Optional[str] = None
    gamma: Optional[str] = None
    rho: Optional[str] = None
    vega: Optional[str] = None
    iv: Optional[str] = None


class IndexPrice(Struct, frozen=True):
    """GET /index response and index:<asset> push payload."""
    price: str
    timestamp: str


class OrderInfo(Struct, frozen=True, kw_only=True):
    """Order snapshot returned by order create/edit (REST and streaming) and GET /orders."""
    order_id: str
    account: Optional[str] = None
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    order_type: Optional[str] = None
    order_status: Optional[str] = None
    side: Optional[str] = None
    amount: Optional[str] = None
    price: Optional[str] = None
    avg_price: Optional[str] = None
    filled: Optional[str] = None
    post_only: Optional[bool] = None
    reduce_only: Optional[bool] = None
    initial_margin: Optional[str] = None
    option_type: Optional[str] = None
    iv: Optional[str] = None
    expiry: Optional[str] = None
    strike: Optional[str] = None
    created_timestamp: Optional[str] = None
    timestamp: Optional[str] = None
    system_type: Optional[str] = None
    time_in_force: Optional[str] = None
    stop: Optional[str] = None
    trigger: Optional[str] = None
    close_position: Optional[bool] = None
    partial_position: Optional[bool] = None
    isolated_margin: Optional[str] = None
    parent_order_id: Optional[str] = None
    self_trade_prevention: Optional[str] = None


class CancelOrderResult(Struct, frozen=True, kw_only=True):
    order_id: str
    success: Optional[bool] = None


class CancelAllOrdersResult(Struct, frozen=True, kw_only=True):
    success: bool
    order_ids: List[str] = []


class WithdrawResult(Struct, frozen=True):
    success: bool


class AuthResult(Struct, frozen=True, kw_only=True):
    """Auth acknowledgement (reply to id 1)."""
    success: Optional[bool] = None
    account: Optional[str] = None
    subscriptions: List[str] = []


# REST responses

class MarketInfo(Struct, frozen=True, kw_only=True):
    """GET /markets entry; option-only fields are None for perpetuals."""
    instrument_id: str
    instrument_name: str
    instrument_type: str
    underlying_asset: Optional[str] = None
    quote_asset: Optional[str] = None
    price_step: Optional[str] = None
    amount_step: Optional[str] = None
    min_order_value: Optional[str] = None
    max_order_value: Optional[str] = None
    max_notional_value: Optional[str] = None
    mark_price: Optional[str] = None
    index_price: Optional[str] = None
    forward_price: Optional[str] = None
    is_active: bool = True
    max_leverage: Optional[str] = None
    option_type: Optional[str] = None
    expiry: Optional[str] = None
    strike: Optional[str] = None
    greeks: Optional[Greeks] = None


class CollateralInfo(Struct, frozen=True, kw_only=True):
    collateral_asset: str
    balance: Optional[str] = None
    available_balance: Optional[str] = None
    withdrawable_balance: Optional[str] = None
    margin_value: Optional[str] = None
    collateral_value: Optional[str] = None
    collateral_yield_bearing: Optional[bool] = None


class SigningKeyInfo(Struct, frozen=True, kw_only=True):
    signing_key: str
    expiry: Optional[str] = None
    created_timestamp: Optional[str] = None


class ApiKeyInfo(Struct, frozen=True, kw_only=True):
    api_key: str
    read_only: Optional[bool] = None
    created_timestamp: Optional[str] = None


class FeeStructureInfo(Struct, frozen=True, kw_only=True):
    asset: str
    instrument_type: str
    taker_fee: Optional[str] = None
    maker_fee: Optional[str] = None


class LeverageInfo(Struct, frozen=True, kw_only=True):
    instrument_id: str
    leverage: str
    margin_type: Optional[str] = None  # CROSS / ISOLATED


class ManualWithdrawalInfo(Struct, frozen=True, kw_only=True):
    withdrawal_id: str
    account: Optional[str] = None
    amount: Optional[str] = None
    chain_id: Optional[str] = None
    collateral: Optional[str] = None
    to: Optional[str] = None
    label: Optional[str] = None


class AccountInfo(Struct, frozen=True, kw_only=True):
    """GET /account response."""
    account: str
    username: Optional[str] = None
    account_type: Optional[str] = None
    portfolio: Optional[bool] = None
    equity: Optional[str] = None
    balance: Optional[str] = None
    credit: Optional[str] = None
    credited: Optional[bool] = None
    available_balance: Optional[str] = None
    initial_margin: Optional[str] = None
    maintenance_margin: Optional[str] = None
    email_address: Optional[str] = None
    in_liquidation: Optional[bool] = None
    referral_bonus: Optional[float] = None
    has_been_referred: Optional[bool] = None
    referrer: Optional[str] = None
    permissions: Optional[List[str]] = None
    manual_mode: Optional[bool] = None
    collaterals: List[CollateralInfo] = []
    positions: List[Any] = []
    signing_keys: List[SigningKeyInfo] = []
    api_keys: List[ApiKeyInfo] = []
    fee_structures: List[FeeStructureInfo] = []
    leverages: List[LeverageInfo] = []
    manual_withdrawals: List[ManualWithdrawalInfo] = []


class PortfolioGreeks(Struct, frozen=True, kw_only=True):
    asset: str
    delta: Optional[str] = None
    theta: Optional[str] = None
    gamma: Optional[str] = None
    rho: Optional[str] = None
    vega: Optional[str] = None
    iv: Optional[str] = None


class UsedMarginInfo(Struct, frozen=True, kw_only=True):
    used: Optional[str] = None
    balance: Optional[str] = None


class PortfolioInfo(Struct, frozen=True, kw_only=True):
    """GET /portfolio response."""
    balance: Optional[str] = None
    pnl: Optional[str] = None
    realized_pnl: Optional[str] = None
    profit_factor: Optional[str] = None
    win_rate: Optional[str] = None
    sharpe_ratio: Optional[str] = None
    greeks: List[PortfolioGreeks] = []
    user_margin: Optional[UsedMarginInfo] = None


# Channel push payloads

class PriceLevel(Struct, frozen=True, kw_only=True):
    price: Optional[str] = None
    amount: Optional[str] = None
    delta: Optional[str] = None
    theta: Optional[str] = None
    gamma: Optional[str] = None
    rho: Optional[str] = None
    vega: Optional[str] = None
    iv: Optional[str] = None


class Ticker(Struct, frozen=True, kw_only=True):
    instrument_id: str
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    funding_rate: Optional[str] = None
    next_funding_rate: Optional[str] = None
    mark: Optional[PriceLevel] = None
    bid: Optional[PriceLevel] = None
    ask: Optional[PriceLevel] = None


class TickerData(Struct, frozen=True, kw_only=True):
    timestamp: Optional[str] = None
    tickers: List[Ticker] = []


class MarkPrice(Struct, frozen=True, kw_only=True):
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    mark_price: Optional[str] = None


class MarkPriceData(Struct, frozen=True, kw_only=True):
    timestamp: Optional[str] = None
    prices: List[MarkPrice] = []


class OrderbookData(Struct, frozen=True, kw_only=True):
    """orderbook:<instrument> push; levels are [price, amount, iv?] strings."""
    type: str
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    bids: List[List[str]] = []
    asks: List[List[str]] = []
    last_updated: Optional[str] = None
    checksum: Optional[str] = None


class IndexData(IndexPrice, frozen=True):
    pass


class TradeData(Struct, frozen=True, kw_only=True):
    trade_id: str
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    side: Optional[str] = None
    price: Optional[str] = None
    amount: Optional[str] = None
    created_timestamp: Optional[str] = None


class AccountOrder(Struct, frozen=True, kw_only=True):
    order_id: str
    account: Optional[str] = None
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    order_type: Optional[str] = None
    side: Optional[str] = None
    price: Optional[str] = None
    amount: Optional[str] = None
    filled: Optional[str] = None
    order_status: Optional[str] = None
    created_timestamp: Optional[str] = None
    system_type: Optional[str] = None


class OrdersData(Struct, frozen=True, kw_only=True):
    timestamp: Optional[str] = None
    orders: List[AccountOrder] = []


class Fill(Struct, frozen=True, kw_only=True):
    trade_id: str
    order_id: Optional[str] = None
    instrument_id: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    price: Optional[str] = None
    side: Optional[str] = None
    fees: Optional[str] = None
    filled: Optional[str] = None
    order_status: Optional[str] = None
    liquidity: Optional[str] = None
    created_timestamp: Optional[str] = None
    system_type: Optional[str] = None


class FillsData(Struct, frozen=True, kw_only=True):
    timestamp: Optional[str] = None
    fill: Optional[Fill] = None


class OptionData(Struct, frozen=True, kw_only=True):
    strike: Optional[str] = None
    option_type: Optional[str] = None
    expiry: Optional[str] = None
    iv: Optional[str] = None
    delta: Optional[str] = None
    theta: Optional[str] = None
    rho: Optional[str] = None
    vega: Optional[str] = None


class Position(Struct, frozen=True, kw_only=True):
    instrument_id: str
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    asset: Optional[str] = None
    side: Optional[str] = None
    amount: Optional[str] = None
    mark_price: Optional[str] = None
    avg_entry_price: Optional[str] = None
    unrealized_pnl: Optional[str] = None
    maintenance_margin: Optional[str] = None
    option: Optional[OptionData] = None


class PositionsData(Struct, frozen=True, kw_only=True):
    timestamp: Optional[str] = None
    positions: List[Position] = []


# Inbound streaming responses

class SubscriptionPush(Struct, frozen=True):
    """Channel data: {channel, data}."""
    channel: str
    data: Any


class CorrelatedReply(Struct, frozen=True):
    """Reply to a request: {id?, data}. op is the recorded request op, if known."""
    id: Optional[Union[int, str]]
    data: Any
    op: Optional[str] = None


class ErrorReply(Struct, frozen=True):
    """Server-side error: {id?, error}."""
    id: Optional[Union[int, str]]
    error: Any


WsResponse = Union[SubscriptionPush, CorrelatedReply, ErrorReply]


def to_json(record: Any) -> str:
    return msgspec.json.encode(record).decode('utf-8')
