"""
Aevo Client

Single entry point for the Aevo connector: streaming connection lifecycle,
channel subscriptions, signed order flow over the stream and over REST, and
signed withdrawals.

Usage:
    client = AevoClient.from_config()
    await client.open_connection()
    await client.subscribe_orderbook("ETH-PERP")

    queue = asyncio.Queue()
    client.start_reading(queue)
    response = await queue.get()

    order_hash = await client.create_order(instrument_id=1, is_buy=True,
                                           limit_price=1850.5, quantity=0.1)
    await client.close()

Streaming requests are fire-and-forget: acknowledgements and errors arrive on
the consumer queue as CorrelatedReply / ErrorReply. Pass request_id to have
the reply's data decoded into the op's typed record.
"""

import asyncio
from typing import List, Optional, Sequence, Union

from config import AevoConfig, get_config
from config.environments import AevoEnvironment, get_environment_config, parse_environment
from config.structs import AevoCredentials, NetworkConfig, WebSocketConfig
from infrastructure.logging import configure_logging, get_exchange_logger
from infrastructure.networking.websocket import ConnectionState, TransportManager, WebSocketManager
from utils import TaskManager, get_current_timestamp_seconds
from utils.math_utils import DEFAULT_DECIMALS
from .rest.aevo_rest import AevoRestClient
from .signing import AevoSigner, SignedIntent
from .structs import (
    AccountInfo,
    CancelAllOrdersResult,
    CancelOrderResult,
    EditOrderData,
    IndexPrice,
    MarketInfo,
    OrderData,
    OrderInfo,
    PortfolioInfo,
    RestOrder,
    RestWithdraw,
    WithdrawResult,
    WsRequest,
)
from .ws import requests
from .ws.message_parser import AevoMessageParser
from .ws.requests import Channels

Number = Union[int, float, str]

READ_TASK_NAME = "read_messages"


class AevoClient:
    """Streaming and REST client for one Aevo account on one environment."""

    def __init__(
        self,
        credentials: Optional[AevoCredentials] = None,
        environment: Union[AevoEnvironment, str] = AevoEnvironment.TESTNET,
        websocket_config: Optional[WebSocketConfig] = None,
        network_config: Optional[NetworkConfig] = None,
        connect_method=None,
        logger=None,
    ):
        self.credentials = credentials or AevoCredentials()
        self.environment = parse_environment(environment)
        self.env_config = get_environment_config(self.environment)
        self.logger = logger or get_exchange_logger('aevo', 'client')

        self.signer = AevoSigner(self.credentials, self.env_config.signing_domain)
        self.message_parser = AevoMessageParser()

        auth_message = self._auth_message if self._can_authenticate() else None
        self.transport = TransportManager(
            self.env_config.ws_url,
            config=websocket_config,
            connect_method=connect_method,
            auth_message=auth_message,
            connection_handler=self._on_connection_state,
        )
        self.ws_manager = WebSocketManager(self.transport, self.message_parser)
        self.rest = AevoRestClient(self.env_config, self.credentials, network_config)

        self._task_manager = TaskManager('aevo_client')

        self.logger.info("Aevo client initialized", environment=self.environment.value,
                         ws_url=self.env_config.ws_url, api_key=self.credentials.get_preview(),
                         can_sign=self.credentials.has_signing_credentials())

    @classmethod
    def from_config(cls, config: Optional[AevoConfig] = None, connect_method=None,
                    logger=None) -> "AevoClient":
        """Build a client from config.yaml / AEVO_* environment variables."""
        config = config or get_config()
        logging_config = config.get_logging_config()
        if logging_config is not None:
            configure_logging(logging_config)
        return cls(
            credentials=config.get_credentials(),
            environment=config.environment,
            websocket_config=config.get_websocket_config(),
            network_config=config.get_network_config(),
            connect_method=connect_method,
            logger=logger,
        )

    async def __aenter__(self):
        await self.open_connection()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _can_authenticate(self) -> bool:
        return self.credentials.has_api_credentials() and bool(self.credentials.wallet_address)

    def _auth_message(self) -> str:
        return requests.encode_request(
            requests.auth_request(self.credentials.api_key, self.credentials.api_secret)
        )

    async def _on_connection_state(self, state: ConnectionState) -> None:
        self.logger.debug("Connection state", state=state.value)

    # Connection lifecycle

    @property
    def is_connected(self) -> bool:
        return self.transport.is_connected

    async def open_connection(self) -> None:
        """
        Open the streaming connection and, with API credentials and a wallet
        address, send the auth frame.

        Raises:
            WebSocketConnectionError: Connect failed
        """
        self.logger.info("Opening Aevo websocket connection", url=self.env_config.ws_url)
        if not self._can_authenticate():
            self.logger.info("Api key and/or wallet address not defined: no authentication on connect")
        await self.transport.open()

    async def close_connection(self) -> None:
        """Close the stream; a running receive loop ends instead of reconnecting."""
        await self.transport.close()

    async def reconnect(self) -> None:
        await self.transport.reconnect()

    async def read_messages(self, queue: asyncio.Queue) -> None:
        """Run the receive loop in the calling task until cancelled."""
        await self.ws_manager.read_messages(queue)

    def start_reading(self, queue: asyncio.Queue) -> asyncio.Task:
        """Run the receive loop as a background task."""
        return self._task_manager.create_task(self.ws_manager.read_messages(queue), READ_TASK_NAME)

    async def stop_reading(self) -> None:
        await self._task_manager.cancel_task(READ_TASK_NAME)

    async def close(self) -> None:
        """Stop the receive loop, then close the stream and the REST session."""
        await self._task_manager.shutdown(logger=self.logger)
        await self.transport.close()
        await self.rest.close()
        self.logger.info("Aevo client closed")

    async def _send(self, request: WsRequest) -> None:
        """
        Raises:
            ValueError: request.id is the id reserved for auth
        """
        self.message_parser.register_request(request.id, request.op)
        try:
            await self.ws_manager.send(requests.encode_request(request))
        except Exception:
            self.message_parser.unregister_request(request.id)
            raise

    # Subscriptions

    async def subscribe(self, channels: Union[str, Sequence[str]], request_id: Optional[int] = None) -> None:
        await self._send(requests.subscribe_request(channels, request_id))

    async def unsubscribe(self, channels: Union[str, Sequence[str]], request_id: Optional[int] = None) -> None:
        await self._send(requests.unsubscribe_request(channels, request_id))

    async def subscribe_tickers(self, asset: str) -> None:
        await self.subscribe(Channels.tickers(asset))

    async def subscribe_ticker(self, channel: str) -> None:
        await self.subscribe(channel)

    async def subscribe_markprice(self, asset: str) -> None:
        await self.subscribe(Channels.markprice(asset))

    async def subscribe_orderbook(self, instrument_name: str) -> None:
        await self.subscribe(Channels.orderbook(instrument_name))

    async def subscribe_trades(self, instrument_name: str) -> None:
        await self.subscribe(Channels.trades(instrument_name))

    async def subscribe_index(self, asset: str) -> None:
        await self.subscribe(Channels.index(asset))

    async def subscribe_orders(self) -> None:
        await self.subscribe(Channels.ORDERS)

    async def subscribe_fills(self) -> None:
        await self.subscribe(Channels.FILLS)

    async def subscribe_positions(self) -> None:
        await self.subscribe(Channels.POSITIONS)

    # Streaming trading

    def _sign_order(self, instrument_id: int, is_buy: bool, limit_price: Optional[Number],
                    quantity: Number, price_decimals: int, amount_decimals: int):
        timestamp = get_current_timestamp_seconds()
        signed = self.signer.sign_order(
            instrument_id=instrument_id,
            is_buy=is_buy,
            limit_price=limit_price,
            quantity=quantity,
            timestamp=timestamp,
            price_decimals=price_decimals,
            amount_decimals=amount_decimals,
        )
        return signed, timestamp

    def _order_fields(self, instrument_id: int, is_buy: bool, signed: SignedIntent, timestamp: int) -> dict:
        return dict(
            maker=self.signer.wallet_address,
            is_buy=is_buy,
            instrument=str(instrument_id),
            limit_price=str(signed.limit_price),
            amount=str(signed.amount),
            salt=str(signed.salt),
            signature=signed.signature,
            timestamp=str(timestamp),
        )

    async def create_order(
        self,
        instrument_id: int,
        is_buy: bool,
        limit_price: Number,
        quantity: Number,
        post_only: bool = True,
        mmp: bool = True,
        request_id: Optional[int] = None,
        price_decimals: int = DEFAULT_DECIMALS,
        amount_decimals: int = DEFAULT_DECIMALS,
    ) -> str:
        """
        Sign and send a create_order request.

        Returns:
            Order hash (the order id Aevo assigns)

        Raises:
            SigningError: Missing signing key or wallet address
        """
        signed, timestamp = self._sign_order(instrument_id, is_buy, limit_price, quantity,
                                             price_decimals, amount_decimals)
        order = OrderData(post_only=post_only, mmp=mmp,
                          **self._order_fields(instrument_id, is_buy, signed, timestamp))

        self.logger.audit("Order created", order_hash=signed.hash, instrument=instrument_id,
                          is_buy=is_buy, limit_price=order.limit_price, amount=order.amount)
        await self._send(requests.create_order_request(order, request_id))
        return signed.hash

    async def edit_order(
        self,
        order_id: str,
        instrument_id: int,
        is_buy: bool,
        limit_price: Number,
        quantity: Number,
        post_only: bool = True,
        mmp: bool = True,
        request_id: Optional[int] = None,
        price_decimals: int = DEFAULT_DECIMALS,
        amount_decimals: int = DEFAULT_DECIMALS,
    ) -> str:
        """Replace order_id with a freshly signed order; returns the new order hash."""
        signed, timestamp = self._sign_order(instrument_id, is_buy, limit_price, quantity,
                                             price_decimals, amount_decimals)
        order = EditOrderData(order_id=order_id, post_only=post_only, mmp=mmp,
                              **self._order_fields(instrument_id, is_buy, signed, timestamp))

        self.logger.audit("Order edited", order_id=order_id, new_order_hash=signed.hash,
                          limit_price=order.limit_price, amount=order.amount)
        await self._send(requests.edit_order_request(order, request_id))
        return signed.hash

    async def cancel_order(self, order_id: str, request_id: Optional[int] = None) -> None:
        self.logger.audit("Order cancelled", order_id=order_id)
        await self._send(requests.cancel_order_request(order_id, request_id))

    async def cancel_all_orders(self, request_id: Optional[int] = None) -> None:
        self.logger.audit("Cancelling all orders")
        await self._send(requests.cancel_all_orders_request(request_id))

    # REST

    async def get_index(self, asset: str) -> IndexPrice:
        return await self.rest.get_index(asset)

    async def get_markets(self, asset: Optional[str] = None) -> List[MarketInfo]:
        return await self.rest.get_markets(asset)

    async def get_account(self) -> AccountInfo:
        return await self.rest.get_account()

    async def get_portfolio(self) -> PortfolioInfo:
        return await self.rest.get_portfolio()

    async def get_open_orders(self) -> List[OrderInfo]:
        return await self.rest.get_open_orders()

    def _build_rest_order(
        self,
        instrument_id: int,
        is_buy: bool,
        limit_price: Optional[Number],
        quantity: Number,
        post_only: bool,
        reduce_only: bool,
        close_position: bool,
        trigger: Optional[str],
        stop: Optional[str],
        price_decimals: int,
        amount_decimals: int,
    ):
        signed, timestamp = self._sign_order(instrument_id, is_buy, limit_price, quantity,
                                             price_decimals, amount_decimals)
        order = RestOrder(
            post_only=post_only,
            reduce_only=reduce_only,
            close_position=close_position,
            trigger=trigger,
            stop=stop,
            **self._order_fields(instrument_id, is_buy, signed, timestamp),
        )
        return order, signed.hash

    async def rest_create_order(
        self,
        instrument_id: int,
        is_buy: bool,
        limit_price: Number,
        quantity: Number,
        post_only: bool = True,
        reduce_only: bool = False,
        close_position: bool = False,
        trigger: Optional[str] = None,
        stop: Optional[str] = None,
        price_decimals: int = DEFAULT_DECIMALS,
        amount_decimals: int = DEFAULT_DECIMALS,
    ) -> OrderInfo:
        order, order_hash = self._build_rest_order(
            instrument_id, is_buy, limit_price, quantity, post_only, reduce_only,
            close_position, trigger, stop, price_decimals, amount_decimals,
        )
        self.logger.audit("Creating rest order", order_hash=order_hash, instrument=instrument_id,
                          is_buy=is_buy, limit_price=order.limit_price, amount=order.amount)
        return await self.rest.create_order(order)

    async def rest_create_market_order(
        self,
        instrument_id: int,
        is_buy: bool,
        quantity: Number,
        amount_decimals: int = DEFAULT_DECIMALS,
    ) -> OrderInfo:
        """Market order: limit price is 2**256 - 1 for buys and 0 for sells, never post-only."""
        order, order_hash = self._build_rest_order(
            instrument_id, is_buy, None, quantity, False, False, False, None, None,
            DEFAULT_DECIMALS, amount_decimals,
        )
        self.logger.audit("Creating rest market order", order_hash=order_hash,
                          instrument=instrument_id, is_buy=is_buy, amount=order.amount)
        return await self.rest.create_order(order)

    async def rest_edit_order(
        self,
        order_id: str,
        instrument_id: int,
        is_buy: bool,
        limit_price: Number,
        quantity: Number,
        post_only: bool = True,
        reduce_only: bool = False,
        close_position: bool = False,
        price_decimals: int = DEFAULT_DECIMALS,
        amount_decimals: int = DEFAULT_DECIMALS,
    ) -> OrderInfo:
        order, order_hash = self._build_rest_order(
            instrument_id, is_buy, limit_price, quantity, post_only, reduce_only,
            close_position, None, None, price_decimals, amount_decimals,
        )
        self.logger.audit("Editing rest order", order_id=order_id, new_order_hash=order_hash)
        return await self.rest.edit_order(order_id, order)

    async def rest_cancel_order(self, order_id: str) -> CancelOrderResult:
        return await self.rest.cancel_order(order_id)

    async def rest_cancel_all_orders(self, instrument_type: Optional[str] = None,
                                     asset: Optional[str] = None) -> CancelAllOrdersResult:
        return await self.rest.cancel_all_orders(instrument_type, asset)

    async def withdraw(
        self,
        amount: Number,
        collateral: Optional[str] = None,
        to: Optional[str] = None,
        data: Optional[int] = None,
        amount_decimals: int = DEFAULT_DECIMALS,
    ) -> WithdrawResult:
        """
        Sign and submit a withdrawal.

        collateral defaults to the environment's L1 USDC address and to
        defaults to its L2 withdraw proxy.
        """
        addresses = self.env_config.addresses
        collateral = collateral or addresses.l1_usdc
        to = to or addresses.l2_withdraw_proxy

        signed = self.signer.sign_withdraw(collateral, to, amount, data=data or 0,
                                           amount_decimals=amount_decimals)
        withdrawal = RestWithdraw(
            account=self.signer.wallet_address,
            collateral=collateral,
            to=to,
            amount=str(signed.amount),
            salt=str(signed.salt),
            signature=signed.signature,
            data=str(data) if data is not None else None,
        )

        self.logger.audit("Withdrawing", withdraw_hash=signed.hash, collateral=collateral,
                          to=to, amount=withdrawal.amount)
        return await self.rest.withdraw(withdrawal)
