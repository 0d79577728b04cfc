"""
Aevo REST API client.

Public market data (index, markets) plus the authenticated account, order and
withdrawal endpoints. Authenticated calls carry the AEVO-KEY / AEVO-SECRET
headers; signed bodies (orders, withdrawals) are built by the caller.

Responses are decoded into the records in exchanges.aevo.structs.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import msgspec

from config.structs import AevoCredentials, EnvironmentConfig, NetworkConfig
from infrastructure.exceptions.exchange import ExchangeRestError
from infrastructure.exceptions.system import ConfigurationError
from infrastructure.logging import get_exchange_logger
from infrastructure.networking.http import RestManager
from ..structs import (
    AccountInfo,
    CancelAllOrdersResult,
    CancelOrderResult,
    IndexPrice,
    MarketInfo,
    OrderInfo,
    PortfolioInfo,
    RestCancelAllOrders,
    RestOrder,
    RestWithdraw,
    WithdrawResult,
)
from .error_handler import handle_aevo_error

T = TypeVar('T')


class AevoRestClient:
    """Thin typed wrapper over RestManager for the Aevo endpoints."""

    def __init__(
        self,
        env_config: EnvironmentConfig,
        credentials: Optional[AevoCredentials] = None,
        network_config: Optional[NetworkConfig] = None,
        logger=None,
    ):
        self.env_config = env_config
        self.credentials = credentials or AevoCredentials()
        self.logger = logger or get_exchange_logger('aevo', 'rest')
        self._rest = RestManager(
            env_config.rest_url,
            config=network_config,
            error_handler=handle_aevo_error,
            logger=self.logger,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _auth_headers(self) -> Dict[str, str]:
        if not self.credentials.has_api_credentials():
            raise ConfigurationError("Api key and/or secret are not established", 'api_key')
        return {
            "AEVO-KEY": self.credentials.api_key,
            "AEVO-SECRET": self.credentials.api_secret,
        }

    @staticmethod
    def _decode(data: Any, response_type: Type[T]) -> T:
        try:
            return msgspec.convert(data, response_type)
        except msgspec.ValidationError as e:
            raise ExchangeRestError(200, f"Unexpected response shape: {e}") from e

    # Public endpoints

    async def get_index(self, asset: str) -> IndexPrice:
        data = await self._rest.get("/index", params={"asset": asset})
        return self._decode(data, IndexPrice)

    async def get_markets(self, asset: Optional[str] = None) -> List[MarketInfo]:
        data = await self._rest.get("/markets", params={"asset": asset})
        return self._decode(data, List[MarketInfo])

    # Authenticated endpoints

    async def get_account(self) -> AccountInfo:
        self.logger.info("Getting account info")
        data = await self._rest.get("/account", headers=self._auth_headers())
        return self._decode(data, AccountInfo)

    async def get_portfolio(self) -> PortfolioInfo:
        self.logger.info("Getting portfolio info")
        data = await self._rest.get("/portfolio", headers=self._auth_headers())
        return self._decode(data, PortfolioInfo)

    async def get_open_orders(self) -> List[OrderInfo]:
        self.logger.info("Getting open orders")
        data = await self._rest.get("/orders", headers=self._auth_headers())
        return self._decode(data, List[OrderInfo])

    async def create_order(self, order: RestOrder) -> OrderInfo:
        headers = self._auth_headers()
        self.logger.info("Creating REST order", instrument=order.instrument,
                         is_buy=order.is_buy, limit_price=order.limit_price, amount=order.amount)
        data = await self._rest.post("/orders", json_data=order, headers=headers)
        return self._decode(data, OrderInfo)

    async def edit_order(self, order_id: str, order: RestOrder) -> OrderInfo:
        headers = self._auth_headers()
        self.logger.info("Editing REST order", order_id=order_id, instrument=order.instrument)
        data = await self._rest.post(f"/orders/{order_id}", json_data=order, headers=headers)
        return self._decode(data, OrderInfo)

    async def cancel_order(self, order_id: str) -> CancelOrderResult:
        headers = self._auth_headers()
        self.logger.info("Cancelling order", order_id=order_id)
        data = await self._rest.delete(f"/orders/{order_id}", headers=headers)
        return self._decode(data, CancelOrderResult)

    async def cancel_all_orders(self, instrument_type: Optional[str] = None,
                                asset: Optional[str] = None) -> CancelAllOrdersResult:
        headers = self._auth_headers()
        self.logger.info("Cancelling all orders", instrument_type=instrument_type, asset=asset)
        body = RestCancelAllOrders(instrument_type=instrument_type, asset=asset)
        data = await self._rest.delete("/orders-all", json_data=body, headers=headers)
        return self._decode(data, CancelAllOrdersResult)

    async def withdraw(self, withdrawal: RestWithdraw) -> WithdrawResult:
        headers = self._auth_headers()
        self.logger.info("Withdrawing", collateral=withdrawal.collateral, to=withdrawal.to,
                         amount=withdrawal.amount)
        data = await self._rest.post("/withdraw", json_data=withdrawal, headers=headers)
        return self._decode(data, WithdrawResult)

    async def close(self) -> None:
        await self._rest.close()
