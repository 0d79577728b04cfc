"""
Tests for the REST layer: RestManager retry/status mapping, Aevo error
bodies and the typed AevoRestClient endpoints.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from config.structs import AevoCredentials, NetworkConfig
from exchanges.aevo.rest import AevoRestClient, handle_aevo_error
from exchanges.aevo.structs import (
    AccountInfo,
    CancelAllOrdersResult,
    IndexPrice,
    MarketInfo,
    OrderInfo,
    RestCancelAllOrders,
    RestOrder,
    RestWithdraw,
    WithdrawResult,
)
from infrastructure.exceptions.exchange import (
    AuthenticationError,
    ExchangeConnectionRestError,
    ExchangeRestError,
    ExchangeServerError,
    InvalidParameterError,
    OrderNotFoundError,
    RateLimitErrorRest,
)
from infrastructure.exceptions.system import ConfigurationError
from infrastructure.networking.http import HTTPMethod, RestManager, default_error_handler

SAMPLE_ORDER = RestOrder(
    maker="0xabc", is_buy=True, instrument="1", limit_price="1850500000", amount="100000",
    salt="42", signature="0xsig", post_only=True, reduce_only=False, close_position=False,
    timestamp="1700000000",
)


class FakeResponse:
    def __init__(self, status, text, headers=None):
        self.status = status
        self._text = text
        self.headers = headers or {}

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


def session_returning(*outcomes):
    """Mock aiohttp session whose request() yields the outcomes in order."""
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    queue = list(outcomes)

    def request(method, url, **kwargs):
        outcome = queue.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    session.request = MagicMock(side_effect=request)
    return session


class TestDefaultErrorHandler:

    @pytest.mark.parametrize("status,error_type", [
        (400, InvalidParameterError),
        (401, AuthenticationError),
        (403, AuthenticationError),
        (404, OrderNotFoundError),
        (429, RateLimitErrorRest),
        (500, ExchangeServerError),
        (503, ExchangeServerError),
    ])
    def test_status_mapping(self, status, error_type):
        error = default_error_handler(status, "failure", {})
        assert isinstance(error, error_type)
        assert error.status_code == status

    def test_retry_after_header(self):
        error = default_error_handler(429, "slow down", {"Retry-After": "3"})
        assert error.retry_after == 3


class TestAevoErrorHandler:

    def test_known_error_code(self):
        error = handle_aevo_error(400, '{"error":"ORDER_DOES_NOT_EXIST"}')
        assert isinstance(error, OrderNotFoundError)
        assert "ORDER_DOES_NOT_EXIST" in str(error)

    def test_unknown_error_code_uses_status(self):
        error = handle_aevo_error(400, '{"error":"SOMETHING_NEW"}')
        assert isinstance(error, InvalidParameterError)

    def test_non_json_body_uses_status(self):
        error = handle_aevo_error(502, "<html>Bad Gateway</html>")
        assert isinstance(error, ExchangeServerError)


class TestRestManager:

    @pytest.mark.asyncio
    async def test_get_decodes_json(self):
        manager = RestManager("https://api.test", NetworkConfig(retry_delay=0))
        manager._session = session_returning(FakeResponse(200, '{"price":"1850.5","timestamp":"1"}'))

        result = await manager.get("/index", params={"asset": "ETH", "unused": None})

        assert result == {"price": "1850.5", "timestamp": "1"}
        args, kwargs = manager._session.request.call_args
        assert args == ("GET", "https://api.test/index")
        assert kwargs["params"] == {"asset": "ETH"}
        assert manager.get_metrics().total_requests == 1

    @pytest.mark.asyncio
    async def test_http_errors_are_not_retried(self):
        manager = RestManager("https://api.test", NetworkConfig(max_retries=3, retry_delay=0))
        manager._session = session_returning(FakeResponse(400, '{"error":"INVALID_AMOUNT"}'))

        with pytest.raises(InvalidParameterError):
            await manager.post("/orders", json_data={"amount": "0"})
        assert manager._session.request.call_count == 1

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self):
        manager = RestManager("https://api.test", NetworkConfig(max_retries=2, retry_delay=0))
        manager._session = session_returning(
            aiohttp.ClientConnectionError("reset"),
            asyncio.TimeoutError(),
            FakeResponse(200, '{"success":true}'),
        )

        assert await manager.post("/withdraw", json_data={}) == {"success": True}
        assert manager._session.request.call_count == 3

    @pytest.mark.asyncio
    async def test_connection_errors_exhaust(self):
        manager = RestManager("https://api.test", NetworkConfig(max_retries=1, retry_delay=0))
        manager._session = session_returning(
            aiohttp.ClientConnectionError("reset"),
            aiohttp.ClientConnectionError("reset"),
        )

        with pytest.raises(ExchangeConnectionRestError):
            await manager.get("/markets")

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        manager = RestManager("https://api.test", NetworkConfig(retry_delay=0))
        manager._session = session_returning(FakeResponse(200, "not json"))

        with pytest.raises(ExchangeRestError):
            await manager.get("/markets")

    def test_supported_methods(self):
        assert [method.value for method in HTTPMethod] == ["GET", "POST", "DELETE"]
        assert not hasattr(RestManager, "put")

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self):
        manager = RestManager("https://api.test", NetworkConfig(retry_delay=0))
        manager._session = session_returning(FakeResponse(200, ""))

        assert await manager.delete("/orders/abc") is None


@pytest.fixture
def rest_client(credentials, testnet_config):
    client = AevoRestClient(testnet_config, credentials, NetworkConfig(retry_delay=0))
    client._rest = MagicMock()
    client._rest.get = AsyncMock()
    client._rest.post = AsyncMock()
    client._rest.delete = AsyncMock()
    client._rest.close = AsyncMock()
    return client


class TestAevoRestClient:

    @pytest.mark.asyncio
    async def test_get_index(self, rest_client):
        rest_client._rest.get.return_value = {"price": "1850.5", "timestamp": "1700000000"}

        index = await rest_client.get_index("ETH")

        assert index == IndexPrice(price="1850.5", timestamp="1700000000")
        rest_client._rest.get.assert_awaited_once_with("/index", params={"asset": "ETH"})

    @pytest.mark.asyncio
    async def test_get_markets(self, rest_client):
        rest_client._rest.get.return_value = [
            {"instrument_id": "1", "instrument_name": "ETH-PERP", "instrument_type": "PERPETUAL",
             "is_active": True, "max_leverage": "20"},
            {"instrument_id": "77", "instrument_name": "ETH-29DEC23-2000-C", "instrument_type": "OPTION",
             "option_type": "call", "strike": "2000", "greeks": {"delta": "0.5", "iv": "0.6"}},
        ]

        markets = await rest_client.get_markets("ETH")

        assert [m.instrument_name for m in markets] == ["ETH-PERP", "ETH-29DEC23-2000-C"]
        assert isinstance(markets[0], MarketInfo)
        assert markets[0].greeks is None
        assert markets[1].greeks.delta == "0.5"

    @pytest.mark.asyncio
    async def test_private_endpoints_send_auth_headers(self, rest_client):
        rest_client._rest.get.return_value = {"account": "0xabc", "collaterals": []}

        account = await rest_client.get_account()

        assert isinstance(account, AccountInfo)
        _, kwargs = rest_client._rest.get.call_args
        assert kwargs["headers"] == {"AEVO-KEY": "test-api-key", "AEVO-SECRET": "test-api-secret"}

    @pytest.mark.asyncio
    async def test_missing_api_credentials(self, testnet_config):
        client = AevoRestClient(testnet_config, AevoCredentials())
        client._rest = MagicMock()
        client._rest.get = AsyncMock()

        with pytest.raises(ConfigurationError):
            await client.get_open_orders()
        client._rest.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_and_edit_order(self, rest_client):
        rest_client._rest.post.return_value = {"order_id": "0xhash", "order_status": "opened"}

        created = await rest_client.create_order(SAMPLE_ORDER)
        edited = await rest_client.edit_order("0xhash", SAMPLE_ORDER)

        assert isinstance(created, OrderInfo) and isinstance(edited, OrderInfo)
        endpoints = [call.args[0] for call in rest_client._rest.post.call_args_list]
        assert endpoints == ["/orders", "/orders/0xhash"]

    @pytest.mark.asyncio
    async def test_cancel_all_orders_body(self, rest_client):
        rest_client._rest.delete.return_value = {"success": True, "order_ids": ["a"]}

        result = await rest_client.cancel_all_orders(asset="ETH")

        assert result == CancelAllOrdersResult(success=True, order_ids=["a"])
        args, kwargs = rest_client._rest.delete.call_args
        assert args == ("/orders-all",)
        assert kwargs["json_data"] == RestCancelAllOrders(asset="ETH")

    @pytest.mark.asyncio
    async def test_withdraw(self, rest_client):
        rest_client._rest.post.return_value = {"success": True}
        withdrawal = RestWithdraw(account="0xabc", collateral="0xc", to="0xt", amount="1000000",
                                  salt="1", signature="0xsig")

        result = await rest_client.withdraw(withdrawal)

        assert result == WithdrawResult(success=True)
        rest_client._rest.post.assert_awaited_once()
        assert rest_client._rest.post.call_args.args[0] == "/withdraw"

    @pytest.mark.asyncio
    async def test_unexpected_response_shape(self, rest_client):
        rest_client._rest.get.return_value = {"unexpected": True}

        with pytest.raises(ExchangeRestError):
            await rest_client.get_index("ETH")
