"""
Tests for AevoClient: connection lifecycle, subscriptions, signed order flow
over the stream and over REST, and withdrawals.
"""

import asyncio
from unittest.mock import AsyncMock

import msgspec
import pytest

from config.environments import AevoEnvironment
from config.structs import AevoCredentials
from exchanges.aevo import AevoClient
from exchanges.aevo.structs import CorrelatedReply, OrderInfo, SubscriptionPush, WithdrawResult
from infrastructure.exceptions.system import SigningError
from infrastructure.exceptions.websocket import ConnectionNotEstablishedError, WebSocketSendError
from utils.math_utils import MARKET_BUY_PRICE
from fakes import FakeConnection, FakeConnector


@pytest.fixture
def client(credentials, ws_config, connector):
    return AevoClient(credentials=credentials, environment=AevoEnvironment.TESTNET,
                      websocket_config=ws_config, connect_method=connector)


def sent_requests(connection):
    return [msgspec.json.decode(frame) for frame in connection.sent]


class TestConnection:

    @pytest.mark.asyncio
    async def test_open_sends_auth(self, client, connection):
        await client.open_connection()

        assert client.is_connected
        assert sent_requests(connection) == [{
            "op": "auth",
            "data": {"key": "test-api-key", "secret": "test-api-secret"},
            "id": 1,
        }]

    @pytest.mark.asyncio
    async def test_no_auth_without_api_credentials(self, ws_config, connector, connection):
        client = AevoClient(credentials=AevoCredentials(), websocket_config=ws_config,
                            connect_method=connector)
        await client.open_connection()

        assert connection.sent == []

    @pytest.mark.asyncio
    async def test_send_before_open(self, client):
        with pytest.raises(ConnectionNotEstablishedError):
            await client.subscribe_orders()

    @pytest.mark.asyncio
    async def test_reconnect_and_close(self, client, connector):
        await client.open_connection()
        await client.reconnect()

        assert connector.calls == 2
        assert client.transport.generation == 2

        client.rest.close = AsyncMock()
        await client.close()

        assert not client.is_connected
        assert all(conn.closed for conn in connector.opened)
        client.rest.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_connection_ends_background_reading(self, client, connector):
        await client.open_connection()
        task = client.start_reading(asyncio.Queue())
        await asyncio.sleep(0)

        await client.close_connection()
        await asyncio.wait_for(task, timeout=1.0)

        assert connector.calls == 1
        assert not client.is_connected

    @pytest.mark.asyncio
    async def test_context_manager(self, credentials, ws_config, connector):
        async with AevoClient(credentials=credentials, websocket_config=ws_config,
                              connect_method=connector) as client:
            assert client.is_connected
        assert not client.is_connected


class TestSubscriptions:

    @pytest.mark.asyncio
    async def test_channel_names(self, client, connection):
        await client.open_connection()
        connection.sent.clear()

        await client.subscribe_tickers("ETH")
        await client.subscribe_ticker("ticker:BTC:OPTION")
        await client.subscribe_markprice("ETH")
        await client.subscribe_orderbook("ETH-PERP")
        await client.subscribe_trades("ETH-PERP")
        await client.subscribe_index("ETH")
        await client.subscribe_orders()
        await client.subscribe_fills()
        await client.subscribe_positions()

        channels = [request["data"] for request in sent_requests(connection)]
        assert channels == [
            ["ticker:ETH:OPTION"],
            ["ticker:BTC:OPTION"],
            ["markprice:ETH:OPTION"],
            ["orderbook:ETH-PERP"],
            ["trades:ETH-PERP"],
            ["index:ETH"],
            ["orders"],
            ["fills"],
            ["positions"],
        ]
        assert {request["op"] for request in sent_requests(connection)} == {"subscribe"}

    @pytest.mark.asyncio
    async def test_unsubscribe(self, client, connection):
        await client.open_connection()
        connection.sent.clear()

        await client.unsubscribe(["orders", "fills"], request_id=9)

        assert sent_requests(connection) == [{"op": "unsubscribe", "data": ["orders", "fills"], "id": 9}]


class TestStreamingOrders:

    @pytest.mark.asyncio
    async def test_create_order(self, client, connection, test_account):
        await client.open_connection()
        connection.sent.clear()

        order_hash = await client.create_order(instrument_id=1, is_buy=True,
                                               limit_price=1850.5, quantity=0.1)

        request = sent_requests(connection)[0]
        assert request["op"] == "create_order"
        assert "id" not in request
        data = request["data"]
        assert data["maker"] == test_account.address
        assert data["instrument"] == "1"
        assert data["limit_price"] == "1850500000"
        assert data["amount"] == "100000"
        assert data["post_only"] is True
        assert data["mmp"] is True
        assert data["signature"].startswith("0x")
        assert order_hash.startswith("0x") and len(order_hash) == 66

    @pytest.mark.asyncio
    async def test_edit_order_carries_previous_id(self, client, connection):
        await client.open_connection()
        connection.sent.clear()

        new_hash = await client.edit_order("0xold", instrument_id=1, is_buy=False,
                                           limit_price=1900, quantity=1, post_only=False, mmp=False)

        request = sent_requests(connection)[0]
        assert request["op"] == "edit_order"
        assert request["data"]["order_id"] == "0xold"
        assert request["data"]["post_only"] is False
        assert request["data"]["mmp"] is False
        assert new_hash != "0xold"

    @pytest.mark.asyncio
    async def test_cancel_requests(self, client, connection):
        await client.open_connection()
        connection.sent.clear()

        await client.cancel_order("0xhash")
        await client.cancel_all_orders()

        assert sent_requests(connection) == [
            {"op": "cancel_order", "data": {"order_id": "0xhash"}},
            {"op": "cancel_all_orders", "data": {}},
        ]

    @pytest.mark.asyncio
    async def test_missing_signing_key_sends_nothing(self, ws_config, connector, connection):
        client = AevoClient(credentials=AevoCredentials(api_key="k", api_secret="s"),
                            websocket_config=ws_config, connect_method=connector)
        await client.open_connection()
        connection.sent.clear()

        with pytest.raises(SigningError):
            await client.create_order(instrument_id=1, is_buy=True, limit_price=10, quantity=1)
        assert connection.sent == []

    @pytest.mark.asyncio
    async def test_reply_decoded_by_request_id(self, client, connection):
        await client.open_connection()
        queue = asyncio.Queue()
        client.start_reading(queue)

        await client.create_order(instrument_id=1, is_buy=True, limit_price=10,
                                  quantity=1, request_id=42)
        connection.feed('{"id":42,"data":{"order_id":"0xhash","order_status":"opened"}}')
        connection.feed('{"channel":"index:ETH","data":{"price":"1850","timestamp":"1"}}')

        reply = await asyncio.wait_for(queue.get(), timeout=1.0)
        push = await asyncio.wait_for(queue.get(), timeout=1.0)

        assert isinstance(reply, CorrelatedReply)
        assert reply.op == "create_order"
        assert isinstance(reply.data, OrderInfo)
        assert isinstance(push, SubscriptionPush)

        await client.stop_reading()
        await client.close_connection()


@pytest.fixture
def rest_mocked_client(client):
    client.rest.create_order = AsyncMock(return_value=OrderInfo(order_id="0xhash"))
    client.rest.edit_order = AsyncMock(return_value=OrderInfo(order_id="0xnew"))
    client.rest.withdraw = AsyncMock(return_value=WithdrawResult(success=True))
    client.rest.cancel_all_orders = AsyncMock()
    return client


class TestRestOrders:

    @pytest.mark.asyncio
    async def test_rest_create_order_defaults(self, rest_mocked_client):
        result = await rest_mocked_client.rest_create_order(instrument_id=1, is_buy=True,
                                                            limit_price=1850.5, quantity=0.1)

        order = rest_mocked_client.rest.create_order.call_args.args[0]
        assert result.order_id == "0xhash"
        assert order.post_only is True
        assert order.reduce_only is False
        assert order.close_position is False
        assert order.limit_price == "1850500000"
        assert msgspec.json.decode(msgspec.json.encode(order)).keys().isdisjoint({"trigger", "stop"})

    @pytest.mark.asyncio
    async def test_rest_market_order_uses_sentinel(self, rest_mocked_client):
        await rest_mocked_client.rest_create_market_order(instrument_id=1, is_buy=True, quantity=2)

        order = rest_mocked_client.rest.create_order.call_args.args[0]
        assert order.limit_price == str(MARKET_BUY_PRICE)
        assert order.post_only is False

    @pytest.mark.asyncio
    async def test_rest_market_sell(self, rest_mocked_client):
        await rest_mocked_client.rest_create_market_order(instrument_id=1, is_buy=False, quantity=2)

        order = rest_mocked_client.rest.create_order.call_args.args[0]
        assert order.limit_price == "0"

    @pytest.mark.asyncio
    async def test_rest_edit_order(self, rest_mocked_client):
        await rest_mocked_client.rest_edit_order("0xold", instrument_id=1, is_buy=True,
                                                 limit_price=10, quantity=1)

        order_id, order = rest_mocked_client.rest.edit_order.call_args.args
        assert order_id == "0xold"
        assert order.limit_price == "10000000"

    @pytest.mark.asyncio
    async def test_rest_cancel_all_orders_filters(self, rest_mocked_client):
        await rest_mocked_client.rest_cancel_all_orders(instrument_type="OPTION", asset="ETH")
        rest_mocked_client.rest.cancel_all_orders.assert_awaited_once_with("OPTION", "ETH")


class TestWithdraw:

    @pytest.mark.asyncio
    async def test_withdraw_defaults(self, rest_mocked_client, test_account, testnet_config):
        result = await rest_mocked_client.withdraw(amount=25.5)

        withdrawal = rest_mocked_client.rest.withdraw.call_args.args[0]
        assert result.success is True
        assert withdrawal.account == test_account.address
        assert withdrawal.collateral == testnet_config.addresses.l1_usdc
        assert withdrawal.to == testnet_config.addresses.l2_withdraw_proxy
        assert withdrawal.amount == "25500000"
        assert withdrawal.data is None

    @pytest.mark.asyncio
    async def test_withdraw_with_data(self, rest_mocked_client):
        await rest_mocked_client.withdraw(amount=1, data=7)

        withdrawal = rest_mocked_client.rest.withdraw.call_args.args[0]
        assert withdrawal.data == "7"


class TestRequestIds:

    @pytest.mark.asyncio
    async def test_auth_id_cannot_be_reused(self, client, connection):
        await client.open_connection()
        connection.sent.clear()

        with pytest.raises(ValueError):
            await client.subscribe("orders", request_id=1)

        assert connection.sent == []
        reply = client.message_parser('{"id":1,"data":{"success":true}}')
        assert reply.op == "auth"

    @pytest.mark.asyncio
    async def test_failed_send_forgets_request_id(self, client, connection):
        await client.open_connection()
        connection.send_failures = [RuntimeError("socket buffer full")]

        with pytest.raises(WebSocketSendError):
            await client.cancel_order("0xhash", request_id=5)

        assert client.message_parser.pending_count == 0

    @pytest.mark.asyncio
    async def test_auth_reply_typed_after_reconnect(self, client, connector, connection):
        await client.open_connection()
        queue = asyncio.Queue()
        client.start_reading(queue)

        connection.feed('{"id":1,"data":{"success":true}}')
        await client.reconnect()
        connector.opened[-1].feed('{"id":1,"data":{"success":true}}')

        first = await asyncio.wait_for(queue.get(), timeout=1.0)
        second = await asyncio.wait_for(queue.get(), timeout=1.0)

        assert first.op == second.op == "auth"
        await client.stop_reading()
        await client.close_connection()
