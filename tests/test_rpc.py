from __future__ import annotations

import random

import pytest
import requests

from payra_sdk.core.errors import ConfigError, ContractCallError, ErrorKind, RpcUnavailable
from payra_sdk.core.rpc import (
    JsonRpcTransport,
    PrioritySelector,
    RandomSelector,
    RoundRobinSelector,
    check_rpc_health,
    select_endpoint,
    selector_for,
)
from rpc_mocks import FORWARD_ADDRESS, RPC_URL, FakeResponse, FakeSession, healthy, rpc_result

URLS = ("https://a.example", "https://b.example", "https://c.example")


class TestSelectors:
    def test_random_selector_is_uniform_over_candidates(self):
        selector = RandomSelector(random.Random(1234))
        picks = {selector.select("POLYGON", URLS) for _ in range(200)}
        assert picks == set(URLS)

    def test_round_robin_cycles_per_network(self):
        selector = RoundRobinSelector()
        assert [selector.select("POLYGON", URLS) for _ in range(4)] == [
            URLS[0],
            URLS[1],
            URLS[2],
            URLS[0],
        ]
        assert selector.select("LINEA", URLS) == URLS[0]

    def test_priority_selector_uses_first(self):
        assert PrioritySelector().select("POLYGON", URLS) == URLS[0]

    def test_selector_for_names(self):
        assert isinstance(selector_for("random"), RandomSelector)
        assert isinstance(selector_for("ROUND-ROBIN"), RoundRobinSelector)
        assert isinstance(selector_for("priority"), PrioritySelector)
        with pytest.raises(ConfigError):
            selector_for("fastest")


class TestHealthProbe:
    def test_healthy_endpoint(self):
        session = FakeSession(eth_blockNumber=healthy())

        assert check_rpc_health(session, RPC_URL) is True

        (call,) = session.calls
        assert call["url"] == RPC_URL
        assert call["json"] == {
            "jsonrpc": "2.0",
            "method": "eth_blockNumber",
            "id": 1,
            "params": [],
        }
        assert call["headers"] == {"Content-Type": "application/json"}
        assert call["timeout"] == 3

    @pytest.mark.parametrize(
        "response",
        [
            FakeResponse(500, {"error": "boom"}),
            FakeResponse(200, None, text="<html>"),
            FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "result": 123}),
            FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000}}),
            FakeResponse(200, ["0x1"]),
        ],
    )
    def test_unhealthy_responses(self, response):
        session = FakeSession(eth_blockNumber=response)
        assert check_rpc_health(session, RPC_URL) is False

    def test_transport_errors_are_unhealthy(self, timeout_error):
        session = FakeSession(eth_blockNumber=timeout_error)
        assert check_rpc_health(session, RPC_URL, timeout=0.5) is False
        assert session.calls[0]["timeout"] == 0.5

    def test_failure_is_logged(self, caplog):
        session = FakeSession(eth_blockNumber=requests.ConnectionError("refused"))
        with caplog.at_level("WARNING"):
            check_rpc_health(session, RPC_URL)
        assert f"RPC {RPC_URL} failed" in caplog.text


class TestSelectEndpoint:
    def test_returns_healthy_url(self):
        session = FakeSession(eth_blockNumber=healthy())
        url = select_endpoint(session, "POLYGON", URLS, PrioritySelector())
        assert url == URLS[0]

    def test_no_urls(self):
        with pytest.raises(ConfigError, match="No RPC URLs found for network: POLYGON"):
            select_endpoint(FakeSession(), "POLYGON", (), PrioritySelector())

    def test_single_shot_without_fallback(self):
        session = FakeSession(eth_blockNumber=[FakeResponse(500, {}), healthy()])

        with pytest.raises(RpcUnavailable) as excinfo:
            select_endpoint(session, "POLYGON", URLS, PrioritySelector())

        assert str(excinfo.value) == f"RPC {URLS[0]} is not responding"
        assert excinfo.value.url == URLS[0]
        assert excinfo.value.kind is ErrorKind.RPC_UNAVAILABLE
        assert len(session.calls) == 1


class TestJsonRpcTransport:
    def test_eth_call_request_shape(self):
        session = FakeSession(eth_call=rpc_result("0x" + "00" * 31 + "01"))
        transport = JsonRpcTransport(session, RPC_URL, timeout=12)

        raw = transport.call(FORWARD_ADDRESS, b"\x12\x34")

        assert bytes(raw) == b"\x00" * 31 + b"\x01"
        (call,) = session.calls
        assert call["json"]["method"] == "eth_call"
        assert call["json"]["params"] == [
            {"to": FORWARD_ADDRESS, "data": "0x1234"},
            "latest",
        ]
        assert call["timeout"] == 12

    def test_revert_is_reported(self):
        session = FakeSession(
            eth_call=FakeResponse(
                200,
                {
                    "jsonrpc": "2.0",
                    "id": 1,
                    "error": {"code": 3, "message": "execution reverted", "data": "0x08c379a0"},
                },
            )
        )
        transport = JsonRpcTransport(session, RPC_URL)

        with pytest.raises(ContractCallError, match="execution reverted \\(data: 0x08c379a0\\)"):
            transport.call(FORWARD_ADDRESS, b"")

    @pytest.mark.parametrize(
        "handler",
        [
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
            FakeResponse(502, None, text="bad gateway"),
            FakeResponse(200, None, text="not json"),
            FakeResponse(200, {"jsonrpc": "2.0", "id": 1}),
            FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "result": "0xzz"}),
        ],
    )
    def test_transport_failures(self, handler):
        transport = JsonRpcTransport(FakeSession(eth_call=handler), RPC_URL)
        with pytest.raises(ContractCallError):
            transport.call(FORWARD_ADDRESS, b"\x00")
