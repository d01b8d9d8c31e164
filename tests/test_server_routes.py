import json
import logging

import pytest
from fastapi.testclient import TestClient

from abstract_mcp import mcp, server
from abstract_mcp.logging_config import JsonFormatter
from abstract_mcp.metrics import RECENT_DURATIONS_LIMIT, MetricsRecorder, default_metrics
from abstract_mcp.tools import ToolError


@pytest.fixture
def client():
    return TestClient(server.app)


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID")


def test_metrics_endpoint_counts_requests(client):
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["requests"] >= 2
    assert data["skipped_tokens"] == 0


def test_wallet_balance_route(monkeypatch, client):
    async def fake_tool(address, token_addresses=None, include_zero_balances=False):
        return {"address": address, "tokens": token_addresses, "include": include_zero_balances}

    monkeypatch.setattr(server, "get_wallet_balance", fake_tool)
    resp = client.get(
        "/tools/wallet_balance/0xabc?tokenAddresses=0x1&tokenAddresses=0x2&includeZeroBalances=true"
    )
    assert resp.status_code == 200
    assert resp.json() == {"address": "0xabc", "tokens": ["0x1", "0x2"], "include": True}


def test_token_routes(monkeypatch, client):
    async def fake_supply(token_address):
        return {"tokenAddress": token_address, "rawTotalSupply": "1"}

    async def fake_info(token_address):
        return {"tokenAddress": token_address, "metadata": {"tokenType": "ERC20"}}

    monkeypatch.setattr(server, "get_token_supply", fake_supply)
    monkeypatch.setattr(server, "get_token_info", fake_info)
    assert client.get("/tools/token_supply/0xtok").json()["rawTotalSupply"] == "1"
    assert client.get("/tools/token_info/0xtok").json()["metadata"]["tokenType"] == "ERC20"


def test_transaction_route_pending(monkeypatch, client):
    async def fake_tool(tx_hash):
        return {"status": "pending", "message": "Transaction is pending or not found on the blockchain"}

    monkeypatch.setattr(server, "get_transaction_data", fake_tool)
    resp = client.get("/tools/transaction/0x01")
    assert resp.json()["status"] == "pending"


def test_block_route_rejects_bad_hash_without_network(client):
    resp = client.get("/tools/block/deadbeef")
    assert resp.status_code == 200
    assert resp.json()["status"] == "error"


def test_route_reports_tool_error(monkeypatch, client):
    async def failing(tx_hash):
        raise ToolError("Failed to get transaction receipt: Node unreachable")

    monkeypatch.setattr(server, "get_transaction_data", failing)
    resp = client.get("/tools/transaction/0x01")
    assert resp.status_code == 200
    assert resp.json() == {"error": "Failed to get transaction receipt: Node unreachable"}
    assert client.get("/metrics").json()["tool_error"] == {"getTransactionData": 1}


def test_record_outcome_counts_results():
    mcp.record_outcome("getBlockInfo", {"number": 1})
    mcp.record_outcome("getBlockInfo", {"error": "Failed to get block information: boom"})
    mcp.record_outcome("getBlockInfo", None)
    snapshot = default_metrics.snapshot()
    assert snapshot["tool_success"] == {"getBlockInfo": 2}
    assert snapshot["tool_error"] == {"getBlockInfo": 1}


def test_recent_durations_stay_bounded(client):
    for _ in range(RECENT_DURATIONS_LIMIT + 25):
        client.get("/health")
    snapshot = client.get("/metrics").json()
    assert snapshot["requests"] == RECENT_DURATIONS_LIMIT + 26
    assert len(snapshot["recent_request_durations_ms"]) == RECENT_DURATIONS_LIMIT


def test_recorder_keeps_latest_durations():
    recorder = MetricsRecorder(recent_limit=2)
    for index in range(5):
        recorder.record_duration(f"req-{index}", float(index))
    assert recorder.snapshot()["recent_request_durations_ms"] == {"req-3": 3.0, "req-4": 4.0}


def test_json_formatter_includes_extras():
    record = logging.LogRecord("abstract_mcp.server", logging.WARNING, __file__, 1, "tool=%s", ("x",), None)
    record.tool = "getBlockInfo"
    record.request_id = "req-1"
    payload = json.loads(JsonFormatter().format(record))
    assert payload == {
        "level": "WARNING",
        "message": "tool=x",
        "name": "abstract_mcp.server",
        "tool": "getBlockInfo",
        "request_id": "req-1",
    }
