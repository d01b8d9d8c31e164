import json

import pytest
from fastapi.testclient import TestClient

from abstract_mcp import mcp
from abstract_mcp.metrics import default_metrics
from abstract_mcp.server import MCP_SERVER_NAME, MCP_SERVER_VERSION, app
from abstract_mcp.tools import ToolError

TOOL_NAMES = ["getWalletBalance", "getTokenSupply", "getTokenInfo", "getTransactionData", "getBlockInfo"]


@pytest.fixture
def client():
    return TestClient(app)


def _call(client, name, arguments, rpc_id=1):
    return client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": rpc_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        },
    )


def test_mcp_list_tools(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 1
    tools = {tool["name"]: tool for tool in data["result"]["tools"]}
    assert sorted(tools) == sorted(TOOL_NAMES)
    wallet_schema = tools["getWalletBalance"]["inputSchema"]
    assert wallet_schema["type"] == "object"
    assert set(wallet_schema["properties"]) == {"address", "tokenAddresses", "includeZeroBalances"}
    assert wallet_schema["required"] == ["address"]
    assert tools["getBlockInfo"]["inputSchema"]["required"] == ["blockHash"]
    assert tools["getTransactionData"]["inputSchema"]["required"] == ["txHash"]


def test_mcp_list_tools_legacy_alias(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "list_tools"})
    assert len(resp.json()["result"]["tools"]) == 5


def test_mcp_call_block_info_bad_hash_returns_text_block(client):
    resp = _call(client, "getBlockInfo", {"blockHash": "nope"}, rpc_id=3)
    assert resp.status_code == 200
    result = resp.json()["result"]
    assert "isError" not in result
    content = result["content"][0]
    assert content["type"] == "text"
    payload = json.loads(content["text"])
    assert payload["status"] == "error"
    assert payload["requestedBlockHash"] == "nope"
    assert result["structuredContent"] == payload
    assert content["text"].startswith("{\n  ")


def test_mcp_call_invalid_params(client):
    resp = _call(client, "getTokenSupply", {"token": "0x00"})
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "Invalid parameters."


def test_mcp_call_unknown_tool(client):
    resp = _call(client, "sendTransaction", {})
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "Unknown tool: sendTransaction"


def test_mcp_call_tool_failure_is_reported_in_band(monkeypatch, client):
    async def failing(token_address, **_kwargs):
        raise ToolError(f"Failed to get token supply: boom for {token_address}")

    monkeypatch.setattr(mcp.TOOL_REGISTRY["getTokenSupply"], "callable", failing)
    resp = _call(client, "getTokenSupply", {"tokenAddress": "0x" + "aa" * 20})
    result = resp.json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"].startswith("Failed to get token supply: boom")
    assert default_metrics.snapshot()["tool_error"] == {"getTokenSupply": 1}


def test_mcp_call_passes_snake_case_arguments(monkeypatch, client):
    seen = {}

    async def fake_wallet(address, token_addresses=None, include_zero_balances=False):
        seen.update(address=address, tokens=token_addresses, include=include_zero_balances)
        return {"address": address, "tokens": [], "tokenCount": 0}

    monkeypatch.setattr(mcp.TOOL_REGISTRY["getWalletBalance"], "callable", fake_wallet)
    resp = _call(
        client,
        "getWalletBalance",
        {"address": "0xabc", "tokenAddresses": ["0x1"], "includeZeroBalances": True},
    )
    assert resp.json()["result"]["structuredContent"]["tokenCount"] == 0
    assert seen == {"address": "0xabc", "tokens": ["0x1"], "include": True}
    assert default_metrics.snapshot()["tool_success"] == {"getWalletBalance": 1}


def test_mcp_initialize(client):
    resp = client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 10,
            "method": "initialize",
            "params": {
                "protocolVersion": "2025-03-26",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "0.0.0"},
            },
        },
    )
    assert resp.status_code == 200
    result = resp.json()["result"]
    assert result["protocolVersion"] == "2025-03-26"
    assert result["serverInfo"] == {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION}
    assert result["capabilities"]["tools"]["listChanged"] is False


def test_mcp_initialize_requires_protocol_version(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 11, "method": "initialize"})
    assert resp.json()["error"]["code"] == -32602


def test_mcp_initialized_notification_has_no_body(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert resp.status_code == 204


def test_mcp_unknown_method_returns_error(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 7, "method": "not_a_real_method"})
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32601


def test_mcp_invalid_params_type(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 12, "method": "tools/call", "params": []})
    data = resp.json()
    assert data["id"] == 12
    assert data["error"]["code"] == -32602


def test_mcp_missing_tool_name(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 13, "method": "tools/call", "params": {}})
    assert resp.json()["error"]["code"] == -32602


def test_mcp_parse_error_invalid_json(client):
    resp = client.post("/mcp", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700


def test_mcp_non_object_body(client):
    resp = client.post("/mcp", json=[1, 2, 3])
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32600
