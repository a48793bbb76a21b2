#!/usr/bin/env python3
"""
Test the Solana JSON-RPC client and transaction normalization.

Tests:
1. Request shape for getSignaturesForAddress / getTransaction
2. RPC, HTTP and malformed-body errors surface as exceptions
3. Fractional JSON numbers decode to Decimal, never float
4. Account keys from jsonParsed objects or plain strings + loaded addresses
"""
import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from conftest import MINT, WALLET, swap_tx
from wallet_pnl.ingestion.history import paginate_signatures
from wallet_pnl.ingestion.solana_rpc import RpcError, SolanaRpcClient, parse_transaction

ENDPOINT = "https://rpc.test"


def make_client(handler):
    return SolanaRpcClient(ENDPOINT, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def rpc_result(request, result):
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def test_get_signatures_request_and_result():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return rpc_result(request, [
            {"signature": "sigA", "slot": 2, "err": None, "blockTime": 20},
            {"signature": "sigB", "slot": 1, "err": None, "blockTime": 10},
        ])

    async def run():
        async with make_client(handler) as client:
            return await client.get_signatures(WALLET, before="sigZ", limit=50)

    assert asyncio.run(run()) == ["sigA", "sigB"]
    body = seen[0]
    assert body["method"] == "getSignaturesForAddress"
    assert body["params"][0] == WALLET
    assert body["params"][1] == {"limit": 50, "commitment": "confirmed", "before": "sigZ"}


def test_first_page_has_no_before():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return rpc_result(request, [])

    async def run():
        async with make_client(handler) as client:
            return await client.get_signatures(WALLET)

    assert asyncio.run(run()) == []
    assert "before" not in seen[0]["params"][1]


def test_get_transaction_requests_json_parsed():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return rpc_result(request, swap_tx(100, "buy", tokens=1, sol=1))

    async def run():
        async with make_client(handler) as client:
            return await client.get_transaction("sig1")

    raw = asyncio.run(run())
    assert raw["blockTime"] == 100
    params = seen[0]["params"]
    assert seen[0]["method"] == "getTransaction"
    assert params[0] == "sig1"
    assert params[1]["encoding"] == "jsonParsed"
    assert params[1]["maxSupportedTransactionVersion"] == 0


def test_rpc_error_raises():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32005, "message": "rate limited"}})

    async def run():
        async with make_client(handler) as client:
            await client.get_signatures(WALLET)

    with pytest.raises(RpcError) as exc:
        asyncio.run(run())
    assert exc.value.code == -32005


def test_http_error_raises():
    def handler(request):
        return httpx.Response(502, text="bad gateway")

    async def run():
        async with make_client(handler) as client:
            await client.get_transaction("sig1")

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(run())


def test_pagination_over_rpc_stops_on_error():
    calls = []

    def handler(request):
        body = json.loads(request.content)
        calls.append(body["params"][1].get("before"))
        if len(calls) == 1:
            return rpc_result(request, [{"signature": "s2"}, {"signature": "s1"}])
        return httpx.Response(429, text="too many requests")

    async def run():
        async with make_client(handler) as client:
            return await paginate_signatures(client, WALLET, page_size=2, progress=lambda e, d: None)

    assert asyncio.run(run()) == ["s2", "s1"]
    assert calls == [None, "s1"]


def test_pagination_over_rpc_stops_on_invalid_body():
    calls = []

    def handler(request):
        body = json.loads(request.content)
        calls.append(body["params"][1].get("before"))
        if len(calls) == 1:
            return rpc_result(request, [{"signature": "s2"}, {"signature": "s1"}])
        # Gateway error page served with a 200 status
        return httpx.Response(200, text="<html>502 Bad Gateway</html>")

    async def run():
        async with make_client(handler) as client:
            return await paginate_signatures(client, WALLET, page_size=2, progress=lambda e, d: None)

    assert asyncio.run(run()) == ["s2", "s1"]
    assert calls == [None, "s1"]


@pytest.mark.parametrize("body", ["<html>502 Bad Gateway</html>", "[]", "null"])
def test_non_object_body_raises_rpc_error(body):
    def handler(request):
        return httpx.Response(200, text=body)

    async def run():
        async with make_client(handler) as client:
            await client.get_transaction("sig1")

    with pytest.raises(RpcError) as exc:
        asyncio.run(run())
    assert exc.value.code is None
    assert "invalid response" in exc.value.message


def test_ui_amount_decodes_as_decimal():
    raw = swap_tx(100, "buy", tokens=1, sol=1)
    for entry in raw["meta"]["postTokenBalances"]:
        entry["uiTokenAmount"] = {"uiAmount": 0.1}

    def handler(request):
        return rpc_result(request, raw)

    async def run():
        async with make_client(handler) as client:
            return await client.get_transaction("sig1")

    tx = parse_transaction("sig1", asyncio.run(run()))
    amounts = [tb.amount for tb in tx.post_token_balances]
    assert amounts == [Decimal("0.1"), Decimal("0.1")]


def test_raw_amount_takes_precedence():
    raw = swap_tx(100, "buy", tokens=1, sol=1)
    raw["meta"]["postTokenBalances"][0]["uiTokenAmount"] = {
        "amount": "1234567",
        "decimals": 6,
        "uiAmount": 1.234567,
        "uiAmountString": "1.234567",
    }
    tx = parse_transaction("sig", raw)

    assert tx.post_token_balances[0].amount == Decimal("1.234567")
    assert tx.post_token_balances[0].owner == WALLET
    assert tx.post_token_balances[0].mint == MINT


def test_plain_account_keys_include_loaded_addresses():
    raw = swap_tx(100, "buy", tokens=1, sol=1)
    raw["transaction"]["message"]["accountKeys"] = ["k0", "k1"]
    raw["meta"]["loadedAddresses"] = {"writable": ["w0"], "readonly": ["r0"]}
    tx = parse_transaction("sig", raw)

    assert tx.account_keys == ["k0", "k1", "w0", "r0"]


def test_incomplete_records_parse_to_none():
    assert parse_transaction("sig", None) is None
    raw = swap_tx(100, "buy", tokens=1, sol=1)
    assert parse_transaction("sig", {**raw, "blockTime": None}) is None
    assert parse_transaction("sig", {**raw, "meta": {}}) is None

    bad = swap_tx(100, "buy", tokens=1, sol=1)
    bad["meta"]["postTokenBalances"][0]["uiTokenAmount"] = {"amount": "abc", "decimals": 6}
    assert parse_transaction("sig", bad) is None

    # Post balance with no usable amount field must not read as an emptied position
    empty = swap_tx(100, "sell", tokens=4, sol=1, wallet_tokens_before=10)
    empty["meta"]["postTokenBalances"][0]["uiTokenAmount"] = {}
    assert parse_transaction("sig", empty) is None
