"""
Shared fixtures: an in-memory LedgerSource and builders for raw
getTransaction (jsonParsed) records.
"""
from decimal import Decimal
from typing import Dict, List, Optional

import httpx
import pytest

from wallet_pnl.core.constants import SIGNATURE_PAGE_SIZE
from wallet_pnl.ingestion.base import LedgerSource

WALLET = "WaLLet1111111111111111111111111111111111111"
POOL = "PooL11111111111111111111111111111111111111"
MINT = "MinT11111111111111111111111111111111111pump"
OTHER_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
DECIMALS = 6
LAMPORTS = 1_000_000_000


def token_entry(account_index: int, mint: str, owner: Optional[str], raw_amount: int, decimals: int = DECIMALS) -> Dict:
    return {
        "accountIndex": account_index,
        "mint": mint,
        "owner": owner,
        "uiTokenAmount": {
            "amount": str(raw_amount),
            "decimals": decimals,
            "uiAmountString": str(Decimal(raw_amount).scaleb(-decimals)),
        },
    }


def raw_tx(block_time, keys, pre_lamports, post_lamports, pre_tokens=(), post_tokens=(), slot=1) -> Dict:
    return {
        "slot": slot,
        "blockTime": block_time,
        "meta": {
            "err": None,
            "fee": 0,
            "preBalances": list(pre_lamports),
            "postBalances": list(post_lamports),
            "preTokenBalances": list(pre_tokens),
            "postTokenBalances": list(post_tokens),
        },
        "transaction": {
            "message": {
                "accountKeys": [
                    {"pubkey": k, "signer": i == 0, "writable": True, "source": "transaction"}
                    for i, k in enumerate(keys)
                ],
            },
            "signatures": [],
        },
    }


def swap_tx(block_time, side, tokens, sol, wallet=WALLET, mint=MINT, wallet_tokens_before=0, wallet_sol_before=100):
    """
    Wallet swaps `tokens` (whole units) of mint against `sol` (whole SOL) with POOL.
    side='buy' means the wallet receives tokens and pays SOL.
    """
    sign = 1 if side == "buy" else -1
    token_raw = tokens * 10 ** DECIMALS
    before_raw = wallet_tokens_before * 10 ** DECIMALS
    pool_raw = 1_000_000 * 10 ** DECIMALS

    keys = [wallet, POOL, wallet + "-ata", POOL + "-ata"]
    pre_lamports = [wallet_sol_before * LAMPORTS, 500 * LAMPORTS, 2039280, 2039280]
    post_lamports = [
        (wallet_sol_before - sign * sol) * LAMPORTS,
        (500 + sign * sol) * LAMPORTS,
        2039280,
        2039280,
    ]

    pre_tokens = [token_entry(3, mint, POOL, pool_raw)]
    if wallet_tokens_before:
        pre_tokens.append(token_entry(2, mint, wallet, before_raw))
    post_tokens = [
        token_entry(2, mint, wallet, before_raw + sign * token_raw),
        token_entry(3, mint, POOL, pool_raw - sign * token_raw),
    ]
    return raw_tx(block_time, keys, pre_lamports, post_lamports, pre_tokens, post_tokens)


class FakeLedgerSource(LedgerSource):
    """
    Serves signatures (newest first) per address and raw records per signature.
    Signatures listed in `failing` raise a transport error when resolved.
    """

    def __init__(self, history: Dict[str, List[str]], transactions: Dict[str, Dict], failing=(), failing_pages=()):
        self.history = history
        self.transactions = transactions
        self.failing = set(failing)
        self.failing_pages = set(failing_pages)
        self.signature_calls: List[Dict] = []
        self.transaction_calls: List[str] = []

    async def get_signatures(self, address, before=None, limit=SIGNATURE_PAGE_SIZE):
        self.signature_calls.append({"address": address, "before": before, "limit": limit})
        if before in self.failing_pages:
            raise httpx.ConnectError("connection reset")
        sigs = self.history.get(address, [])
        start = sigs.index(before) + 1 if before else 0
        return sigs[start:start + limit]

    async def get_transaction(self, signature):
        self.transaction_calls.append(signature)
        if signature in self.failing:
            raise httpx.ReadTimeout("timed out")
        return self.transactions.get(signature)


class Recorder:
    """Progress sink that keeps every (event, data) pair."""

    def __init__(self):
        self.events = []

    def __call__(self, event, data):
        self.events.append((event, data))

    def named(self, event):
        return [data for name, data in self.events if name == event]


@pytest.fixture
def recorder():
    return Recorder()
