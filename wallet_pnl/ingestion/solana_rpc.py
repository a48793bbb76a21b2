"""
Solana JSON-RPC Client
======================
Async ledger source backed by a standard Solana RPC node
(getSignaturesForAddress + getTransaction), and the normalizer that
turns a raw jsonParsed transaction into a ParsedTransaction.
"""
import itertools
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from wallet_pnl.core import constants
from wallet_pnl.ingestion.base import LedgerSource
from wallet_pnl.ingestion.models import ParsedTransaction, TokenBalance

logger = logging.getLogger("ingestion.solana_rpc")


class RpcError(Exception):
    """JSON-RPC level error returned by the node."""

    def __init__(self, code: Optional[int], message: str):
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


class SolanaRpcClient(LedgerSource):
    """
    Thin async wrapper over a Solana RPC endpoint.
    Usable as an async context manager; closes the underlying httpx client on exit.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = constants.RPC_TIMEOUT_SECONDS,
        commitment: str = constants.RPC_COMMITMENT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.commitment = commitment
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        resp = await self._client.post(self.endpoint, json=payload)
        resp.raise_for_status()
        # Fractional JSON numbers (uiAmount) must never become floats
        try:
            data = resp.json(parse_float=Decimal)
        except ValueError as e:
            raise RpcError(None, f"invalid response: {e}") from e
        if not isinstance(data, dict):
            raise RpcError(None, f"invalid response: expected a JSON object, got {type(data).__name__}")

        if data.get("error"):
            err = data["error"]
            raise RpcError(err.get("code"), err.get("message", ""))
        return data.get("result")

    async def get_signatures(self, address: str, before: Optional[str] = None, limit: int = constants.SIGNATURE_PAGE_SIZE) -> List[str]:
        options: Dict[str, Any] = {"limit": limit, "commitment": self.commitment}
        if before:
            options["before"] = before

        result = await self._call("getSignaturesForAddress", [address, options]) or []
        return [entry["signature"] for entry in result if entry.get("signature")]

    async def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        return await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "jsonParsed",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": self.commitment,
                },
            ],
        )


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _ui_amount(ui: Dict[str, Any]) -> Optional[Decimal]:
    """
    Exact token amount in UI units.
    Prefers raw amount + decimals, then uiAmountString, then uiAmount.
    """
    amount = ui.get("amount")
    decimals = ui.get("decimals")
    try:
        if amount is not None and decimals is not None:
            return Decimal(str(amount)).scaleb(-int(decimals))
        if ui.get("uiAmountString") is not None:
            return Decimal(ui["uiAmountString"])
        if ui.get("uiAmount") is not None:
            return Decimal(str(ui["uiAmount"]))
    except (InvalidOperation, ValueError, TypeError):
        return None
    # No usable amount field: malformed, not an empty balance
    return None


def _token_balances(entries: Optional[List[Dict[str, Any]]]) -> Optional[List[TokenBalance]]:
    balances = []
    for entry in entries or []:
        amount = _ui_amount(entry.get("uiTokenAmount") or {})
        if amount is None or not entry.get("mint"):
            return None
        balances.append(TokenBalance(
            account_index=entry.get("accountIndex", -1),
            mint=entry["mint"],
            owner=entry.get("owner"),
            amount=amount,
        ))
    return balances


def _account_keys(message: Dict[str, Any], meta: Dict[str, Any]) -> List[str]:
    keys = []
    for key in message.get("accountKeys", []):
        # jsonParsed gives {"pubkey": ..., "signer": ..., "writable": ...}
        keys.append(key["pubkey"] if isinstance(key, dict) else key)

    # Plain json encoding lists v0 lookup-table accounts separately
    if keys and not isinstance(message["accountKeys"][0], dict):
        loaded = meta.get("loadedAddresses") or {}
        keys.extend(loaded.get("writable", []))
        keys.extend(loaded.get("readonly", []))
    return keys


def parse_transaction(signature: str, raw: Optional[Dict[str, Any]]) -> Optional[ParsedTransaction]:
    """
    Convert a raw getTransaction result into a ParsedTransaction.
    Returns None for records missing a block time or balance metadata.
    """
    if not raw:
        return None

    block_time = raw.get("blockTime")
    meta = raw.get("meta")
    if block_time is None or not meta:
        return None

    pre_balances = meta.get("preBalances")
    post_balances = meta.get("postBalances")
    if pre_balances is None or post_balances is None:
        return None

    pre_tokens = _token_balances(meta.get("preTokenBalances"))
    post_tokens = _token_balances(meta.get("postTokenBalances"))
    if pre_tokens is None or post_tokens is None:
        logger.warning(f"Unparseable token balances in {signature}, skipping")
        return None

    message = (raw.get("transaction") or {}).get("message") or {}

    return ParsedTransaction(
        signature=signature,
        block_time=int(block_time),
        account_keys=_account_keys(message, meta),
        pre_balances=[int(b) for b in pre_balances],
        post_balances=[int(b) for b in post_balances],
        pre_token_balances=pre_tokens,
        post_token_balances=post_tokens,
        slot=raw.get("slot"),
    )
