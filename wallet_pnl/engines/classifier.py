"""
Trade Classifier
================
Pairs the wallet's token delta with a SOL delta from the same
transaction to synthesize a buy or sell.

Known approximation: multi-hop routes and transactions where SOL moves
for reasons other than the swap can be misclassified or skipped.
"""
import logging
from typing import Iterable, List, Optional

from wallet_pnl.engines.deltas import base_deltas, token_deltas
from wallet_pnl.ingestion.models import ParsedTransaction, Trade

logger = logging.getLogger("engines.classifier")


def classify_trade(tx: ParsedTransaction, mint: str, wallet: Optional[str] = None) -> Optional[Trade]:
    """
    Returns a Trade, or None if tx is not a swap of `mint` for SOL.

    With wallet=None any owner's token change qualifies.
    """
    token_change = next(
        (
            d for d in token_deltas(tx)
            if d.currency == mint and (wallet is None or d.owner == wallet)
        ),
        None,
    )
    if token_change is None:
        return None

    sol_changes = base_deltas(tx)
    if not sol_changes:
        return None

    # Prefer the wallet's own native balance; fall back to the first mover
    sol_change = next((d for d in sol_changes if d.owner == wallet), sol_changes[0])

    token_amount = abs(token_change.amount)
    quote_amount = abs(sol_change.amount)

    return Trade(
        signature=tx.signature,
        side="buy" if token_change.amount > 0 else "sell",
        token_amount=token_amount,
        quote_amount=quote_amount,
        price=quote_amount / token_amount,
        block_time=tx.block_time,
    )


def extract_trades(txs: Iterable[ParsedTransaction], mint: str, wallet: Optional[str] = None) -> List[Trade]:
    """
    Classify every transaction and return trades oldest-first.

    Input arrives newest-first from the paginator, so ties on block_time
    are ordered by reversed input position.
    """
    indexed = []
    skipped = 0
    for position, tx in enumerate(txs):
        trade = classify_trade(tx, mint, wallet)
        if trade is None:
            skipped += 1
            continue
        indexed.append((trade.block_time, -position, trade))

    if skipped:
        logger.debug(f"Skipped {skipped} non-swap transactions")

    indexed.sort(key=lambda item: (item[0], item[1]))
    return [trade for _, _, trade in indexed]
