"""
Balance Delta Extractor
=======================
Diffs pre/post balance snapshots of one transaction into signed
BalanceDelta records. Pure Decimal arithmetic; zero deltas are dropped.
"""
from decimal import Decimal
from typing import Dict, List, Tuple

from wallet_pnl.core.constants import SOL_DECIMALS
from wallet_pnl.ingestion.models import BalanceDelta, ParsedTransaction, TokenBalance

# Currency tag for native lamport balances
BASE_CURRENCY = "SOL"


def _group_by_owner(balances: List[TokenBalance]) -> Dict[Tuple[str, str], Decimal]:
    # An owner may hold the same mint in several token accounts
    grouped: Dict[Tuple[str, str], Decimal] = {}
    for tb in balances:
        if not tb.owner:
            continue
        key = (tb.owner, tb.mint)
        grouped[key] = grouped.get(key, Decimal(0)) + tb.amount
    return grouped


def token_deltas(tx: ParsedTransaction) -> List[BalanceDelta]:
    """
    Per-(owner, mint) token balance changes.
    Only owners present in the post snapshot are considered; a missing pre balance counts as zero.
    """
    pre = _group_by_owner(tx.pre_token_balances)
    post = _group_by_owner(tx.post_token_balances)

    deltas = []
    for (owner, mint), post_amount in post.items():
        change = post_amount - pre.get((owner, mint), Decimal(0))
        if change != 0:
            deltas.append(BalanceDelta(owner=owner, currency=mint, amount=change))
    return deltas


def base_deltas(tx: ParsedTransaction) -> List[BalanceDelta]:
    """Native balance changes per account key, in SOL, in account-key order."""
    deltas = []
    for index, account in enumerate(tx.account_keys):
        if index >= len(tx.post_balances):
            break
        pre = tx.pre_balances[index] if index < len(tx.pre_balances) else 0
        change = tx.post_balances[index] - pre  # integer lamports, exact
        if change != 0:
            deltas.append(BalanceDelta(
                owner=account,
                currency=BASE_CURRENCY,
                amount=Decimal(change).scaleb(-SOL_DECIMALS),
            ))
    return deltas
