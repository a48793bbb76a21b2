"""
Holder address discovery: every distinct owner that ever held the mint
in the observed transaction history.
"""
from typing import Iterable, Set

from wallet_pnl.core import constants
from wallet_pnl.core.logger import ProgressCallback, log_progress
from wallet_pnl.ingestion.base import LedgerSource
from wallet_pnl.ingestion.history import fetch_transactions, paginate_signatures
from wallet_pnl.ingestion.models import ParsedTransaction


def holders_in(txs: Iterable[ParsedTransaction], mint: str) -> Set[str]:
    addresses = set()
    for tx in txs:
        for tb in tx.pre_token_balances + tx.post_token_balances:
            if tb.mint == mint and tb.owner:
                addresses.add(tb.owner)
    return addresses


async def collect_holder_addresses(
    source: LedgerSource,
    mint: str,
    page_size: int = constants.SIGNATURE_PAGE_SIZE,
    batch_size: int = constants.DETAIL_BATCH_SIZE,
    progress: ProgressCallback = log_progress,
) -> Set[str]:
    signatures = await paginate_signatures(source, mint, page_size=page_size, progress=progress)
    txs = await fetch_transactions(source, signatures, batch_size=batch_size, progress=progress)

    addresses = holders_in(txs, mint)
    progress("addresses_collected", {"mint": mint, "transactions": len(txs), "addresses": len(addresses)})
    return addresses
