"""
History Paginator + Batch Detail Fetcher
========================================
The only I/O stages of the pipeline. Both degrade to partial results
instead of raising: a failed page ends pagination, a failed signature
yields no record.
"""
import asyncio
import logging
from typing import List, Optional

import httpx

from wallet_pnl.core import constants
from wallet_pnl.core.logger import ProgressCallback, log_progress
from wallet_pnl.ingestion.base import LedgerSource
from wallet_pnl.ingestion.models import ParsedTransaction
from wallet_pnl.ingestion.solana_rpc import RpcError, parse_transaction

logger = logging.getLogger("ingestion.history")


async def paginate_signatures(
    source: LedgerSource,
    address: str,
    page_size: int = constants.SIGNATURE_PAGE_SIZE,
    progress: ProgressCallback = log_progress,
) -> List[str]:
    """
    Walk the signature index for address backward in time until a page comes back empty.
    Returns signatures newest -> oldest.
    """
    signatures: List[str] = []
    seen_cursors = set()
    before: Optional[str] = None

    while True:
        try:
            page = await source.get_signatures(address, before=before, limit=page_size)
        except (httpx.HTTPError, RpcError) as e:
            logger.error(f"Error fetching signatures for {address} (before={before}): {e}")
            break

        if not page:
            break

        cursor = page[-1]

        # A node that ignores `before` would otherwise loop forever, re-adding the same page
        if not cursor or cursor in seen_cursors:
            logger.warning(f"Pagination cursor did not advance for {address} (cursor={cursor}), stopping")
            break
        seen_cursors.add(cursor)
        signatures.extend(page)
        before = cursor

        progress("signatures_page", {"address": address, "page_size": len(page), "total": len(signatures)})

    progress("signatures_done", {"address": address, "total": len(signatures)})
    return signatures


async def _resolve(source: LedgerSource, signature: str) -> Optional[ParsedTransaction]:
    raw = await source.get_transaction(signature)
    return parse_transaction(signature, raw)


async def fetch_transactions(
    source: LedgerSource,
    signatures: List[str],
    batch_size: int = constants.DETAIL_BATCH_SIZE,
    references: Optional[str] = None,
    progress: ProgressCallback = log_progress,
) -> List[ParsedTransaction]:
    """
    Resolve signatures to ParsedTransactions, batch_size at a time.

    Calls within a batch run concurrently; batches run one after another.
    Output keeps the input order. If references is given, only records
    that reference that account are kept.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    records: List[ParsedTransaction] = []
    total_batches = (len(signatures) + batch_size - 1) // batch_size

    for i in range(0, len(signatures), batch_size):
        batch = signatures[i:i + batch_size]
        results = await asyncio.gather(
            *(_resolve(source, sig) for sig in batch),
            return_exceptions=True,
        )

        failed = 0
        dropped = 0
        for sig, result in zip(batch, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.warning(f"Failed to fetch transaction {sig}: {result}")
                continue
            if result is None:
                dropped += 1
                continue
            if references and not result.references(references):
                dropped += 1
                continue
            records.append(result)

        progress("detail_batch", {
            "batch": i // batch_size + 1,
            "total_batches": total_batches,
            "fetched": len(batch) - failed,
            "failed": failed,
            "dropped": dropped,
        })

    return records
