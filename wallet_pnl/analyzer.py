"""
Wallet Analyzer
===============
Wires the pipeline together for one wallet and one token:

    paginate signatures -> fetch details -> deltas -> trades -> FIFO
"""
import logging
from typing import List

from wallet_pnl.core import constants
from wallet_pnl.core.config import Settings
from wallet_pnl.core.logger import ProgressCallback, log_progress
from wallet_pnl.engines.classifier import extract_trades
from wallet_pnl.engines.fifo import calculate_pnl
from wallet_pnl.ingestion.base import LedgerSource
from wallet_pnl.ingestion.history import fetch_transactions, paginate_signatures
from wallet_pnl.ingestion.models import Trade, WalletPnL

logger = logging.getLogger("wallet_pnl.analyzer")


class WalletAnalyzer:

    def __init__(
        self,
        source: LedgerSource,
        token_mint: str,
        page_size: int = constants.SIGNATURE_PAGE_SIZE,
        batch_size: int = constants.DETAIL_BATCH_SIZE,
        progress: ProgressCallback = log_progress,
    ):
        self.source = source
        self.token_mint = token_mint
        self.page_size = page_size
        self.batch_size = batch_size
        self.progress = progress

    @classmethod
    def from_settings(cls, source: LedgerSource, settings: Settings, progress: ProgressCallback = log_progress) -> "WalletAnalyzer":
        return cls(
            source,
            settings.token_mint,
            page_size=settings.signature_page_size,
            batch_size=settings.detail_batch_size,
            progress=progress,
        )

    async def get_wallet_trades(self, wallet: str) -> List[Trade]:
        """Chronological (oldest-first) trades of the token for wallet."""
        signatures = await paginate_signatures(
            self.source, wallet, page_size=self.page_size, progress=self.progress
        )
        txs = await fetch_transactions(
            self.source,
            signatures,
            batch_size=self.batch_size,
            references=self.token_mint,
            progress=self.progress,
        )
        trades = extract_trades(txs, self.token_mint, wallet)
        self.progress("trades_classified", {
            "wallet": wallet,
            "transactions": len(txs),
            "trades": len(trades),
        })
        return trades

    async def get_wallet_pnl(self, wallet: str) -> WalletPnL:
        logger.info(f"Analyzing wallet {wallet} for token {self.token_mint}")
        trades = await self.get_wallet_trades(wallet)
        return calculate_pnl(trades, progress=self.progress)
