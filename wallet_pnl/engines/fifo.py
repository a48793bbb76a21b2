"""
FIFO PnL Accountant
===================
Matches sells against the oldest open buy lots first.

Realized PnL per match = matched_qty * (sell_price - lot_cost_basis).
Buy/sell totals are plain sums of quote amounts, independent of matching.

Unmatched sells: when a sell exceeds all open lots (tokens acquired
outside the observed history) the excess is dropped from matching and
contributes nothing to realized PnL. It is accumulated in
WalletPnL.unmatched_sell_tokens and reported as an `unmatched_sell`
event rather than corrected.
"""
from collections import deque
from decimal import Decimal
from typing import Deque, Iterable

from wallet_pnl.core.logger import ProgressCallback, log_progress
from wallet_pnl.ingestion.models import Lot, Trade, WalletPnL


class FifoAccountant:
    """
    Stateful accountant for one analysis run. Trades must be applied oldest-first.
    Trade objects are never mutated; partial consumption shrinks the Lot instead.
    """

    def __init__(self, progress: ProgressCallback = log_progress):
        self.lots: Deque[Lot] = deque()
        self.pnl = WalletPnL()
        self._progress = progress

    def apply(self, trade: Trade) -> None:
        if trade.side == "buy":
            self._buy(trade)
        elif trade.side == "sell":
            self._sell(trade)
        else:
            raise ValueError(f"Unknown trade side: {trade.side!r}")

    def _buy(self, trade: Trade) -> None:
        self.lots.append(Lot(
            signature=trade.signature,
            quantity=trade.token_amount,
            cost_basis=trade.price,
            block_time=trade.block_time,
        ))
        self.pnl.total_bought_sol += trade.quote_amount
        self.pnl.remaining_tokens += trade.token_amount
        self.pnl.buy_count += 1

    def _sell(self, trade: Trade) -> None:
        to_sell = trade.token_amount
        sell_price = trade.price

        while to_sell > 0 and self.lots:
            lot = self.lots[0]
            if lot.quantity <= to_sell:
                # Fully consume the oldest lot
                self.pnl.realized_pnl += lot.quantity * (sell_price - lot.cost_basis)
                to_sell -= lot.quantity
                self.pnl.remaining_tokens -= lot.quantity
                self.lots.popleft()
            else:
                # Partial: lot stays at the front for the next sell
                self.pnl.realized_pnl += to_sell * (sell_price - lot.cost_basis)
                self.pnl.remaining_tokens -= to_sell
                lot.quantity -= to_sell
                to_sell = Decimal(0)

        if to_sell > 0:
            self.pnl.unmatched_sell_tokens += to_sell
            self._progress("unmatched_sell", {
                "signature": trade.signature,
                "unmatched_tokens": to_sell,
                "sell_tokens": trade.token_amount,
            })

        self.pnl.total_sold_sol += trade.quote_amount
        self.pnl.sell_count += 1

    def result(self) -> WalletPnL:
        """Snapshot of the running totals; open lots are copied so later applies don't leak in."""
        return WalletPnL(
            total_bought_sol=self.pnl.total_bought_sol,
            total_sold_sol=self.pnl.total_sold_sol,
            realized_pnl=self.pnl.realized_pnl,
            remaining_tokens=self.pnl.remaining_tokens,
            unmatched_sell_tokens=self.pnl.unmatched_sell_tokens,
            buy_count=self.pnl.buy_count,
            sell_count=self.pnl.sell_count,
            open_lots=[
                Lot(lot.signature, lot.quantity, lot.cost_basis, lot.block_time)
                for lot in self.lots
            ],
        )


def calculate_pnl(trades: Iterable[Trade], progress: ProgressCallback = log_progress) -> WalletPnL:
    """Run FIFO accounting over chronologically ordered trades."""
    accountant = FifoAccountant(progress=progress)
    for trade in trades:
        accountant.apply(trade)
    return accountant.result()
