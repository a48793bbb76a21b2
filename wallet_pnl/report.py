import os
from typing import Iterable

from wallet_pnl.ingestion.models import WalletPnL


def format_summary(wallet: str, mint: str, pnl: WalletPnL) -> str:
    lines = [
        f"Wallet: {wallet}",
        f"Token: {mint}",
        "",
        "Results:",
        f"Total bought (SOL): {pnl.total_bought_sol}",
        f"Total sold (SOL): {pnl.total_sold_sol}",
        f"Realized PnL (SOL): {pnl.realized_pnl}",
        f"Remaining tokens: {pnl.remaining_tokens}",
        f"Trades: {pnl.buy_count} buys / {pnl.sell_count} sells",
    ]
    if pnl.unmatched_sell_tokens > 0:
        lines.append(
            f"Unmatched sold tokens (no open lot, excluded from PnL): {pnl.unmatched_sell_tokens}"
        )
    return "\n".join(lines)


def write_addresses(path: str, addresses: Iterable[str]) -> int:
    """Write one address per line, sorted. Returns the number written."""
    ordered = sorted(set(addresses))
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        f.write("\n".join(ordered))
    return len(ordered)
