from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TokenBalance:
    account_index: int
    mint: str
    owner: Optional[str]
    amount: Decimal  # UI units (already scaled by decimals)


@dataclass
class ParsedTransaction:
    """
    Normalized view of a getTransaction record: only the fields the
    delta extractor needs, with every amount as an exact Decimal.
    """
    signature: str
    block_time: int  # Unix seconds
    account_keys: List[str]
    pre_balances: List[int]  # lamports, indexed like account_keys
    post_balances: List[int]
    pre_token_balances: List[TokenBalance] = field(default_factory=list)
    post_token_balances: List[TokenBalance] = field(default_factory=list)
    slot: Optional[int] = None

    def references(self, account: str) -> bool:
        """True if the account is a key of the message or the mint of any token balance."""
        if account in self.account_keys:
            return True
        return any(
            tb.mint == account
            for tb in self.pre_token_balances + self.post_token_balances
        )


@dataclass(frozen=True)
class BalanceDelta:
    owner: str
    currency: str  # token mint, or BASE_CURRENCY for lamport balances
    amount: Decimal  # post - pre, never zero


@dataclass(frozen=True)
class Trade:
    signature: str
    side: str  # 'buy' | 'sell'
    token_amount: Decimal
    quote_amount: Decimal  # SOL paid (buy) or received (sell)
    price: Decimal  # quote_amount / token_amount
    block_time: int


@dataclass
class Lot:
    """Open buy position. quantity shrinks in place as sells consume it."""
    signature: str
    quantity: Decimal
    cost_basis: Decimal  # SOL per token
    block_time: int


@dataclass
class WalletPnL:
    total_bought_sol: Decimal = Decimal(0)
    total_sold_sol: Decimal = Decimal(0)
    realized_pnl: Decimal = Decimal(0)
    remaining_tokens: Decimal = Decimal(0)
    # Sell quantity that found no open lot (bought outside the observed window)
    unmatched_sell_tokens: Decimal = Decimal(0)
    buy_count: int = 0
    sell_count: int = 0
    open_lots: List[Lot] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_bought_sol": str(self.total_bought_sol),
            "total_sold_sol": str(self.total_sold_sol),
            "realized_pnl": str(self.realized_pnl),
            "remaining_tokens": str(self.remaining_tokens),
            "unmatched_sell_tokens": str(self.unmatched_sell_tokens),
            "buy_count": self.buy_count,
            "sell_count": self.sell_count,
            "open_lots": len(self.open_lots),
        }
