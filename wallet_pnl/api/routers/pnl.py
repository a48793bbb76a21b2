"""
Wallet PnL endpoints
====================
- /pnl/{wallet} - Realized FIFO PnL of the configured token for one wallet
"""
import logging
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from wallet_pnl.analyzer import WalletAnalyzer
from wallet_pnl.core.config import ConfigError, load_settings
from wallet_pnl.ingestion.solana_rpc import SolanaRpcClient

router = APIRouter(prefix="/pnl", tags=["pnl"])
logger = logging.getLogger("api.pnl")


class OpenLotResponse(BaseModel):
    signature: str
    quantity: str
    cost_basis: str
    block_time: int


class WalletPnLResponse(BaseModel):
    wallet: str
    token_mint: str
    total_bought_sol: str
    total_sold_sol: str
    realized_pnl: str
    remaining_tokens: str
    unmatched_sell_tokens: str
    buy_count: int
    sell_count: int
    open_lots: List[OpenLotResponse]


async def get_analyzer() -> AsyncIterator[WalletAnalyzer]:
    try:
        settings = load_settings(require_wallet=False)
    except ConfigError as e:
        logger.error(str(e))
        raise HTTPException(status_code=503, detail=str(e))

    async with SolanaRpcClient(settings.rpc_endpoint, timeout=settings.rpc_timeout, commitment=settings.commitment) as client:
        yield WalletAnalyzer.from_settings(client, settings)


@router.get("/{wallet}", response_model=WalletPnLResponse)
async def get_wallet_pnl(wallet: str, analyzer: WalletAnalyzer = Depends(get_analyzer)):
    """
    Reconstruct the wallet's trade history for the configured token and
    return realized PnL. Decimal amounts are returned as strings.
    """
    pnl = await analyzer.get_wallet_pnl(wallet)

    return WalletPnLResponse(
        wallet=wallet,
        token_mint=analyzer.token_mint,
        total_bought_sol=str(pnl.total_bought_sol),
        total_sold_sol=str(pnl.total_sold_sol),
        realized_pnl=str(pnl.realized_pnl),
        remaining_tokens=str(pnl.remaining_tokens),
        unmatched_sell_tokens=str(pnl.unmatched_sell_tokens),
        buy_count=pnl.buy_count,
        sell_count=pnl.sell_count,
        open_lots=[
            OpenLotResponse(
                signature=lot.signature,
                quantity=str(lot.quantity),
                cost_basis=str(lot.cost_basis),
                block_time=lot.block_time,
            )
            for lot in pnl.open_lots
        ],
    )
