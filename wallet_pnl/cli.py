"""
Command-line entrypoints: wallet analysis and holder address collection.
Configuration comes from the environment (see core.config); a few
values can be overridden with flags.
"""
import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from wallet_pnl.analyzer import WalletAnalyzer
from wallet_pnl.core.config import ConfigError, Settings, load_settings
from wallet_pnl.core.logger import get_logger
from wallet_pnl.engines.discovery import collect_holder_addresses
from wallet_pnl.ingestion.models import WalletPnL
from wallet_pnl.ingestion.solana_rpc import SolanaRpcClient
from wallet_pnl.report import format_summary, write_addresses

logger = logging.getLogger("wallet_pnl.cli")


def _configure_logging(settings: Settings) -> None:
    # Progress and module loggers all propagate to the JSON handler on the package root
    get_logger("wallet_pnl", level=settings.log_level)
    for name in ("ingestion", "engines"):
        get_logger(name, level=settings.log_level)


def _client(settings: Settings) -> SolanaRpcClient:
    return SolanaRpcClient(settings.rpc_endpoint, timeout=settings.rpc_timeout, commitment=settings.commitment)


async def analyze_wallet(settings: Settings) -> WalletPnL:
    async with _client(settings) as client:
        analyzer = WalletAnalyzer.from_settings(client, settings)
        return await analyzer.get_wallet_pnl(settings.wallet_address)


async def collect_addresses(settings: Settings) -> int:
    async with _client(settings) as client:
        addresses = await collect_holder_addresses(
            client,
            settings.token_mint,
            page_size=settings.signature_page_size,
            batch_size=settings.detail_batch_size,
        )
    count = write_addresses(settings.addresses_output_path, addresses)
    logger.info(f"Wrote {count} unique addresses to {settings.addresses_output_path}")
    return count


def _load(require_wallet: bool, overrides: dict) -> Optional[Settings]:
    try:
        settings = load_settings(require_wallet=False)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    values = {k: v for k, v in overrides.items() if v}
    if values:
        settings = dataclasses.replace(settings, **values)
    if require_wallet and not settings.wallet_address:
        print("Error: Invalid configuration: WALLET_ADDRESS is required", file=sys.stderr)
        return None
    return settings


def analyze_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Realized FIFO PnL of one token for one wallet")
    parser.add_argument("--wallet", help="Wallet address (default: $WALLET_ADDRESS)")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    args = parser.parse_args(argv)

    settings = _load(require_wallet=True, overrides={"wallet_address": args.wallet})
    if settings is None:
        return 2

    _configure_logging(settings)
    pnl = asyncio.run(analyze_wallet(settings))
    if args.json:
        print(json.dumps({"wallet": settings.wallet_address, "token_mint": settings.token_mint, **pnl.as_dict()}, indent=2))
    else:
        print(format_summary(settings.wallet_address, settings.token_mint, pnl))
    return 0


def collect_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Collect every holder address of a token")
    parser.add_argument("--output", help="Output file (default: $ADDRESSES_OUTPUT_PATH or wallets.txt)")
    args = parser.parse_args(argv)

    settings = _load(require_wallet=False, overrides={"addresses_output_path": args.output})
    if settings is None:
        return 2

    _configure_logging(settings)
    count = asyncio.run(collect_addresses(settings))
    print(f"Found {count} unique addresses, written to {settings.addresses_output_path}")
    return 0
