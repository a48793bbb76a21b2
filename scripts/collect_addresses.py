#!/usr/bin/env python3
"""
Collect every address that has held TOKEN_MINT_ADDRESS and write them,
one per line, to ADDRESSES_OUTPUT_PATH (default wallets.txt).

Env: RPC_ENDPOINT, TOKEN_MINT_ADDRESS
"""
import sys

from wallet_pnl.cli import collect_main

if __name__ == "__main__":
    sys.exit(collect_main())
