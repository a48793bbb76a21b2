#!/usr/bin/env python3
"""
Print realized FIFO PnL for WALLET_ADDRESS trading TOKEN_MINT_ADDRESS.

Env: RPC_ENDPOINT, TOKEN_MINT_ADDRESS, WALLET_ADDRESS (or --wallet)
"""
import sys

from wallet_pnl.cli import analyze_main

if __name__ == "__main__":
    sys.exit(analyze_main())
