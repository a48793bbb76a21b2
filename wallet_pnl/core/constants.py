# ==============================================================================
# LEDGER CONSTANTS
# ==============================================================================
SOL_DECIMALS = 9                         # 1 SOL = 1e9 lamports

# ==============================================================================
# PAGINATION & BATCHING
# ==============================================================================
SIGNATURE_PAGE_SIZE = 1000               # getSignaturesForAddress hard max
DETAIL_BATCH_SIZE = 100                  # concurrent getTransaction calls per batch
RPC_TIMEOUT_SECONDS = 60.0
RPC_COMMITMENT = "confirmed"

# ==============================================================================
# OUTPUT
# ==============================================================================
ADDRESSES_OUTPUT_PATH = "wallets.txt"
