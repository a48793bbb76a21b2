import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from wallet_pnl.core import constants

ENV_FILE = ".env.local"


class ConfigError(ValueError):
    """Raised when required settings are missing or malformed."""


def load_env_file(path: str = ENV_FILE) -> None:
    """
    Load KEY=VALUE lines from a local env file.
    Variables already present in the environment are left untouched.
    """
    if not os.path.exists(path):
        return
    with open(path, "r") as f:
        for line in f:
            if "=" in line and not line.strip().startswith("#"):
                k, v = line.split("=", 1)
                os.environ.setdefault(k.strip(), v.strip().strip('"').strip("'"))


@dataclass(frozen=True)
class Settings:
    rpc_endpoint: str
    token_mint: str
    wallet_address: Optional[str] = None
    signature_page_size: int = constants.SIGNATURE_PAGE_SIZE
    detail_batch_size: int = constants.DETAIL_BATCH_SIZE
    rpc_timeout: float = constants.RPC_TIMEOUT_SECONDS
    commitment: str = constants.RPC_COMMITMENT
    addresses_output_path: str = constants.ADDRESSES_OUTPUT_PATH
    log_level: str = "INFO"


def _int_setting(env: Dict[str, str], name: str, default: int, low: int, high: Optional[int], errors: List[str]) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        errors.append(f"{name} must be an integer (got {raw!r})")
        return default
    if value < low or (high is not None and value > high):
        bound = f"{low}..{high}" if high is not None else f">= {low}"
        errors.append(f"{name} must be in {bound} (got {value})")
    return value


def load_settings(require_wallet: bool = True, env: Optional[Dict[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    All problems are collected and reported together in a single ConfigError
    so that nothing is fetched with a half-valid configuration.
    """
    if env is None:
        load_env_file()
        env = dict(os.environ)

    errors: List[str] = []

    rpc_endpoint = env.get("RPC_ENDPOINT", "").strip()
    token_mint = env.get("TOKEN_MINT_ADDRESS", "").strip()
    wallet_address = env.get("WALLET_ADDRESS", "").strip() or None

    if not rpc_endpoint:
        errors.append("RPC_ENDPOINT is required")
    if not token_mint:
        errors.append("TOKEN_MINT_ADDRESS is required")
    if require_wallet and not wallet_address:
        errors.append("WALLET_ADDRESS is required")

    page_size = _int_setting(env, "SIGNATURE_PAGE_SIZE", constants.SIGNATURE_PAGE_SIZE, 1, 1000, errors)
    batch_size = _int_setting(env, "DETAIL_BATCH_SIZE", constants.DETAIL_BATCH_SIZE, 1, None, errors)

    timeout_raw = env.get("RPC_TIMEOUT_SECONDS")
    rpc_timeout = constants.RPC_TIMEOUT_SECONDS
    if timeout_raw:
        try:
            rpc_timeout = float(timeout_raw)
        except ValueError:
            errors.append(f"RPC_TIMEOUT_SECONDS must be a number (got {timeout_raw!r})")
        else:
            if rpc_timeout <= 0:
                errors.append(f"RPC_TIMEOUT_SECONDS must be positive (got {rpc_timeout})")

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        errors.append(f"LOG_LEVEL must be a logging level name such as DEBUG or INFO (got {env.get('LOG_LEVEL')!r})")

    if errors:
        raise ConfigError("Invalid configuration: " + "; ".join(errors))

    return Settings(
        rpc_endpoint=rpc_endpoint,
        token_mint=token_mint,
        wallet_address=wallet_address,
        signature_page_size=page_size,
        detail_batch_size=batch_size,
        rpc_timeout=rpc_timeout,
        commitment=env.get("RPC_COMMITMENT") or constants.RPC_COMMITMENT,
        addresses_output_path=env.get("ADDRESSES_OUTPUT_PATH") or constants.ADDRESSES_OUTPUT_PATH,
        log_level=log_level,
    )
