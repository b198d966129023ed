"""Chain and contract constants for Base mainnet."""

from typing import Dict, FrozenSet

BASE_CHAIN_ID = 8453
BASE_SEPOLIA_CHAIN_ID = 84532

BASE_RPC_URL = "https://mainnet.base.org"

BASESCAN_URLS: Dict[int, str] = {
    BASE_CHAIN_ID: "https://basescan.org",
    BASE_SEPOLIA_CHAIN_ID: "https://sepolia.basescan.org",
}

# Token factory deployed on Base mainnet
TOKEN_FACTORY_ADDRESS = "0xe42e88c072204060A9618140B6089a0a6c33b96e"

# Creation fee: 0.00015 ETH
CREATION_FEE_WEI = 150_000_000_000_000

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Names and symbols that collide with well-known assets (warning only)
WELL_KNOWN_NAMES: FrozenSet[str] = frozenset(
    {"eth", "ethereum", "bitcoin", "btc", "usdt", "usdc", "base", "coinbase"}
)
RESERVED_SYMBOLS: FrozenSet[str] = frozenset(
    {"ETH", "BTC", "USDT", "USDC", "DAI", "WETH", "BASE"}
)
STANDARD_DECIMALS: FrozenSet[int] = frozenset({0, 6, 8, 18})


def explorer_tx_url(tx_hash: str, chain_id: int = BASE_CHAIN_ID) -> str:
    base = BASESCAN_URLS.get(chain_id, BASESCAN_URLS[BASE_CHAIN_ID])
    return f"{base}/tx/{tx_hash}"
