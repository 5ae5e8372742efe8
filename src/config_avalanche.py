"""
Avalanche C-Chain constants for the cross-DEX arbitrage deployment.
Token metadata, DEX routers and pools, and the limits applied when the
contract is configured.
"""

from __future__ import annotations

CHAIN_IDS: dict[str, int] = {
    "AVALANCHE": 43114,
    "ARBITRUM": 42161,
    "BASE": 8453,
    "POLYGON": 137,
}

# Uniswap V3 pool fees (hundredths of a bip)
POOL_FEES: dict[str, int] = {
    "LOWEST": 100,  # 0.01%
    "LOW": 500,  # 0.05%
    "MEDIUM": 3_000,  # 0.3%
    "HIGH": 10_000,  # 1%
}

TOKEN_CONFIGS: dict[str, dict] = {
    "WAVAX": {
        "address": "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7",
        "decimals": 18,
        "symbol": "WAVAX",
        "name": "Wrapped AVAX",
        "chain_id": CHAIN_IDS["AVALANCHE"],
    },
    "USDC": {
        "address": "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E",
        "decimals": 6,
        "symbol": "USDC",
        "name": "USD Coin",
        "chain_id": CHAIN_IDS["AVALANCHE"],
    },
    "WBTC": {
        "address": "0x152b9d0FdC40C096757F570A51E494bd4b943E50",
        "decimals": 8,  # BTC.b uses 8 decimals
        "symbol": "BTC.b",
        "name": "Wrapped Bitcoin",
        "chain_id": CHAIN_IDS["AVALANCHE"],
    },
}

# Human-unit bounds passed to configure_token (scaled by decimals on use).
TOKEN_LIMITS: dict[str, dict[str, str]] = {
    "USDC": {"max": "1000000", "min": "0.00001"},
    "WAVAX": {"max": "10000", "min": "0.00001"},
    "WBTC": {"max": "100", "min": "0.00001"},
}

ADDRESSES: dict[str, dict] = {
    "UNISWAP_V3": {
        "FACTORY": "0x740b1c1de25031C31FF4fC9A62f554A55cdC1baD",
        "ROUTER": "0xbb00FF08d01D300023C629E8fFfFcb65A5a578cE",
        "QUOTER": "0xbe0F5544EC67e9B3b2D979aaA43f18Fd87E6257F",
        "POOLS": {
            "USDC_WAVAX": "0xfAe3f424a0a47706811521E3ee268f00cFb5c45E",
            "USDC_WBTC": "0xD1356d360F37932059E5b89b7992692aA234EDA6",
        },
    },
    "TRADER_JOE": {
        "FACTORY": "0x9Ad6C38BE94206cA50bb0d90783181662f0Cfa10",
        "ROUTER": "0x18556DA13313f3532c54711497A8FedAC273220E",
        "POOLS": {
            "USDC_WAVAX": "0x864d4e5Ee7318e97483DB7EB0912E09F161516EA",
            "USDC_WBTC": "0x4224f6f4c9280509724db2dbac314621e4465c29",
        },
    },
}


def uniswap_fee_to_bps(fee: int) -> int:
    """Uniswap fee units (3000 = 0.3%) to contract basis points (30)."""
    return fee // 100


# Fees below are contract basis points.
DEX_SETTINGS: dict[str, dict] = {
    "uniswap": {
        "max_gas_usage": 3_000_000,
        "default_fee": uniswap_fee_to_bps(POOL_FEES["MEDIUM"]),
        "fee_tiers": [uniswap_fee_to_bps(fee) for fee in POOL_FEES.values()],
        "pool_fee": POOL_FEES["MEDIUM"],
    },
    "traderjoe": {
        "max_gas_usage": 3_000_000,
        "default_fee": 30,
        "fee_tiers": [30],
        "pool_fee": 30,
    },
}


# Pools as (dex name, pool key) pairs, in configuration order.
POOL_ROUTES: list[tuple[str, str]] = [
    ("uniswap", "USDC_WAVAX"),
    ("traderjoe", "USDC_WAVAX"),
    ("uniswap", "USDC_WBTC"),
    ("traderjoe", "USDC_WBTC"),
]

POOL_MIN_LIQUIDITY = "100"  # 18-decimal units

TRADE_SETTINGS: dict[str, int] = {
    "SLIPPAGE_TOLERANCE": 200,  # bps
    "DEFAULT_DEADLINE_MINS": 30,
}
