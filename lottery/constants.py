"""
Lottery module constants.

This module centralizes:
- The smallest-unit scale used for fees and balances
- Default round economics (entry fee, interval)
- Default randomness request parameters (gas lane, confirmations, words)
- Mock coordinator pricing used by the local network

Networks override operational knobs via `lottery.config.LotteryConfig`; code
that needs stable defaults imports them from here.
"""

from __future__ import annotations

# -----------------------------
# Units
# -----------------------------
# All amounts are integers in the smallest unit (wei-like).
UNIT: int = 10**18

# -----------------------------
# Round economics
# -----------------------------
DEFAULT_ENTRY_FEE: int = UNIT // 100      # 0.01 unit
DEFAULT_INTERVAL_S: int = 30

# -----------------------------
# Randomness request parameters
# -----------------------------
# The lottery only ever needs a single random word per round.
NUM_WORDS: int = 1
DEFAULT_REQUEST_CONFIRMATIONS: int = 3
DEFAULT_CALLBACK_GAS_LIMIT: int = 500_000

# Gas lane (key hash) used on the local network; any 32-byte value works there.
LOCAL_KEY_HASH: bytes = bytes.fromhex(
    "474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c"
)
SEPOLIA_KEY_HASH: bytes = bytes.fromhex(
    "787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae"
)

# Coordinator-side bounds.
MIN_REQUEST_CONFIRMATIONS: int = 3
MAX_REQUEST_CONFIRMATIONS: int = 200
MAX_NUM_WORDS: int = 500
MAX_CALLBACK_GAS_LIMIT: int = 2_500_000

# -----------------------------
# Mock coordinator pricing
# -----------------------------
MOCK_BASE_FEE: int = UNIT // 4            # flat fee per fulfilment
MOCK_SUBSCRIPTION_FUND: int = 10 * UNIT   # default local funding

__all__ = [
    "UNIT",
    "DEFAULT_ENTRY_FEE",
    "DEFAULT_INTERVAL_S",
    "NUM_WORDS",
    "DEFAULT_REQUEST_CONFIRMATIONS",
    "DEFAULT_CALLBACK_GAS_LIMIT",
    "LOCAL_KEY_HASH",
    "SEPOLIA_KEY_HASH",
    "MIN_REQUEST_CONFIRMATIONS",
    "MAX_REQUEST_CONFIRMATIONS",
    "MAX_NUM_WORDS",
    "MAX_CALLBACK_GAS_LIMIT",
    "MOCK_BASE_FEE",
    "MOCK_SUBSCRIPTION_FUND",
]
