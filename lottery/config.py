"""
Lottery module configuration.

Typed, immutable configuration for one lottery deployment:
- Round economics (entry fee, interval)
- Randomness request parameters (gas lane, subscription, confirmations,
  callback gas ceiling, number of words)

It provides:
- A frozen dataclass with validation
- Named network presets (local mock coordinator, Sepolia)
- Loading from environment variables (prefix configurable)
- Loading from a JSON file
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

from .constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_ENTRY_FEE,
    DEFAULT_INTERVAL_S,
    DEFAULT_REQUEST_CONFIRMATIONS,
    LOCAL_KEY_HASH,
    MAX_CALLBACK_GAS_LIMIT,
    MAX_REQUEST_CONFIRMATIONS,
    NUM_WORDS,
    SEPOLIA_KEY_HASH,
)


def _hex_to_bytes(s: str) -> bytes:
    s = s.strip()
    if s.startswith("0x") or s.startswith("0X"):
        s = s[2:]
    return bytes.fromhex(s)


@dataclass(frozen=True)
class LotteryConfig:
    """
    Round economics:
      - entry_fee: minimum amount (smallest unit) accepted per entry
      - interval_s: minimum seconds between the round opening and its close

    Randomness request:
      - key_hash: 32-byte gas lane identifying the coordinator's key
      - subscription_id: billing handle charged for fulfilments
      - callback_gas_limit: resource ceiling for the fulfilment callback
      - request_confirmations: confirmation depth before fulfilment
      - num_words: random words requested per round (always 1)
    """

    entry_fee: int = DEFAULT_ENTRY_FEE
    interval_s: int = DEFAULT_INTERVAL_S
    key_hash: bytes = LOCAL_KEY_HASH
    subscription_id: int = 0
    callback_gas_limit: int = DEFAULT_CALLBACK_GAS_LIMIT
    request_confirmations: int = DEFAULT_REQUEST_CONFIRMATIONS
    num_words: int = NUM_WORDS

    def validate(self) -> "LotteryConfig":
        if self.entry_fee <= 0:
            raise ValueError("entry_fee must be > 0")
        if self.interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        if not isinstance(self.key_hash, (bytes, bytearray)) or len(self.key_hash) != 32:
            raise ValueError("key_hash must be exactly 32 bytes")
        if self.subscription_id < 0:
            raise ValueError("subscription_id must be >= 0")
        if not (0 < self.callback_gas_limit <= MAX_CALLBACK_GAS_LIMIT):
            raise ValueError(
                f"callback_gas_limit must be in (0, {MAX_CALLBACK_GAS_LIMIT}]"
            )
        if not (0 < self.request_confirmations <= MAX_REQUEST_CONFIRMATIONS):
            raise ValueError(
                f"request_confirmations must be in (0, {MAX_REQUEST_CONFIRMATIONS}]"
            )
        if self.num_words != NUM_WORDS:
            raise ValueError(f"num_words must be {NUM_WORDS}")
        return self

    def with_subscription(self, subscription_id: int) -> "LotteryConfig":
        """Return a copy bound to a concrete subscription (used at deploy time)."""
        return replace(self, subscription_id=int(subscription_id)).validate()

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["key_hash"] = "0x" + bytes(self.key_hash).hex()
        return data

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "LotteryConfig":
        kwargs: Dict[str, Any] = {}
        for name in (
            "entry_fee",
            "interval_s",
            "subscription_id",
            "callback_gas_limit",
            "request_confirmations",
            "num_words",
        ):
            if data.get(name) is not None:
                kwargs[name] = int(data[name])
        kh = data.get("key_hash")
        if kh is not None:
            kwargs["key_hash"] = _hex_to_bytes(kh) if isinstance(kh, str) else bytes(kh)
        return LotteryConfig(**kwargs).validate()

    @staticmethod
    def from_file(path: str) -> "LotteryConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object")
        return LotteryConfig.from_dict(data)

    @staticmethod
    def from_env(
        prefix: str = "LOTTERY_",
        base: Optional["LotteryConfig"] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "LotteryConfig":
        """
        Load configuration from environment variables. All variables are optional;
        unset values keep `base` (or the defaults).

        Supported keys:
          - LOTTERY_PRESET=localnet            (start from a named preset)
          - LOTTERY_ENTRY_FEE=10000000000000000
          - LOTTERY_INTERVAL_S=30
          - LOTTERY_KEY_HASH=0x474e…
          - LOTTERY_SUBSCRIPTION_ID=1
          - LOTTERY_CALLBACK_GAS_LIMIT=500000
          - LOTTERY_REQUEST_CONFIRMATIONS=3
        """
        e = os.environ if env is None else env

        def get(name: str) -> Optional[str]:
            v = e.get(prefix + name)
            return v.strip() if v is not None and v.strip() else None

        cfg = base
        preset_name = get("PRESET")
        if preset_name is not None:
            cfg = preset(preset_name)
        cfg = cfg or LotteryConfig()

        data = cfg.to_dict()
        mapping = {
            "ENTRY_FEE": "entry_fee",
            "INTERVAL_S": "interval_s",
            "KEY_HASH": "key_hash",
            "SUBSCRIPTION_ID": "subscription_id",
            "CALLBACK_GAS_LIMIT": "callback_gas_limit",
            "REQUEST_CONFIRMATIONS": "request_confirmations",
        }
        for env_key, field_name in mapping.items():
            v = get(env_key)
            if v is not None:
                data[field_name] = v
        return LotteryConfig.from_dict(data)


# -------------------------
# Network presets
# -------------------------

NETWORK_PRESETS: Dict[str, LotteryConfig] = {
    # Local development against lottery.oracle.coordinator.MockCoordinator;
    # the subscription id is assigned at deploy time.
    "localnet": LotteryConfig(
        entry_fee=DEFAULT_ENTRY_FEE,
        interval_s=DEFAULT_INTERVAL_S,
        key_hash=LOCAL_KEY_HASH,
        subscription_id=0,
        callback_gas_limit=DEFAULT_CALLBACK_GAS_LIMIT,
        request_confirmations=DEFAULT_REQUEST_CONFIRMATIONS,
    ),
    "sepolia": LotteryConfig(
        entry_fee=DEFAULT_ENTRY_FEE,
        interval_s=DEFAULT_INTERVAL_S,
        key_hash=SEPOLIA_KEY_HASH,
        subscription_id=0,
        callback_gas_limit=DEFAULT_CALLBACK_GAS_LIMIT,
        request_confirmations=DEFAULT_REQUEST_CONFIRMATIONS,
    ),
}


def preset(name: str) -> LotteryConfig:
    try:
        return NETWORK_PRESETS[name.lower()]
    except KeyError:
        raise ValueError(
            f"unknown network preset {name!r}; expected one of {sorted(NETWORK_PRESETS)}"
        ) from None


__all__ = ["LotteryConfig", "NETWORK_PRESETS", "preset"]
