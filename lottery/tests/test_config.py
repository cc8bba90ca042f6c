import json
from dataclasses import FrozenInstanceError

import pytest

from lottery.config import NETWORK_PRESETS, LotteryConfig, preset
from lottery.constants import (
    DEFAULT_ENTRY_FEE,
    DEFAULT_INTERVAL_S,
    LOCAL_KEY_HASH,
    SEPOLIA_KEY_HASH,
)


def test_defaults_are_valid():
    cfg = LotteryConfig().validate()
    assert cfg.entry_fee == DEFAULT_ENTRY_FEE
    assert cfg.interval_s == DEFAULT_INTERVAL_S
    assert cfg.num_words == 1
    assert cfg.key_hash == LOCAL_KEY_HASH


@pytest.mark.parametrize(
    "kwargs",
    [
        {"entry_fee": 0},
        {"interval_s": -1},
        {"key_hash": b"\x00" * 31},
        {"subscription_id": -1},
        {"callback_gas_limit": 0},
        {"callback_gas_limit": 10**9},
        {"request_confirmations": 0},
        {"num_words": 2},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        LotteryConfig(**kwargs).validate()


def test_config_is_immutable():
    cfg = LotteryConfig()
    with pytest.raises(FrozenInstanceError):
        cfg.entry_fee = 1  # type: ignore[misc]


def test_to_dict_renders_key_hash_as_hex_and_loads_back():
    cfg = LotteryConfig(entry_fee=123, subscription_id=9)
    data = cfg.to_dict()
    assert data["key_hash"] == "0x" + LOCAL_KEY_HASH.hex()
    assert json.loads(cfg.to_json())["entry_fee"] == 123
    assert LotteryConfig.from_dict(data) == cfg


def test_from_file(tmp_path):
    path = tmp_path / "lottery.json"
    path.write_text(json.dumps({"entry_fee": "500", "interval_s": 60}), encoding="utf-8")
    cfg = LotteryConfig.from_file(str(path))
    assert cfg.entry_fee == 500
    assert cfg.interval_s == 60

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        LotteryConfig.from_file(str(bad))


def test_from_env_overrides_and_presets():
    env = {
        "LOTTERY_PRESET": "sepolia",
        "LOTTERY_ENTRY_FEE": "42",
        "LOTTERY_INTERVAL_S": " 90 ",
        "LOTTERY_SUBSCRIPTION_ID": "",
    }
    cfg = LotteryConfig.from_env(env=env)
    assert cfg.key_hash == SEPOLIA_KEY_HASH
    assert cfg.entry_fee == 42
    assert cfg.interval_s == 90
    assert cfg.subscription_id == 0


def test_from_env_custom_prefix_and_base():
    base = LotteryConfig(entry_fee=7)
    cfg = LotteryConfig.from_env(prefix="X_", base=base, env={"X_KEY_HASH": "0x" + "11" * 32})
    assert cfg.entry_fee == 7
    assert cfg.key_hash == bytes([0x11]) * 32


def test_presets():
    assert set(NETWORK_PRESETS) == {"localnet", "sepolia"}
    assert preset("LocalNet") is NETWORK_PRESETS["localnet"]
    with pytest.raises(ValueError):
        preset("mainnet")


def test_with_subscription_returns_bound_copy():
    cfg = preset("localnet")
    bound = cfg.with_subscription(3)
    assert bound.subscription_id == 3
    assert cfg.subscription_id == 0
