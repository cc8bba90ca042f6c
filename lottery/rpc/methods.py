"""
lottery.rpc.methods
-------------------

JSON-RPC method shims for the lottery.

These are intentionally thin: they validate/normalize inputs with pydantic,
then delegate to a `Lottery` instance that owns all state and logic.

Exposed methods:

- lottery.getStatus()
- lottery.getPlayer(index)
- lottery.enter(caller, amount)
- lottery.checkUpkeep(perform_data?)
- lottery.performUpkeep(perform_data?)

Byte-typed inputs/outputs are 0x-prefixed hex. Amounts are integers in the
smallest unit (decimal strings are accepted for values beyond JSON's safe
integer range).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field, field_validator

from ..engine.lottery import Lottery


# ---------- helpers ----------

def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith("0x") or s.startswith("0X") else s


def _hex_to_bytes(s: str) -> bytes:
    return bytes.fromhex(_strip_0x(s))


def _bytes_to_hex(b: bytes) -> str:
    return "0x" + b.hex()


# ---------- request models ----------

class EnterParams(BaseModel):
    caller: str = Field(..., min_length=1, description="Account paying for the entry.")
    amount: int = Field(..., ge=0, description="Amount sent with the entry (smallest unit).")


class PlayerQuery(BaseModel):
    index: int = Field(..., ge=0, description="Position in the current round's entry list.")


class UpkeepParams(BaseModel):
    perform_data: str = Field(default="0x", description="0x-hex opaque data, echoed back.")

    @field_validator("perform_data")
    @classmethod
    def _perform_data_hex(cls, v: str) -> str:
        _ = _hex_to_bytes(v)
        return v


# ---------- method handlers ----------

def lottery_get_status(lottery: Lottery, _args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Returns the lottery's public state: fee, interval, round state, entries,
    balance, pending request and most recent winner.
    """
    return lottery.status()


def lottery_get_player(lottery: Lottery, args: Mapping[str, Any]) -> Dict[str, Any]:
    q = PlayerQuery(**args)
    return {"index": q.index, "player": lottery.get_player(q.index)}


def lottery_enter(lottery: Lottery, args: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Enter the open round on behalf of `caller`, paying `amount`.

    Returns:
      - accepted (always True; failures raise)
      - caller
      - number_of_players (after the entry)
    """
    params = EnterParams(**args)
    lottery.enter(params.caller, params.amount)
    return {
        "accepted": True,
        "caller": params.caller,
        "number_of_players": lottery.number_of_players,
    }


def lottery_check_upkeep(lottery: Lottery, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    params = UpkeepParams(**(args or {}))
    check = lottery.check_upkeep(_hex_to_bytes(params.perform_data))
    return {
        "upkeep_needed": check.upkeep_needed,
        "perform_data": _bytes_to_hex(check.perform_data),
    }


def lottery_perform_upkeep(lottery: Lottery, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Close the round and request randomness. Returns the new request id."""
    params = UpkeepParams(**(args or {}))
    rid = lottery.perform_upkeep(_hex_to_bytes(params.perform_data))
    return {"request_id": rid, "state": lottery.state.value}


# Public registry mapping JSON-RPC method names to callables.
# Each callable has signature: (lottery, args_dict) -> result
RPC_METHODS: Dict[str, Callable[..., Any]] = {
    "lottery.getStatus": lottery_get_status,
    "lottery.getPlayer": lottery_get_player,
    "lottery.enter": lottery_enter,
    "lottery.checkUpkeep": lottery_check_upkeep,
    "lottery.performUpkeep": lottery_perform_upkeep,
}


def _normalize_params(params: Union[None, Mapping[str, Any], Sequence[Any]]) -> Dict[str, Any]:
    """Accept `{...}`, `[{...}]` or nothing."""
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, Sequence) and not isinstance(params, (str, bytes)):
        if len(params) == 0:
            return {}
        if len(params) == 1 and isinstance(params[0], Mapping):
            return dict(params[0])
    raise TypeError("params must be an object or a single-element array holding one")


def dispatch(
    lottery: Lottery,
    method: str,
    params: Union[None, Mapping[str, Any], Sequence[Any]] = None,
) -> Any:
    """Look up `method` and call it. Raises KeyError for unknown methods."""
    fn = RPC_METHODS[method]
    return fn(lottery, _normalize_params(params))


__all__ = [
    "RPC_METHODS",
    "dispatch",
    "EnterParams",
    "PlayerQuery",
    "UpkeepParams",
    "lottery_get_status",
    "lottery_get_player",
    "lottery_enter",
    "lottery_check_upkeep",
    "lottery_perform_upkeep",
]
