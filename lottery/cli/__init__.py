"""
lottery.cli
-----------

Small convenience CLI for a lottery, over JSON-RPC or fully offline.

Commands (requires `typer` and `requests`):
  - status     : Show fee, interval, round state, entries, balance, winner.
  - player     : Show the entry at a position of the current round.
  - enter      : Enter the open round on behalf of an account.
  - upkeep     : Check eligibility; with --perform, close the round.
  - simulate   : Run complete rounds on an in-process local network and print
                 the outcomes as JSON (no RPC endpoint needed).

Environment:
  LOTTERY_RPC_URL (or ANIMICA_RPC_URL) may be set to override the default
  endpoint. `simulate` also honours the LOTTERY_* config variables.

Example:
  python -m lottery.cli status
  python -m lottery.cli enter --caller alice --amount 10000000000000000
  python -m lottery.cli simulate -p alice -p bob -p carol --rounds 2
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

import requests
import typer

from ..config import LotteryConfig
from ..devnet import LocalNetwork
from ..errors import LotteryError

__all__ = ["app", "main"]

_DEFAULT_RPC = (
    os.getenv("LOTTERY_RPC_URL")
    or os.getenv("ANIMICA_RPC_URL")
    or "http://127.0.0.1:8000/lottery/rpc"
)


def _rpc_call(url: str, method: str, params: Optional[Sequence[Any]] = None, timeout: float = 10.0) -> Any:
    """
    Minimal JSON-RPC 2.0 helper.
    """
    body = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
        "params": list(params or []),
    }
    try:
        r = requests.post(url, json=body, timeout=timeout)
    except requests.RequestException as e:
        raise SystemExit(f"RPC POST failed: {e}")
    if r.status_code != 200:
        raise SystemExit(f"RPC error HTTP {r.status_code}: {r.text}")
    try:
        data = r.json()
    except ValueError:
        raise SystemExit(f"RPC response not JSON: {r.text}")
    if "error" in data and data["error"]:
        raise SystemExit(f"RPC error: {json.dumps(data['error'], indent=2)}")
    return data.get("result")


app = typer.Typer(
    name="lottery",
    help="Recurring lottery CLI (enter → upkeep → randomness → payout).",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _setup(
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _opt_rpc() -> str:
    return typer.Option(_DEFAULT_RPC, "--rpc", help=f"JSON-RPC endpoint (default: {_DEFAULT_RPC})")  # type: ignore[return-value]


@app.command("status")
def cmd_status(rpc: str = _opt_rpc()) -> None:
    """Show the lottery's public state."""
    res = _rpc_call(rpc, "lottery.getStatus")
    typer.echo(json.dumps(res, indent=2))


@app.command("player")
def cmd_player(
    index: int = typer.Argument(..., min=0, help="Entry position in the current round."),
    rpc: str = _opt_rpc(),
) -> None:
    """Show the entry at INDEX."""
    res = _rpc_call(rpc, "lottery.getPlayer", [{"index": index}])
    typer.echo(json.dumps(res, indent=2))


@app.command("enter")
def cmd_enter(
    caller: str = typer.Option(..., "--caller", "-c", help="Account paying for the entry."),
    amount: int = typer.Option(..., "--amount", "-a", min=0, help="Amount in the smallest unit."),
    rpc: str = _opt_rpc(),
) -> None:
    """Enter the open round."""
    res = _rpc_call(rpc, "lottery.enter", [{"caller": caller, "amount": amount}])
    typer.echo(json.dumps(res, indent=2))


@app.command("upkeep")
def cmd_upkeep(
    perform: bool = typer.Option(False, "--perform", help="Close the round if eligible."),
    data: str = typer.Option("0x", "--data", help="0x-hex perform data."),
    rpc: str = _opt_rpc(),
) -> None:
    """
    Check whether the round can close; with --perform, close it and request
    randomness.
    """
    check = _rpc_call(rpc, "lottery.checkUpkeep", [{"perform_data": data}])
    if not perform:
        typer.echo(json.dumps(check, indent=2))
        return
    if not check.get("upkeep_needed"):
        typer.echo(json.dumps(check, indent=2))
        raise typer.Exit(code=1)
    res = _rpc_call(rpc, "lottery.performUpkeep", [{"perform_data": check["perform_data"]}])
    typer.echo(json.dumps(res, indent=2))


@app.command("simulate")
def cmd_simulate(
    players: List[str] = typer.Option(
        ["alice", "bob", "carol"], "--player", "-p", help="Entrant (repeat for more entries)."
    ),
    rounds: int = typer.Option(1, "--rounds", "-n", min=1, max=1000, help="Rounds to run."),
    word: Optional[int] = typer.Option(
        None, "--word", "-w", min=0, help="Fixed random word (default: derived per request)."
    ),
) -> None:
    """Run rounds on an in-process local network and print the outcomes."""
    cfg = LotteryConfig.from_env(base=LotteryConfig())
    net = LocalNetwork.deploy(cfg)
    words = None if word is None else [word]
    outcomes: List[Dict[str, Any]] = []
    try:
        for _ in range(rounds):
            outcomes.append(net.simulate_round(players, words=words).to_dict())
    except LotteryError as e:
        typer.echo(json.dumps({"error": e.to_dict(), "rounds": outcomes}, indent=2), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps({"rounds": outcomes, "status": net.lottery.status()}, indent=2))


def main(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover - thin wrapper
    """Entry-point to run as `python -m lottery.cli` or the `lottery` script."""
    try:
        app(args=list(argv) if argv is not None else None, prog_name="lottery")
    except KeyboardInterrupt:
        typer.echo("", err=True)
        sys.exit(130)
