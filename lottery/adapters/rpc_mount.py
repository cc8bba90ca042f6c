"""
lottery.adapters.rpc_mount
--------------------------

Mount HTTP and JSON-RPC endpoints for a lottery:

- REST (prefix `/lottery` by default):
    GET  /status              → public state (fee, interval, round, balance, winner)
    GET  /players/{index}     → entry at a position of the current round
    GET  /upkeep              → eligibility check (read only)
    POST /enter               → enter the open round {caller, amount}
    POST /upkeep              → close the round and request randomness

- JSON-RPC 2.0 (same prefix):
    POST /rpc                 → dispatches to `lottery.rpc.methods.RPC_METHODS`

Domain errors become HTTP 4xx responses whose `detail` is the error's
`to_dict()` payload (e.g. UpkeepNotNeeded carries balance, participant count
and state). Over JSON-RPC they are returned as error objects with the same
payload under `data`.

This module is transport glue only; all logic lives in the injected
`Lottery`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Type

from fastapi import APIRouter, Body, FastAPI, HTTPException, Query
from pydantic import ValidationError

from ..engine.lottery import Lottery
from ..errors import (
    FundsError,
    InsufficientPayment,
    InvalidRandomness,
    LotteryError,
    NoResolutionPending,
    OnlyCoordinatorCanFulfill,
    OracleError,
    PayoutTransferFailed,
    RoundNotOpen,
    UnknownRequest,
    UpkeepNotNeeded,
)
from ..rpc.methods import RPC_METHODS, EnterParams, UpkeepParams, dispatch

logger = logging.getLogger(__name__)

# First match wins; subclasses before their bases.
_STATUS_FOR: Tuple[Tuple[Type[LotteryError], int], ...] = (
    (InsufficientPayment, 400),
    (InvalidRandomness, 400),
    (FundsError, 400),
    (OnlyCoordinatorCanFulfill, 403),
    (RoundNotOpen, 409),
    (UpkeepNotNeeded, 409),
    (NoResolutionPending, 409),
    (UnknownRequest, 409),
    (PayoutTransferFailed, 409),
    (OracleError, 424),
)

# JSON-RPC 2.0 error codes
_RPC_INVALID_REQUEST = -32600
_RPC_METHOD_NOT_FOUND = -32601
_RPC_INVALID_PARAMS = -32602
_RPC_DOMAIN_ERROR = -32000


def http_status_for(err: LotteryError) -> int:
    for cls, status in _STATUS_FOR:
        if isinstance(err, cls):
            return status
    return 400


def _to_http(err: LotteryError) -> HTTPException:
    status = http_status_for(err)
    logger.info("lottery request refused (%d): %s", status, err)
    return HTTPException(status_code=status, detail=err.to_dict())


def _rpc_error(req_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    err: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        err["data"] = data
    return {"jsonrpc": "2.0", "id": req_id, "error": err}


def handle_jsonrpc(lottery: Lottery, payload: Any) -> Dict[str, Any]:
    """Process one JSON-RPC 2.0 request object and build the response object."""
    if not isinstance(payload, dict) or not isinstance(payload.get("method"), str):
        return _rpc_error(None, _RPC_INVALID_REQUEST, "invalid request")
    req_id = payload.get("id")
    method = payload["method"]
    if method not in RPC_METHODS:
        return _rpc_error(req_id, _RPC_METHOD_NOT_FOUND, f"method not found: {method}")
    try:
        result = dispatch(lottery, method, payload.get("params"))
    except ValidationError as e:
        details = e.errors(include_url=False, include_context=False)
        return _rpc_error(req_id, _RPC_INVALID_PARAMS, "invalid params", details)
    except (TypeError, ValueError) as e:
        return _rpc_error(req_id, _RPC_INVALID_PARAMS, f"invalid params: {e}")
    except IndexError as e:
        return _rpc_error(req_id, _RPC_INVALID_PARAMS, str(e))
    except LotteryError as e:
        logger.info("rpc %s refused: %s", method, e)
        return _rpc_error(req_id, _RPC_DOMAIN_ERROR, str(e), e.to_dict())
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def get_router(lottery: Lottery, *, prefix: str = "/lottery") -> APIRouter:
    r = APIRouter(prefix=prefix, tags=["lottery"])

    @r.get("/status")
    def status() -> dict:
        return lottery.status()

    @r.get("/players/{index}")
    def player(index: int) -> dict:
        try:
            return {"index": index, "player": lottery.get_player(index)}
        except IndexError:
            raise HTTPException(status_code=404, detail="player not found")

    @r.get("/upkeep")
    def check_upkeep(perform_data: str = Query("0x", description="0x-hex data echoed back")) -> dict:
        try:
            params = UpkeepParams(perform_data=perform_data)
        except ValidationError:
            raise HTTPException(status_code=422, detail="perform_data must be 0x-hex")
        return dispatch(lottery, "lottery.checkUpkeep", params.model_dump())

    @r.post("/enter")
    def post_enter(req: EnterParams) -> dict:
        try:
            return dispatch(lottery, "lottery.enter", req.model_dump())
        except LotteryError as e:
            raise _to_http(e)

    @r.post("/upkeep")
    def post_upkeep(req: Optional[UpkeepParams] = None) -> dict:
        args = req.model_dump() if req is not None else {}
        try:
            return dispatch(lottery, "lottery.performUpkeep", args)
        except LotteryError as e:
            raise _to_http(e)

    @r.post("/rpc")
    def rpc(payload: Any = Body(...)) -> dict:
        return handle_jsonrpc(lottery, payload)

    return r


def mount_lottery_routes(app: FastAPI, lottery: Lottery, *, prefix: str = "/lottery") -> APIRouter:
    """Attach the lottery router to `app` and return it."""
    router = get_router(lottery, prefix=prefix)
    app.include_router(router)
    logger.info("lottery routes mounted at %s", prefix)
    return router


__all__ = ["get_router", "mount_lottery_routes", "handle_jsonrpc", "http_status_for"]
