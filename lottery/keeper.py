"""
lottery.keeper
==============

A minimal upkeep trigger: the stand-in for an external automation network,
a cron job or a human operator.

The keeper is neither trusted to be timely nor to be the only caller. It
checks eligibility and, when eligible, performs the upkeep. Losing a race
against another trigger surfaces as `UpkeepNotNeeded` from the lottery and
is treated as "nothing to do".
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from .errors import UpkeepNotNeeded
from .types.core import RequestId, UpkeepCheck


class UpkeepTarget(Protocol):
    def check_upkeep(self, aux: bytes = b"") -> UpkeepCheck: ...
    def perform_upkeep(self, aux: bytes = b"") -> RequestId: ...


class UpkeepKeeper:
    def __init__(
        self,
        target: UpkeepTarget,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._target = target
        self._logger = logger or logging.getLogger(__name__)
        self.performed = 0

    def run_once(self) -> Optional[RequestId]:
        """Check once; perform if eligible. Returns the request id or None."""
        check = self._target.check_upkeep()
        if not check.upkeep_needed:
            self._logger.debug("upkeep not needed")
            return None
        try:
            rid = self._target.perform_upkeep(check.perform_data)
        except UpkeepNotNeeded as e:
            self._logger.info("upkeep raced by another trigger: %s", e)
            return None
        self.performed += 1
        self._logger.info("upkeep performed request_id=%d", rid)
        return rid

    async def run_forever(
        self, poll_s: float = 5.0, stop: Optional[asyncio.Event] = None
    ) -> None:
        """Poll every `poll_s` seconds until `stop` is set (forever if None)."""
        if poll_s <= 0:
            raise ValueError("poll_s must be > 0")
        self._logger.info("keeper loop started; poll interval=%ss", poll_s)
        while stop is None or not stop.is_set():
            try:
                self.run_once()
            except Exception as exc:
                self._logger.exception("keeper iteration failed: %s", exc)
            if stop is None:
                await asyncio.sleep(poll_s)
                continue
            try:
                await asyncio.wait_for(stop.wait(), timeout=poll_s)
            except asyncio.TimeoutError:
                pass
        self._logger.info("keeper loop stopped after %d upkeeps", self.performed)


__all__ = ["UpkeepKeeper", "UpkeepTarget"]
