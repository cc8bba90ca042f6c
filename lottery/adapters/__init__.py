"""Transport adapters that expose a `Lottery` over HTTP."""

from .rpc_mount import get_router, mount_lottery_routes

__all__ = ["get_router", "mount_lottery_routes"]
