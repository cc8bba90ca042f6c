"""JSON-RPC method shims for the lottery (see `lottery.rpc.methods`)."""

from .methods import RPC_METHODS, dispatch

__all__ = ["RPC_METHODS", "dispatch"]
