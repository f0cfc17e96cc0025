"""Chain JSON-RPC reads."""

from mintbridge.rpc.erc20 import get_allowance, get_native_balance, get_token_balance
from mintbridge.rpc.jsonrpc import RpcError, forward_rpc

__all__ = [
    "RpcError",
    "forward_rpc",
    "get_allowance",
    "get_native_balance",
    "get_token_balance",
]
