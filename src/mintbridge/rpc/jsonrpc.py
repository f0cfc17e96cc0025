"""Chain JSON-RPC forwarding.

Read calls are passed through verbatim to a chain's public endpoint. No
retries: reads are idempotent and callers re-issue them if needed.
"""

import logging
import time
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class RpcError(Exception):
    """JSON-RPC request failed at the HTTP or protocol level."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


async def forward_rpc(
    rpc_url: str,
    method: str,
    params: Any = None,
    timeout: float = 30.0,
) -> Any:
    """Issue a single JSON-RPC 2.0 call.

    Args:
        rpc_url: Chain RPC endpoint
        method: RPC method name (opaque to this module)
        params: RPC params, forwarded unchanged
        timeout: HTTP timeout in seconds

    Returns:
        The `result` member of the response

    Raises:
        RpcError: Non-success HTTP status or JSON-RPC error object
    """
    payload = {
        "jsonrpc": "2.0",
        "id": int(time.time() * 1000),
        "method": method,
        "params": params if params is not None else [],
    }

    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.post(rpc_url, json=payload)

    if not response.is_success:
        raise RpcError(
            f"RPC request failed: {response.status_code} {response.reason_phrase}",
            code=response.status_code,
        )

    data = response.json()
    error = data.get("error")
    if error:
        code = error.get("code")
        logger.debug(f"RPC {method} on {rpc_url} returned error {code}")
        raise RpcError(f"RPC error {code}: {error.get('message')}", code=code)

    return data.get("result")
