"""ERC-20 call encoding and balance reads.

Call data is encoded by hand from the 4-byte function selectors; every
argument is a 32-byte word (addresses left-padded, uint256 big-endian).
"""

import logging

from mintbridge.rpc.jsonrpc import forward_rpc

logger = logging.getLogger(__name__)

ERC20_TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)
ERC20_APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)
BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
ALLOWANCE_SELECTOR = "0xdd62ed3e"  # allowance(address,address)

MAX_UINT256 = 2**256 - 1


def _pad_address(address: str) -> str:
    return address.lower().replace("0x", "").zfill(64)


def _pad_uint(value: int) -> str:
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"uint256 out of range: {value}")
    return hex(value)[2:].zfill(64)


def encode_transfer(to: str, amount: int) -> str:
    """Encode transfer(to, amount) call data."""
    return f"{ERC20_TRANSFER_SELECTOR}{_pad_address(to)}{_pad_uint(amount)}"


def encode_approve(spender: str, amount: int) -> str:
    """Encode approve(spender, amount) call data."""
    return f"{ERC20_APPROVE_SELECTOR}{_pad_address(spender)}{_pad_uint(amount)}"


def encode_balance_of(owner: str) -> str:
    return f"{BALANCE_OF_SELECTOR}{_pad_address(owner)}"


def encode_allowance(owner: str, spender: str) -> str:
    return f"{ALLOWANCE_SELECTOR}{_pad_address(owner)}{_pad_address(spender)}"


def decode_uint(result: str) -> int:
    """Decode a uint256 return value ("0x" decodes to 0)."""
    if not result or result == "0x":
        return 0
    return int(result, 16)


async def get_native_balance(rpc_url: str, address: str) -> int:
    """Get native balance in wei."""
    result = await forward_rpc(rpc_url, "eth_getBalance", [address, "latest"])
    return decode_uint(result)


async def get_token_balance(rpc_url: str, token_address: str, owner: str) -> int:
    """Get ERC-20 balance in token units."""
    result = await forward_rpc(
        rpc_url,
        "eth_call",
        [{"to": token_address, "data": encode_balance_of(owner)}, "latest"],
    )
    return decode_uint(result)


async def get_allowance(rpc_url: str, token_address: str, owner: str, spender: str) -> int:
    """Get the ERC-20 allowance granted by owner to spender."""
    result = await forward_rpc(
        rpc_url,
        "eth_call",
        [{"to": token_address, "data": encode_allowance(owner, spender)}, "latest"],
    )
    return decode_uint(result)
