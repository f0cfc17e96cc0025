#!/usr/bin/env python3
"""Show balances of the custodial wallet.

Usage:
    python scripts/get_balance.py [--onchain]

Options:
    --onchain  Read balances directly from Base and Arbitrum RPCs
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

load_dotenv()

from mintbridge.chains import BASE_CHAIN_ID, get_explorer_address_url
from mintbridge.services.balances import get_onchain_balances
from mintbridge.signing.factory import get_custodial_client

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

FUND_HINT = "Fund this wallet with USDC on Base to run the bridge demo."


async def show_custodial_balances(client, address: str):
    balances = await client.get_wallet_balances(address)
    if not balances:
        print("No token balances found.")
        print(f"   {FUND_HINT}")
        return

    print("Balances on Base:")
    print("-" * 60)
    non_zero = [b for b in balances if Decimal(b.amount or "0") > 0]
    for token in non_zero:
        places = min(token.decimals, 6)
        amount = f"{Decimal(token.amount):.{places}f}"
        usd = f" (~${Decimal(token.usd_value):.2f})" if token.usd_value != "0" else ""
        print(f"  {token.symbol:<10} {amount:>15}{usd}")
    if not non_zero:
        print("  All balances are zero.")
        print(f"\n  {FUND_HINT}")
    print("-" * 60)


async def show_onchain_balances(address: str):
    balances = await get_onchain_balances(address)
    print("On-chain balances:")
    print("-" * 60)
    for b in balances:
        print(f"  {b.symbol:<6} {b.chain_name:<14} {b.formatted:>20}")
    if not balances:
        print("  All balances are zero.")
    print("-" * 60)


async def main():
    parser = argparse.ArgumentParser(description="Show custodial wallet balances")
    parser.add_argument("--onchain", action="store_true", help="Read balances from chain RPCs")
    args = parser.parse_args()

    print("Fetching wallet balances...\n")
    client = get_custodial_client()
    wallet = await client.resolve_or_create_wallet()

    print(f"Wallet: {wallet.address}")
    print(f"Explorer: {get_explorer_address_url(BASE_CHAIN_ID, wallet.address)}\n")

    if args.onchain:
        await show_onchain_balances(wallet.address)
    else:
        await show_custodial_balances(client, wallet.address)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
