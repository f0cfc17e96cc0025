#!/usr/bin/env python3
"""Bridge USDC on Base to ETH on Arbitrum through LI.FI, signed by the custodial wallet.

Usage:
    python scripts/bridge_and_swap.py [--amount 1.5]

Options:
    --amount  USDC to bridge (default: 1)

Prerequisites:
    - CROSSMINT_SERVER_API_KEY set in .env
    - Wallet funded with USDC on Base
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

load_dotenv()

from mintbridge.chains import (
    ARBITRUM_CHAIN_ID,
    BASE_CHAIN_ID,
    NATIVE_TOKEN_ADDRESS,
    TOKENS,
    format_units,
    get_explorer_address_url,
    get_explorer_tx_url,
    get_supported_chains,
    parse_units,
)
from mintbridge.config import get_settings
from mintbridge.routing import RoutesRequest, StepUpdate, execute_bridge_route, format_route
from mintbridge.routing.factory import create_route_engine
from mintbridge.services.balances import BalanceQuery, read_balance_snapshot
from mintbridge.signing import CustodialSignerProvider, get_custodial_client

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description="Bridge USDC (Base) to ETH (Arbitrum)")
    parser.add_argument("--amount", type=str, default="1", help="USDC amount to bridge")
    args = parser.parse_args()

    usdc = TOKENS["USDC_BASE"]
    amount = parse_units(args.amount, usdc.decimals)

    print("Base USDC -> Arbitrum ETH\n")

    # Step 1: wallet
    print("Step 1/4: Initializing custodial wallet...")
    client = get_custodial_client()
    wallet = await client.resolve_or_create_wallet()
    print(f"  Address: {wallet.address}")
    print(f"  Explorer: {get_explorer_address_url(BASE_CHAIN_ID, wallet.address)}\n")

    # Step 2: source balance
    print("Step 2/4: Checking USDC balance on Base...")
    chains = get_supported_chains()
    snapshot = await read_balance_snapshot(
        wallet.address, [BalanceQuery(chain=chains[BASE_CHAIN_ID], token=usdc)]
    )
    balance = snapshot.get(usdc.symbol, BASE_CHAIN_ID)
    if balance < amount:
        print("\nInsufficient USDC balance on Base.")
        print(f"   Required: {args.amount} USDC ({amount} units)")
        print(f"   Found: {format_units(balance, usdc.decimals)} USDC")
        print(f"\n   Fund this address with USDC on Base and try again:\n   {wallet.address}")
        sys.exit(1)
    print(f"  USDC balance: {format_units(balance, usdc.decimals)} USDC\n")

    # Step 3: route
    print("Step 3/4: Fetching best route from LI.FI...")
    engine = create_route_engine()
    route = await engine.get_best_route(
        RoutesRequest(
            from_chain_id=BASE_CHAIN_ID,
            to_chain_id=ARBITRUM_CHAIN_ID,
            from_token=usdc.address,
            to_token=NATIVE_TOKEN_ADDRESS,
            from_amount=str(amount),
            from_address=wallet.address,
            slippage=get_settings().default_slippage,
        )
    )
    if route is None:
        print("\nNo route found. LI.FI may not support this pair right now.")
        print("   Try again later or reduce the amount.")
        sys.exit(1)

    print("\n  Route found:")
    print("\n".join(f"  {line}" for line in format_route(route).split("\n")))
    print()

    # Step 4: execute
    print("Step 4/4: Executing bridge via custodial wallet...")
    print("  (This may take 1-5 minutes depending on the bridge)\n")

    def on_update(update: StepUpdate):
        print(f"  [{update.step}/{update.total_steps}] {update.message}")

    result = await execute_bridge_route(
        engine, route, CustodialSignerProvider(wallet, client), on_update
    )

    print("\nBridge complete!\n")
    print(f"Received: ~{result.to_amount} {result.to_token}")
    if result.tx_hashes:
        print("Transaction receipts:")
        for i, tx_hash in enumerate(result.tx_hashes):
            chain_id = BASE_CHAIN_ID if i == 0 else ARBITRUM_CHAIN_ID
            print(f"  {i + 1}. {get_explorer_tx_url(chain_id, tx_hash)}")
        print()

    print(f"Arbitrum wallet: {get_explorer_address_url(ARBITRUM_CHAIN_ID, wallet.address)}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)
