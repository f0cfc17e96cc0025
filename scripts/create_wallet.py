#!/usr/bin/env python3
"""Create (or fetch) the custodial EVM smart wallet and print its address.

Usage:
    python scripts/create_wallet.py [--locator userId:alice:evm:smart]
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

from mintbridge.chains import ARBITRUM_CHAIN_ID, BASE_CHAIN_ID, get_explorer_address_url
from mintbridge.signing.factory import get_custodial_client

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def main():
    parser = argparse.ArgumentParser(description="Create or fetch the custodial wallet")
    parser.add_argument("--locator", type=str, help="Wallet locator (default from .env)")
    args = parser.parse_args()

    print("Initializing custodial wallet...\n")
    client = get_custodial_client()
    wallet = await client.resolve_or_create_wallet(args.locator)

    print("Wallet ready!")
    print(f"   Address:       {wallet.address}")
    print(f"   Base explorer: {get_explorer_address_url(BASE_CHAIN_ID, wallet.address)}")
    print(f"   Arb explorer:  {get_explorer_address_url(ARBITRUM_CHAIN_ID, wallet.address)}")
    print()
    print("Next step: fund this wallet with a small amount of USDC on Base.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
