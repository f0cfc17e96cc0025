#!/usr/bin/env python3
"""Withdraw all USDC (Base) and ETH (Arbitrum) from the custodial wallet.

Usage:
    python scripts/withdraw.py <destination> [--locator userId:alice:evm:smart]
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

from mintbridge.events import EventKind, ProgressEvent
from mintbridge.services.withdrawal import WithdrawalStatus, run_withdrawal, validate_destination

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def print_event(event: ProgressEvent):
    if event.event == EventKind.STATUS:
        print(f"  [{event.data['status']}] {event.data['message']}")
    elif event.event == EventKind.ERROR:
        print(f"\nError: {event.data['message']}")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Withdraw everything to an external address")
    parser.add_argument("destination", help="Destination EVM address (0x...)")
    parser.add_argument("--locator", type=str, help="Wallet locator (default from .env)")
    args = parser.parse_args()

    try:
        validate_destination(args.destination)
    except ValueError as e:
        print(f"{e}: {args.destination}")
        return 1

    print(f"Withdrawing to {args.destination}\n")
    outcome = await run_withdrawal(args.destination, print_event, locator=args.locator)

    if outcome.status == WithdrawalStatus.EMPTY:
        print("\nNothing to withdraw - all balances are zero.")
        return 0

    if outcome.receipts:
        print("\nConfirmed transfers:")
        for receipt in outcome.receipts:
            print(f"  {receipt.label}: {receipt.explorer_url}")

    if outcome.status == WithdrawalStatus.FAILED:
        if outcome.is_partial:
            print("\nWithdrawal stopped after a partial transfer; the transfers above are final.")
        return 1

    print("\nWithdrawal complete!")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
