#!/usr/bin/env python3
"""
Script to load and print a wallet snapshot.

Logs in (or reuses persisted tokens), loads balance, address and the NFT
gallery, then fetches every NFT image.

Usage:
    # Demo data, no network
    MOCK_MODE=true python scripts/wallet_snapshot.py --username alice --password pw

    # Reuse tokens saved by a previous login
    python scripts/wallet_snapshot.py

    # Forget saved tokens
    python scripts/wallet_snapshot.py --logout
"""

import argparse
import asyncio
import getpass
import sys

import structlog

from bsvwallet.client import WalletClient
from bsvwallet.config.logging import configure_logging
from bsvwallet.core.exceptions import BsvWalletError, ConfigurationError

log = structlog.get_logger()


async def run(args: argparse.Namespace) -> int:
    async with WalletClient() as wallet:
        if args.logout:
            wallet.logout()
            print("Logged out.")
            return 0

        if args.username:
            password = args.password or getpass.getpass("Password: ")
            await wallet.sessions.login(args.username, password)

        if not wallet.session.is_authenticated:
            print("Not logged in. Pass --username.", file=sys.stderr)
            return 1

        snapshot = await wallet.refresh()

        print("\n" + "=" * 60)
        print(f"Wallet: {wallet.session.username or '(restored session)'}")
        print("=" * 60)
        print(f"Address: {snapshot.address}")
        print(f"Balance: {snapshot.balance_satoshis:,} sat")
        print(f"\nNFTs ({len(snapshot.assets)}):")
        if not snapshot.assets:
            print("  No NFTs found.")
        for asset in snapshot.assets:
            image = "Image not found" if asset.is_degraded else asset.image.value
            print(f"  - {asset.display_name:<30} {asset.origin_id}  [{image}]")
        return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a wallet snapshot")
    parser.add_argument("--username", help="Log in with this username")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument("--logout", action="store_true", help="Clear saved tokens")
    args = parser.parse_args()

    try:
        configure_logging()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        sys.exit(asyncio.run(run(args)))
    except BsvWalletError as e:
        log.error("wallet_snapshot_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
