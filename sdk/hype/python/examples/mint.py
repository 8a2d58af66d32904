#!/usr/bin/env python3
"""Example CLI that mints (or burns) tokens for a network address."""

import argparse
import json
import logging
import sys

from solders.keypair import Keypair  # type: ignore[import-untyped]

from hype.client import Client
from hype.config import Settings
from hype.errors import HypeError
from hype.events import EventSchema
from hype.instructions import TradeArgs


def load_keypair(path: str) -> Keypair:
    with open(path) as f:
        return Keypair.from_bytes(bytes(json.load(f)))


def main() -> None:
    parser = argparse.ArgumentParser(description="Mint or burn hype tokens")
    parser.add_argument("network_id", type=int, help="Network id (index in the root account)")
    parser.add_argument("address", help="Address on that network")
    parser.add_argument("amount", help="Token amount")
    parser.add_argument("--burn", action="store_true", help="Burn instead of mint")
    parser.add_argument("--limit", help="Slippage limit in base currency")
    parser.add_argument("--nickname", help="Client nickname")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = Settings.from_env()
    except HypeError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    if not settings.keypair_path:
        print("HYPE_KEYPAIR must point to a keypair JSON file")
        sys.exit(1)

    payer = load_keypair(settings.keypair_path)
    client = Client.from_settings(settings)

    try:
        root = client.fetch_root()
        trade = TradeArgs(
            root=root,
            root_account=client.root_address,
            wallet=payer.pubkey(),
            program_id=client.program_id,
            network_id=args.network_id,
            address=args.address,
            amount=args.amount,
            nickname=args.nickname,
            limit=args.limit,
            ref_wallet=settings.ref_wallet,
        )
        built = client.burn(trade) if args.burn else client.mint(trade)
        signature = client.send_instruction(built, payer)
        schema = EventSchema.LEGACY if root.version == 1 else EventSchema.CURRENT
        reports = client.fetch_reports(signature, root.base_crncy_decs_factor, schema)
    except HypeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Signature: {signature}")
    for report in reports:
        print(f"  {report.event.name}: {report.report}")


if __name__ == "__main__":
    main()
