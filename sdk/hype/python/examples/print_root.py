#!/usr/bin/env python3
"""Example CLI that fetches and displays the hype root account."""

import argparse
import logging
import sys

from hype.client import Client
from hype.config import Settings
from hype.errors import HypeError


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch hype program state")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="Also list every token account",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        settings = Settings.from_env()
    except HypeError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    print(f"Fetching hype root account from {settings.rpc_url}...\n")
    client = Client.from_settings(settings)

    try:
        root = client.fetch_root()
    except HypeError as e:
        print(f"Error fetching root account: {e}")
        sys.exit(1)

    print("=== Root Account ===")
    print(f"Address:              {client.root_address}")
    print(f"Version:              {root.version}")
    print(f"Admin:                {root.admin}")
    print(f"Fee Wallet:           {root.fee_wallet}")
    print(f"Base Currency Mint:   {root.base_crncy_mint}")
    print(f"Operator:             {root.operator_name}")
    print(f"Clients:              {root.clients_count}")
    print(f"Tokens:               {root.tokens_count}")
    print(f"Supply:               {root.supply}")
    print(f"TVL:                  {root.tvl}")
    print(f"Fees:                 {root.fees}")
    print(f"Volume:               {root.all_time_base_crncy_volume}")
    print(f"Last Update:          {root.time.isoformat()}")
    print()

    print(f"=== Networks ({root.networks_count}) ===")
    for i, network in enumerate(root.networks):
        print(f"  [{i}] {network.descriptor:<16} max={network.max_length:<3} validator={network.validator}")
    print()

    if args.tokens:
        tokens = client.fetch_all_tokens(root)
        print(f"=== Tokens ({len(tokens)}) ===")
        for token in tokens:
            print(
                f"  {token.address:<24} network={token.network} supply={token.supply} "
                f"status={token.validation_status}"
            )


if __name__ == "__main__":
    main()
