"""Program constants and network configuration for the hype program."""

from __future__ import annotations

import os
from dataclasses import dataclass

from solders import system_program  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from spl.token.constants import (  # type: ignore[import-untyped]
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

from hype.errors import InvalidFieldValue

HYPE_SEED = b"hypewtch"

ROOT_ACCOUNT_TAG = 2
TOKEN_ACCOUNT_TAG = 3
CLIENT_ACCOUNT_TAG = 4

DEFAULT_VERSION = 2

NETWORK_STRING_LENGTH = 32
NICKNAME_STRING_LENGTH = 32
ADDRESS_STRING_LENGTH = 24
MASK_STRING_LENGTH = 64
OPERATOR_NAME_LENGTH = 32
URL_PREFIX_LENGTH = 32
NETWORK_RECORD_LENGTH = 136

# Fixed-point scale applied to trade amounts and limits in instruction payloads.
AMOUNT_MULTIPLIER = 1_000_000

SYSTEM_PROGRAM_ID = system_program.ID

# Referral slots are filled with this address when no referrer is given.
NO_REFERRAL_ADDRESS = SYSTEM_PROGRAM_ID

SOLANA_RPC_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "localnet": "http://localhost:8899",
}

ENV_RPC_URL = "HYPE_RPC_URL"
ENV_PROGRAM_ID = "HYPE_PROGRAM_ID"
ENV_VERSION = "HYPE_VERSION"
ENV_KEYPAIR = "HYPE_KEYPAIR"
ENV_REF_WALLET = "HYPE_REF_WALLET"


@dataclass(frozen=True)
class Settings:
    """Connection settings read from the environment by the example scripts."""

    rpc_url: str
    program_id: Pubkey
    version: int = DEFAULT_VERSION
    keypair_path: str | None = None
    ref_wallet: Pubkey | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        program_id = env.get(ENV_PROGRAM_ID)
        if not program_id:
            raise InvalidFieldValue(f"{ENV_PROGRAM_ID} is not set")

        version_str = env.get(ENV_VERSION, str(DEFAULT_VERSION))
        try:
            version = int(version_str)
        except ValueError:
            raise InvalidFieldValue(
                f"{ENV_VERSION} must be an integer, got {version_str!r}"
            ) from None

        ref_wallet = env.get(ENV_REF_WALLET)
        return cls(
            rpc_url=env.get(ENV_RPC_URL, SOLANA_RPC_URLS["localnet"]),
            program_id=Pubkey.from_string(program_id),
            version=version,
            keypair_path=env.get(ENV_KEYPAIR) or None,
            ref_wallet=Pubkey.from_string(ref_wallet) if ref_wallet else None,
        )
