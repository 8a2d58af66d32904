"""Program address derivation for hype program accounts."""

import struct

from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from spl.token.instructions import get_associated_token_address  # type: ignore[import-untyped]

from hype.config import (
    ADDRESS_STRING_LENGTH,
    CLIENT_ACCOUNT_TAG,
    HYPE_SEED,
    ROOT_ACCOUNT_TAG,
    TOKEN_PROGRAM_ID,
)
from hype.errors import DerivationExhausted, InvalidFieldValue

TOKEN_SEED_LENGTH = 32
TOKEN_SEED_NETWORK_OFFSET = 24
TOKEN_SEED_VERSION_OFFSET = 28

MAX_U32 = 0xFFFFFFFF


def derive(program_id: Pubkey, seeds: list[bytes]) -> tuple[Pubkey, int]:
    """Find the first valid program address for ``seeds``, walking bumps 255..1.

    Produces the same result as ``Pubkey.find_program_address`` but raises
    DerivationExhausted instead of aborting when no bump works. Seeds the
    runtime rejects (too many, or longer than 32 bytes) fail every bump and
    end up as DerivationExhausted, chained to the library error.
    """
    last_error: Exception | None = None
    for bump in range(255, 0, -1):
        try:
            addr = Pubkey.create_program_address([*seeds, bytes([bump])], program_id)
        except Exception as e:  # solders raises PubkeyError for on-curve results
            last_error = e
            continue
        return addr, bump
    raise DerivationExhausted(
        f"no viable bump seed for program {program_id}"
    ) from last_error


def versioned_tag_seed(version: int, tag: int) -> bytes:
    """8-byte seed: version (i32 LE) followed by account tag (i32 LE)."""
    return struct.pack("<ii", version, tag)


def token_account_seed(network_id: int, address: str, version: int) -> bytes:
    """32-byte seed: lower-cased address in bytes 0..24, network id at 24, version at 28.

    Addresses longer than 24 bytes are cut so they never reach the numeric
    fields. Network id and version are u32.
    """
    for name, value in (("network id", network_id), ("version", version)):
        if not 0 <= value <= MAX_U32:
            raise InvalidFieldValue(f"{name} out of range: {value}")
    buf = bytearray(TOKEN_SEED_LENGTH)
    encoded = address.lower().encode("utf-8")[:ADDRESS_STRING_LENGTH]
    buf[: len(encoded)] = encoded
    struct.pack_into("<I", buf, TOKEN_SEED_NETWORK_OFFSET, network_id)
    struct.pack_into("<I", buf, TOKEN_SEED_VERSION_OFFSET, version)
    return bytes(buf)


def derive_hype_authority(program_id: Pubkey) -> tuple[Pubkey, int]:
    return derive(program_id, [HYPE_SEED])


def derive_root_account(program_id: Pubkey, version: int) -> tuple[Pubkey, int]:
    authority, _ = derive_hype_authority(program_id)
    return derive(
        program_id,
        [versioned_tag_seed(version, ROOT_ACCOUNT_TAG), bytes(authority)],
    )


def derive_client_account(
    program_id: Pubkey, wallet: Pubkey, version: int
) -> tuple[Pubkey, int]:
    return derive(
        program_id,
        [versioned_tag_seed(version, CLIENT_ACCOUNT_TAG), bytes(wallet)],
    )


def derive_token_account(
    program_id: Pubkey, network_id: int, address: str, version: int
) -> tuple[Pubkey, int]:
    authority, _ = derive_hype_authority(program_id)
    return derive(
        program_id,
        [token_account_seed(network_id, address, version), bytes(authority)],
    )


def derive_associated_token_address(
    wallet: Pubkey, mint: Pubkey, token_program: Pubkey = TOKEN_PROGRAM_ID
) -> Pubkey:
    """Associated token account holding ``wallet``'s balance of ``mint``."""
    return get_associated_token_address(wallet, mint, token_program)
