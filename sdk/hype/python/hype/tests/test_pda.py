"""Address derivation tests."""

import struct

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from conftest import PROGRAM_ID, key
from hype import pda
from hype.config import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    CLIENT_ACCOUNT_TAG,
    HYPE_SEED,
    ROOT_ACCOUNT_TAG,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from hype.errors import DerivationExhausted, InvalidFieldValue


def test_derive_matches_find_program_address():
    for seeds in ([HYPE_SEED], [b"a", b"b"], [bytes(32), bytes(key(5))], []):
        assert pda.derive(PROGRAM_ID, seeds) == Pubkey.find_program_address(seeds, PROGRAM_ID)


def test_derive_hype_authority():
    addr, bump = pda.derive_hype_authority(PROGRAM_ID)
    assert addr != Pubkey.default()
    assert (addr, bump) == Pubkey.find_program_address([HYPE_SEED], PROGRAM_ID)
    assert pda.derive_hype_authority(PROGRAM_ID) == (addr, bump)


def test_derive_root_account():
    authority, _ = Pubkey.find_program_address([HYPE_SEED], PROGRAM_ID)
    seed = struct.pack("<ii", 2, ROOT_ACCOUNT_TAG)
    expected = Pubkey.find_program_address([seed, bytes(authority)], PROGRAM_ID)
    assert pda.derive_root_account(PROGRAM_ID, 2) == expected


def test_derive_root_account_different_versions():
    addr1, _ = pda.derive_root_account(PROGRAM_ID, 1)
    addr2, _ = pda.derive_root_account(PROGRAM_ID, 2)
    assert addr1 != addr2


def test_derive_client_account():
    wallet = key(7)
    seed = struct.pack("<ii", 2, CLIENT_ACCOUNT_TAG)
    expected = Pubkey.find_program_address([seed, bytes(wallet)], PROGRAM_ID)
    assert pda.derive_client_account(PROGRAM_ID, wallet, 2) == expected


def test_derive_client_account_different_wallets():
    addr1, _ = pda.derive_client_account(PROGRAM_ID, key(7), 2)
    addr2, _ = pda.derive_client_account(PROGRAM_ID, key(8), 2)
    assert addr1 != addr2


def test_derive_token_account():
    authority, _ = Pubkey.find_program_address([HYPE_SEED], PROGRAM_ID)
    seed = bytearray(32)
    seed[:8] = b"elonmusk"
    struct.pack_into("<i", seed, 24, 1)
    struct.pack_into("<i", seed, 28, 2)
    expected = Pubkey.find_program_address([bytes(seed), bytes(authority)], PROGRAM_ID)
    assert pda.derive_token_account(PROGRAM_ID, 1, "ElonMusk", 2) == expected


def test_derive_token_account_is_case_insensitive():
    assert pda.derive_token_account(PROGRAM_ID, 0, "ABC", 2) == pda.derive_token_account(
        PROGRAM_ID, 0, "abc", 2
    )


def test_derive_token_account_changes_with_each_input():
    base, _ = pda.derive_token_account(PROGRAM_ID, 0, "abc", 2)
    assert pda.derive_token_account(PROGRAM_ID, 1, "abc", 2)[0] != base
    assert pda.derive_token_account(PROGRAM_ID, 0, "abd", 2)[0] != base
    assert pda.derive_token_account(PROGRAM_ID, 0, "abc", 3)[0] != base
    assert pda.derive_token_account(key(1), 0, "abc", 2)[0] != base


class TestSeedLayout:
    def test_versioned_tag_seed(self):
        assert pda.versioned_tag_seed(2, ROOT_ACCOUNT_TAG) == bytes([2, 0, 0, 0, 2, 0, 0, 0])
        assert pda.versioned_tag_seed(2, CLIENT_ACCOUNT_TAG) == bytes([2, 0, 0, 0, 4, 0, 0, 0])

    def test_token_seed_fields(self):
        seed = pda.token_account_seed(5, "Abc", 2)
        assert len(seed) == 32
        assert seed[:3] == b"abc"
        assert seed[3:24] == bytes(21)
        assert struct.unpack_from("<i", seed, 24)[0] == 5
        assert struct.unpack_from("<i", seed, 28)[0] == 2

    def test_long_address_never_overlaps_numeric_fields(self):
        seed = pda.token_account_seed(5, "x" * 40, 2)
        assert seed[:24] == b"x" * 24
        assert struct.unpack_from("<i", seed, 24)[0] == 5
        assert struct.unpack_from("<i", seed, 28)[0] == 2


def test_derive_associated_token_address():
    wallet, mint = key(30), key(31)
    expected, _ = Pubkey.find_program_address(
        [bytes(wallet), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    assert pda.derive_associated_token_address(wallet, mint) == expected
    assert pda.derive_associated_token_address(wallet, mint, TOKEN_2022_PROGRAM_ID) != expected


def test_derive_rejects_oversized_seed():
    with pytest.raises(DerivationExhausted) as exc:
        pda.derive(PROGRAM_ID, [bytes(33)])
    assert exc.value.__cause__ is not None


def test_derive_rejects_too_many_seeds():
    with pytest.raises(DerivationExhausted):
        pda.derive(PROGRAM_ID, [b"x"] * 16)


def test_derive_exhausted(monkeypatch):
    calls = []

    class OnCurve:
        @staticmethod
        def create_program_address(seeds, program_id):
            calls.append(seeds[-1])
            raise ValueError("address is on the curve")

    monkeypatch.setattr(pda, "Pubkey", OnCurve)
    with pytest.raises(DerivationExhausted) as exc:
        pda.derive(PROGRAM_ID, [HYPE_SEED])
    assert isinstance(exc.value.__cause__, ValueError)
    assert calls[0] == bytes([255])
    assert calls[-1] == bytes([1])
    assert len(calls) == 255


class TestNetworkIdRange:
    def test_high_network_id_is_unsigned(self):
        seed = pda.token_account_seed(2**31, "abc", 2)
        assert struct.unpack_from("<I", seed, 24)[0] == 2**31
        addr, _ = pda.derive_token_account(PROGRAM_ID, 0xFFFFFFFF, "abc", 2)
        assert addr != pda.derive_token_account(PROGRAM_ID, 0, "abc", 2)[0]

    @pytest.mark.parametrize("network_id", [-1, 2**32])
    def test_out_of_range(self, network_id):
        with pytest.raises(InvalidFieldValue):
            pda.token_account_seed(network_id, "abc", 2)
