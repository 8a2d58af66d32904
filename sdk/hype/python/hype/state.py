"""On-chain account data structures for the hype program.

Layouts are fixed-offset little-endian records that start with a u32 account
tag and a u32 program version. Monetary quantities are stored as i64
fixed-point integers and decoded to ``Decimal`` by dividing by the base
currency decimals factor. Extra trailing bytes are tolerated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import IntEnum

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from hype.config import (
    ADDRESS_STRING_LENGTH,
    CLIENT_ACCOUNT_TAG,
    MASK_STRING_LENGTH,
    NETWORK_RECORD_LENGTH,
    NETWORK_STRING_LENGTH,
    NICKNAME_STRING_LENGTH,
    OPERATOR_NAME_LENGTH,
    ROOT_ACCOUNT_TAG,
    TOKEN_ACCOUNT_TAG,
    URL_PREFIX_LENGTH,
)
from hype.errors import InvalidFieldValue
from hype.reader import LayoutReader


class TokenValidation(IntEnum):
    UNVERIFIED = 0
    VERIFIED = 1
    REJECTED = 2

    def __str__(self) -> str:
        _names = {0: "unverified", 1: "verified", 2: "rejected"}
        return _names.get(self.value, "unknown")


def _check_tag(r: LayoutReader, expected: int, name: str) -> None:
    tag = r.read_u32(0)
    if tag != expected:
        raise InvalidFieldValue(f"{name}: invalid account tag: got {tag}, want {expected}")


# ---------------------------------------------------------------------------
# Nested records
# ---------------------------------------------------------------------------


@dataclass
class NetworkRecord:
    max_length: int  # i8
    validator: Pubkey
    descriptor: str  # [32]u8
    mask: str  # [64]u8

    STRUCT_SIZE = NETWORK_RECORD_LENGTH

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> NetworkRecord:
        r = LayoutReader(data, "NetworkRecord")
        r.require(offset + cls.STRUCT_SIZE)
        return cls(
            max_length=r.read_i8(offset),
            validator=r.read_pubkey(offset + 8),
            descriptor=r.read_string(offset + 40, NETWORK_STRING_LENGTH),
            mask=r.read_string(offset + 72, MASK_STRING_LENGTH),
        )


# ---------------------------------------------------------------------------
# Top-level account types
# ---------------------------------------------------------------------------


@dataclass
class RootAccount:
    tag: int  # u32
    version: int  # u32
    admin: Pubkey
    fee_wallet: Pubkey
    base_crncy_mint: Pubkey
    base_crncy_program_address: Pubkey
    clients_count: int  # i64
    tokens_count: int  # i64
    fees: Decimal  # i64 scaled
    networks_count: int  # u32
    base_crncy_decs_factor: int  # u32
    slot: int  # i64
    time: datetime  # u32 unix seconds
    decimals: int  # u32
    supply: Decimal  # i64 scaled
    tvl: Decimal  # i64 scaled
    counter: int  # i64
    all_time_base_crncy_volume: Decimal  # i64 scaled
    all_time_tokens_volume: Decimal  # i64 scaled
    holder_fees: Decimal  # i64 scaled
    init_price: float  # f64
    slope: float  # f64
    fee_ratio: float  # f64
    fee_rate: float  # f64
    creation_fee: float  # f64
    max_networks_count: int  # u32
    creation_time: datetime  # u32 unix seconds
    min_fees: float  # f64
    operator_name: str  # [32]u8
    ref_duration: int  # u32
    mask: int  # u32
    ref_discount: float  # f64
    ref_ratio: float  # f64
    url_prefix: str  # [32]u8
    networks: list[NetworkRecord] = field(default_factory=list)

    BASE_SIZE = 392
    NETWORKS_COUNT_OFFSET = 160
    DECS_FACTOR_OFFSET = 164

    @classmethod
    def size_for(cls, networks_count: int) -> int:
        return cls.BASE_SIZE + networks_count * NetworkRecord.STRUCT_SIZE

    @classmethod
    def from_bytes(cls, data: bytes, check_tag: bool = False) -> RootAccount:
        r = LayoutReader(data, "RootAccount")

        # Phase 1: the values every other field depends on.
        r.require(cls.BASE_SIZE)
        if check_tag:
            _check_tag(r, ROOT_ACCOUNT_TAG, "RootAccount")
        networks_count = r.read_u32(cls.NETWORKS_COUNT_OFFSET)
        f = r.read_u32(cls.DECS_FACTOR_OFFSET)
        if f == 0:
            raise InvalidFieldValue("RootAccount: base currency decimals factor is zero")
        r.require(cls.size_for(networks_count))

        # Phase 2: everything else, monetary fields scaled by f.
        networks = [
            NetworkRecord.from_bytes(r.data, cls.BASE_SIZE + i * NetworkRecord.STRUCT_SIZE)
            for i in range(networks_count)
        ]
        return cls(
            tag=r.read_u32(0),
            version=r.read_u32(4),
            admin=r.read_pubkey(8),
            fee_wallet=r.read_pubkey(40),
            base_crncy_mint=r.read_pubkey(72),
            base_crncy_program_address=r.read_pubkey(104),
            clients_count=r.read_i64(136),
            tokens_count=r.read_i64(144),
            fees=r.read_amount(152, f),
            networks_count=networks_count,
            base_crncy_decs_factor=f,
            slot=r.read_i64(168),
            time=r.read_time(176),
            decimals=r.read_u32(180),
            supply=r.read_amount(184, f),
            tvl=r.read_amount(192, f),
            counter=r.read_i64(200),
            all_time_base_crncy_volume=r.read_amount(208, f),
            all_time_tokens_volume=r.read_amount(224, f),
            holder_fees=r.read_amount(240, f),
            init_price=r.read_f64(248),
            slope=r.read_f64(256),
            fee_ratio=r.read_f64(264),
            fee_rate=r.read_f64(272),
            creation_fee=r.read_f64(280),
            max_networks_count=r.read_u32(288),
            creation_time=r.read_time(292),
            min_fees=r.read_f64(296),
            operator_name=r.read_string(304, OPERATOR_NAME_LENGTH),
            ref_duration=r.read_u32(336),
            mask=r.read_u32(340),
            ref_discount=r.read_f64(344),
            ref_ratio=r.read_f64(352),
            url_prefix=r.read_string(360, URL_PREFIX_LENGTH),
            networks=networks,
        )

    def network(self, network_id: int) -> NetworkRecord:
        """Network record for ``network_id`` (ids are array positions)."""
        if not 0 <= network_id < len(self.networks):
            raise InvalidFieldValue(
                f"unknown network id {network_id}, root has {len(self.networks)} networks"
            )
        return self.networks[network_id]


@dataclass
class ClientAccount:
    tag: int  # u32
    version: int  # u32
    id: int  # i64
    wallet: Pubkey
    all_time_base_crncy_volume: Decimal  # i64 scaled
    all_time_tokens_volume: Decimal  # i64 scaled
    slot: int  # i64
    time: datetime  # u32 unix seconds
    tokens_created: int  # u32
    ref_stop: datetime  # u32 unix seconds
    all_time_trades_count: int  # u32
    nickname: str  # [32]u8
    ref_address: Pubkey
    ref_paid: Decimal  # i64 scaled
    ref_discount: float  # f64
    ref_ratio: float  # f64

    STRUCT_SIZE = 176

    @classmethod
    def from_bytes(
        cls, data: bytes, decs_factor: int, check_tag: bool = False
    ) -> ClientAccount:
        if decs_factor <= 0:
            raise InvalidFieldValue(f"decimals factor must be positive, got {decs_factor}")
        r = LayoutReader(data, "ClientAccount")
        r.require(cls.STRUCT_SIZE)
        if check_tag:
            _check_tag(r, CLIENT_ACCOUNT_TAG, "ClientAccount")
        return cls(
            tag=r.read_u32(0),
            version=r.read_u32(4),
            id=r.read_i64(8),
            wallet=r.read_pubkey(16),
            all_time_base_crncy_volume=r.read_amount(48, decs_factor),
            all_time_tokens_volume=r.read_amount(56, decs_factor),
            slot=r.read_i64(64),
            time=r.read_time(72),
            tokens_created=r.read_u32(76),
            ref_stop=r.read_time(80),
            all_time_trades_count=r.read_u32(84),
            nickname=r.read_string(88, NICKNAME_STRING_LENGTH),
            ref_address=r.read_pubkey(120),
            ref_paid=r.read_amount(152, decs_factor),
            ref_discount=r.read_f64(160),
            ref_ratio=r.read_f64(168),
        )


@dataclass
class TokenAccount:
    tag: int  # u32
    version: int  # u32
    id: int  # i64
    mint: Pubkey
    program_address: Pubkey
    creator: Pubkey
    creation_time: datetime  # u32 unix seconds
    time: datetime  # u32 unix seconds
    supply: Decimal  # i64 scaled
    address: str  # [24]u8
    network: int  # u32
    slot: int  # i64
    all_time_trades_count: int  # i64
    all_time_base_crncy_volume: Decimal  # i64 scaled
    all_time_tokens_volume: Decimal  # i64 scaled
    validation: int  # u32

    STRUCT_SIZE = 212
    MINT_OFFSET = 16
    PROGRAM_ADDRESS_OFFSET = 48

    @classmethod
    def from_bytes(
        cls, data: bytes, decs_factor: int, check_tag: bool = False
    ) -> TokenAccount:
        if decs_factor <= 0:
            raise InvalidFieldValue(f"decimals factor must be positive, got {decs_factor}")
        r = LayoutReader(data, "TokenAccount")
        r.require(cls.STRUCT_SIZE)
        if check_tag:
            _check_tag(r, TOKEN_ACCOUNT_TAG, "TokenAccount")
        return cls(
            tag=r.read_u32(0),
            version=r.read_u32(4),
            id=r.read_i64(8),
            mint=r.read_pubkey(cls.MINT_OFFSET),
            program_address=r.read_pubkey(cls.PROGRAM_ADDRESS_OFFSET),
            creator=r.read_pubkey(80),
            creation_time=r.read_time(112),
            time=r.read_time(116),
            supply=r.read_amount(120, decs_factor),
            address=r.read_string(128, ADDRESS_STRING_LENGTH),
            network=r.read_u32(152),
            slot=r.read_i64(160),
            all_time_trades_count=r.read_i64(168),
            all_time_base_crncy_volume=r.read_amount(176, decs_factor),
            all_time_tokens_volume=r.read_amount(192, decs_factor),
            validation=r.read_u32(208),
        )

    @property
    def validation_status(self) -> TokenValidation | None:
        try:
            return TokenValidation(self.validation)
        except ValueError:
            return None


def decode_root(data: bytes) -> RootAccount:
    return RootAccount.from_bytes(data)


def decode_client(data: bytes, decs_factor: int) -> ClientAccount:
    return ClientAccount.from_bytes(data, decs_factor)


def decode_token(data: bytes, decs_factor: int) -> TokenAccount:
    return TokenAccount.from_bytes(data, decs_factor)
