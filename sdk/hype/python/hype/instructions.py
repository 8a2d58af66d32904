"""Instruction builders for state-changing hype program operations.

Every payload starts with a one-byte opcode followed by fields at fixed
offsets. Optional fields (nickname, slippage limit) leave their slot zeroed
when absent, which the program reads as "unset".

Two payload schemas exist for mint and burn. ``CurrentSchema`` matches program
version 2 and later. ``LegacySchema`` targets version 1, which used opcodes 2/3;
its payload and account layout are a best-effort reconstruction with no
published reference, assuming the current offsets minus the trade nickname and
the referral accounts. Pick one explicitly or derive it from the root account
with ``schema_for_root``.
"""

from __future__ import annotations

import logging
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from enum import IntEnum
from typing import Union

from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from hype.config import (
    ADDRESS_STRING_LENGTH,
    AMOUNT_MULTIPLIER,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    NICKNAME_STRING_LENGTH,
    NO_REFERRAL_ADDRESS,
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from hype.errors import AccountNotFound, FieldTooLong, InvalidAmount, InvalidFieldValue
from hype.fetch import AccountFetcher, Found
from hype.pda import (
    derive_associated_token_address,
    derive_client_account,
    derive_hype_authority,
    derive_token_account,
)
from hype.reader import LayoutReader
from hype.state import RootAccount, TokenAccount

logger = logging.getLogger(__name__)

Amount = Union[int, float, Decimal, str]

MAX_I64 = 2**63 - 1

CHANGE_NICKNAME_OPCODE = 6
CHANGE_TOKEN_STATUS_OPCODE = 7

CHANGE_NICKNAME_PAYLOAD_SIZE = 40
CHANGE_TOKEN_STATUS_PAYLOAD_SIZE = 8


class SchemaVersion(IntEnum):
    LEGACY = 1
    CURRENT = 2


class TokenStatus(IntEnum):
    VERIFIED = 1
    REJECTED = 2


@dataclass
class TradeArgs:
    root: RootAccount
    root_account: Pubkey
    wallet: Pubkey
    program_id: Pubkey
    network_id: int
    address: str
    amount: Amount
    nickname: str | None = None
    limit: Amount | None = None
    ref_wallet: Pubkey | None = None


@dataclass
class ChangeNicknameArgs:
    root: RootAccount
    root_account: Pubkey
    wallet: Pubkey
    program_id: Pubkey
    nickname: str


@dataclass
class ChangeTokenStatusArgs:
    program_id: Pubkey
    validator: Pubkey
    root_account: Pubkey
    token_account: Pubkey
    network_id: int
    verified: bool


@dataclass
class BuiltInstruction:
    """A ready-to-sign instruction and the extra keypairs that must sign it."""

    instruction: Instruction
    signers: list[Keypair] = field(default_factory=list)


@dataclass
class _TradeAccounts:
    hype_authority: Pubkey
    client_account: Pubkey
    currency_account: Pubkey
    token_account: Pubkey


def to_decimal(value: Amount, name: str = "amount") -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(name, value) from None


def scale_amount(value: Amount, name: str = "amount") -> int:
    """Convert a decimal quantity to the program's fixed-point integer."""
    d = to_decimal(value, name)
    if not d.is_finite() or d <= 0:
        raise InvalidAmount(name, value)
    scaled = int((d * AMOUNT_MULTIPLIER).to_integral_value(rounding=ROUND_DOWN))
    if scaled <= 0 or scaled > MAX_I64:
        raise InvalidAmount(name, value)
    return scaled


def encode_string(value: str, max_length: int, name: str, strict: bool = False) -> bytes:
    """UTF-8 encode ``value`` to at most ``max_length`` bytes.

    Long values are cut on a character boundary, or rejected with
    FieldTooLong when ``strict`` is set.
    """
    raw = value.encode("utf-8")
    if len(raw) <= max_length:
        return raw
    if strict:
        raise FieldTooLong(name, len(raw), max_length)
    return raw[:max_length].decode("utf-8", "ignore").encode("utf-8")


class InstructionSchema(ABC):
    """Payload and account layout for one program version."""

    version: SchemaVersion
    mint_opcode: int
    burn_opcode: int
    mint_payload_size: int
    burn_payload_size: int

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    # -- Trades --

    def mint(self, args: TradeArgs, fetcher: AccountFetcher) -> BuiltInstruction:
        """Build a mint instruction, creating the token on first mint.

        If the token account does not exist yet, two fresh keypairs (token
        mint and token program account) are generated and returned as extra
        signers.
        """
        data = self._mint_payload(args)
        accts = self._derive_trade_accounts(args)
        result = fetcher.fetch_account(accts.token_account)
        signers: list[Keypair] = []
        if isinstance(result, Found):
            token_mint, token_program = _read_token_keys(result.data)
            is_new = False
        else:
            mint_kp = Keypair()
            program_kp = Keypair()
            signers = [mint_kp, program_kp]
            token_mint, token_program = mint_kp.pubkey(), program_kp.pubkey()
            is_new = True
            logger.debug(
                "token account %s not found, creating mint %s",
                accts.token_account,
                token_mint,
            )

        metas = self._trade_metas(args, accts, token_mint, token_program, is_new)
        return BuiltInstruction(Instruction(args.program_id, data, metas), signers)

    def burn(self, args: TradeArgs, fetcher: AccountFetcher) -> BuiltInstruction:
        data = self._burn_payload(args)
        accts = self._derive_trade_accounts(args)
        result = fetcher.fetch_account(accts.token_account)
        if not isinstance(result, Found):
            raise AccountNotFound(accts.token_account)
        token_mint, token_program = _read_token_keys(result.data)

        metas = self._trade_metas(args, accts, token_mint, token_program, False)
        return BuiltInstruction(Instruction(args.program_id, data, metas))

    # -- Administrative --

    def change_nickname(self, args: ChangeNicknameArgs) -> BuiltInstruction:
        client_account, _ = derive_client_account(
            args.program_id, args.wallet, args.root.version
        )
        buf = bytearray(CHANGE_NICKNAME_PAYLOAD_SIZE)
        buf[0] = CHANGE_NICKNAME_OPCODE
        self._put_string(buf, 8, args.nickname, NICKNAME_STRING_LENGTH, "nickname")
        metas = [
            AccountMeta(args.wallet, is_signer=True, is_writable=True),
            AccountMeta(args.root_account, is_signer=False, is_writable=False),
            AccountMeta(client_account, is_signer=False, is_writable=True),
        ]
        return BuiltInstruction(Instruction(args.program_id, bytes(buf), metas))

    def change_token_status(self, args: ChangeTokenStatusArgs) -> BuiltInstruction:
        status = TokenStatus.VERIFIED if args.verified else TokenStatus.REJECTED
        buf = bytearray(CHANGE_TOKEN_STATUS_PAYLOAD_SIZE)
        buf[0] = CHANGE_TOKEN_STATUS_OPCODE
        buf[1] = status
        struct.pack_into("<I", buf, 4, _network_id(args.network_id))
        metas = [
            AccountMeta(args.validator, is_signer=True, is_writable=True),
            AccountMeta(args.root_account, is_signer=False, is_writable=False),
            AccountMeta(args.token_account, is_signer=False, is_writable=True),
        ]
        return BuiltInstruction(Instruction(args.program_id, bytes(buf), metas))

    # -- Layout hooks --

    @abstractmethod
    def _mint_payload(self, args: TradeArgs) -> bytes: ...

    @abstractmethod
    def _burn_payload(self, args: TradeArgs) -> bytes: ...

    def _trade_metas(
        self,
        args: TradeArgs,
        accts: _TradeAccounts,
        token_mint: Pubkey,
        token_program: Pubkey,
        is_new: bool,
    ) -> list[AccountMeta]:
        wallet_token_account = derive_associated_token_address(
            args.wallet, token_mint, TOKEN_2022_PROGRAM_ID
        )
        return [
            AccountMeta(args.wallet, is_signer=True, is_writable=True),
            AccountMeta(args.root_account, is_signer=False, is_writable=True),
            AccountMeta(accts.client_account, is_signer=False, is_writable=True),
            AccountMeta(accts.currency_account, is_signer=False, is_writable=True),
            AccountMeta(wallet_token_account, is_signer=False, is_writable=True),
            AccountMeta(accts.token_account, is_signer=False, is_writable=True),
            AccountMeta(args.root.base_crncy_mint, is_signer=False, is_writable=False),
            AccountMeta(args.root.base_crncy_program_address, is_signer=False, is_writable=True),
            AccountMeta(token_mint, is_signer=is_new, is_writable=True),
            AccountMeta(token_program, is_signer=is_new, is_writable=True),
            AccountMeta(accts.hype_authority, is_signer=False, is_writable=False),
            AccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(TOKEN_2022_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        ]

    # -- Helpers --

    def _derive_trade_accounts(self, args: TradeArgs) -> _TradeAccounts:
        _network_id(args.network_id)
        version = args.root.version
        hype_authority, _ = derive_hype_authority(args.program_id)
        client_account, _ = derive_client_account(args.program_id, args.wallet, version)
        token_account, _ = derive_token_account(
            args.program_id, args.network_id, args.address, version
        )
        currency_account = derive_associated_token_address(
            args.wallet, args.root.base_crncy_mint, TOKEN_PROGRAM_ID
        )
        return _TradeAccounts(hype_authority, client_account, currency_account, token_account)

    def _put_header(self, buf: bytearray, opcode: int, args: TradeArgs) -> None:
        buf[0] = opcode
        struct.pack_into("<I", buf, 4, _network_id(args.network_id))
        struct.pack_into("<q", buf, 8, scale_amount(args.amount))
        if args.limit is not None and to_decimal(args.limit, "limit") != 0:
            struct.pack_into("<q", buf, 16, scale_amount(args.limit, "limit"))

    def _put_string(
        self, buf: bytearray, offset: int, value: str, max_length: int, name: str
    ) -> None:
        raw = encode_string(value, max_length, name, self.strict)
        buf[offset : offset + len(raw)] = raw

    def _put_address(self, buf: bytearray, offset: int, address: str) -> None:
        self._put_string(buf, offset, address.lower(), ADDRESS_STRING_LENGTH, "address")


class CurrentSchema(InstructionSchema):
    """Program version 2: opcodes 4/5, nickname on trades, referral accounts.

    mint (80 bytes): opcode@0 network_id@4 amount@8 limit@16 address@24[24] nickname@48[32]
    burn (56 bytes): opcode@0 network_id@4 amount@8 limit@16 nickname@24[32]
    """

    version = SchemaVersion.CURRENT
    mint_opcode = 4
    burn_opcode = 5
    mint_payload_size = 80
    burn_payload_size = 56

    def _mint_payload(self, args: TradeArgs) -> bytes:
        buf = bytearray(self.mint_payload_size)
        self._put_header(buf, self.mint_opcode, args)
        self._put_address(buf, 24, args.address)
        if args.nickname is not None:
            self._put_string(buf, 48, args.nickname, NICKNAME_STRING_LENGTH, "nickname")
        return bytes(buf)

    def _burn_payload(self, args: TradeArgs) -> bytes:
        buf = bytearray(self.burn_payload_size)
        self._put_header(buf, self.burn_opcode, args)
        if args.nickname is not None:
            self._put_string(buf, 24, args.nickname, NICKNAME_STRING_LENGTH, "nickname")
        return bytes(buf)

    def _trade_metas(
        self,
        args: TradeArgs,
        accts: _TradeAccounts,
        token_mint: Pubkey,
        token_program: Pubkey,
        is_new: bool,
    ) -> list[AccountMeta]:
        metas = super()._trade_metas(args, accts, token_mint, token_program, is_new)
        if args.ref_wallet is not None:
            ref_wallet = args.ref_wallet
            ref_account = derive_associated_token_address(
                args.ref_wallet, args.root.base_crncy_mint, TOKEN_PROGRAM_ID
            )
        else:
            ref_wallet = NO_REFERRAL_ADDRESS
            ref_account = NO_REFERRAL_ADDRESS
        metas.append(AccountMeta(ref_wallet, is_signer=False, is_writable=False))
        metas.append(AccountMeta(ref_account, is_signer=False, is_writable=True))
        return metas


class LegacySchema(InstructionSchema):
    """Program version 1: opcodes 2/3, no nickname on trades, no referral accounts.

    Reconstructed layout; not checked against a deployed version 1 program.

    mint (48 bytes): opcode@0 network_id@4 amount@8 limit@16 address@24[24]
    burn (24 bytes): opcode@0 network_id@4 amount@8 limit@16
    """

    version = SchemaVersion.LEGACY
    mint_opcode = 2
    burn_opcode = 3
    mint_payload_size = 48
    burn_payload_size = 24

    def _mint_payload(self, args: TradeArgs) -> bytes:
        buf = bytearray(self.mint_payload_size)
        self._put_header(buf, self.mint_opcode, args)
        self._put_address(buf, 24, args.address)
        return bytes(buf)

    def _burn_payload(self, args: TradeArgs) -> bytes:
        buf = bytearray(self.burn_payload_size)
        self._put_header(buf, self.burn_opcode, args)
        return bytes(buf)


def _network_id(network_id: int) -> int:
    if not 0 <= network_id <= 0xFFFFFFFF:
        raise InvalidFieldValue(f"network id out of range: {network_id}")
    return network_id


def _read_token_keys(data: bytes) -> tuple[Pubkey, Pubkey]:
    r = LayoutReader(data, "TokenAccount")
    return (
        r.read_pubkey(TokenAccount.MINT_OFFSET),
        r.read_pubkey(TokenAccount.PROGRAM_ADDRESS_OFFSET),
    )


def schema_for(version: int | SchemaVersion, strict: bool = False) -> InstructionSchema:
    """Instruction schema for a program version (1 = legacy, 2+ = current)."""
    if version == SchemaVersion.LEGACY:
        return LegacySchema(strict=strict)
    if version >= SchemaVersion.CURRENT:
        return CurrentSchema(strict=strict)
    raise InvalidFieldValue(f"unsupported program version: {version}")


def schema_for_root(root: RootAccount, strict: bool = False) -> InstructionSchema:
    return schema_for(root.version, strict=strict)


def mint(
    args: TradeArgs,
    fetcher: AccountFetcher,
    schema: InstructionSchema | None = None,
) -> BuiltInstruction:
    return (schema or schema_for_root(args.root)).mint(args, fetcher)


def burn(
    args: TradeArgs,
    fetcher: AccountFetcher,
    schema: InstructionSchema | None = None,
) -> BuiltInstruction:
    return (schema or schema_for_root(args.root)).burn(args, fetcher)


def change_nickname(
    args: ChangeNicknameArgs, schema: InstructionSchema | None = None
) -> BuiltInstruction:
    return (schema or schema_for_root(args.root)).change_nickname(args)


def change_token_status(
    args: ChangeTokenStatusArgs, schema: InstructionSchema | None = None
) -> BuiltInstruction:
    return (schema or CurrentSchema()).change_token_status(args)
