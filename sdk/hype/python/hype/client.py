"""RPC client for fetching hype program accounts and submitting instructions."""

from __future__ import annotations

import logging
import struct
from typing import Any, Protocol

import base58  # type: ignore[import-untyped]
from solana.exceptions import SolanaRpcException  # type: ignore[import-untyped]
from solana.rpc.api import Client as SolanaHTTPClient  # type: ignore[import-untyped]
from solana.rpc.commitment import Confirmed  # type: ignore[import-untyped]
from solana.rpc.types import MemcmpOpts, TxOpts  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.signature import Signature  # type: ignore[import-untyped]
from solders.transaction import Transaction  # type: ignore[import-untyped]

from hype.config import (
    CLIENT_ACCOUNT_TAG,
    DEFAULT_VERSION,
    SOLANA_RPC_URLS,
    TOKEN_ACCOUNT_TAG,
    Settings,
)
from hype.errors import AccountNotFound, TransactionNotFound
from hype.events import EventSchema, Report, decode_logs
from hype.fetch import FetchResult, Found, NotFound
from hype.instructions import BuiltInstruction, TradeArgs, schema_for
from hype.pda import derive_client_account, derive_root_account, derive_token_account
from hype.state import ClientAccount, RootAccount, TokenAccount

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30


class SolanaClient(Protocol):
    def get_account_info(self, pubkey: Pubkey) -> Any: ...

    def get_program_accounts(self, pubkey: Pubkey, **kwargs: Any) -> Any: ...

    def get_latest_blockhash(self) -> Any: ...

    def send_transaction(self, txn: Transaction, opts: TxOpts | None = None) -> Any: ...

    def confirm_transaction(self, tx_sig: Signature, commitment: Any = None) -> Any: ...

    def get_transaction(self, tx_sig: Signature, **kwargs: Any) -> Any: ...


class Client:
    """Client for hype program accounts.

    Reads go through ``get_account_info``; a missing account or an RPC
    failure is reported as ``NotFound``. Writes build a transaction from a
    ``BuiltInstruction``, sign it with the payer and any extra signers, and
    wait for confirmation.
    """

    def __init__(
        self,
        solana_rpc: SolanaClient,
        program_id: Pubkey,
        version: int = DEFAULT_VERSION,
    ) -> None:
        self._solana_rpc = solana_rpc
        self._program_id = program_id
        self._version = version
        self._schema = schema_for(version)

    @classmethod
    def from_env(
        cls, env: str, program_id: Pubkey | str, version: int = DEFAULT_VERSION
    ) -> Client:
        """Create a client for a named cluster.

        Args:
            env: Cluster name ("mainnet-beta", "testnet", "devnet", "localnet")
            program_id: Address of the deployed hype program
            version: Program version the accounts were created with
        """
        if isinstance(program_id, str):
            program_id = Pubkey.from_string(program_id)
        return cls(
            SolanaHTTPClient(SOLANA_RPC_URLS[env], commitment=Confirmed, timeout=_DEFAULT_TIMEOUT),
            program_id,
            version,
        )

    @classmethod
    def mainnet_beta(cls, program_id: Pubkey | str, version: int = DEFAULT_VERSION) -> Client:
        """Create a client configured for mainnet-beta."""
        return cls.from_env("mainnet-beta", program_id, version)

    @classmethod
    def devnet(cls, program_id: Pubkey | str, version: int = DEFAULT_VERSION) -> Client:
        """Create a client configured for devnet."""
        return cls.from_env("devnet", program_id, version)

    @classmethod
    def localnet(cls, program_id: Pubkey | str, version: int = DEFAULT_VERSION) -> Client:
        """Create a client configured for localnet."""
        return cls.from_env("localnet", program_id, version)

    @classmethod
    def from_settings(cls, settings: Settings) -> Client:
        return cls(
            SolanaHTTPClient(settings.rpc_url, commitment=Confirmed, timeout=_DEFAULT_TIMEOUT),
            settings.program_id,
            settings.version,
        )

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @property
    def version(self) -> int:
        return self._version

    @property
    def root_address(self) -> Pubkey:
        addr, _ = derive_root_account(self._program_id, self._version)
        return addr

    # -- Account reads --

    def fetch_account(self, address: Pubkey) -> FetchResult:
        try:
            resp = self._solana_rpc.get_account_info(address)
        except SolanaRpcException as e:
            logger.warning("get_account_info(%s) failed: %s", address, e)
            return NotFound(address)
        if resp.value is None:
            return NotFound(address)
        return Found(address, bytes(resp.value.data))

    def fetch_root(self) -> RootAccount:
        return RootAccount.from_bytes(self._fetch_data(self.root_address), check_tag=True)

    def fetch_client(self, wallet: Pubkey, root: RootAccount | None = None) -> ClientAccount:
        root = root or self.fetch_root()
        addr, _ = derive_client_account(self._program_id, wallet, self._version)
        return ClientAccount.from_bytes(
            self._fetch_data(addr), root.base_crncy_decs_factor, check_tag=True
        )

    def fetch_token(
        self, network_id: int, address: str, root: RootAccount | None = None
    ) -> TokenAccount:
        root = root or self.fetch_root()
        addr, _ = derive_token_account(self._program_id, network_id, address, self._version)
        return TokenAccount.from_bytes(
            self._fetch_data(addr), root.base_crncy_decs_factor, check_tag=True
        )

    def fetch_all_tokens(self, root: RootAccount | None = None) -> list[TokenAccount]:
        root = root or self.fetch_root()
        return [
            TokenAccount.from_bytes(data, root.base_crncy_decs_factor)
            for data in self._fetch_all_by_tag(TOKEN_ACCOUNT_TAG)
        ]

    def fetch_all_clients(self, root: RootAccount | None = None) -> list[ClientAccount]:
        root = root or self.fetch_root()
        return [
            ClientAccount.from_bytes(data, root.base_crncy_decs_factor)
            for data in self._fetch_all_by_tag(CLIENT_ACCOUNT_TAG)
        ]

    # -- Instructions --

    def mint(self, args: TradeArgs) -> BuiltInstruction:
        return self._schema.mint(args, self)

    def burn(self, args: TradeArgs) -> BuiltInstruction:
        return self._schema.burn(args, self)

    def send_instruction(self, built: BuiltInstruction, payer: Keypair) -> Signature:
        """Sign, submit and confirm a single-instruction transaction."""
        blockhash = self._solana_rpc.get_latest_blockhash().value.blockhash
        tx = Transaction.new_signed_with_payer(
            [built.instruction],
            payer.pubkey(),
            [payer, *built.signers],
            blockhash,
        )
        signature = self._solana_rpc.send_transaction(
            tx, opts=TxOpts(preflight_commitment=Confirmed)
        ).value
        logger.info("sent transaction %s", signature)
        self._solana_rpc.confirm_transaction(signature, commitment=Confirmed)
        return signature

    def fetch_reports(
        self,
        signature: Signature,
        decs_factor: int,
        schema: EventSchema = EventSchema.CURRENT,
    ) -> list[Report]:
        """Decode the events a confirmed transaction logged."""
        resp = self._solana_rpc.get_transaction(
            signature,
            commitment=Confirmed,
            max_supported_transaction_version=0,
        )
        if resp.value is None:
            raise TransactionNotFound(signature)
        meta = resp.value.transaction.meta
        logs = (meta.log_messages if meta is not None else None) or []
        return decode_logs(logs, decs_factor, schema)

    # -- Internal helpers --

    def _fetch_data(self, addr: Pubkey) -> bytes:
        result = self.fetch_account(addr)
        if not isinstance(result, Found):
            raise AccountNotFound(addr)
        return result.data

    def _fetch_all_by_tag(self, tag: int) -> list[bytes]:
        prefix = struct.pack("<II", tag, self._version)
        filters = [MemcmpOpts(offset=0, bytes=base58.b58encode(prefix).decode())]
        resp = self._solana_rpc.get_program_accounts(
            self._program_id,
            encoding="base64",
            filters=filters,
        )
        return [bytes(acct.account.data) for acct in resp.value]
