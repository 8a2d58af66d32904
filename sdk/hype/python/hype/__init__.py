from hype.client import Client
from hype.config import (
    HYPE_SEED,
    SOLANA_RPC_URLS,
    Settings,
)
from hype.errors import (
    AccountNotFound,
    DerivationExhausted,
    FieldTooLong,
    HypeError,
    InvalidAmount,
    InvalidFieldValue,
    TransactionNotFound,
    TruncatedBuffer,
)
from hype.events import (
    ErrorReport,
    Event,
    EventSchema,
    NewClientReport,
    NewNetworkReport,
    NewTokenReport,
    Report,
    TradeReport,
    decode_log_line,
    decode_logs,
)
from hype.fetch import AccountFetcher, Found, NotFound, StaticFetcher
from hype.instructions import (
    BuiltInstruction,
    ChangeNicknameArgs,
    ChangeTokenStatusArgs,
    CurrentSchema,
    LegacySchema,
    SchemaVersion,
    TradeArgs,
    burn,
    change_nickname,
    change_token_status,
    mint,
    schema_for,
    schema_for_root,
)
from hype.pda import (
    derive,
    derive_associated_token_address,
    derive_client_account,
    derive_hype_authority,
    derive_root_account,
    derive_token_account,
)
from hype.state import (
    ClientAccount,
    NetworkRecord,
    RootAccount,
    TokenAccount,
    TokenValidation,
    decode_client,
    decode_root,
    decode_token,
)

__all__ = [
    "Client",
    "HYPE_SEED",
    "SOLANA_RPC_URLS",
    "Settings",
    "AccountNotFound",
    "DerivationExhausted",
    "FieldTooLong",
    "HypeError",
    "InvalidAmount",
    "InvalidFieldValue",
    "TransactionNotFound",
    "TruncatedBuffer",
    "ErrorReport",
    "Event",
    "EventSchema",
    "NewClientReport",
    "NewNetworkReport",
    "NewTokenReport",
    "Report",
    "TradeReport",
    "decode_log_line",
    "decode_logs",
    "AccountFetcher",
    "Found",
    "NotFound",
    "StaticFetcher",
    "BuiltInstruction",
    "ChangeNicknameArgs",
    "ChangeTokenStatusArgs",
    "CurrentSchema",
    "LegacySchema",
    "SchemaVersion",
    "TradeArgs",
    "burn",
    "change_nickname",
    "change_token_status",
    "mint",
    "schema_for",
    "schema_for_root",
    "derive",
    "derive_associated_token_address",
    "derive_client_account",
    "derive_hype_authority",
    "derive_root_account",
    "derive_token_account",
    "ClientAccount",
    "NetworkRecord",
    "RootAccount",
    "TokenAccount",
    "TokenValidation",
    "decode_client",
    "decode_root",
    "decode_token",
]
