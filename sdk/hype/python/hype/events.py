"""Decoding of hype program log events into typed reports.

The program emits events as ``Program data: <f0> <f1> ...`` log lines, each
field base64-encoded. The first byte of ``f0`` selects the event type; the
remaining fields follow a fixed per-event order. Program failures show up as
``Error: <message>`` lines.

NewToken, Mint and Burn changed shape between program versions, so the field
order is chosen with an explicit ``EventSchema``. The legacy field lists are a
best-effort reconstruction: the current order with token id (NewToken) or
wallet and nickname (trades) removed.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Callable, Iterable, Union

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from hype.errors import HypeError, InvalidFieldValue
from hype.reader import LayoutReader, decode_amount, decode_string

logger = logging.getLogger(__name__)

PROGRAM_DATA_PREFIX = "Program data:"
ERROR_PREFIX = "Error:"


class Event(IntEnum):
    ERROR = 0
    NEW_CLIENT = 1
    NEW_NETWORK = 2
    NEW_TOKEN = 3
    MINT = 4
    BURN = 5


class EventSchema(IntEnum):
    LEGACY = 1
    CURRENT = 2


@dataclass
class NewClientReport:
    client_id: int
    order_id: int
    wallet: Pubkey
    time: datetime
    slot: int
    nickname: str


@dataclass
class NewNetworkReport:
    network_id: int
    descriptor: str
    time: datetime
    slot: int


@dataclass
class NewTokenReport:
    client_id: int
    order_id: int
    network_id: int
    mint: Pubkey
    creator: Pubkey
    address: str
    time: datetime
    slot: int
    token_id: int | None = None  # absent in the legacy schema


@dataclass
class TradeReport:
    client_id: int
    order_id: int
    token_id: int
    network_id: int
    mint: Pubkey
    creator: Pubkey
    address: str
    supply: Decimal
    creation_time: datetime
    all_time_trades_count: int
    all_time_base_crncy_volume: Decimal
    all_time_tokens_volume: Decimal
    tokens_amount: Decimal
    base_crncy_amount: Decimal
    time: datetime
    slot: int
    wallet: Pubkey | None = None  # absent in the legacy schema
    nickname: str | None = None  # absent in the legacy schema


MintReport = TradeReport
BurnReport = TradeReport


@dataclass
class ErrorReport:
    message: str


ReportBody = Union[NewClientReport, NewNetworkReport, NewTokenReport, TradeReport, ErrorReport]


@dataclass
class Report:
    event: Event
    report: ReportBody


# ---------------------------------------------------------------------------
# Field schemas
# ---------------------------------------------------------------------------

# Field kinds: i64, u32, pubkey, time, string, amount (i64 / decimals factor).
_FieldSpec = tuple[str, str]

_NEW_CLIENT: list[_FieldSpec] = [
    ("client_id", "i64"),
    ("order_id", "i64"),
    ("wallet", "pubkey"),
    ("time", "time"),
    ("slot", "i64"),
    ("nickname", "string"),
]

_NEW_NETWORK: list[_FieldSpec] = [
    ("network_id", "u32"),
    ("descriptor", "string"),
    ("time", "time"),
    ("slot", "i64"),
]

_NEW_TOKEN_LEGACY: list[_FieldSpec] = [
    ("client_id", "i64"),
    ("order_id", "i64"),
    ("network_id", "u32"),
    ("mint", "pubkey"),
    ("creator", "pubkey"),
    ("address", "string"),
    ("time", "time"),
    ("slot", "i64"),
]

_NEW_TOKEN_CURRENT: list[_FieldSpec] = [
    ("client_id", "i64"),
    ("order_id", "i64"),
    ("token_id", "i64"),
    ("network_id", "u32"),
    ("mint", "pubkey"),
    ("creator", "pubkey"),
    ("address", "string"),
    ("time", "time"),
    ("slot", "i64"),
]

_TRADE_LEGACY: list[_FieldSpec] = [
    ("client_id", "i64"),
    ("order_id", "i64"),
    ("token_id", "i64"),
    ("network_id", "u32"),
    ("mint", "pubkey"),
    ("creator", "pubkey"),
    ("address", "string"),
    ("supply", "amount"),
    ("creation_time", "time"),
    ("all_time_trades_count", "i64"),
    ("all_time_base_crncy_volume", "amount"),
    ("all_time_tokens_volume", "amount"),
    ("tokens_amount", "amount"),
    ("base_crncy_amount", "amount"),
    ("time", "time"),
    ("slot", "i64"),
]

_TRADE_CURRENT: list[_FieldSpec] = _TRADE_LEGACY + [
    ("wallet", "pubkey"),
    ("nickname", "string"),
]

_SCHEMAS: dict[EventSchema, dict[Event, tuple[Callable[..., ReportBody], list[_FieldSpec]]]] = {
    EventSchema.LEGACY: {
        Event.NEW_CLIENT: (NewClientReport, _NEW_CLIENT),
        Event.NEW_NETWORK: (NewNetworkReport, _NEW_NETWORK),
        Event.NEW_TOKEN: (NewTokenReport, _NEW_TOKEN_LEGACY),
        Event.MINT: (TradeReport, _TRADE_LEGACY),
        Event.BURN: (TradeReport, _TRADE_LEGACY),
    },
    EventSchema.CURRENT: {
        Event.NEW_CLIENT: (NewClientReport, _NEW_CLIENT),
        Event.NEW_NETWORK: (NewNetworkReport, _NEW_NETWORK),
        Event.NEW_TOKEN: (NewTokenReport, _NEW_TOKEN_CURRENT),
        Event.MINT: (TradeReport, _TRADE_CURRENT),
        Event.BURN: (TradeReport, _TRADE_CURRENT),
    },
}


def field_count(event: Event, schema: EventSchema = EventSchema.CURRENT) -> int:
    """Number of data fields (after the event code) for ``event``."""
    return len(_SCHEMAS[schema][event][1])


def _decode_field(raw: bytes, kind: str, decs_factor: int) -> object:
    r = LayoutReader(raw, "event field")
    if kind == "i64":
        return r.read_i64(0)
    if kind == "u32":
        return r.read_u32(0)
    if kind == "pubkey":
        return r.read_pubkey(0)
    if kind == "time":
        return r.read_time(0)
    if kind == "amount":
        return decode_amount(r.read_i64(0), decs_factor)
    if kind == "string":
        return decode_string(raw)
    raise ValueError(f"unknown field kind: {kind}")


def _decode_program_data(
    payload: str, decs_factor: int, schema: EventSchema
) -> Report | None:
    fields = payload.split()
    if not fields:
        return None
    head = base64.b64decode(fields[0], validate=True)
    if not head:
        return None
    try:
        event = Event(head[0])
    except ValueError:
        return None
    entry = _SCHEMAS[schema].get(event)
    if entry is None:
        return None
    factory, specs = entry
    if len(fields) - 1 < len(specs):
        raise InvalidFieldValue(
            f"{event.name}: expected {len(specs)} fields, got {len(fields) - 1}"
        )
    values = {
        name: _decode_field(base64.b64decode(fields[i + 1], validate=True), kind, decs_factor)
        for i, (name, kind) in enumerate(specs)
    }
    return Report(event, factory(**values))


def decode_log_line(
    line: str,
    decs_factor: int,
    schema: EventSchema = EventSchema.CURRENT,
) -> Report | None:
    """Decode one log line. Returns None for lines that carry no event.

    Raises on malformed event data; ``decode_logs`` turns that into a skip.
    """
    if line.startswith(PROGRAM_DATA_PREFIX):
        return _decode_program_data(
            line[len(PROGRAM_DATA_PREFIX):], decs_factor, schema
        )
    if line.startswith(ERROR_PREFIX):
        message = line[len(ERROR_PREFIX):]
        if message.startswith(" "):
            message = message[1:]
        return Report(Event.ERROR, ErrorReport(message))
    return None


def decode_logs(
    lines: Iterable[str],
    decs_factor: int,
    schema: EventSchema = EventSchema.CURRENT,
) -> list[Report]:
    """Decode program log lines into reports, preserving input order.

    Lines without an event are skipped, and so are malformed event lines; one
    bad line never stops the rest from decoding.
    """
    if decs_factor <= 0:
        raise InvalidFieldValue(f"decimals factor must be positive, got {decs_factor}")
    reports: list[Report] = []
    for line in lines:
        try:
            report = decode_log_line(line, decs_factor, schema)
        except (HypeError, binascii.Error, ValueError) as e:
            logger.warning("skipping malformed log line %r: %s", line, e)
            continue
        if report is not None:
            reports.append(report)
    return reports
