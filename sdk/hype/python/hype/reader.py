"""Fixed-offset reader for hype account layouts.

Hype accounts are not Borsh: every field lives at a documented byte offset,
little-endian, and strings are NUL-terminated inside fixed-width slots. All
reads are bounds-checked and raise TruncatedBuffer instead of reading past the
end of the data.
"""

from __future__ import annotations

import struct
from datetime import datetime, timezone
from decimal import Decimal

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from hype.errors import InvalidFieldValue, TruncatedBuffer


def decode_amount(raw: int, decs_factor: int) -> Decimal:
    """Convert a fixed-point on-chain integer to a decimal quantity."""
    if decs_factor <= 0:
        raise InvalidFieldValue(f"decimals factor must be positive, got {decs_factor}")
    return Decimal(raw) / Decimal(decs_factor)


def decode_time(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def decode_string(data: bytes, start: int = 0, max_length: int | None = None) -> str:
    """Read a NUL-terminated string from a fixed-width slot.

    Bytes after the first NUL are ignored. Without a NUL the whole slot is
    returned.
    """
    end = len(data) if max_length is None else start + max_length
    raw = bytes(data[start:end])
    nul = raw.find(b"\x00")
    if nul >= 0:
        raw = raw[:nul]
    return raw.decode("utf-8", "replace")


class LayoutReader:
    """Bounds-checked little-endian reads at absolute offsets."""

    def __init__(self, data: bytes, record: str = "account") -> None:
        self._data = bytes(data)
        self._record = record

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        return self._data

    def require(self, size: int) -> None:
        if len(self._data) < size:
            raise TruncatedBuffer(self._record, len(self._data), size)

    def _unpack(self, fmt: str, offset: int) -> int | float:
        self.require(offset + struct.calcsize(fmt))
        (v,) = struct.unpack_from(fmt, self._data, offset)
        return v

    def read_u8(self, offset: int) -> int:
        return int(self._unpack("<B", offset))

    def read_i8(self, offset: int) -> int:
        return int(self._unpack("<b", offset))

    def read_u32(self, offset: int) -> int:
        return int(self._unpack("<I", offset))

    def read_i32(self, offset: int) -> int:
        return int(self._unpack("<i", offset))

    def read_u64(self, offset: int) -> int:
        return int(self._unpack("<Q", offset))

    def read_i64(self, offset: int) -> int:
        return int(self._unpack("<q", offset))

    def read_f64(self, offset: int) -> float:
        return float(self._unpack("<d", offset))

    def read_bytes(self, offset: int, n: int) -> bytes:
        self.require(offset + n)
        return self._data[offset : offset + n]

    def read_pubkey(self, offset: int) -> Pubkey:
        return Pubkey.from_bytes(self.read_bytes(offset, 32))

    def read_string(self, offset: int, max_length: int) -> str:
        self.require(offset + max_length)
        return decode_string(self._data, offset, max_length)

    def read_time(self, offset: int) -> datetime:
        return decode_time(self.read_u32(offset))

    def read_amount(self, offset: int, decs_factor: int) -> Decimal:
        return decode_amount(self.read_i64(offset), decs_factor)
