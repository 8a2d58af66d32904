"""Error types raised by the hype SDK.

Each error also derives from the builtin exception callers would expect for
the same failure, so ``except ValueError`` and ``except LookupError`` keep
working.
"""

from __future__ import annotations


class HypeError(Exception):
    """Base class for all hype SDK errors."""


class TruncatedBuffer(HypeError, ValueError):
    """Account data is shorter than the layout requires."""

    def __init__(self, record: str, have: int, need: int) -> None:
        self.record = record
        self.have = have
        self.need = need
        super().__init__(
            f"{record}: data too short: have {have} bytes, need at least {need}"
        )


class AccountNotFound(HypeError, LookupError):
    """A derived address has no on-chain data."""

    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__(f"account not found: {address}")


class InvalidFieldValue(HypeError, ValueError):
    """A caller-supplied or decoded value violates a documented constraint."""


class InvalidAmount(InvalidFieldValue):
    """Trade amount is not a positive finite number."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a positive finite number, got {value!r}")


class FieldTooLong(InvalidFieldValue):
    """A string does not fit its fixed-width field."""

    def __init__(self, field: str, length: int, max_length: int) -> None:
        self.field = field
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"{field} is {length} bytes, field holds at most {max_length}"
        )


class DerivationExhausted(HypeError, RuntimeError):
    """No bump seed produced a valid program address."""


class TransactionNotFound(HypeError, LookupError):
    """A transaction signature is unknown to the RPC node."""

    def __init__(self, signature: object) -> None:
        self.signature = signature
        super().__init__(f"transaction not found: {signature}")
