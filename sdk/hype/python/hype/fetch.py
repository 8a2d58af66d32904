"""Account lookup results consumed by the instruction builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from solders.pubkey import Pubkey  # type: ignore[import-untyped]


@dataclass(frozen=True)
class Found:
    address: Pubkey
    data: bytes


@dataclass(frozen=True)
class NotFound:
    address: Pubkey


FetchResult = Union[Found, NotFound]


class AccountFetcher(Protocol):
    def fetch_account(self, address: Pubkey) -> FetchResult: ...


class StaticFetcher:
    """In-memory AccountFetcher over a fixed address -> data mapping."""

    def __init__(self, accounts: dict[Pubkey, bytes] | None = None) -> None:
        self._accounts = dict(accounts or {})

    def add(self, address: Pubkey, data: bytes) -> None:
        self._accounts[address] = bytes(data)

    def fetch_account(self, address: Pubkey) -> FetchResult:
        data = self._accounts.get(address)
        if data is None:
            return NotFound(address)
        return Found(address, data)
