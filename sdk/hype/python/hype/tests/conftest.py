"""Builders for synthetic hype account buffers."""

import struct

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

PROGRAM_ID = Pubkey.from_string("4uQeVj5tqViQh7yWWGStvkEG1Zmhx6uasJtWCJziofM")
DECS_FACTOR = 1_000_000


def key(n: int) -> Pubkey:
    """Deterministic test pubkey filled with byte ``n``."""
    return Pubkey.from_bytes(bytes([n]) * 32)


def put_str(buf: bytearray, offset: int, s: str) -> None:
    raw = s.encode("utf-8")
    buf[offset : offset + len(raw)] = raw


def build_network_record(
    max_length: int = 24,
    validator: Pubkey | None = None,
    descriptor: str = "",
    mask: str = "",
) -> bytes:
    buf = bytearray(136)
    struct.pack_into("<b", buf, 0, max_length)
    buf[8:40] = bytes(validator or key(0))
    put_str(buf, 40, descriptor)
    put_str(buf, 72, mask)
    return bytes(buf)


def build_root(
    version: int = 2,
    decs_factor: int = DECS_FACTOR,
    networks: list[bytes] | None = None,
    base_crncy_mint: Pubkey | None = None,
    **overrides: int,
) -> bytes:
    networks = networks or []
    buf = bytearray(392 + 136 * len(networks))
    struct.pack_into("<II", buf, 0, 2, version)
    buf[8:40] = bytes(key(1))
    buf[40:72] = bytes(key(2))
    buf[72:104] = bytes(base_crncy_mint or key(3))
    buf[104:136] = bytes(key(4))
    struct.pack_into("<q", buf, 136, overrides.get("clients_count", 10))
    struct.pack_into("<q", buf, 144, overrides.get("tokens_count", 5))
    struct.pack_into("<q", buf, 152, overrides.get("fees", 2_500_000))
    struct.pack_into("<I", buf, 160, len(networks))
    struct.pack_into("<I", buf, 164, decs_factor)
    struct.pack_into("<q", buf, 168, 123456)
    struct.pack_into("<I", buf, 176, 1_700_000_000)
    struct.pack_into("<I", buf, 180, 6)
    struct.pack_into("<q", buf, 184, overrides.get("supply", 1_000_000_000))
    struct.pack_into("<q", buf, 192, overrides.get("tvl", 333_333))
    struct.pack_into("<q", buf, 200, 77)
    struct.pack_into("<q", buf, 208, 5_000_000)
    struct.pack_into("<q", buf, 224, 7_000_000)
    struct.pack_into("<q", buf, 240, 1)
    struct.pack_into("<d", buf, 248, 1.0)
    struct.pack_into("<d", buf, 256, 0.0001)
    struct.pack_into("<d", buf, 264, 0.7)
    struct.pack_into("<d", buf, 272, 0.01)
    struct.pack_into("<d", buf, 280, 1.0)
    struct.pack_into("<I", buf, 288, 8)
    struct.pack_into("<I", buf, 292, 1_600_000_000)
    struct.pack_into("<d", buf, 296, 0.5)
    put_str(buf, 304, "operator")
    struct.pack_into("<I", buf, 336, 86400)
    struct.pack_into("<I", buf, 340, 38)
    struct.pack_into("<d", buf, 344, 0.05)
    struct.pack_into("<d", buf, 352, 0.1)
    put_str(buf, 360, "https://hype.example/")
    for i, rec in enumerate(networks):
        off = 392 + 136 * i
        buf[off : off + 136] = rec
    return bytes(buf)


def build_client(
    wallet: Pubkey | None = None, nickname: str = "alice", trades_count: int = 17
) -> bytes:
    buf = bytearray(176)
    struct.pack_into("<II", buf, 0, 4, 2)
    struct.pack_into("<q", buf, 8, 42)
    buf[16:48] = bytes(wallet or key(9))
    struct.pack_into("<q", buf, 48, 12_340_000)
    struct.pack_into("<q", buf, 56, 3_000_000)
    struct.pack_into("<q", buf, 64, 999)
    struct.pack_into("<I", buf, 72, 1_700_000_100)
    struct.pack_into("<I", buf, 76, 3)
    struct.pack_into("<I", buf, 80, 1_700_086_400)
    struct.pack_into("<I", buf, 84, trades_count)
    put_str(buf, 88, nickname)
    buf[120:152] = bytes(key(10))
    struct.pack_into("<q", buf, 152, 250_000)
    struct.pack_into("<d", buf, 160, 0.05)
    struct.pack_into("<d", buf, 168, 0.1)
    return bytes(buf)


def build_token(
    mint: Pubkey | None = None,
    program: Pubkey | None = None,
    address: str = "elonmusk",
    network: int = 0,
    validation: int = 1,
) -> bytes:
    buf = bytearray(216)
    struct.pack_into("<II", buf, 0, 3, 2)
    struct.pack_into("<q", buf, 8, 7)
    buf[16:48] = bytes(mint or key(11))
    buf[48:80] = bytes(program or key(12))
    buf[80:112] = bytes(key(13))
    struct.pack_into("<I", buf, 112, 1_650_000_000)
    struct.pack_into("<I", buf, 116, 1_700_000_000)
    struct.pack_into("<q", buf, 120, 21_000_000)
    put_str(buf, 128, address)
    struct.pack_into("<I", buf, 152, network)
    struct.pack_into("<q", buf, 160, 555)
    struct.pack_into("<q", buf, 168, 9)
    struct.pack_into("<q", buf, 176, 4_200_000)
    struct.pack_into("<q", buf, 192, 8_400_000)
    struct.pack_into("<I", buf, 208, validation)
    return bytes(buf)


@pytest.fixture
def root_bytes() -> bytes:
    return build_root(
        networks=[
            build_network_record(24, key(20), "twitter", "^[a-z0-9_]+$"),
            build_network_record(32, key(21), "telegram", "^@?[a-z0-9_]+$"),
        ]
    )
