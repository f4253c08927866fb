"""Binary records of order book snapshots and incremental updates."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO

MAX_UPDATES = 100_000

_LEVEL = struct.Struct("<dQ")
_HEADER = struct.Struct("<QQQ")
_COUNT = struct.Struct("<Q")
_UPDATE = struct.Struct("<BdQ")

_LEVEL_FIELDS = (
    "bid1",
    "ask1",
    "bid2",
    "ask2",
    "bid3",
    "ask3",
    "bid4",
    "ask4",
    "bid5",
    "ask5",
)


class TruncatedRecordError(EOFError):
    """The stream ended before a whole record could be read."""


class RecordParseError(ValueError):
    """A record's bytes are present but describe an invalid record."""

    def __init__(self, position: int, message: str) -> None:
        super().__init__(f"Parsing error at position 0x{position:x} - {message}")
        self.position = position
        self.message = message


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = bytearray()
    while len(data) < size:
        chunk = stream.read(size - len(data))
        if not chunk:
            raise TruncatedRecordError(
                f"expected {size} bytes but the stream ended after {len(data)}"
            )
        data += chunk
    return bytes(data)


@dataclass
class Level:
    """One price level of a snapshot."""

    price: float
    qty: int

    @classmethod
    def read(cls, stream: BinaryIO) -> Level:
        price, qty = _LEVEL.unpack(_read_exact(stream, _LEVEL.size))
        return cls(price, qty)

    def pack(self) -> bytes:
        return _LEVEL.pack(self.price, self.qty)


@dataclass
class OrderBookSnapshot:
    """A full five-level snapshot of one security's book."""

    timestamp: int
    seq_no: int
    security_id: int
    bid1: Level
    ask1: Level
    bid2: Level
    ask2: Level
    bid3: Level
    ask3: Level
    bid4: Level
    ask4: Level
    bid5: Level
    ask5: Level

    @classmethod
    def read(cls, stream: BinaryIO) -> OrderBookSnapshot:
        timestamp, seq_no, security_id = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        levels = {name: Level.read(stream) for name in _LEVEL_FIELDS}
        return cls(timestamp, seq_no, security_id, **levels)

    def pack(self) -> bytes:
        header = _HEADER.pack(self.timestamp, self.seq_no, self.security_id)
        return header + b"".join(level.pack() for pair in self.levels() for level in pair)

    def levels(self) -> tuple[tuple[Level, Level], ...]:
        """Return (bid, ask) pairs from the top of the book downwards."""
        return (
            (self.bid1, self.ask1),
            (self.bid2, self.ask2),
            (self.bid3, self.ask3),
            (self.bid4, self.ask4),
            (self.bid5, self.ask5),
        )


@dataclass
class Update:
    """A change to one price level: side 0 is bid, side 1 is ask."""

    side: int
    price: float
    qty: int

    @classmethod
    def read(cls, stream: BinaryIO) -> Update:
        side, price, qty = _UPDATE.unpack(_read_exact(stream, _UPDATE.size))
        return cls(side, price, qty)

    def pack(self) -> bytes:
        return _UPDATE.pack(self.side, self.price, self.qty)


@dataclass
class OrderBookUpdate:
    """An incremental message carrying any number of level changes."""

    timestamp: int
    seq_no: int
    security_id: int
    updates: list[Update] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> OrderBookUpdate:
        timestamp, seq_no, security_id = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        (num_updates,) = _COUNT.unpack(_read_exact(stream, _COUNT.size))
        if num_updates >= MAX_UPDATES:
            raise RecordParseError(
                stream.tell() - _COUNT.size,
                f"Too many updates: {num_updates} (maximum is {MAX_UPDATES})",
            )
        updates = [Update.read(stream) for _ in range(num_updates)]
        return cls(timestamp, seq_no, security_id, updates)

    def pack(self) -> bytes:
        header = _HEADER.pack(self.timestamp, self.seq_no, self.security_id)
        count = _COUNT.pack(len(self.updates))
        return header + count + b"".join(update.pack() for update in self.updates)