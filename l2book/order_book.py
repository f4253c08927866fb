"""A level-2 order book kept in step with snapshots and incremental updates."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sortedcontainers import SortedDict

from l2book.errors import (
    InvalidPrice,
    InvalidSide,
    OldSequenceNumber,
    SecurityIdMismatch,
    SequenceNumberGap,
    UpdateMessageInfo,
)
from l2book.records import OrderBookSnapshot, OrderBookUpdate

PRICE_TICK = Decimal("0.01")

_BID = 0
_ASK = 1
_MAX_DECIMAL = Decimal(2**96 - 1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return format(Decimal(repr(value)).normalize(), "f")


def normalized_price(security_id: int, seq_no: int, price: float) -> Decimal:
    """Convert a price to a Decimal, raising InvalidPrice unless it is on the tick grid."""
    info = UpdateMessageInfo(security_id, seq_no)
    if not math.isfinite(price) or abs(Decimal(repr(price))) > _MAX_DECIMAL:
        raise InvalidPrice(
            info, f"Failed to convert f64 value {_format_float(price)} to Decimal"
        )
    value = Decimal(repr(price))
    if value % PRICE_TICK != 0:
        raise InvalidPrice(
            info,
            f"The price {_format_float(price)} is not a multiple of {PRICE_TICK}",
        )
    return value


def format_timestamp(timestamp: int) -> str:
    """Render a millisecond Unix timestamp as UTC text, or 'Invalid timestamp'."""
    millis = timestamp - 2**64 if timestamp >= 2**63 else timestamp
    try:
        moment = _EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return "Invalid timestamp"
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
        f".{moment.microsecond // 1000:03d} UTC"
    )


class OrderBook:
    """Bid and ask quantities by price for one security."""

    PRICE_TICK = PRICE_TICK

    def __init__(self, snapshot: OrderBookSnapshot) -> None:
        self.timestamp = snapshot.timestamp
        self.seq_no = snapshot.seq_no
        self.security_id = snapshot.security_id
        self.bids: SortedDict = SortedDict()
        self.asks: SortedDict = SortedDict()
        self._apply_snapshot_sides(snapshot)

    def apply_update(self, update: OrderBookUpdate) -> None:
        """Apply the next incremental update; nothing changes if it is rejected."""
        if update.security_id != self.security_id:
            raise SecurityIdMismatch()
        if update.seq_no <= self.seq_no:
            raise OldSequenceNumber()
        if update.seq_no != self.seq_no + 1:
            raise SequenceNumberGap()

        bid_changes: list[tuple[Decimal, int]] = []
        ask_changes: list[tuple[Decimal, int]] = []
        for change in update.updates:
            price = normalized_price(update.security_id, update.seq_no, change.price)
            if change.side == _BID:
                bid_changes.append((price, change.qty))
            elif change.side == _ASK:
                ask_changes.append((price, change.qty))
            else:
                raise InvalidSide(
                    UpdateMessageInfo(update.security_id, update.seq_no),
                    str(change.side),
                )

        for side, changes in ((self.bids, bid_changes), (self.asks, ask_changes)):
            for price, qty in changes:
                if qty == 0:
                    side.pop(price, None)
                else:
                    side[price] = qty

        self.timestamp = update.timestamp
        self.seq_no = update.seq_no

    def apply_snapshot(self, snapshot: OrderBookSnapshot) -> None:
        """Replace the book with a newer snapshot of the same security."""
        if snapshot.security_id != self.security_id:
            raise SecurityIdMismatch()
        if snapshot.seq_no <= self.seq_no:
            raise OldSequenceNumber()
        self._apply_snapshot_sides(snapshot)
        self.timestamp = snapshot.timestamp
        self.seq_no = snapshot.seq_no

    def _apply_snapshot_sides(self, snapshot: OrderBookSnapshot) -> None:
        pairs = snapshot.levels()

        def prepared(levels):
            return [
                (
                    normalized_price(snapshot.security_id, snapshot.seq_no, level.price),
                    level.qty,
                )
                for level in levels
                if level.qty > 0
            ]

        asks = prepared(ask for _, ask in pairs)
        bids = prepared(bid for bid, _ in pairs)

        self.asks = SortedDict(asks)
        self.bids = SortedDict(bids)

    def __str__(self) -> str:
        lines = [
            "OrderBook {",
            f"  timestamp: {self.timestamp} ({format_timestamp(self.timestamp)})",
            f"  seq_no: {self.seq_no}",
            f"  security_id: {self.security_id}",
            "  asks: [",
        ]
        lines += [f"    {price:.2f} @ {qty}" for price, qty in reversed(self.asks.items())]
        lines += ["  ]", "  bids: ["]
        lines += [f"    {price:.2f} @ {qty}" for price, qty in reversed(self.bids.items())]
        lines += ["  ]", "}"]
        return "\n".join(lines) + "\n"