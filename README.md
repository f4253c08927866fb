# l2book

`l2book` rebuilds level-2 (price-aggregated) order books from two binary
market-data files: one holding full five-level snapshots and one holding
incremental updates. It checks sequence numbers, buffers updates that arrive
ahead of a gap, rejects prices that are not a multiple of the 0.01 tick, and
prints the final book for every security.

## Installation

```
pip install .
```

## Command line

```
l2book SNAPSHOT_FILE INCREMENTAL_FILE [-v | --verbose]
```

The snapshot file is applied first, then the incremental file.

- Records with an invalid price or side are reported on standard error and
  skipped.
- Updates for a security with no snapshot yet, updates whose sequence number
  was already applied, and updates that arrive ahead of a gap are skipped
  without a message. Updates ahead of a gap are held back (up to 1000 per
  security, the oldest dropped first) and applied once the gap is filled by
  an update or a newer snapshot.
- A corrupted record (for example an update claiming 100 000 or more
  entries) is reported on standard error and ends the processing of that
  file; the command carries on with what was read so far.
- A file that ends partway through a record is treated as ending at the last
  whole record.

With `-v` / `--verbose` every record of both files is printed before
processing. The command exits with status 1 if either file cannot be opened,
and 0 otherwise.

Output, one block per security in ascending security id order, with prices
from highest to lowest on both sides:

```
OrderBook {
  timestamp: 1627846266 (1970-01-19 20:10:46.266 UTC)
  seq_no: 101
  security_id: 1001
  asks: [
    105.00 @ 55
    ...
  ]
  bids: [
    100.00 @ 10
    ...
  ]
}
```

Timestamps are milliseconds since the Unix epoch; one that cannot be shown
as a date is printed as `Invalid timestamp`.

## File formats

All integers are unsigned 64-bit little-endian, all prices little-endian
IEEE-754 doubles.

Snapshot record: `timestamp`, `seq_no`, `security_id`, then ten levels of
`(price, qty)` in the order bid1, ask1, bid2, ask2, … bid5, ask5. A level with
quantity 0 is treated as empty. A snapshot replaces the whole book.

Update record: `timestamp`, `seq_no`, `security_id`, `num_updates` (fewer than
100 000), then `num_updates` entries of `side` (one byte: 0 bid, 1 ask),
`price` and `qty`. A quantity of 0 removes the price level. An update is
applied whole or not at all.

## Library use

```python
from l2book.errors import OrderBookError
from l2book.manager import Manager
from l2book.reader import iter_records
from l2book.records import OrderBookSnapshot, OrderBookUpdate

manager = Manager()
with open("snapshots.bin", "rb") as stream:
    for snapshot in iter_records(stream, OrderBookSnapshot):
        manager.apply_snapshot(snapshot)
with open("updates.bin", "rb") as stream:
    for update in iter_records(stream, OrderBookUpdate):
        try:
            manager.apply_update(update)
        except OrderBookError as error:
            print(type(error).__name__, error)
print(manager)
```

Modules:

- `l2book.records` – the record dataclasses `Level`, `OrderBookSnapshot`,
  `Update` and `OrderBookUpdate`, each with a `read(stream)` class method and
  a `pack()` method that produces the binary form. `OrderBookSnapshot.levels()`
  returns the (bid, ask) pairs from the top of the book down.
- `l2book.reader` – `iter_records(stream, record_type)` yields records until
  the stream ends, stopping quietly at the end of the stream or at a record
  cut short.
- `l2book.order_book` – `OrderBook`, with sorted `bids` and `asks` mapping
  `Decimal` prices to quantities, plus `normalized_price` and
  `format_timestamp`.
- `l2book.buffered_order_book` – `BufferedOrderBook`, which holds back
  out-of-sequence updates in `pending_updates`.
- `l2book.manager` – `Manager`, keeping one buffered book per security in
  `buffered_order_books`.
- `l2book.cli` – the command, with `main(argv=None)`, `print_records` and
  `apply_records`.

Errors raised while applying records derive from
`l2book.errors.OrderBookError`: `SequenceNumberGap`, `OldSequenceNumber`,
`InvalidPrice`, `InvalidSide`, `SecurityIdMismatch` and `OrderBookNotFound`.
`InvalidPrice` and `InvalidSide` carry an `info` (`security_id`, `seq_no`)
and a `message`. Reading a record directly with `read()` raises
`l2book.records.TruncatedRecordError` when the stream ends early and
`l2book.records.RecordParseError` for a malformed record.

## Running the tests

```
pip install .[test]
pytest
```