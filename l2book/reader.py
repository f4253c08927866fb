"""Iteration over consecutive binary records in a stream."""

from __future__ import annotations

from typing import BinaryIO, Iterator, Protocol, TypeVar

from l2book.records import TruncatedRecordError

T = TypeVar("T", covariant=True)


class _Readable(Protocol[T]):
    def read(self, stream: BinaryIO) -> T: ...


def iter_records(stream: BinaryIO, record_type: _Readable[T]) -> Iterator[T]:
    """Yield records of ``record_type`` until the stream runs out.

    The end of the stream, including one that cuts a record short, ends the
    iteration quietly. A malformed record raises RecordParseError.
    """
    while True:
        try:
            record = record_type.read(stream)
        except TruncatedRecordError:
            return
        yield record