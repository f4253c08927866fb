"""Command line entry point: build order books from snapshot and incremental files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from pprint import pformat
from typing import Callable

from l2book.errors import InvalidPrice, InvalidSide, OrderBookError, SecurityIdMismatch
from l2book.manager import Manager
from l2book.reader import iter_records
from l2book.records import OrderBookSnapshot, OrderBookUpdate, RecordParseError

_RECORD_NAMES: dict[type, str] = {
    OrderBookSnapshot: "Snapshot",
    OrderBookUpdate: "Update",
}


def _applier(manager: Manager, record_type: type) -> Callable[[object], None]:
    if record_type is OrderBookSnapshot:
        return manager.apply_snapshot
    if record_type is OrderBookUpdate:
        return manager.apply_update
    raise TypeError(f"unsupported record type: {record_type!r}")


def print_records(path: str | Path, record_type: type) -> None:
    """Print every record of the file, stopping at the first corrupted one."""
    path = Path(path)
    print(f"Printing records from file: {path}")
    try:
        stream = path.open("rb")
    except OSError:
        print(f"Failed to open file: {path}", file=sys.stderr)
        return

    count = 0
    with stream:
        try:
            for record in iter_records(stream, record_type):
                print(pformat(record))
                count += 1
        except (RecordParseError, OSError) as exc:
            print(
                f"Failed to read next record from the file: {exc}. The file is corrupted.",
                file=sys.stderr,
            )
            return
    print(f"Successfully read {count} records from the file")


def _report(name: str, error: OrderBookError) -> None:
    if isinstance(error, InvalidPrice):
        print(
            f"{name} for security {error.info.security_id} with seq_no "
            f"{error.info.seq_no} has invalid price: {error.message}. "
            "The record will be ignored.",
            file=sys.stderr,
        )
    elif isinstance(error, InvalidSide):
        print(
            f"{name} for security {error.info.security_id} with seq_no "
            f"{error.info.seq_no} has invalid side: {error.message}. "
            "The record will be ignored.",
            file=sys.stderr,
        )
    elif isinstance(error, SecurityIdMismatch):
        print("Internal error: Security ID mismatch.", file=sys.stderr)


def apply_records(path: str | Path, manager: Manager, record_type: type) -> bool:
    """Apply every record of the file to the manager.

    Returns False only if the file cannot be opened. Rejected records are
    reported and skipped; a corrupted record ends the file early.
    """
    path = Path(path)
    name = _RECORD_NAMES[record_type]
    apply = _applier(manager, record_type)
    try:
        stream = path.open("rb")
    except OSError:
        print(f"Failed to open file: {path}", file=sys.stderr)
        return False

    with stream:
        try:
            for record in iter_records(stream, record_type):
                try:
                    apply(record)
                except OrderBookError as error:
                    _report(name, error)
        except (RecordParseError, OSError) as exc:
            print(
                f"Failed to read next {name} from the file: {exc}. "
                f"The file {path} is corrupted.",
                file=sys.stderr,
            )
    return True


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="l2book", description="Processes snapshot and incremental files"
    )
    parser.add_argument("path_to_snapshot", type=Path)
    parser.add_argument("path_to_incremental", type=Path)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command; returns the process exit status."""
    args = _parser().parse_args(argv)

    if args.verbose:
        print_records(args.path_to_snapshot, OrderBookSnapshot)
        print_records(args.path_to_incremental, OrderBookUpdate)

    manager = Manager()
    if not apply_records(args.path_to_snapshot, manager, OrderBookSnapshot):
        return 1
    if not apply_records(args.path_to_incremental, manager, OrderBookUpdate):
        return 1

    sys.stdout.write(str(manager))
    return 0


if __name__ == "__main__":
    sys.exit(main())