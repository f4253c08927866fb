import struct

import pytest

from l2book.cli import apply_records, main, print_records
from l2book.manager import Manager
from l2book.records import Level, OrderBookSnapshot, OrderBookUpdate, Update

CORRUPT_TAIL = struct.pack("<QQQQ", 0, 0, 0, 100_001)


def snap(security_id, seq_no):
    depth = range(5)
    bids = [Level(100.0 - i, 10 + 10 * i) for i in depth]
    asks = [Level(101.0 + i, 15 + 10 * i) for i in depth]
    interleaved = [level for pair in zip(bids, asks) for level in pair]
    return OrderBookSnapshot(1627846265, seq_no, security_id, *interleaved)


def upd(security_id, seq_no):
    body = [Update(0, 99.50, 25), Update(1, 100.50, 30)]
    return OrderBookUpdate(1627846266, seq_no, security_id, body)


def write(path, records, tail=b""):
    path.write_bytes(b"".join(r.pack() for r in records) + tail)
    return path


def default_records():
    return [snap(1001, 100), snap(1002, 200)], [upd(1001, 101)]


@pytest.fixture
def files(tmp_path):
    snapshots, updates = default_records()
    return write(tmp_path / "snap.bin", snapshots), write(tmp_path / "inc.bin", updates)


@pytest.fixture
def missing(tmp_path):
    return tmp_path / "absent.bin"


def expected_output():
    manager = Manager()
    snapshots, updates = default_records()
    for s in snapshots:
        manager.apply_snapshot(s)
    for u in updates:
        manager.apply_update(u)
    return str(manager)


def test_main_prints_all_books(files, capsys):
    assert main([str(p) for p in files]) == 0
    out, err = capsys.readouterr()
    assert err == ""
    assert out == expected_output()
    assert out.index("security_id: 1001") < out.index("security_id: 1002")


@pytest.mark.parametrize("position", [0, 1])
def test_main_missing_file_fails(files, missing, capsys, position):
    args = [str(p) for p in files]
    args[position] = str(missing)
    assert main(args) == 1
    out, err = capsys.readouterr()
    assert f"Failed to open file: {missing}" in err
    assert "OrderBook {" not in out


def test_apply_records_builds_books(files):
    snap_path, inc_path = files
    manager = Manager()
    assert apply_records(snap_path, manager, OrderBookSnapshot) is True
    assert list(manager.buffered_order_books) == [1001, 1002]
    assert apply_records(inc_path, manager, OrderBookUpdate) is True
    assert manager.buffered_order_books[1001].order_book.seq_no == 101
    assert manager.buffered_order_books[1002].order_book.seq_no == 200


def test_invalid_price_is_reported_and_skipped(tmp_path, capsys):
    bad = snap(1001, 100)
    bad.ask5 = Level(105.005, 55)
    manager = Manager()
    assert apply_records(write(tmp_path / "snap.bin", [bad]), manager, OrderBookSnapshot) is True
    _, err = capsys.readouterr()
    assert "Snapshot for security 1001 with seq_no 100 has invalid price" in err
    assert "is not a multiple of 0.01. The record will be ignored." in err
    assert len(manager.buffered_order_books) == 0


def load_one_book(tmp_path, updates):
    manager = Manager()
    apply_records(write(tmp_path / "snap.bin", [snap(1001, 100)]), manager, OrderBookSnapshot)
    ok = apply_records(write(tmp_path / "inc.bin", updates), manager, OrderBookUpdate)
    return manager, ok


def test_invalid_side_is_reported(tmp_path, capsys):
    bad = upd(1001, 101)
    bad.updates[1].side = 2
    manager, ok = load_one_book(tmp_path, [bad])
    assert ok is True
    _, err = capsys.readouterr()
    assert "Update for security 1001 with seq_no 101 has invalid side: 2." in err
    assert manager.buffered_order_books[1001].order_book.seq_no == 100


def test_gaps_and_unknown_books_are_silent(tmp_path, capsys):
    manager, ok = load_one_book(tmp_path, [upd(1001, 102), upd(7, 1)])
    assert ok is True
    _, err = capsys.readouterr()
    assert err == ""
    assert list(manager.buffered_order_books[1001].pending_updates) == [102]


def test_corrupted_update_file_stops_reading(tmp_path, capsys):
    snap_path = write(tmp_path / "snap.bin", [snap(1001, 100)])
    inc_path = write(tmp_path / "inc.bin", [upd(1001, 101)], tail=CORRUPT_TAIL)
    assert main([str(snap_path), str(inc_path)]) == 0
    out, err = capsys.readouterr()
    assert "Failed to read next Update from the file:" in err
    assert "Too many updates: 100001 (maximum is 100000)" in err
    assert f"The file {inc_path} is corrupted." in err
    assert "seq_no: 101" in out


def test_print_records_counts(files, capsys):
    snap_path = files[0]
    print_records(snap_path, OrderBookSnapshot)
    out, err = capsys.readouterr()
    assert out.startswith(f"Printing records from file: {snap_path}\n")
    assert out.rstrip().endswith("Successfully read 2 records from the file")
    assert out.count("OrderBookSnapshot(") == 2
    assert err == ""


def test_print_records_missing_file(missing, capsys):
    print_records(missing, OrderBookUpdate)
    out, err = capsys.readouterr()
    assert f"Failed to open file: {missing}" in err
    assert "Successfully read" not in out


def test_print_records_corrupted(tmp_path, capsys):
    path = tmp_path / "inc.bin"
    path.write_bytes(CORRUPT_TAIL)
    print_records(path, OrderBookUpdate)
    out, err = capsys.readouterr()
    assert "Failed to read next record from the file:" in err
    assert "The file is corrupted." in err
    assert "Successfully read" not in out


def test_verbose_prints_records_before_books(files, capsys):
    assert main(["--verbose", *(str(p) for p in files)]) == 0
    out, _ = capsys.readouterr()
    assert out.count("Successfully read") == 2
    assert "Successfully read 1 records from the file" in out
    assert out.index("Printing records from file") < out.index("OrderBook {")
    assert out.endswith(expected_output())