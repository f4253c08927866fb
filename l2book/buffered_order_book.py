"""An order book that holds back out-of-order updates until the gap is filled."""

from sortedcontainers import SortedDict

from l2book.errors import OldSequenceNumber, OrderBookError, SequenceNumberGap


class BufferedOrderBook:
    """Wraps an OrderBook and buffers updates that arrive ahead of sequence."""

    MAX_PENDING_UPDATES = 1000

    def __init__(self, order_book):
        self.order_book = order_book
        self.pending_updates = SortedDict()

    def apply_update(self, update):
        """Apply an update, buffering it if its sequence number leaves a gap.

        The SequenceNumberGap error is still raised after buffering.
        """
        try:
            self.order_book.apply_update(update)
        except SequenceNumberGap:
            if len(self.pending_updates) >= self.MAX_PENDING_UPDATES:
                self.pending_updates.popitem(0)
            self.pending_updates[update.seq_no] = update
            raise
        self._drain()

    def apply_snapshot(self, snapshot):
        """Apply a snapshot, then any buffered updates that now follow on."""
        self.order_book.apply_snapshot(snapshot)
        self._drain()

    def _drain(self):
        done = []
        for seq_no, pending in self.pending_updates.items():
            try:
                self.order_book.apply_update(pending)
            except OldSequenceNumber:
                pass
            except OrderBookError:
                break
            done.append(seq_no)
        for seq_no in done:
            del self.pending_updates[seq_no]

    def __str__(self):
        return str(self.order_book)