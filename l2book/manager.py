"""Keeps one buffered order book per security."""

from sortedcontainers import SortedDict

from l2book.buffered_order_book import BufferedOrderBook
from l2book.errors import OrderBookNotFound
from l2book.order_book import OrderBook


class Manager:
    """Routes snapshots and updates to the order book of their security."""

    def __init__(self):
        self.buffered_order_books = SortedDict()

    def apply_update(self, update):
        """Apply an update; raises OrderBookNotFound if no snapshot was seen yet."""
        try:
            target = self.buffered_order_books[update.security_id]
        except KeyError:
            raise OrderBookNotFound() from None
        target.apply_update(update)

    def apply_snapshot(self, snapshot):
        """Create the security's book from a snapshot, or refresh an existing one."""
        existing = self.buffered_order_books.get(snapshot.security_id)
        if existing is not None:
            existing.apply_snapshot(snapshot)
            return
        fresh = BufferedOrderBook(OrderBook(snapshot))
        self.buffered_order_books[snapshot.security_id] = fresh

    def __str__(self):
        return "".join(map(str, self.buffered_order_books.values()))