"""Errors raised while maintaining level-2 order books."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UpdateMessageInfo:
    """Identifies the message that caused an error."""

    security_id: int
    seq_no: int


class OrderBookError(Exception):
    """Base class for all order book errors."""


class SequenceNumberGap(OrderBookError):
    """The message's sequence number is ahead of the next expected one."""


class OldSequenceNumber(OrderBookError):
    """The message's sequence number has already been applied."""


class SecurityIdMismatch(OrderBookError):
    """The message belongs to a different security than the book."""


class OrderBookNotFound(OrderBookError):
    """No order book exists for the message's security."""


class InvalidPrice(OrderBookError):
    """A price in the message cannot be used."""

    def __init__(self, info: UpdateMessageInfo, message: str) -> None:
        super().__init__(message)
        self.info = info
        self.message = message


class InvalidSide(OrderBookError):
    """A side in the message is neither bid nor ask."""

    def __init__(self, info: UpdateMessageInfo, message: str) -> None:
        super().__init__(message)
        self.info = info
        self.message = message