"""Level-2 order book reconstruction from binary snapshot and update files."""

__version__ = "0.1.0"