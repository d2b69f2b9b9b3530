"""Wallet bookkeeping from hashtag-formatted chat messages: parsing, per-chat SQLite storage and balance updates."""

__version__ = "0.1.0"