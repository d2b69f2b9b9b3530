"""Records stored in the database and produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass
class Wallet:
    """A named wallet belonging to one chat."""

    chat_id: int
    name: str
    current_balance: float = 0.0
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Transaction:
    """One recorded income or expense; ``transaction_type`` is e.g. 出账 or 入账."""

    wallet_id: int
    transaction_type: str
    amount: float
    month: str
    year: str
    message_id: int | None = None
    chat_id: int | None = None
    id: int | None = None
    created_at: datetime | None = None


@dataclass
class StoredMessage:
    """Processing state of a chat message."""

    message_id: int
    chat_id: int
    wallet_id: int
    has_total: bool = False
    processed: bool = False
    original_balance: float | None = None
    new_balance: float | None = None
    id: int | None = None
    created_at: datetime | None = None


@dataclass
class ParsedMessage:
    """The fields extracted from a wallet message."""

    wallet_name: str
    transaction_type: str
    amount: float
    month: str
    year: str
    total_amount: float | None = None
    original_text: str = ""


class BalanceUpdateSource(Enum):
    """Where a new balance came from."""

    TRANSACTION = "transaction"
    MANUAL_EDIT = "manual_edit"
    INITIAL = "initial"


@dataclass
class BalanceUpdate:
    """A change of a wallet's balance."""

    wallet_name: str
    old_balance: float
    new_balance: float
    source: BalanceUpdateSource
    message_id: int | None = None
    chat_id: int | None = None