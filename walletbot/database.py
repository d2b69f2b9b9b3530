"""SQLite storage of wallets, transactions and processed messages."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from walletbot.errors import DatabaseError, WalletNotFoundError
from walletbot.models import Transaction, Wallet

logger = logging.getLogger(__name__)

_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS wallets (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        chat_id INTEGER NOT NULL,
        name TEXT NOT NULL,
        current_balance REAL NOT NULL DEFAULT 0.0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(chat_id, name)
    )""",
    """CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        wallet_id INTEGER NOT NULL,
        transaction_type TEXT NOT NULL,
        amount REAL NOT NULL,
        month TEXT NOT NULL,
        year TEXT NOT NULL,
        message_id INTEGER,
        chat_id INTEGER,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (wallet_id) REFERENCES wallets(id)
    )""",
    """CREATE TABLE IF NOT EXISTS messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        message_id INTEGER NOT NULL,
        chat_id INTEGER NOT NULL,
        wallet_id INTEGER NOT NULL,
        has_total BOOLEAN DEFAULT FALSE,
        processed BOOLEAN DEFAULT FALSE,
        original_balance REAL,
        new_balance REAL,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (wallet_id) REFERENCES wallets(id),
        UNIQUE(message_id, chat_id)
    )""",
)

_WALLET_COLUMNS = "id, chat_id, name, current_balance, created_at, updated_at"

INCOME_TYPES = frozenset({"收入", "入账"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp(moment: datetime) -> str:
    return moment.isoformat(sep=" ")


def _parse_stamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        return None
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _wallet_from_row(row: sqlite3.Row) -> Wallet:
    return Wallet(
        id=row["id"],
        chat_id=row["chat_id"],
        name=row["name"],
        current_balance=row["current_balance"],
        created_at=_parse_stamp(row["created_at"]),
        updated_at=_parse_stamp(row["updated_at"]),
    )


class Database:
    """Thread-safe access to the bot's SQLite database."""

    def __init__(self, database_url: str) -> None:
        try:
            self._conn = sqlite3.connect(
                database_url, check_same_thread=False, isolation_level=None
            )
        except sqlite3.Error as error:
            raise DatabaseError(error) from error
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        with self._session() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)
        logger.info("Database schema initialized successfully")

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            self._conn.close()

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as error:
                raise DatabaseError(error) from error

    @staticmethod
    def _find_wallet(conn: sqlite3.Connection, chat_id: int, name: str) -> Wallet | None:
        row = conn.execute(
            f"SELECT {_WALLET_COLUMNS} FROM wallets WHERE chat_id = ? AND name = ?",
            (chat_id, name),
        ).fetchone()
        return _wallet_from_row(row) if row else None

    def _require_wallet(self, conn: sqlite3.Connection, chat_id: int, name: str) -> Wallet:
        wallet = self._find_wallet(conn, chat_id, name)
        if wallet is None:
            raise WalletNotFoundError(name)
        return wallet

    def get_or_create_wallet(self, chat_id: int, name: str) -> Wallet:
        """The wallet of that name in the chat, created with balance 0 if missing."""
        with self._session() as conn:
            wallet = self._find_wallet(conn, chat_id, name)
            if wallet is not None:
                return wallet
            now = _now()
            cursor = conn.execute(
                "INSERT INTO wallets (chat_id, name, current_balance, created_at, updated_at)"
                " VALUES (?, ?, ?, ?, ?)",
                (chat_id, name, 0.0, _stamp(now), _stamp(now)),
            )
            wallet_id = cursor.lastrowid
        logger.debug("Created new wallet: %s in chat %s with ID: %s", name, chat_id, wallet_id)
        return Wallet(
            id=wallet_id,
            chat_id=chat_id,
            name=name,
            current_balance=0.0,
            created_at=now,
            updated_at=now,
        )

    def update_wallet_balance(self, chat_id: int, name: str, balance: float) -> None:
        with self._session() as conn:
            conn.execute(
                "UPDATE wallets SET current_balance = ?, updated_at = ?"
                " WHERE chat_id = ? AND name = ?",
                (balance, _stamp(_now()), chat_id, name),
            )
        logger.info("Updated wallet balance: %s in chat %s -> %s", name, chat_id, balance)

    def record_transaction(
        self,
        chat_id: int,
        wallet_name: str,
        transaction_type: str,
        amount: float,
        month: str,
        year: str,
        message_id: int | None = None,
    ) -> None:
        """Store a transaction of an existing wallet."""
        with self._session() as conn:
            wallet = self._require_wallet(conn, chat_id, wallet_name)
            conn.execute(
                "INSERT INTO transactions (wallet_id, transaction_type, amount, month,"
                " year, message_id, chat_id, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    wallet.id,
                    transaction_type,
                    amount,
                    month,
                    year,
                    message_id,
                    chat_id,
                    _stamp(_now()),
                ),
            )
        logger.debug("Recorded transaction: %s %s %s", wallet_name, transaction_type, amount)

    def record_message(
        self,
        message_id: int,
        chat_id: int,
        wallet_name: str,
        has_total: bool,
        original_balance: float | None = None,
        new_balance: float | None = None,
    ) -> None:
        """Mark a chat message as processed for an existing wallet."""
        with self._session() as conn:
            wallet = self._require_wallet(conn, chat_id, wallet_name)
            conn.execute(
                "INSERT OR REPLACE INTO messages (message_id, chat_id, wallet_id,"
                " has_total, processed, original_balance, new_balance, created_at)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    message_id,
                    chat_id,
                    wallet.id,
                    bool(has_total),
                    True,
                    original_balance,
                    new_balance,
                    _stamp(_now()),
                ),
            )
        logger.debug("Recorded message: %s in chat %s", message_id, chat_id)

    def get_latest_balance(
        self, chat_id: int, wallet_name: str, month: str, year: str
    ) -> float:
        """The wallet's current balance; month and year are not used."""
        return self.get_balance(chat_id, wallet_name)

    def is_message_processed(self, message_id: int, chat_id: int) -> bool:
        with self._session() as conn:
            row = conn.execute(
                "SELECT id FROM messages WHERE message_id = ? AND chat_id = ?",
                (message_id, chat_id),
            ).fetchone()
        return row is not None

    def get_transactions(self, chat_id: int, wallet_name: str) -> list[Transaction]:
        """The wallet's transactions, newest first."""
        with self._session() as conn:
            wallet = self._require_wallet(conn, chat_id, wallet_name)
            rows = conn.execute(
                "SELECT id, wallet_id, transaction_type, amount, month, year,"
                " message_id, chat_id, created_at FROM transactions"
                " WHERE wallet_id = ? ORDER BY created_at DESC, id DESC",
                (wallet.id,),
            ).fetchall()
        return [
            Transaction(
                id=row["id"],
                wallet_id=row["wallet_id"],
                transaction_type=row["transaction_type"],
                amount=row["amount"],
                month=row["month"],
                year=row["year"],
                message_id=row["message_id"],
                chat_id=row["chat_id"],
                created_at=_parse_stamp(row["created_at"]),
            )
            for row in rows
        ]

    def get_balance(self, chat_id: int, wallet_name: str) -> float:
        with self._session() as conn:
            return self._require_wallet(conn, chat_id, wallet_name).current_balance

    def create_wallet(self, chat_id: int, name: str) -> Wallet:
        return self.get_or_create_wallet(chat_id, name)

    def wallet_exists(self, chat_id: int, name: str) -> bool:
        with self._session() as conn:
            return self._find_wallet(conn, chat_id, name) is not None

    def add_transaction(
        self,
        chat_id: int,
        wallet_name: str,
        transaction_type: str,
        amount: float,
        description: str,
        transaction_id: str,
    ) -> None:
        """Record a transaction dated now and apply it to the balance.

        收入 and 入账 add the amount; every other type subtracts it.
        """
        self.get_or_create_wallet(chat_id, wallet_name)
        now = _now()
        self.record_transaction(
            chat_id,
            wallet_name,
            transaction_type,
            amount,
            f"{now.month:02d}",
            str(now.year),
            None,
        )
        current = self.get_balance(chat_id, wallet_name)
        if transaction_type in INCOME_TYPES:
            new_balance = current + amount
        else:
            new_balance = current - amount
        self.update_wallet_balance(chat_id, wallet_name, new_balance)