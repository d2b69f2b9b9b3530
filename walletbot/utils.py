"""Logging, formatting, validation and file helpers."""

from __future__ import annotations

import logging
import math
import os
import re
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path

from walletbot.errors import ParserError, WalletIOError

logger = logging.getLogger(__name__)

_UNSIGNED_RE = re.compile(r"\+?[0-9]+")
_MAX_AMOUNT = 999_999_999.99
_MAX_WALLET_NAME_BYTES = 100


def _plain_float(value: float) -> str:
    """Shortest plain rendering of a float, without a trailing ``.0``."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


# --- logging -----------------------------------------------------------------


def log_operation_start(operation: str, details: str) -> None:
    logger.info("🚀 Starting %s: %s", operation, details)


def log_operation_success(operation: str, details: str) -> None:
    logger.info("✅ %s completed successfully: %s", operation, details)


def log_operation_failure(operation: str, error: str) -> None:
    logger.error("❌ %s failed: %s", operation, error)


def log_wallet_transaction(
    wallet_name: str,
    transaction_type: str,
    amount: float,
    old_balance: float,
    new_balance: float,
) -> None:
    logger.info(
        "💰 Wallet Transaction: %s | %s %.2f元 | %s → %.2f元",
        wallet_name,
        transaction_type,
        amount,
        _plain_float(old_balance),
        new_balance,
    )


def log_balance_update(
    wallet_name: str, old_balance: float, new_balance: float, source: str
) -> None:
    logger.info(
        "🔄 Balance Update: %s | %.2f元 → %.2f元 (%s)",
        wallet_name,
        old_balance,
        new_balance,
        source,
    )


def log_message_processed(message_id: int, chat_id: int, wallet_name: str) -> None:
    logger.info(
        "📝 Message Processed: ID=%s Chat=%s Wallet=%s", message_id, chat_id, wallet_name
    )


# --- formatting --------------------------------------------------------------


def format_amount(amount: float) -> str:
    """An amount with two decimals and the currency sign."""
    return f"{amount:.2f}元"


def format_balance_change(old_balance: float, new_balance: float) -> str:
    """The change between two balances, absolute and in percent."""
    if old_balance == 0.0:
        return "初始设置"
    change = new_balance - old_balance
    percentage = change / abs(old_balance) * 100.0
    if change > 0.0:
        return f"+{change:.2f}元 (+{percentage:.1f}%)"
    return f"{change:.2f}元 ({percentage:.1f}%)"


def format_timestamp(timestamp: datetime) -> str:
    """A timestamp in UTC; naive timestamps are taken to be UTC already."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime("%Y-%m-%d %H:%M:%S UTC")


# --- validation --------------------------------------------------------------


def is_valid_wallet_name(name: str) -> bool:
    return (
        bool(name)
        and len(name.encode("utf-8")) <= _MAX_WALLET_NAME_BYTES
        and "\n" not in name
    )


def is_valid_amount(amount: float) -> bool:
    return math.isfinite(amount) and 0.0 <= amount <= _MAX_AMOUNT


def _unsigned(text: str) -> int | None:
    return int(text) if _UNSIGNED_RE.fullmatch(text) else None


def is_valid_month(month: str) -> bool:
    value = _unsigned(month)
    return value is not None and 1 <= value <= 12


def is_valid_year(year: str) -> bool:
    value = _unsigned(year)
    return value is not None and 2000 <= value <= 2100


# --- files -------------------------------------------------------------------


def ensure_dir_exists(path: str | os.PathLike[str]) -> None:
    """Create the directory and its parents if it does not exist."""
    path = Path(path)
    if path.exists():
        return
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise WalletIOError(error) from error
    logger.info("Created directory: %s", path)


def backup_file(
    source: str | os.PathLike[str], backup_dir: str | os.PathLike[str]
) -> Path | None:
    """Copy ``source`` into ``backup_dir`` under a timestamped name.

    Returns the path of the copy, or None when the source does not exist.
    """
    source = Path(source)
    backup_dir = Path(backup_dir)
    if not source.exists():
        logger.warning("Source file does not exist: %s", source)
        return None

    ensure_dir_exists(backup_dir)

    if not source.name:
        raise ParserError("Invalid source filename")
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    backup_path = backup_dir / f"{stamp}_{source.name}"
    try:
        shutil.copyfile(source, backup_path)
    except OSError as error:
        raise WalletIOError(error) from error
    logger.info("Backed up %s to %s", source, backup_path)
    return backup_path


def _created_time(stat: os.stat_result) -> float:
    """Earliest known timestamp of a file."""
    birth = getattr(stat, "st_birthtime", None)
    if birth is None:
        return stat.st_mtime
    return min(birth, stat.st_mtime)


def cleanup_old_backups(
    backup_dir: str | os.PathLike[str], retention_days: int
) -> int:
    """Delete entries older than ``retention_days``; return how many went."""
    backup_dir = Path(backup_dir)
    if not backup_dir.exists():
        return 0

    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    deleted = 0
    try:
        entries = list(backup_dir.iterdir())
        for entry in entries:
            created = datetime.fromtimestamp(_created_time(entry.stat()), timezone.utc)
            if created >= cutoff:
                continue
            try:
                entry.unlink()
            except OSError as error:
                logger.warning("Failed to delete old backup %s: %s", entry, error)
            else:
                deleted += 1
    except OSError as error:
        raise WalletIOError(error) from error

    if deleted:
        logger.info("Cleaned up %d old backup files", deleted)
    return deleted