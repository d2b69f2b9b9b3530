"""Wallet balance calculation."""

from __future__ import annotations

import logging

from walletbot.database import Database
from walletbot.models import BalanceUpdate, BalanceUpdateSource

logger = logging.getLogger(__name__)

OUTGOING = "出账"
INCOMING = "入账"

# Differences up to one cent are not worth an adjustment.
BALANCE_TOLERANCE = 0.01


class BalanceCalculator:
    """Computes and stores new wallet balances."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def calculate_transaction_balance(
        self,
        chat_id: int,
        wallet_name: str,
        transaction_type: str,
        amount: float,
        month: str,
        year: str,
    ) -> float:
        """The balance the wallet would have after the transaction.

        The wallet is created if missing; its stored balance is not changed.
        Only 出账 and 入账 move the balance, other types leave it as it is.
        """
        logger.debug(
            "Calculating %s of %s for wallet %s in chat %s",
            transaction_type,
            amount,
            wallet_name,
            chat_id,
        )
        current = self.db.get_or_create_wallet(chat_id, wallet_name).current_balance

        if transaction_type == OUTGOING:
            new_balance = current - amount
        elif transaction_type == INCOMING:
            new_balance = current + amount
        else:
            logger.warning("⚠️ Unknown transaction type: %s", transaction_type)
            new_balance = current

        logger.info(
            "✅ Transaction balance calculated: %s %s → %s",
            wallet_name,
            current,
            new_balance,
        )
        return new_balance

    def update_from_manual_total(
        self,
        chat_id: int,
        wallet_name: str,
        total_amount: float,
        message_id: int | None = None,
    ) -> BalanceUpdate:
        """Set the wallet's balance to a total written in a message."""
        old_balance = self.db.get_or_create_wallet(chat_id, wallet_name).current_balance
        self.db.update_wallet_balance(chat_id, wallet_name, total_amount)
        logger.info(
            "✅ Manual balance update completed: %s %s → %s",
            wallet_name,
            old_balance,
            total_amount,
        )
        return BalanceUpdate(
            wallet_name=wallet_name,
            old_balance=old_balance,
            new_balance=total_amount,
            source=BalanceUpdateSource.MANUAL_EDIT,
            message_id=message_id,
            chat_id=chat_id,
        )

    def smart_calculate_balance(
        self,
        chat_id: int,
        wallet_name: str,
        transaction_type: str,
        amount: float,
        month: str,
        year: str,
        total_amount: float | None = None,
        message_id: int | None = None,
    ) -> BalanceUpdate:
        """Use the total if one is given, otherwise apply the transaction."""
        if total_amount is not None:
            logger.debug("📊 Using manual total for calculation: %s", total_amount)
            return self.update_from_manual_total(
                chat_id, wallet_name, total_amount, message_id
            )

        logger.debug("💰 Using transaction-based calculation")
        old_balance = self.db.get_or_create_wallet(chat_id, wallet_name).current_balance
        new_balance = self.calculate_transaction_balance(
            chat_id, wallet_name, transaction_type, amount, month, year
        )
        self.db.update_wallet_balance(chat_id, wallet_name, new_balance)
        return BalanceUpdate(
            wallet_name=wallet_name,
            old_balance=old_balance,
            new_balance=new_balance,
            source=BalanceUpdateSource.TRANSACTION,
            message_id=message_id,
            chat_id=chat_id,
        )

    def get_latest_balance(
        self, chat_id: int, wallet_name: str, month: str, year: str
    ) -> float:
        """The wallet's current balance."""
        return self.db.get_latest_balance(chat_id, wallet_name, month, year)

    def should_adjust_balance(
        self, wallet_name: str, current_total: float, calculated_total: float
    ) -> bool:
        """Whether two totals differ by more than one cent."""
        return abs(current_total - calculated_total) > BALANCE_TOLERANCE

    def create_balance_adjustment(
        self,
        wallet_name: str,
        old_balance: float,
        new_balance: float,
        reason: str,
        message_id: int | None = None,
        chat_id: int | None = None,
    ) -> None:
        """Write an audit log entry for a balance adjustment."""
        logger.info(
            "Creating balance adjustment for %s: %s -> %s (%s) message=%s chat=%s",
            wallet_name,
            old_balance,
            new_balance,
            reason,
            message_id,
            chat_id,
        )