"""Parsing of wallet transaction messages."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from walletbot.errors import ParserError
from walletbot.models import ParsedMessage

logger = logging.getLogger(__name__)

# #钱包名称 #月份 #年份
WALLET_RE = re.compile(r"#([^#\s]+)\s+#\d+月")
# #出账 / #入账 / #收入 / #支出
TRANSACTION_RE = re.compile(r"#(出账|入账|收入|支出)")
# 数字.数字元
AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)元")
# #数字月 #数字年
TIME_RE = re.compile(r"#(\d+月)\s+#(\d+年)")
# #总额 数字元
TOTAL_RE = re.compile(r"#总额\s+(\d+(?:\.\d+)?)元")

TOTAL_MARKER = "#总额"


def _decimal(text: str) -> float | None:
    """Parse an ASCII decimal number, or return None."""
    if not text.isascii():
        return None
    try:
        return float(text)
    except ValueError:
        return None


@dataclass
class SimpleTransaction:
    """A transaction written as ``<type> <amount> <description>``."""

    transaction_type: str
    amount: float
    description: str


class MessageParser:
    """Recognises and parses wallet messages."""

    def parse(self, text: str) -> ParsedMessage | None:
        """Extract wallet, type, amount, month, year and optional total."""
        logger.debug("Parsing message: %s", text)

        wallet = WALLET_RE.search(text)
        if wallet is None:
            return None
        transaction = TRANSACTION_RE.search(text)
        if transaction is None:
            return None
        amount = self._transaction_amount(text)
        if amount is None:
            return None
        time = TIME_RE.search(text)
        if time is None:
            return None

        total = self.extract_total_amount(text)
        if total is not None:
            logger.debug("Total amount found: %s", total)

        return ParsedMessage(
            wallet_name=wallet.group(1),
            transaction_type=transaction.group(1),
            amount=amount,
            month=time.group(1),
            year=time.group(2),
            total_amount=total,
            original_text=text,
        )

    def _transaction_amount(self, text: str) -> float | None:
        """The first amount that is not preceded by a total marker."""
        for match in AMOUNT_RE.finditer(text):
            if TOTAL_MARKER in text[: match.start()]:
                continue
            amount = _decimal(match.group(1))
            if amount is not None:
                return amount
        return None

    def has_total(self, text: str) -> bool:
        """Whether the message already carries a total line."""
        return TOTAL_RE.search(text) is not None

    def extract_total_amount(self, text: str) -> float | None:
        """The amount of the total line, if any."""
        match = TOTAL_RE.search(text)
        return _decimal(match.group(1)) if match else None

    def is_wallet_message(self, text: str) -> bool:
        """Whether the message looks like a wallet operation."""
        return bool(
            WALLET_RE.search(text)
            and TRANSACTION_RE.search(text)
            and AMOUNT_RE.search(text)
        )

    def parse_transaction(self, text: str) -> SimpleTransaction:
        """Parse ``收入|支出 <amount> <description>``; raise ParserError otherwise."""
        parts = text.split()
        if len(parts) < 3:
            raise ParserError("Invalid transaction format")

        transaction_type, amount_text, *description = parts
        if "_" in amount_text:
            raise ParserError("Invalid amount")
        try:
            amount = float(amount_text)
        except ValueError:
            raise ParserError("Invalid amount") from None

        if transaction_type not in ("收入", "支出"):
            raise ParserError("Invalid transaction type")

        return SimpleTransaction(transaction_type, amount, " ".join(description))