"""Exception hierarchy for the wallet bot."""

from __future__ import annotations

from enum import Enum


class ErrorSeverity(Enum):
    """How serious an error is."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    def __str__(self) -> str:
        return self.value


class WalletBotError(Exception):
    """Base class of every error raised by the bot.

    ``detail`` may be a message or the exception that caused the failure.
    """

    prefix = "WalletBot error"
    _retryable = False
    _severity = ErrorSeverity.MEDIUM

    def __init__(self, detail: object) -> None:
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}")

    def is_retryable(self) -> bool:
        """Whether retrying the failed operation may succeed."""
        return self._retryable

    def severity(self) -> ErrorSeverity:
        """The severity of this error."""
        return self._severity


class DatabaseError(WalletBotError):
    prefix = "Database error"
    _retryable = True
    _severity = ErrorSeverity.HIGH


class ConfigError(WalletBotError):
    prefix = "Configuration error"
    _severity = ErrorSeverity.CRITICAL


class TelegramError(WalletBotError):
    prefix = "Telegram API error"
    _retryable = True
    _severity = ErrorSeverity.MEDIUM


class ParserError(WalletBotError):
    prefix = "Parser error"
    _severity = ErrorSeverity.LOW


class BalanceCalculationError(WalletBotError):
    prefix = "Balance calculation error"
    _severity = ErrorSeverity.HIGH


class WalletNotFoundError(WalletBotError):
    prefix = "Wallet not found"
    _severity = ErrorSeverity.MEDIUM

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)


class InvalidMessageFormatError(WalletBotError):
    prefix = "Invalid message format"
    _severity = ErrorSeverity.LOW


class WalletIOError(WalletBotError):
    prefix = "IO error"
    _retryable = True
    _severity = ErrorSeverity.MEDIUM


class EnvError(WalletBotError):
    prefix = "Environment variable error"
    _severity = ErrorSeverity.CRITICAL