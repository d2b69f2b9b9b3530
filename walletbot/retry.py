"""Retrying asynchronous operations with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from walletbot.errors import WalletBotError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Retry limits; delays are in seconds."""

    max_attempts: int = 3
    base_delay: float = 0.1
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds, retrying retryable errors.

    A :class:`WalletBotError` that is not retryable is raised at once;
    after the last attempt the last error is raised.
    """
    config = config or RetryConfig()
    if config.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    max_delay_ms = int(config.max_delay * 1000)
    delay_ms = int(config.base_delay * 1000)
    last_error: WalletBotError | None = None

    for attempt in range(1, config.max_attempts + 1):
        logger.debug(
            "Attempting operation '%s' (attempt %d/%d)",
            operation_name,
            attempt,
            config.max_attempts,
        )
        try:
            result = await operation()
        except WalletBotError as error:
            logger.warning(
                "Operation '%s' failed on attempt %d: %s", operation_name, attempt, error
            )
            if not error.is_retryable():
                logger.warning("Error is not retryable, stopping attempts")
                raise
            last_error = error
            if attempt < config.max_attempts:
                logger.debug("Waiting %d ms before next attempt", delay_ms)
                await asyncio.sleep(delay_ms / 1000)
                delay_ms = min(int(delay_ms * config.backoff_multiplier), max_delay_ms)
        else:
            if attempt > 1:
                logger.debug(
                    "Operation '%s' succeeded on attempt %d", operation_name, attempt
                )
            return result

    logger.warning(
        "Operation '%s' failed after %d attempts: %s",
        operation_name,
        config.max_attempts,
        last_error,
    )
    assert last_error is not None
    raise last_error