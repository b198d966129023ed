"""
Retry Policy

Re-invokes an async operation under an exponential backoff schedule,
classifying each failure as retryable or terminal. Terminal errors and the
final failed attempt re-raise the original exception unchanged.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from .errors import (
    OperationTimeoutError,
    TransactionError,
    TransientNetworkError,
    TxBuildError,
    ValidationError,
    WalletError,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

Classifier = Callable[[BaseException], bool]
RetryCallback = Callable[[BaseException, int, float], None]

_RETRYABLE_STATUS_CODES = {429, 502, 503, 504}

_RETRYABLE_PATTERNS = (
    "network",
    "fetch",
    "timeout",
    "timed out",
    "connection",
    "rate limit",
    "too many requests",
    "503",
    "502",
    "temporarily unavailable",
    "sequencer",
)

_REJECTION_PATTERNS = ("user rejected", "user denied")


def is_retryable_error(error: BaseException) -> bool:
    """
    Default classification.

    Network, timeout, rate-limit and sequencer errors are retryable. User
    rejections and other typed terminal errors are not.
    """
    if isinstance(error, TransientNetworkError):
        return True
    if isinstance(error, (ValidationError, WalletError, TransactionError, TxBuildError)):
        return False
    if isinstance(error, (httpx.TimeoutException, httpx.TransportError, asyncio.TimeoutError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in _RETRYABLE_STATUS_CODES

    message = str(error).lower()
    if any(p in message for p in _REJECTION_PATTERNS):
        return False
    return any(p in message for p in _RETRYABLE_PATTERNS)


def is_retryable_rpc_error(error: BaseException) -> bool:
    """RPC reads: default classification, never retrying a user rejection."""
    if "user rejected" in str(error).lower():
        return False
    return is_retryable_error(error)


def is_retryable_wallet_error(error: BaseException) -> bool:
    """Wallet submissions: only typed transient failures are retried."""
    return isinstance(error, TransientNetworkError)


@dataclass(frozen=True)
class RetryOptions:
    """Configuration for one ``with_retry`` call. Delays are in seconds."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0
    classify: Classifier = is_retryable_error
    on_retry: Optional[RetryCallback] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be at least 1")

    def with_observer(self, on_retry: Optional[RetryCallback]) -> "RetryOptions":
        return replace(self, on_retry=on_retry)


def rpc_retry_options(**overrides: Any) -> RetryOptions:
    """Retry settings for JSON-RPC reads."""
    options = dict(
        max_attempts=3,
        initial_delay=0.5,
        max_delay=5.0,
        classify=is_retryable_rpc_error,
    )
    options.update(overrides)
    return RetryOptions(**options)


def wallet_retry_options(**overrides: Any) -> RetryOptions:
    """Retry settings for wallet signature/broadcast requests."""
    options = dict(
        max_attempts=2,
        initial_delay=1.0,
        max_delay=5.0,
        classify=is_retryable_wallet_error,
    )
    options.update(overrides)
    return RetryOptions(**options)


def api_retry_options(**overrides: Any) -> RetryOptions:
    """Retry settings for third-party HTTP APIs."""
    options = dict(max_attempts=3, initial_delay=1.0, max_delay=10.0)
    options.update(overrides)
    return RetryOptions(**options)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
    operation_name: str = "operation",
) -> T:
    """
    Execute ``operation`` with automatic retry on retryable failures.

    Args:
        operation: Zero-argument callable returning an awaitable
        options: Retry configuration (defaults to ``RetryOptions()``)
        operation_name: Name used in log lines

    Returns:
        Whatever ``operation`` returns on its first successful attempt

    Raises:
        The exception from the last attempt, unchanged
    """
    options = options or RetryOptions()
    delay = options.initial_delay
    attempt = 0

    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as e:
            if attempt >= options.max_attempts or not options.classify(e):
                if attempt > 1:
                    logger.error(f"{operation_name} failed after {attempt} attempts: {e}")
                raise

            logger.warning(
                f"{operation_name} attempt {attempt}/{options.max_attempts} "
                f"failed: {e}. Retrying in {delay:.2f}s"
            )
            if options.on_retry:
                options.on_retry(e, attempt, delay)

            await asyncio.sleep(delay)
            delay = min(delay * options.backoff_multiplier, options.max_delay)


async def with_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout: float,
    message: str = "Operation timed out",
) -> T:
    """Race ``operation`` against a timer; raise ``OperationTimeoutError`` if the timer wins."""
    try:
        return await asyncio.wait_for(operation(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise OperationTimeoutError(message, timeout=timeout) from e


async def with_retry_and_timeout(
    operation: Callable[[], Awaitable[T]],
    timeout: float,
    options: Optional[RetryOptions] = None,
    operation_name: str = "operation",
) -> T:
    """Retry where each individual attempt is bounded by ``timeout``."""
    return await with_retry(
        lambda: with_timeout(operation, timeout),
        options,
        operation_name=operation_name,
    )


__all__ = [
    "RetryOptions",
    "is_retryable_error",
    "is_retryable_rpc_error",
    "is_retryable_wallet_error",
    "rpc_retry_options",
    "wallet_retry_options",
    "api_retry_options",
    "with_retry",
    "with_timeout",
    "with_retry_and_timeout",
]
