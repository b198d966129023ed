"""
Error Classification

Defines the error taxonomy for the transaction pipeline.
Errors are either transient (safe to retry) or terminal (surface to the user).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    # Input
    VALIDATION = "VALIDATION_ERROR"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    # Wallet
    WALLET = "WALLET_ERROR"
    USER_REJECTED = "USER_REJECTED"
    WALLET_UNAVAILABLE = "WALLET_UNAVAILABLE"

    # Transaction
    TRANSACTION = "TRANSACTION_ERROR"
    EXECUTION_REVERTED = "EXECUTION_REVERTED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    GAS_LIMIT_EXCEEDED = "GAS_LIMIT_EXCEEDED"
    NONCE_TOO_LOW = "NONCE_TOO_LOW"
    REPLACEMENT_UNDERPRICED = "REPLACEMENT_UNDERPRICED"
    FEE_TOO_LOW = "FEE_TOO_LOW"
    CONTRACT_NOT_DEPLOYED = "CONTRACT_NOT_DEPLOYED"
    WRONG_NETWORK = "WRONG_NETWORK"

    # Network
    NETWORK = "NETWORK_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    SEQUENCER_UNAVAILABLE = "SEQUENCER_UNAVAILABLE"
    RPC = "RPC_ERROR"

    # Orchestration
    TRANSFER_IN_PROGRESS = "TRANSFER_IN_PROGRESS"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    UNKNOWN = "UNKNOWN"


class ForgeError(Exception):
    """Base class for every error raised by the pipeline."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}


# =============================================================================
# Validation
# =============================================================================

@dataclass(frozen=True)
class FieldIssue:
    """A single field-level validation message."""

    field: str
    message: str


class ValidationError(ForgeError):
    """User input failed validation. Never retried."""

    code = ErrorCode.VALIDATION

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        issues: Optional[List[FieldIssue]] = None,
    ):
        super().__init__(message, details={"field": field} if field else {})
        self.field = field
        self.issues = list(issues) if issues else (
            [FieldIssue(field, message)] if field else []
        )


# =============================================================================
# Wallet (terminal)
# =============================================================================

class WalletError(ForgeError):
    """Signing wallet refused or could not handle the request."""

    code = ErrorCode.WALLET


class UserRejectedError(WalletError):
    """The user declined the signature request."""

    code = ErrorCode.USER_REJECTED

    def __init__(self, message: str = "User rejected the request"):
        super().__init__(message)


class WalletUnavailableError(WalletError):
    """No wallet is connected or the wallet cannot sign."""

    code = ErrorCode.WALLET_UNAVAILABLE

    def __init__(self, message: str = "Wallet is not available"):
        super().__init__(message)


class WrongNetworkError(WalletError):
    """The connected chain is not the one the flow targets."""

    code = ErrorCode.WRONG_NETWORK

    def __init__(self, expected_chain_id: int, actual_chain_id: int):
        super().__init__(
            f"Wrong network: connected to chain {actual_chain_id}, expected {expected_chain_id}",
            details={"expected_chain_id": expected_chain_id, "actual_chain_id": actual_chain_id},
        )
        self.expected_chain_id = expected_chain_id
        self.actual_chain_id = actual_chain_id


# =============================================================================
# Transaction (terminal)
# =============================================================================

class TransactionError(ForgeError):
    """On-chain revert or failed receipt. Carries the hash for investigation."""

    code = ErrorCode.TRANSACTION

    def __init__(
        self,
        message: str = "Transaction failed",
        tx_hash: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        details: Dict[str, Any] = {}
        if tx_hash:
            details["tx_hash"] = tx_hash
        if reason:
            details["revert_reason"] = reason
        super().__init__(message, details=details)
        self.tx_hash = tx_hash
        self.reason = reason


# =============================================================================
# Network (retryable)
# =============================================================================

class TransientNetworkError(ForgeError):
    """
    Base class for errors that can be retried.

    These errors are typically transient:
    - RPC timeouts
    - Rate limits
    - Sequencer unavailability
    - Connection failures
    """

    code = ErrorCode.NETWORK
    retryable = True


class NetworkError(TransientNetworkError):
    """Network connectivity error."""

    def __init__(self, message: str = "Network error"):
        super().__init__(message)


class RateLimitError(TransientNetworkError):
    """RPC rate limit exceeded."""

    code = ErrorCode.RATE_LIMIT

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
    ):
        super().__init__(
            message,
            details={"retry_after": retry_after} if retry_after is not None else {},
        )
        self.retry_after = retry_after


class RpcTimeoutError(TransientNetworkError):
    """An RPC request timed out."""

    code = ErrorCode.TIMEOUT

    def __init__(self, message: str = "RPC request timed out"):
        super().__init__(message)


class OperationTimeoutError(TransientNetworkError):
    """An awaited operation lost the race against its timer."""

    code = ErrorCode.TIMEOUT

    def __init__(self, message: str = "Operation timed out", timeout: Optional[float] = None):
        super().__init__(message, details={"timeout": timeout} if timeout is not None else {})
        self.timeout = timeout


class SequencerUnavailableError(TransientNetworkError):
    """The L2 sequencer is not accepting requests."""

    code = ErrorCode.SEQUENCER_UNAVAILABLE

    def __init__(self, message: str = "Sequencer unavailable"):
        super().__init__(message)


class RpcError(ForgeError):
    """JSON-RPC error response that is not transient."""

    code = ErrorCode.RPC

    def __init__(
        self,
        message: str,
        rpc_code: Optional[int] = None,
        data: Any = None,
    ):
        details: Dict[str, Any] = {}
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        if data is not None:
            details["data"] = data
        super().__init__(message, details=details)
        self.rpc_code = rpc_code
        self.data = data


# =============================================================================
# Builder
# =============================================================================

class TxBuildError(ForgeError, ValueError):
    """Calldata could not be built from the given arguments."""

    code = ErrorCode.VALIDATION


class InvalidAmountError(TxBuildError):
    """Unit amount is negative, non-integer, or out of uint range."""

    code = ErrorCode.INVALID_AMOUNT


class InvalidAddressError(TxBuildError):
    """Address is not a well-formed EVM address."""

    code = ErrorCode.INVALID_ADDRESS


# =============================================================================
# Orchestration
# =============================================================================

class TransferInProgressError(ForgeError):
    """A transfer was requested while another one is still in flight."""

    code = ErrorCode.TRANSFER_IN_PROGRESS


class InvalidTransitionError(ForgeError):
    """The transfer state machine rejected an event."""

    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, from_status: str, event: str):
        super().__init__(f"Invalid transition from {from_status} on {event}")
        self.from_status = from_status
        self.event = event


# =============================================================================
# Display parsing
# =============================================================================

@dataclass(frozen=True)
class ParsedError:
    """User-facing description of an error."""

    code: ErrorCode
    title: str
    message: str
    suggestion: str
    is_retryable: bool
    details: Dict[str, Any] = field(default_factory=dict)


def error_text(error: BaseException) -> str:
    """Extract the most specific message available from an exception."""
    for attr in ("short_message", "reason"):
        value = getattr(error, attr, None)
        if isinstance(value, str) and value:
            return value
    return str(error) or error.__class__.__name__


def parse_error(error: BaseException) -> ParsedError:
    """
    Turn any exception into a displayable record.

    Typed pipeline errors keep their original message so the UI can render
    an exact, debuggable string. Untyped errors are matched on message
    patterns from wallets and RPC nodes.
    """
    text = error_text(error)
    lower = text.lower()

    if isinstance(error, ValidationError):
        return ParsedError(
            code=ErrorCode.VALIDATION,
            title="Invalid Input",
            message=text,
            suggestion="Fix the highlighted fields and try again.",
            is_retryable=False,
            details={"issues": [issue.__dict__ for issue in error.issues]},
        )

    if isinstance(error, UserRejectedError) or "user rejected" in lower or "user denied" in lower:
        return ParsedError(
            code=ErrorCode.USER_REJECTED,
            title="Transaction Cancelled",
            message=text,
            suggestion="Click the button to try again when ready.",
            is_retryable=False,
        )

    if isinstance(error, WrongNetworkError):
        return ParsedError(
            code=ErrorCode.WRONG_NETWORK,
            title="Wrong Network",
            message=text,
            suggestion="Switch your wallet to the Base network.",
            is_retryable=True,
            details=dict(error.details),
        )

    if isinstance(error, WalletError):
        return ParsedError(
            code=error.code,
            title="Wallet Error",
            message=text,
            suggestion="Reconnect your wallet and try again.",
            is_retryable=False,
        )

    if isinstance(error, TransactionError):
        return ParsedError(
            code=ErrorCode.TRANSACTION,
            title="Transaction Failed",
            message=text,
            suggestion="Inspect the transaction on the block explorer.",
            is_retryable=False,
            details=dict(error.details),
        )

    if isinstance(error, TransientNetworkError):
        return ParsedError(
            code=error.code,
            title="Network Error",
            message=text,
            suggestion="Please wait a moment and try again.",
            is_retryable=True,
            details=dict(error.details),
        )

    if "insufficient funds" in lower or "insufficient balance" in lower:
        return ParsedError(
            code=ErrorCode.INSUFFICIENT_FUNDS,
            title="Insufficient ETH",
            message=text,
            suggestion="Bridge more ETH to Base using the official Base Bridge.",
            is_retryable=False,
        )

    if "gas limit" in lower or "out of gas" in lower:
        return ParsedError(
            code=ErrorCode.GAS_LIMIT_EXCEEDED,
            title="Gas Limit Exceeded",
            message=text,
            suggestion="Try increasing the gas limit or simplifying the transaction.",
            is_retryable=True,
        )

    if "nonce too low" in lower:
        return ParsedError(
            code=ErrorCode.NONCE_TOO_LOW,
            title="Nonce Too Low",
            message=text,
            suggestion="Try resetting your wallet's pending transactions.",
            is_retryable=True,
        )

    if "replacement transaction underpriced" in lower:
        return ParsedError(
            code=ErrorCode.REPLACEMENT_UNDERPRICED,
            title="Gas Price Too Low",
            message=text,
            suggestion="Try with a higher gas price or wait for pending transactions.",
            is_retryable=True,
        )

    if "revert" in lower:
        if "fee too low" in lower or "insufficient fee" in lower:
            return ParsedError(
                code=ErrorCode.FEE_TOO_LOW,
                title="Insufficient Fee",
                message=text,
                suggestion="Ensure you're sending the correct creation fee amount.",
                is_retryable=True,
            )
        return ParsedError(
            code=ErrorCode.EXECUTION_REVERTED,
            title="Transaction Failed",
            message=text,
            suggestion="Check your input values and try again.",
            is_retryable=True,
        )

    if "wrong network" in lower or "unsupported chain" in lower:
        return ParsedError(
            code=ErrorCode.WRONG_NETWORK,
            title="Wrong Network",
            message=text,
            suggestion="Switch your wallet to the Base network.",
            is_retryable=True,
        )

    if "contract not deployed" in lower or "no code" in lower:
        return ParsedError(
            code=ErrorCode.CONTRACT_NOT_DEPLOYED,
            title="Contract Not Found",
            message=text,
            suggestion="Make sure you're connected to the correct network.",
            is_retryable=False,
        )

    if "sequencer" in lower:
        return ParsedError(
            code=ErrorCode.SEQUENCER_UNAVAILABLE,
            title="Sequencer Issue",
            message=text,
            suggestion="Please wait a moment and try again.",
            is_retryable=True,
        )

    if "network" in lower or "connection" in lower:
        return ParsedError(
            code=ErrorCode.NETWORK,
            title="Network Error",
            message=text,
            suggestion="Check your internet connection and try again.",
            is_retryable=True,
        )

    return ParsedError(
        code=ErrorCode.UNKNOWN,
        title="Transaction Error",
        message=text or "An unexpected error occurred.",
        suggestion="Please try again. If the problem persists, contact support.",
        is_retryable=True,
    )
