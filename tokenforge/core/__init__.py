"""
Token Forge Core

Validation, fee estimation, transaction building, retry policy and the
transfer state machine. Nothing here reads configuration or global state.
"""

from .errors import (
    ErrorCode,
    ForgeError,
    ValidationError,
    WalletError,
    UserRejectedError,
    WalletUnavailableError,
    WrongNetworkError,
    TransactionError,
    TransientNetworkError,
    NetworkError,
    RateLimitError,
    RpcTimeoutError,
    OperationTimeoutError,
    SequencerUnavailableError,
    RpcError,
    TxBuildError,
    InvalidAmountError,
    InvalidAddressError,
    TransferInProgressError,
    InvalidTransitionError,
    parse_error,
)
from .fees import FeeEstimate, FeeEstimator, FeeState, GasEstimation, calculate_cost
from .retry import RetryOptions, with_retry, with_timeout, with_retry_and_timeout
from .transfer import TokenCreationOrchestrator, TransferOrchestrator, TransferResult, TransferStatus
from .tx_builder import (
    TxRequest,
    build_approve,
    build_burn,
    build_create,
    build_transfer,
    build_unlimited_approve,
)
from .validation import (
    TokenFormParams,
    TransferParams,
    ValidationResult,
    ensure_valid,
    validate_token_params,
    validate_transfer_params,
)

__all__ = [
    # Errors
    "ErrorCode",
    "ForgeError",
    "ValidationError",
    "WalletError",
    "UserRejectedError",
    "WalletUnavailableError",
    "WrongNetworkError",
    "TransactionError",
    "TransientNetworkError",
    "NetworkError",
    "RateLimitError",
    "RpcTimeoutError",
    "OperationTimeoutError",
    "SequencerUnavailableError",
    "RpcError",
    "TxBuildError",
    "InvalidAmountError",
    "InvalidAddressError",
    "TransferInProgressError",
    "InvalidTransitionError",
    "parse_error",
    # Fees
    "FeeEstimate",
    "FeeEstimator",
    "FeeState",
    "GasEstimation",
    "calculate_cost",
    # Retry
    "RetryOptions",
    "with_retry",
    "with_timeout",
    "with_retry_and_timeout",
    # Transfer
    "TransferOrchestrator",
    "TokenCreationOrchestrator",
    "TransferResult",
    "TransferStatus",
    # Builder
    "TxRequest",
    "build_create",
    "build_transfer",
    "build_approve",
    "build_unlimited_approve",
    "build_burn",
    # Validation
    "TokenFormParams",
    "TransferParams",
    "ValidationResult",
    "validate_token_params",
    "validate_transfer_params",
    "ensure_valid",
]
