"""
Transaction flow state and event models.

Token transfers and token creation share these. Each state is a frozen
dataclass carrying only the data that exists at that point of the flow, so a
pending flow always has a hash and a succeeded one always has a receipt.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from ..tx_builder import TxRequest
from ..validation import TokenFormParams, TransferParams

FlowParams = Union[TransferParams, TokenFormParams]


class TransferStatus(str, Enum):
    """Lifecycle of a single transfer or token creation."""

    IDLE = "idle"
    PREPARING = "preparing"
    AWAITING_SIGNATURE = "awaiting-signature"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class TransferResult:
    """What is known about the transaction so far. Fields fill in as stages complete."""

    hash: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    timestamp: Optional[datetime] = None
    # Set by token creation once the factory reports the new token
    token_address: Optional[str] = None


# =============================================================================
# States
# =============================================================================

@dataclass(frozen=True)
class Idle:
    status = TransferStatus.IDLE


@dataclass(frozen=True)
class Preparing:
    params: FlowParams
    status = TransferStatus.PREPARING


@dataclass(frozen=True)
class AwaitingSignature:
    params: FlowParams
    tx: TxRequest
    status = TransferStatus.AWAITING_SIGNATURE


@dataclass(frozen=True)
class Pending:
    params: FlowParams
    tx_hash: str
    status = TransferStatus.PENDING


@dataclass(frozen=True)
class Succeeded:
    params: FlowParams
    result: TransferResult
    status = TransferStatus.SUCCESS


@dataclass(frozen=True)
class Failed:
    error: BaseException
    params: Optional[FlowParams] = None
    # Set when the failure happened after broadcast
    tx_hash: Optional[str] = None
    status = TransferStatus.ERROR


TransferState = Union[Idle, Preparing, AwaitingSignature, Pending, Succeeded, Failed]


# =============================================================================
# Events
# =============================================================================

@dataclass(frozen=True)
class TransferRequested:
    params: FlowParams


@dataclass(frozen=True)
class TransactionPrepared:
    tx: TxRequest


@dataclass(frozen=True)
class TransactionBroadcast:
    tx_hash: str


@dataclass(frozen=True)
class ReceiptConfirmed:
    block_number: int
    gas_used: int
    timestamp: datetime
    token_address: Optional[str] = None


@dataclass(frozen=True)
class TransferFailed:
    error: BaseException


@dataclass(frozen=True)
class ResetRequested:
    pass


TransferEvent = Union[
    TransferRequested,
    TransactionPrepared,
    TransactionBroadcast,
    ReceiptConfirmed,
    TransferFailed,
    ResetRequested,
]
