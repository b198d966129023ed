"""
Token Transfer Module

State models, the pure transition function, and the orchestrators that run a
transfer or a token creation from intent to confirmed receipt.
"""

from .models import (
    AwaitingSignature,
    Failed,
    Idle,
    Pending,
    Preparing,
    Succeeded,
    ReceiptConfirmed,
    ResetRequested,
    TransactionBroadcast,
    TransactionPrepared,
    TransferEvent,
    TransferFailed,
    TransferRequested,
    TransferResult,
    TransferState,
    TransferStatus,
)
from .creation import TokenCreationOrchestrator, created_token_address
from .flow import TransactionFlow, TransitionCallback
from .orchestrator import TransferOrchestrator
from .state_machine import TRANSITIONS, can_transition, reduce, result_of

__all__ = [
    # States
    "TransferStatus",
    "TransferState",
    "TransferResult",
    "Idle",
    "Preparing",
    "AwaitingSignature",
    "Pending",
    "Succeeded",
    "Failed",
    # Events
    "TransferEvent",
    "TransferRequested",
    "TransactionPrepared",
    "TransactionBroadcast",
    "ReceiptConfirmed",
    "TransferFailed",
    "ResetRequested",
    # Machine
    "TRANSITIONS",
    "can_transition",
    "reduce",
    "result_of",
    "TransactionFlow",
    "TransitionCallback",
    "TransferOrchestrator",
    "TokenCreationOrchestrator",
    "created_token_address",
]
