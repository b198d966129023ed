"""
Transfer state machine.

``reduce`` is the only way a flow changes state. It is pure: given the
current state and an event it returns the next state, or raises
``InvalidTransitionError`` when the event is not allowed from there.

    idle ──request──▶ preparing ──prepared──▶ awaiting-signature
     ▲                    │                         │
     │                  fail                    broadcast
     │                    ▼                         ▼
   reset ◀── success/error ◀──confirmed / fail──  pending

A finished result is only discarded by ``reset``; starting again from
success or error goes through ``idle`` first.
"""

from typing import Dict, FrozenSet, Type

from ..errors import InvalidTransitionError
from .models import (
    AwaitingSignature,
    Failed,
    Idle,
    Pending,
    Preparing,
    ReceiptConfirmed,
    ResetRequested,
    Succeeded,
    TransactionBroadcast,
    TransactionPrepared,
    TransferEvent,
    TransferFailed,
    TransferRequested,
    TransferResult,
    TransferState,
    TransferStatus,
)

# States from which a new flow may start; success and error reset first
STARTABLE: FrozenSet[TransferStatus] = frozenset(
    {TransferStatus.IDLE, TransferStatus.SUCCESS, TransferStatus.ERROR}
)

# Allowed (state, event) pairs, for documentation and introspection
TRANSITIONS: Dict[TransferStatus, FrozenSet[Type]] = {
    TransferStatus.IDLE: frozenset({TransferRequested}),
    TransferStatus.PREPARING: frozenset({TransactionPrepared, TransferFailed}),
    TransferStatus.AWAITING_SIGNATURE: frozenset({TransactionBroadcast, TransferFailed}),
    TransferStatus.PENDING: frozenset({ReceiptConfirmed, TransferFailed}),
    TransferStatus.SUCCESS: frozenset({ResetRequested}),
    TransferStatus.ERROR: frozenset({ResetRequested}),
}


def can_transition(state: TransferState, event: TransferEvent) -> bool:
    return type(event) in TRANSITIONS[state.status]


def reduce(state: TransferState, event: TransferEvent) -> TransferState:
    """Apply ``event`` to ``state`` and return the resulting state."""
    if not can_transition(state, event):
        raise InvalidTransitionError(state.status.value, type(event).__name__)

    if isinstance(event, TransferRequested):
        return Preparing(params=event.params)

    if isinstance(event, ResetRequested):
        return Idle()

    if isinstance(event, TransactionPrepared):
        return AwaitingSignature(params=state.params, tx=event.tx)

    if isinstance(event, TransactionBroadcast):
        return Pending(params=state.params, tx_hash=event.tx_hash)

    if isinstance(event, ReceiptConfirmed):
        return Succeeded(
            params=state.params,
            result=TransferResult(
                hash=state.tx_hash,
                block_number=event.block_number,
                gas_used=event.gas_used,
                timestamp=event.timestamp,
                token_address=event.token_address,
            ),
        )

    if isinstance(event, TransferFailed):
        return Failed(
            error=event.error,
            params=state.params,
            tx_hash=state.tx_hash if isinstance(state, Pending) else None,
        )

    raise InvalidTransitionError(state.status.value, type(event).__name__)


def result_of(state: TransferState) -> TransferResult:
    """The transfer result visible in ``state``."""
    if isinstance(state, Succeeded):
        return state.result
    if isinstance(state, Pending):
        return TransferResult(hash=state.tx_hash)
    if isinstance(state, Failed) and state.tx_hash:
        return TransferResult(hash=state.tx_hash)
    return TransferResult()
