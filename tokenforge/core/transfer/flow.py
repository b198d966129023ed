"""
Single-transaction flow.

The part every wallet-driven flow shares: one state at a time changed only
through ``reduce``, a start guard, wallet submission under the wallet retry
policy, and a receipt wait under the RPC retry policy.
"""

from typing import Callable, Optional

import structlog

from ..errors import TransactionError, TransferInProgressError
from ..fees import GAS_ESTIMATES, FeeEstimator, GasEstimation
from ..retry import RetryOptions, rpc_retry_options, with_retry
from ..retry import wallet_retry_options as default_wallet_retry_options
from ..tx_builder import TxRequest
from .models import (
    AwaitingSignature,
    Failed,
    FlowParams,
    Idle,
    Pending,
    ResetRequested,
    TransactionBroadcast,
    TransferEvent,
    TransferRequested,
    TransferResult,
    TransferState,
    TransferStatus,
)
from .state_machine import STARTABLE, reduce, result_of

logger = structlog.stdlib.get_logger(__name__)

TransitionCallback = Callable[[TransferState, TransferState], None]


class TransactionFlow:
    """Base for flows that sign one transaction and wait for its receipt."""

    # Key into GAS_ESTIMATES for ``estimated_cost``
    gas_operation = "transfer"

    def __init__(
        self,
        wallet,
        rpc,
        retry_options: Optional[RetryOptions] = None,
        wallet_retry_options: Optional[RetryOptions] = None,
        on_transition: Optional[TransitionCallback] = None,
        receipt_timeout: float = 120.0,
        receipt_poll_interval: float = 2.0,
        fee_estimator: Optional[FeeEstimator] = None,
    ):
        """
        Args:
            wallet: Signs and broadcasts transactions (``Wallet`` protocol)
            rpc: Reads chain state and receipts (``JsonRpcClient`` or compatible)
            retry_options: Retry settings for RPC reads and the receipt wait
            wallet_retry_options: Retry settings for the wallet submission
            on_transition: Called with ``(previous, current)`` after each transition
            receipt_timeout: Seconds to wait for a receipt per attempt
            receipt_poll_interval: Seconds between receipt polls
            fee_estimator: Optional source of cost estimates for logging
        """
        self._wallet = wallet
        self._rpc = rpc
        self._rpc_retry = retry_options or rpc_retry_options()
        self._wallet_retry = wallet_retry_options or default_wallet_retry_options()
        self._on_transition = on_transition
        self.receipt_timeout = receipt_timeout
        self.receipt_poll_interval = receipt_poll_interval
        self._fees = fee_estimator
        self._state: TransferState = Idle()

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> TransferState:
        return self._state

    @property
    def status(self) -> TransferStatus:
        return self._state.status

    @property
    def result(self) -> TransferResult:
        return result_of(self._state)

    @property
    def error(self) -> Optional[BaseException]:
        return self._state.error if isinstance(self._state, Failed) else None

    @property
    def is_pending(self) -> bool:
        return isinstance(self._state, Pending)

    @property
    def is_awaiting_signature(self) -> bool:
        return isinstance(self._state, AwaitingSignature)

    def estimated_cost(self, eth_price_usd: Optional[float] = None) -> Optional[GasEstimation]:
        """Gas cost of this flow's transaction at the current fee estimate, if an estimator is attached."""
        if self._fees is None:
            return None
        return self._fees.calculate_cost(GAS_ESTIMATES[self.gas_operation], eth_price_usd)

    def reset(self) -> None:
        """Return to idle from success or error."""
        self._dispatch(ResetRequested())

    def _dispatch(self, event: TransferEvent) -> TransferState:
        previous = self._state
        self._state = reduce(previous, event)
        logger.debug(
            "flow_transition",
            flow=type(self).__name__,
            from_status=previous.status.value,
            to_status=self._state.status.value,
        )
        if self._on_transition is not None:
            self._on_transition(previous, self._state)
        return self._state

    # ---------------------------------------------------------------- stages

    def _begin(self, params: FlowParams) -> None:
        """Enter ``preparing``. Must run before the caller's first await."""
        if self.status not in STARTABLE:
            raise TransferInProgressError(
                f"Cannot start while a previous request is {self.status.value}"
            )
        if self.status is not TransferStatus.IDLE:
            self._dispatch(ResetRequested())
        self._dispatch(TransferRequested(params=params))

    async def _submit(self, tx: TxRequest, operation_name: str) -> str:
        tx_hash = await with_retry(
            lambda: self._wallet.send_transaction(tx),
            self._wallet_retry,
            operation_name=operation_name,
        )
        self._dispatch(TransactionBroadcast(tx_hash=tx_hash))
        return tx_hash

    async def _confirm(self, tx_hash: str):
        """Wait for the receipt of ``tx_hash``; a revert raises ``TransactionError``."""
        receipt = await with_retry(
            lambda: self._rpc.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout,
                poll_interval=self.receipt_poll_interval,
            ),
            self._rpc_retry,
            operation_name="wait_for_receipt",
        )
        if not receipt.status:
            raise TransactionError("Transaction reverted", tx_hash=tx_hash)
        return receipt
