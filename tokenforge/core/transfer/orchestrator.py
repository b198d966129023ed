"""
Transfer Orchestrator

Drives one ERC-20 transfer from user intent to a confirmed receipt:

    validate -> check balance -> build tx -> wallet signs -> wait for receipt

Every step goes through the pure ``reduce`` state machine so observers see
each transition. Only the network-facing steps (balance read, wallet
submission, receipt wait) are retried; validation and building fail fast.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from ..amounts import parse_amount
from ..errors import ValidationError
from ..retry import with_retry
from ..tx_builder import build_transfer
from ..validation import TransferParams, ensure_valid, validate_transfer_params
from .flow import TransactionFlow
from .models import ReceiptConfirmed, TransactionPrepared, TransferFailed

logger = structlog.stdlib.get_logger(__name__)


class TransferOrchestrator(TransactionFlow):
    """
    Runs token transfers for a single wallet, one at a time.

    Usage:
        orchestrator = TransferOrchestrator(wallet, rpc)
        ok = await orchestrator.transfer(
            TransferParams(token_address, recipient, "10", decimals=18)
        )
        if ok:
            print(orchestrator.result.hash)
        else:
            print(orchestrator.error)
    """

    gas_operation = "transfer"

    async def transfer(self, params: TransferParams, balance_units: Optional[int] = None) -> bool:
        """
        Run a transfer to completion.

        Starting from success or error resets to idle first, so the previous
        result is discarded through the same path as ``reset()``.

        Args:
            params: Token, recipient and human-unit amount
            balance_units: Known sender balance in base units. When omitted the
                balance is read from the token contract.

        Returns:
            True on a successful receipt, False if the transfer ended in error.
            The error itself is available as ``self.error``.

        Raises:
            TransferInProgressError: another transfer has not finished yet
        """
        self._begin(params)

        log = logger.bind(
            token=params.token_address,
            recipient=params.recipient_address,
            amount=params.amount,
        )

        try:
            ensure_valid(validate_transfer_params(params))
            amount_units = parse_amount(params.amount, params.decimals)

            if balance_units is None:
                balance_units = await self._read_balance(params.token_address)
            if amount_units > balance_units:
                raise ValidationError("Insufficient token balance", field="amount")

            tx = build_transfer(params.token_address, params.recipient_address, amount_units)
            self._dispatch(TransactionPrepared(tx=tx))

            cost = self.estimated_cost()
            if cost is not None:
                log.info("transfer_awaiting_signature", estimated_cost_wei=cost.estimated_cost_wei)
            else:
                log.info("transfer_awaiting_signature")

            tx_hash = await self._submit(tx, "send_transfer")
            log = log.bind(tx_hash=tx_hash)
            log.info("transfer_broadcast")

            receipt = await self._confirm(tx_hash)
            self._dispatch(
                ReceiptConfirmed(
                    block_number=receipt.block_number,
                    gas_used=receipt.gas_used,
                    timestamp=datetime.now(timezone.utc),
                )
            )
            log.info(
                "transfer_confirmed",
                block_number=receipt.block_number,
                gas_used=receipt.gas_used,
            )
            return True

        except Exception as e:
            log.warning("transfer_failed", error=str(e), error_type=type(e).__name__)
            self._dispatch(TransferFailed(error=e))
            return False

    async def _read_balance(self, token_address: str) -> int:
        return await with_retry(
            lambda: self._rpc.get_token_balance(token_address, self._wallet.address),
            self._rpc_retry,
            operation_name="read_balance",
        )


__all__ = ["TransferOrchestrator"]
