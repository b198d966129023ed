"""
Token Creation Orchestrator

Runs ``createToken`` on the factory through the same state machine as a
transfer:

    check wallet + chain -> validate -> build tx (fee as value) -> wallet signs
        -> wait for receipt -> read the new token address

The token address comes from the factory's ``TokenCreated`` log, falling back
to the receipt's ``contractAddress``.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog
from eth_utils import to_checksum_address

from ..amounts import parse_amount
from ..constants import BASE_CHAIN_ID, CREATION_FEE_WEI, TOKEN_FACTORY_ADDRESS, explorer_tx_url
from ..errors import WalletUnavailableError, WrongNetworkError
from ..retry import with_retry
from ..tx_builder import TOKEN_CREATED_TOPIC, build_create
from ..validation import TokenFormParams, ensure_valid, validate_token_params
from .flow import TransactionFlow
from .models import ReceiptConfirmed, TransactionPrepared, TransferFailed

logger = structlog.stdlib.get_logger(__name__)


def created_token_address(logs: Iterable, factory_address: str) -> Optional[str]:
    """Token address from the first ``TokenCreated`` log emitted by the factory."""
    factory = factory_address.lower()
    for log in logs:
        if (log.address or "").lower() != factory or len(log.topics) < 2:
            continue
        if log.topics[0].lower() == TOKEN_CREATED_TOPIC:
            # Indexed address: last 20 bytes of the 32-byte topic
            return to_checksum_address("0x" + log.topics[1][-40:])
    return None


class TokenCreationOrchestrator(TransactionFlow):
    """
    Creates tokens through the factory for a single wallet, one at a time.

    Usage:
        creation = TokenCreationOrchestrator(wallet, rpc)
        if await creation.create(TokenFormParams("My Token", "MTK", 18, "1000000")):
            print(creation.result.token_address)
    """

    gas_operation = "token_creation"

    def __init__(
        self,
        wallet,
        rpc,
        chain_id: int = BASE_CHAIN_ID,
        factory_address: str = TOKEN_FACTORY_ADDRESS,
        creation_fee_wei: int = CREATION_FEE_WEI,
        **kwargs,
    ):
        super().__init__(wallet, rpc, **kwargs)
        self.chain_id = chain_id
        self.factory_address = factory_address
        self.creation_fee_wei = creation_fee_wei

    @property
    def explorer_url(self) -> Optional[str]:
        """Block explorer link for the creation transaction, once broadcast."""
        tx_hash = self.result.hash
        return explorer_tx_url(tx_hash, self.chain_id) if tx_hash else None

    async def create(self, params: TokenFormParams) -> bool:
        """
        Create a token and wait for it to be mined.

        Returns:
            True on a successful receipt, False if creation ended in error.
            The new token's address is ``self.result.token_address``.

        Raises:
            TransferInProgressError: a previous request has not finished yet
        """
        self._begin(params)
        log = logger.bind(token_name=params.name, token_symbol=params.symbol)

        try:
            self._ensure_wallet()
            await self._ensure_chain()

            ensure_valid(validate_token_params(params))
            decimals = int(params.decimals)
            supply_units = parse_amount(params.supply, decimals, field="supply")
            tx = build_create(
                params.name.strip(),
                params.symbol.strip(),
                decimals,
                supply_units,
                self.creation_fee_wei,
                factory_address=self.factory_address,
            )
            self._dispatch(TransactionPrepared(tx=tx))
            log.info("token_creation_awaiting_signature", creation_fee_wei=self.creation_fee_wei)

            tx_hash = await self._submit(tx, "send_create_token")
            log = log.bind(tx_hash=tx_hash)
            log.info("token_creation_broadcast")

            receipt = await self._confirm(tx_hash)
            token_address = created_token_address(receipt.logs, self.factory_address)
            if token_address is None and receipt.contract_address:
                token_address = to_checksum_address(receipt.contract_address)
            if token_address is None:
                log.warning("token_address_not_in_receipt")

            self._dispatch(
                ReceiptConfirmed(
                    block_number=receipt.block_number,
                    gas_used=receipt.gas_used,
                    timestamp=datetime.now(timezone.utc),
                    token_address=token_address,
                )
            )
            log.info(
                "token_created",
                token_address=token_address,
                block_number=receipt.block_number,
                explorer_url=self.explorer_url,
            )
            return True

        except Exception as e:
            log.warning("token_creation_failed", error=str(e), error_type=type(e).__name__)
            self._dispatch(TransferFailed(error=e))
            return False

    def _ensure_wallet(self) -> None:
        if self._wallet is None or not getattr(self._wallet, "address", None):
            raise WalletUnavailableError("Wallet not connected")

    async def _ensure_chain(self) -> None:
        actual = await with_retry(
            self._rpc.get_chain_id,
            self._rpc_retry,
            operation_name="read_chain_id",
        )
        if actual != self.chain_id:
            raise WrongNetworkError(self.chain_id, actual)


__all__ = ["TokenCreationOrchestrator", "created_token_address"]
