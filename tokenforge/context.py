"""
Process-wide wiring.

``ForgeContext`` owns the JSON-RPC client and the fee estimator and hands out
transfer and token creation orchestrators bound to them. It is constructed
explicitly and passed to whoever needs it; nothing here is a module-level
singleton.
"""

import logging
from typing import Optional

from .config import Settings
from .core.fees import FeeEstimator
from .core.retry import rpc_retry_options
from .core.transfer import TokenCreationOrchestrator, TransferOrchestrator, TransitionCallback
from .providers.rpc import JsonRpcClient
from .providers.wallet import RpcWallet, Wallet

logger = logging.getLogger(__name__)


class ForgeContext:
    """
    Shared services for one running process.

    Usage:
        async with ForgeContext.from_settings(settings) as ctx:
            state = await ctx.fees.refresh()
    """

    def __init__(
        self,
        settings: Settings,
        rpc: JsonRpcClient,
        fees: FeeEstimator,
    ):
        self.settings = settings
        self.rpc = rpc
        self.fees = fees
        self._started = False

    @classmethod
    def from_settings(cls, settings: Settings, rpc: Optional[JsonRpcClient] = None) -> "ForgeContext":
        rpc = rpc or JsonRpcClient(settings.rpc_url, timeout_s=settings.rpc_timeout_seconds)
        fees = FeeEstimator(
            rpc,
            priority_fee_wei=settings.priority_fee_wei,
            refresh_interval=settings.fee_refresh_interval_seconds,
            retry_options=rpc_retry_options(**settings.rpc_retry_overrides()),
        )
        return cls(settings, rpc, fees)

    async def __aenter__(self) -> "ForgeContext":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        if self._started:
            return
        await self.fees.start()
        self._started = True
        logger.info(f"Forge context started (chain {self.settings.chain_id}, rpc {self.settings.rpc_url})")

    async def close(self) -> None:
        await self.fees.stop()
        await self.rpc.close()
        self._started = False
        logger.info("Forge context closed")

    def rpc_wallet(self, address: str) -> RpcWallet:
        """A wallet backed by a node-managed account on the configured RPC."""
        return RpcWallet(self.rpc, address)

    def new_transfer(
        self,
        wallet: Wallet,
        on_transition: Optional[TransitionCallback] = None,
    ) -> TransferOrchestrator:
        """A fresh orchestrator for ``wallet`` sharing this context's RPC and fees."""
        return TransferOrchestrator(
            wallet,
            self.rpc,
            retry_options=rpc_retry_options(**self.settings.rpc_retry_overrides()),
            on_transition=on_transition,
            receipt_timeout=self.settings.receipt_timeout_seconds,
            receipt_poll_interval=self.settings.receipt_poll_interval_seconds,
            fee_estimator=self.fees,
        )

    def new_token_creation(
        self,
        wallet: Wallet,
        on_transition: Optional[TransitionCallback] = None,
    ) -> TokenCreationOrchestrator:
        """A creation orchestrator targeting the configured chain and factory."""
        return TokenCreationOrchestrator(
            wallet,
            self.rpc,
            chain_id=self.settings.chain_id,
            factory_address=self.settings.token_factory_address,
            creation_fee_wei=self.settings.creation_fee_wei,
            retry_options=rpc_retry_options(**self.settings.rpc_retry_overrides()),
            on_transition=on_transition,
            receipt_timeout=self.settings.receipt_timeout_seconds,
            receipt_poll_interval=self.settings.receipt_poll_interval_seconds,
            fee_estimator=self.fees,
        )
