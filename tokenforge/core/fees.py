"""
Base L2 Fee Estimation.

Reads the latest base fee from JSON-RPC, adds a fixed priority fee suited to a
low-congestion L2, and converts gas-unit counts into ETH/USD cost.

The estimator publishes immutable ``FeeState`` snapshots. A failed refresh
keeps the last good estimate visible alongside the error (stale while
revalidate) instead of clearing it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Protocol

from .amounts import WEI_PER_GWEI, format_units, to_decimal
from .retry import RetryOptions, rpc_retry_options, with_retry

logger = logging.getLogger(__name__)

# L1 data availability overhead added to every estimate
L2_OVERHEAD = 2100

# 0.001 gwei
DEFAULT_PRIORITY_FEE = 1_000_000

DEFAULT_REFRESH_INTERVAL = 15.0

# Gas used on L1 per byte of calldata
L1_GAS_PER_BYTE = 16

# Typical gas units for common operations on Base
GAS_ESTIMATES: Dict[str, int] = {
    "token_creation": 2_500_000,
    "transfer": 65_000,
    "approve": 46_000,
    "transfer_from": 85_000,
    "burn": 40_000,
    "native_transfer": 21_000,
    "balance_of": 0,
}


class BlockSource(Protocol):
    async def get_latest_block(self): ...


@dataclass(frozen=True)
class FeeEstimate:
    """EIP-1559 fee components in wei."""

    base_fee: int
    priority_fee: int
    gas_price: int
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_base_fee(cls, base_fee: int, priority_fee: int = DEFAULT_PRIORITY_FEE) -> "FeeEstimate":
        if base_fee < 0 or priority_fee < 0:
            raise ValueError("fees must be non-negative")
        return cls(base_fee=base_fee, priority_fee=priority_fee, gas_price=base_fee + priority_fee)

    @property
    def base_fee_gwei(self) -> str:
        return format_units(self.base_fee, 9)

    @property
    def priority_fee_gwei(self) -> str:
        return format_units(self.priority_fee, 9)

    @property
    def gas_price_gwei(self) -> str:
        return format_units(self.gas_price, 9)


@dataclass(frozen=True)
class GasEstimation:
    """Cost of ``gas_units`` at a given gas price."""

    gas_units: int
    total_gas: int
    gas_price: int
    estimated_cost_wei: int
    estimated_cost_eth: Decimal
    # None means no ETH price was supplied; never a stand-in for zero
    estimated_cost_usd: Optional[Decimal] = None

    @property
    def formatted_usd(self) -> Optional[str]:
        if self.estimated_cost_usd is None:
            return None
        return f"${self.estimated_cost_usd:.4f}"


@dataclass(frozen=True)
class FeeState:
    """Snapshot of what the estimator currently knows."""

    estimate: Optional[FeeEstimate] = None
    error: Optional[BaseException] = None
    last_updated: Optional[datetime] = None
    is_loading: bool = False

    @property
    def has_data(self) -> bool:
        return self.estimate is not None

    @property
    def is_stale(self) -> bool:
        return self.estimate is not None and self.error is not None


@dataclass(frozen=True)
class L2Savings:
    savings_percent: Decimal
    savings_wei: int
    savings_eth: Decimal


# =============================================================================
# Pure helpers
# =============================================================================

def calculate_cost(
    estimate: Optional[FeeEstimate],
    gas_units: int,
    eth_price_usd: Optional[float] = None,
) -> GasEstimation:
    """Cost of ``gas_units`` plus the L2 overhead at the estimate's gas price."""
    if gas_units < 0:
        raise ValueError("gas_units must be non-negative")

    gas_price = estimate.gas_price if estimate else 0
    total_gas = gas_units + L2_OVERHEAD
    cost_wei = total_gas * gas_price
    cost_eth = to_decimal(cost_wei, 18)

    cost_usd = None
    if eth_price_usd is not None:
        cost_usd = (cost_eth * Decimal(str(eth_price_usd))).quantize(
            Decimal("0.0001"), rounding=ROUND_HALF_UP
        )

    return GasEstimation(
        gas_units=gas_units,
        total_gas=total_gas,
        gas_price=gas_price,
        estimated_cost_wei=cost_wei,
        estimated_cost_eth=cost_eth,
        estimated_cost_usd=cost_usd,
    )


def calculate_l2_savings(l2_gas_price: int, l1_gas_price: int, gas_units: int) -> L2Savings:
    """Compare the L2 cost of ``gas_units`` with the same work on L1."""
    l2_cost = l2_gas_price * gas_units
    l1_cost = l1_gas_price * gas_units
    if l1_cost == 0:
        return L2Savings(savings_percent=Decimal("0"), savings_wei=0, savings_eth=Decimal("0"))

    savings = l1_cost - l2_cost
    basis_points = (savings * 10000) // l1_cost
    return L2Savings(
        savings_percent=Decimal(basis_points) / 100,
        savings_wei=savings,
        savings_eth=to_decimal(savings, 18),
    )


def format_gas_price(gas_price_wei: int) -> str:
    gwei = to_decimal(gas_price_wei, 9)
    if gwei < Decimal("0.001"):
        return "< 0.001 Gwei"
    if gwei < 1:
        return f"{gwei.quantize(Decimal('0.0001'), rounding=ROUND_HALF_UP)} Gwei"
    return f"{gwei.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)} Gwei"


def estimate_l1_data_fee(data_bytes: int, l1_gas_price_gwei: float = 30) -> int:
    """Approximate wei charged for posting ``data_bytes`` of calldata to L1."""
    l1_gas_price = int(Decimal(str(l1_gas_price_gwei)) * WEI_PER_GWEI)
    return data_bytes * L1_GAS_PER_BYTE * l1_gas_price


def is_gas_price_reasonable(gas_price_gwei: float) -> bool:
    # Base gas should be very low, anything at or above 1 gwei is suspicious
    return gas_price_gwei < 1


def recommended_gas_settings() -> Dict[str, int]:
    return {
        "max_fee_per_gas": 10_000_000,  # 0.01 gwei
        "max_priority_fee_per_gas": 1_000_000,  # 0.001 gwei
    }


# =============================================================================
# Estimator
# =============================================================================

class FeeEstimator:
    """
    Keeps a current fee estimate for display.

    Usage:
        estimator = FeeEstimator(rpc)
        async with estimator:
            cost = estimator.calculate_cost(GAS_ESTIMATES["transfer"], eth_price_usd=2500)
    """

    def __init__(
        self,
        rpc: BlockSource,
        priority_fee_wei: int = DEFAULT_PRIORITY_FEE,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        retry_options: Optional[RetryOptions] = None,
    ):
        self._rpc = rpc
        self.priority_fee_wei = priority_fee_wei
        self.refresh_interval = refresh_interval
        self.retry_options = retry_options or rpc_retry_options()

        self._state = FeeState()
        self._seq = 0
        self._applied_seq = 0
        self._task: Optional[asyncio.Task] = None
        self._wake: Optional[asyncio.Event] = None

    async def __aenter__(self) -> "FeeEstimator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    @property
    def state(self) -> FeeState:
        return self._state

    @property
    def estimate(self) -> Optional[FeeEstimate]:
        return self._state.estimate

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fetch_fee_estimate(self) -> FeeEstimate:
        """Fetch a fresh estimate and publish it. Raises on failure."""
        self._seq += 1
        seq = self._seq
        self._publish(seq, is_loading=True)

        try:
            block = await with_retry(
                self._rpc.get_latest_block,
                self.retry_options,
                operation_name="fetch_base_fee",
            )
        except asyncio.CancelledError:
            self._settle(seq)
            raise
        except Exception as e:
            logger.warning(f"Fee refresh failed, keeping last estimate: {e}")
            self._publish(seq, error=e)
            raise

        estimate = FeeEstimate.from_base_fee(block.base_fee_per_gas or 0, self.priority_fee_wei)
        self._publish(seq, estimate=estimate)
        return estimate

    async def refresh(self) -> FeeState:
        """Manual refresh. Supersedes the scheduled one and restarts its timer."""
        if self._wake is not None:
            self._wake.set()
        try:
            await self.fetch_fee_estimate()
        except Exception:
            pass  # recorded in state
        return self._state

    def calculate_cost(self, gas_units: int, eth_price_usd: Optional[float] = None) -> GasEstimation:
        return calculate_cost(self._state.estimate, gas_units, eth_price_usd)

    async def start(self) -> None:
        """Start the background refresh loop."""
        if self.is_running or self.refresh_interval <= 0:
            return
        self._wake = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="fee-refresh")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._wake = None

    async def _run(self) -> None:
        while True:
            try:
                await self.fetch_fee_estimate()
            except Exception:
                pass  # recorded in state

            await self._sleep_until_due()

    async def _sleep_until_due(self) -> None:
        wake = self._wake
        while True:
            wake.clear()
            try:
                await asyncio.wait_for(wake.wait(), timeout=self.refresh_interval)
            except asyncio.TimeoutError:
                return
            # A manual refresh ran; the interval restarts from now

    def _settle(self, seq: int) -> None:
        """Clear the loading flag for a fetch that ended without a result."""
        if seq < self._applied_seq or seq < self._seq:
            return
        current = self._state
        self._state = FeeState(
            estimate=current.estimate,
            error=current.error,
            last_updated=current.last_updated,
        )

    def _publish(
        self,
        seq: int,
        estimate: Optional[FeeEstimate] = None,
        error: Optional[BaseException] = None,
        is_loading: bool = False,
    ) -> None:
        """Replace the snapshot, ignoring results from superseded fetches."""
        if seq < self._applied_seq:
            return
        current = self._state

        if is_loading:
            self._state = FeeState(
                estimate=current.estimate,
                error=current.error,
                last_updated=current.last_updated,
                is_loading=True,
            )
            return

        self._applied_seq = seq
        if estimate is not None:
            self._state = FeeState(
                estimate=estimate,
                error=None,
                last_updated=estimate.fetched_at,
                is_loading=seq < self._seq,
            )
        else:
            self._state = FeeState(
                estimate=current.estimate,
                error=error,
                last_updated=current.last_updated,
                is_loading=seq < self._seq,
            )


__all__ = [
    "L2_OVERHEAD",
    "DEFAULT_PRIORITY_FEE",
    "GAS_ESTIMATES",
    "FeeEstimate",
    "FeeState",
    "GasEstimation",
    "L2Savings",
    "FeeEstimator",
    "calculate_cost",
    "calculate_l2_savings",
    "format_gas_price",
    "estimate_l1_data_fee",
    "is_gas_price_reasonable",
    "recommended_gas_settings",
]
