from fastapi import APIRouter, Depends, HTTPException

from ..context import ForgeContext
from ..core.errors import error_text
from ..core.fees import GAS_ESTIMATES, FeeState, format_gas_price
from ..types import FeeEstimateModel, FeeStateResponse, GasCostRequest, GasCostResponse
from .deps import get_context

router = APIRouter(prefix="/fees")


def _state_response(state: FeeState) -> FeeStateResponse:
    estimate = None
    if state.estimate is not None:
        estimate = FeeEstimateModel(
            base_fee_wei=str(state.estimate.base_fee),
            priority_fee_wei=str(state.estimate.priority_fee),
            gas_price_wei=str(state.estimate.gas_price),
            gas_price_gwei=state.estimate.gas_price_gwei,
            formatted_gas_price=format_gas_price(state.estimate.gas_price),
            fetched_at=state.estimate.fetched_at,
        )
    return FeeStateResponse(
        estimate=estimate,
        error=error_text(state.error) if state.error else None,
        last_updated=state.last_updated,
        is_loading=state.is_loading,
        is_stale=state.is_stale,
    )


@router.get("", response_model=FeeStateResponse)
async def get_fees(ctx: ForgeContext = Depends(get_context)) -> FeeStateResponse:
    return _state_response(ctx.fees.state)


@router.post("/refresh", response_model=FeeStateResponse)
async def refresh_fees(ctx: ForgeContext = Depends(get_context)) -> FeeStateResponse:
    return _state_response(await ctx.fees.refresh())


@router.post("/cost", response_model=GasCostResponse)
async def estimate_cost(req: GasCostRequest, ctx: ForgeContext = Depends(get_context)) -> GasCostResponse:
    if req.gas_units is not None:
        gas_units = req.gas_units
    elif req.operation is not None:
        if req.operation not in GAS_ESTIMATES:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown operation '{req.operation}'. Known: {', '.join(sorted(GAS_ESTIMATES))}",
            )
        gas_units = GAS_ESTIMATES[req.operation]
    else:
        raise HTTPException(status_code=400, detail="Either gas_units or operation is required")

    cost = ctx.fees.calculate_cost(gas_units, eth_price_usd=req.eth_price_usd)
    return GasCostResponse(
        gas_units=cost.gas_units,
        total_gas=cost.total_gas,
        gas_price_wei=str(cost.gas_price),
        estimated_cost_wei=str(cost.estimated_cost_wei),
        estimated_cost_eth=str(cost.estimated_cost_eth),
        estimated_cost_usd=str(cost.estimated_cost_usd) if cost.estimated_cost_usd is not None else None,
    )
