from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..context import ForgeContext
from .deps import get_context

router = APIRouter()


@router.get("/healthz")
async def health_check(ctx: ForgeContext = Depends(get_context)) -> Dict[str, Any]:
    """Health check endpoint that verifies the RPC and fee estimator"""

    rpc_status = await ctx.rpc.health_check()

    chain_id = rpc_status.get("chain_id")
    if rpc_status["status"] == "healthy" and chain_id != ctx.settings.chain_id:
        rpc_status = {
            "status": "error",
            "reason": f"RPC chain id {chain_id} does not match expected {ctx.settings.chain_id}",
        }

    fee_state = ctx.fees.state
    fees_status = {
        "status": "healthy" if fee_state.has_data and not fee_state.error else "degraded",
        "has_estimate": fee_state.has_data,
        "is_stale": fee_state.is_stale,
    }

    return {
        "status": "healthy" if rpc_status["status"] == "healthy" else "degraded",
        "chain_id": ctx.settings.chain_id,
        "providers": {"rpc": rpc_status, "fees": fees_status},
    }
