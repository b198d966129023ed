from fastapi import APIRouter, Depends, HTTPException

from ..context import ForgeContext
from ..core.amounts import parse_amount
from ..core.errors import TxBuildError
from ..core.fees import GAS_ESTIMATES
from ..core.tx_builder import build_create, estimate_tx_data_size
from ..core.validation import TokenFormParams, ValidationResult, validate_token_params
from ..types import (
    CreateTxResponse,
    FieldIssueModel,
    TokenParamsRequest,
    TxRequestModel,
    ValidationResponse,
)
from .deps import get_context

router = APIRouter(prefix="/tokens")


def _validation_response(result: ValidationResult) -> ValidationResponse:
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=[FieldIssueModel(field=i.field, message=i.message) for i in result.errors],
        warnings=[FieldIssueModel(field=i.field, message=i.message) for i in result.warnings],
    )


def _params(req: TokenParamsRequest) -> TokenFormParams:
    return TokenFormParams(name=req.name, symbol=req.symbol, decimals=req.decimals, supply=req.supply)


@router.post("/validate", response_model=ValidationResponse)
async def validate_token(req: TokenParamsRequest) -> ValidationResponse:
    return _validation_response(validate_token_params(_params(req)))


@router.post("/create-tx", response_model=CreateTxResponse)
async def create_token_tx(
    req: TokenParamsRequest,
    ctx: ForgeContext = Depends(get_context),
) -> CreateTxResponse:
    """Validate the form and return the unsigned createToken transaction."""
    params = _params(req)
    result = validate_token_params(params)
    if not result.is_valid:
        raise HTTPException(status_code=422, detail=_validation_response(result).model_dump())

    decimals = int(params.decimals)
    supply_units = parse_amount(params.supply, decimals, field="supply")
    try:
        tx = build_create(
            params.name.strip(),
            params.symbol.strip(),
            decimals,
            supply_units,
            ctx.settings.creation_fee_wei,
            factory_address=ctx.settings.token_factory_address,
        )
    except TxBuildError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CreateTxResponse(
        tx=TxRequestModel(**tx.to_dict()),
        warnings=[FieldIssueModel(field=i.field, message=i.message) for i in result.warnings],
        supply_units=str(supply_units),
        creation_fee_wei=str(ctx.settings.creation_fee_wei),
        data_size_bytes=estimate_tx_data_size(tx.data),
        estimated_gas_units=GAS_ESTIMATES["token_creation"],
    )
