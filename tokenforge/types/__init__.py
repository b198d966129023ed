from .requests import GasCostRequest, TokenParamsRequest
from .responses import (
    CreateTxResponse,
    FeeEstimateModel,
    FeeStateResponse,
    FieldIssueModel,
    GasCostResponse,
    TxRequestModel,
    ValidationResponse,
)

__all__ = [
    "GasCostRequest",
    "TokenParamsRequest",
    "CreateTxResponse",
    "FeeEstimateModel",
    "FeeStateResponse",
    "FieldIssueModel",
    "GasCostResponse",
    "TxRequestModel",
    "ValidationResponse",
]
