from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class FeeEstimateModel(BaseModel):
    base_fee_wei: str = Field(description="Latest block base fee in wei")
    priority_fee_wei: str = Field(description="Priority fee in wei")
    gas_price_wei: str = Field(description="base fee + priority fee, in wei")
    gas_price_gwei: str = Field(description="Gas price in gwei")
    formatted_gas_price: str = Field(description="Human readable gas price")
    fetched_at: datetime = Field(description="When the estimate was fetched")


class FeeStateResponse(BaseModel):
    estimate: Optional[FeeEstimateModel] = Field(default=None, description="Last good estimate")
    error: Optional[str] = Field(default=None, description="Error from the latest refresh, if it failed")
    last_updated: Optional[datetime] = Field(default=None, description="When the estimate last changed")
    is_loading: bool = Field(default=False, description="A refresh is in flight")
    is_stale: bool = Field(default=False, description="Estimate is shown alongside a refresh error")


class GasCostResponse(BaseModel):
    gas_units: int = Field(description="Gas units requested")
    total_gas: int = Field(description="Gas units plus L2 overhead")
    gas_price_wei: str = Field(description="Gas price used for the estimate")
    estimated_cost_wei: str = Field(description="Total cost in wei")
    estimated_cost_eth: str = Field(description="Total cost in ETH")
    estimated_cost_usd: Optional[str] = Field(default=None, description="Total cost in USD when a price was given")


class FieldIssueModel(BaseModel):
    field: str = Field(description="Form field the issue applies to")
    message: str = Field(description="Human readable description")


class ValidationResponse(BaseModel):
    is_valid: bool = Field(description="True when there are no errors")
    errors: List[FieldIssueModel] = Field(default_factory=list, description="Blocking issues")
    warnings: List[FieldIssueModel] = Field(default_factory=list, description="Non-blocking issues")


class TxRequestModel(BaseModel):
    to: str = Field(description="Checksummed target address")
    data: str = Field(description="0x-prefixed calldata")
    value: str = Field(description="Hex encoded value in wei")


class CreateTxResponse(BaseModel):
    tx: TxRequestModel = Field(description="Unsigned createToken transaction")
    warnings: List[FieldIssueModel] = Field(default_factory=list, description="Non-blocking validation issues")
    supply_units: str = Field(description="Initial supply in base units")
    creation_fee_wei: str = Field(description="Fee sent as the transaction value")
    data_size_bytes: int = Field(description="Calldata size")
    estimated_gas_units: int = Field(description="Default gas estimate for token creation")
