from typing import Any, Optional
from pydantic import BaseModel, Field


class GasCostRequest(BaseModel):
    gas_units: Optional[int] = Field(default=None, ge=0, description="Raw gas units for the operation")
    operation: Optional[str] = Field(
        default=None,
        description="Named operation with a default gas estimate (e.g. transfer, token_creation)",
    )
    eth_price_usd: Optional[float] = Field(default=None, gt=0, description="ETH price for USD conversion")


class TokenParamsRequest(BaseModel):
    name: str = Field(default="", description="Token name")
    symbol: str = Field(default="", description="Token symbol")
    decimals: Any = Field(default=18, description="Token decimals (0-18)")
    supply: str = Field(default="", description="Initial supply in whole tokens")
