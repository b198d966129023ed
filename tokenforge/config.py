from pathlib import Path
from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.constants import BASE_CHAIN_ID, BASE_RPC_URL, CREATION_FEE_WEI, TOKEN_FACTORY_ADDRESS
from .core.fees import DEFAULT_PRIORITY_FEE


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        env_prefix="FORGE_",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Chain
    rpc_url: str = Field(default=BASE_RPC_URL, description="Base JSON-RPC endpoint")
    chain_id: int = Field(default=BASE_CHAIN_ID, description="Expected chain id")
    token_factory_address: str = Field(
        default=TOKEN_FACTORY_ADDRESS,
        description="Token factory contract that deploys new ERC-20s",
    )
    creation_fee_wei: int = Field(
        default=CREATION_FEE_WEI,
        ge=0,
        description="Fee sent with createToken (0.00015 ETH)",
    )

    # Fees
    fee_refresh_interval_seconds: float = Field(
        default=15.0,
        description="Background base fee refresh interval; 0 disables it",
    )
    priority_fee_wei: int = Field(
        default=DEFAULT_PRIORITY_FEE,
        ge=0,
        description="Priority fee added to the base fee (0.001 gwei)",
    )

    # Timeouts
    rpc_timeout_seconds: float = Field(default=10.0, gt=0, description="Per-request RPC timeout")
    receipt_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="How long to wait for a transaction receipt",
    )
    receipt_poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Seconds between receipt polls",
    )

    # Retry
    retry_max_attempts: int = Field(default=3, ge=1, description="Attempts for RPC reads")
    retry_initial_delay_seconds: float = Field(default=0.5, ge=0, description="First backoff delay")
    retry_max_delay_seconds: float = Field(default=5.0, ge=0, description="Backoff delay cap")
    retry_backoff_multiplier: float = Field(default=2.0, ge=1, description="Backoff growth factor")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_mainnet(self) -> bool:
        return self.chain_id == BASE_CHAIN_ID

    def rpc_retry_overrides(self) -> Dict[str, Any]:
        """Retry knobs as keyword arguments for ``rpc_retry_options``."""
        return {
            "max_attempts": self.retry_max_attempts,
            "initial_delay": self.retry_initial_delay_seconds,
            "max_delay": self.retry_max_delay_seconds,
            "backoff_multiplier": self.retry_backoff_multiplier,
        }


# Global settings instance
settings = Settings()
