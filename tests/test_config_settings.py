from tokenforge.config import Settings
from tokenforge.core.constants import CREATION_FEE_WEI, TOKEN_FACTORY_ADDRESS


def test_defaults_target_base_mainnet(monkeypatch):
    """Defaults point at Base mainnet and the deployed factory."""

    for name in ("FORGE_RPC_URL", "FORGE_CHAIN_ID", "FORGE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.chain_id == 8453
    assert settings.rpc_url == "https://mainnet.base.org"
    assert settings.token_factory_address == TOKEN_FACTORY_ADDRESS
    assert settings.creation_fee_wei == CREATION_FEE_WEI
    assert settings.fee_refresh_interval_seconds == 15.0
    assert settings.is_mainnet is True


def test_env_prefix(monkeypatch):
    """FORGE_-prefixed environment variables override defaults."""

    monkeypatch.setenv("FORGE_RPC_URL", "https://sepolia.base.org")
    monkeypatch.setenv("FORGE_CHAIN_ID", "84532")
    monkeypatch.setenv("FORGE_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.rpc_url == "https://sepolia.base.org"
    assert settings.chain_id == 84532
    assert settings.log_level == "DEBUG"
    assert settings.is_mainnet is False


def test_retry_overrides(monkeypatch):
    """Retry knobs map onto rpc_retry_options keyword arguments."""

    monkeypatch.setenv("FORGE_RETRY_MAX_ATTEMPTS", "5")

    overrides = Settings(_env_file=None).rpc_retry_overrides()

    assert overrides == {
        "max_attempts": 5,
        "initial_delay": 0.5,
        "max_delay": 5.0,
        "backoff_multiplier": 2.0,
    }
