"""
Tests for the TokenCreationOrchestrator.

Same setup as the transfer tests: mock wallet, mock RPC, short retry delays.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from eth_utils import to_checksum_address

from tokenforge.core.constants import CREATION_FEE_WEI, TOKEN_FACTORY_ADDRESS
from tokenforge.core.errors import (
    NetworkError,
    TransactionError,
    TransferInProgressError,
    UserRejectedError,
    ValidationError,
    WalletUnavailableError,
    WrongNetworkError,
)
from tokenforge.core.retry import rpc_retry_options, wallet_retry_options
from tokenforge.core.transfer import (
    TokenCreationOrchestrator,
    TransferStatus,
    created_token_address,
)
from tokenforge.core.tx_builder import TOKEN_CREATED_TOPIC, build_create
from tokenforge.core.validation import TokenFormParams
from tokenforge.providers.rpc import Log, TransactionReceipt

SENDER = "0x" + "c" * 40
NEW_TOKEN = to_checksum_address("0x" + "7" * 40)
TX_HASH = "0x" + "d" * 64


def _topic(address: str) -> str:
    return "0x" + "0" * 24 + address[2:].lower()


def _created_log(factory: str = TOKEN_FACTORY_ADDRESS, token: str = NEW_TOKEN) -> Log:
    return Log(
        address=factory.lower(),
        topics=(TOKEN_CREATED_TOPIC, _topic(token), _topic(SENDER)),
        data="0x",
    )


def _receipt(status: bool = True, logs=None, contract_address=None) -> TransactionReceipt:
    return TransactionReceipt(
        transaction_hash=TX_HASH,
        block_number=777,
        gas_used=2_400_000,
        status=status,
        contract_address=contract_address,
        logs=tuple(logs if logs is not None else [_created_log()]),
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def wallet() -> MagicMock:
    mock = MagicMock()
    mock.address = SENDER
    mock.send_transaction = AsyncMock(return_value=TX_HASH)
    return mock


@pytest.fixture
def rpc() -> AsyncMock:
    mock = AsyncMock()
    mock.get_chain_id.return_value = 8453
    mock.wait_for_transaction_receipt.return_value = _receipt()
    return mock


@pytest.fixture
def transitions() -> list:
    return []


@pytest.fixture
def creation(wallet, rpc, transitions) -> TokenCreationOrchestrator:
    return TokenCreationOrchestrator(
        wallet,
        rpc,
        retry_options=rpc_retry_options(initial_delay=0.001),
        wallet_retry_options=wallet_retry_options(initial_delay=0.001),
        on_transition=lambda prev, cur: transitions.append(cur.status),
        receipt_timeout=5.0,
        receipt_poll_interval=0.01,
    )


@pytest.fixture
def params() -> TokenFormParams:
    return TokenFormParams(name="My Token", symbol="MTK", decimals=18, supply="1000000")


# =============================================================================
# End to end
# =============================================================================

class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_creates_token_and_reports_address(self, creation, wallet, rpc, params, transitions):
        ok = await creation.create(params)

        assert ok is True
        assert transitions == [
            TransferStatus.PREPARING,
            TransferStatus.AWAITING_SIGNATURE,
            TransferStatus.PENDING,
            TransferStatus.SUCCESS,
        ]
        assert creation.result.hash == TX_HASH
        assert creation.result.token_address == NEW_TOKEN
        assert creation.result.block_number == 777
        assert creation.result.timestamp is not None
        wallet.send_transaction.assert_awaited_once_with(
            build_create("My Token", "MTK", 18, 10**24, CREATION_FEE_WEI)
        )
        rpc.wait_for_transaction_receipt.assert_awaited_once_with(
            TX_HASH, timeout=5.0, poll_interval=0.01
        )

    @pytest.mark.asyncio
    async def test_fee_sent_as_value(self, wallet, rpc, params):
        creation = TokenCreationOrchestrator(wallet, rpc, creation_fee_wei=123)

        await creation.create(params)

        sent = wallet.send_transaction.await_args.args[0]
        assert sent.value == 123
        assert sent.to == to_checksum_address(TOKEN_FACTORY_ADDRESS)

    @pytest.mark.asyncio
    async def test_receipt_retried_once(self, creation, rpc, params):
        rpc.wait_for_transaction_receipt.side_effect = [NetworkError(), _receipt()]

        assert await creation.create(params) is True
        assert rpc.wait_for_transaction_receipt.await_count == 2

    @pytest.mark.asyncio
    async def test_contract_address_fallback(self, creation, rpc, params):
        rpc.wait_for_transaction_receipt.return_value = _receipt(
            logs=[], contract_address=NEW_TOKEN.lower()
        )

        assert await creation.create(params) is True
        assert creation.result.token_address == NEW_TOKEN

    @pytest.mark.asyncio
    async def test_missing_address_still_succeeds(self, creation, rpc, params):
        rpc.wait_for_transaction_receipt.return_value = _receipt(logs=[])

        assert await creation.create(params) is True
        assert creation.result.token_address is None

    @pytest.mark.asyncio
    async def test_explorer_url(self, creation, params):
        assert creation.explorer_url is None

        await creation.create(params)

        assert creation.explorer_url == f"https://basescan.org/tx/{TX_HASH}"


# =============================================================================
# Failures
# =============================================================================

class TestFailures:
    @pytest.mark.asyncio
    async def test_wrong_chain_never_reaches_signature(self, creation, wallet, rpc, params, transitions):
        rpc.get_chain_id.return_value = 1

        ok = await creation.create(params)

        assert ok is False
        assert isinstance(creation.error, WrongNetworkError)
        assert creation.error.actual_chain_id == 1
        assert transitions == [TransferStatus.PREPARING, TransferStatus.ERROR]
        wallet.send_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_configured_chain_is_checked(self, wallet, rpc, params):
        rpc.get_chain_id.return_value = 84532
        creation = TokenCreationOrchestrator(wallet, rpc, chain_id=84532)

        assert await creation.create(params) is True

    @pytest.mark.asyncio
    async def test_disconnected_wallet(self, rpc, params):
        creation = TokenCreationOrchestrator(None, rpc)

        assert await creation.create(params) is False
        assert isinstance(creation.error, WalletUnavailableError)
        rpc.get_chain_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_form(self, creation, wallet):
        ok = await creation.create(TokenFormParams(name="", symbol="mtk", decimals=18, supply="0"))

        assert ok is False
        assert isinstance(creation.error, ValidationError)
        assert {issue.field for issue in creation.error.issues} == {"name", "symbol", "supply"}
        wallet.send_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_rejection(self, creation, wallet, params):
        wallet.send_transaction.side_effect = UserRejectedError()

        assert await creation.create(params) is False
        assert isinstance(creation.error, UserRejectedError)
        assert wallet.send_transaction.await_count == 1

    @pytest.mark.asyncio
    async def test_revert_keeps_hash(self, creation, rpc, params):
        rpc.wait_for_transaction_receipt.return_value = _receipt(status=False)

        assert await creation.create(params) is False
        assert isinstance(creation.error, TransactionError)
        assert creation.result.hash == TX_HASH
        assert creation.result.token_address is None


# =============================================================================
# Concurrency and reset
# =============================================================================

class TestGuardAndReset:
    @pytest.mark.asyncio
    async def test_concurrent_create_rejected(self, creation, wallet, params):
        release = asyncio.Event()

        async def slow_sign(tx):
            await release.wait()
            return TX_HASH

        wallet.send_transaction.side_effect = slow_sign

        first = asyncio.create_task(creation.create(params))
        await asyncio.sleep(0.01)
        assert creation.is_awaiting_signature

        with pytest.raises(TransferInProgressError):
            await creation.create(params)

        release.set()
        assert await first is True

    @pytest.mark.asyncio
    async def test_reset(self, creation, params):
        await creation.create(params)

        creation.reset()

        assert creation.status == TransferStatus.IDLE
        assert creation.result.token_address is None

    def test_cost_uses_creation_gas(self, wallet, rpc):
        fees = MagicMock()
        fees.calculate_cost.return_value = "cost"
        creation = TokenCreationOrchestrator(wallet, rpc, fee_estimator=fees)

        assert creation.estimated_cost() == "cost"
        fees.calculate_cost.assert_called_once_with(2_500_000, None)


# =============================================================================
# Log parsing
# =============================================================================

class TestCreatedTokenAddress:
    def test_reads_indexed_token_address(self):
        assert created_token_address([_created_log()], TOKEN_FACTORY_ADDRESS) == NEW_TOKEN

    def test_ignores_other_emitters(self):
        log = _created_log(factory="0x" + "9" * 40)
        assert created_token_address([log], TOKEN_FACTORY_ADDRESS) is None

    def test_ignores_other_events(self):
        log = Log(address=TOKEN_FACTORY_ADDRESS, topics=("0x" + "1" * 64, _topic(NEW_TOKEN)))
        assert created_token_address([log], TOKEN_FACTORY_ADDRESS) is None
