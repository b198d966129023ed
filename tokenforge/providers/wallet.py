"""Signing wallet boundary."""

from typing import Protocol, runtime_checkable

from eth_utils import is_address, to_checksum_address

from ..core.errors import WalletUnavailableError
from ..core.tx_builder import TxRequest
from .rpc import JsonRpcClient


@runtime_checkable
class Wallet(Protocol):
    """Anything that can sign and broadcast a transaction for one account."""

    @property
    def address(self) -> str:
        ...

    async def send_transaction(self, tx: TxRequest) -> str:
        """Ask the user to sign ``tx`` and broadcast it. Returns the tx hash."""
        ...


class RpcWallet:
    """Wallet backed by a node-managed account (``eth_sendTransaction``)."""

    def __init__(self, rpc: JsonRpcClient, address: str):
        if not address or not is_address(address):
            raise WalletUnavailableError(f"Invalid wallet address: {address!r}")
        self._rpc = rpc
        self._address = to_checksum_address(address)

    @property
    def address(self) -> str:
        return self._address

    async def send_transaction(self, tx: TxRequest) -> str:
        return await self._rpc.send_transaction(tx, self._address)
