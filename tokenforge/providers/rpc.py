"""
Ethereum JSON-RPC client.

Thin async wrapper over ``httpx`` for the reads and writes the pipeline needs.
Transport and JSON-RPC failures are mapped onto the pipeline's error
taxonomy so callers can classify them for retry.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..core.errors import (
    NetworkError,
    RateLimitError,
    RpcError,
    RpcTimeoutError,
    OperationTimeoutError,
    SequencerUnavailableError,
    TransactionError,
    UserRejectedError,
)
from ..core.tx_builder import TxRequest, build_balance_of_call
from .base import Provider

logger = logging.getLogger(__name__)

USER_REJECTED_CODE = 4001
LIMIT_EXCEEDED_CODE = -32005
EXECUTION_REVERTED_CODE = 3


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


@dataclass(frozen=True)
class Block:
    """The subset of a block header the pipeline reads."""

    number: int
    timestamp: int
    base_fee_per_gas: Optional[int] = None
    hash: Optional[str] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "Block":
        return cls(
            number=_to_int(data.get("number")) or 0,
            timestamp=_to_int(data.get("timestamp")) or 0,
            base_fee_per_gas=_to_int(data.get("baseFeePerGas")),
            hash=data.get("hash"),
        )


@dataclass(frozen=True)
class Log:
    """An event log emitted by a transaction."""

    address: str
    topics: Tuple[str, ...]
    data: str = "0x"

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "Log":
        return cls(
            address=data.get("address") or "",
            topics=tuple(data.get("topics") or ()),
            data=data.get("data") or "0x",
        )


@dataclass(frozen=True)
class TransactionReceipt:
    """A mined transaction's receipt."""

    transaction_hash: str
    block_number: int
    gas_used: int
    status: bool
    effective_gas_price: Optional[int] = None
    contract_address: Optional[str] = None
    logs: Tuple[Log, ...] = ()

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "TransactionReceipt":
        return cls(
            transaction_hash=data["transactionHash"],
            block_number=_to_int(data.get("blockNumber")) or 0,
            gas_used=_to_int(data.get("gasUsed")) or 0,
            status=_to_int(data.get("status")) == 1,
            effective_gas_price=_to_int(data.get("effectiveGasPrice")),
            contract_address=data.get("contractAddress"),
            logs=tuple(Log.from_rpc(entry) for entry in data.get("logs") or ()),
        )


def map_rpc_error(method: str, error: Dict[str, Any]) -> Exception:
    """Translate a JSON-RPC ``error`` object into a pipeline exception."""
    code = error.get("code")
    message = str(error.get("message") or f"RPC error calling {method}")
    data = error.get("data")
    lower = message.lower()

    if code == USER_REJECTED_CODE or "user rejected" in lower or "user denied" in lower:
        return UserRejectedError(message)
    if code == LIMIT_EXCEEDED_CODE or "rate limit" in lower or "too many requests" in lower:
        return RateLimitError(message)
    if "sequencer" in lower:
        return SequencerUnavailableError(message)
    if code == EXECUTION_REVERTED_CODE or "revert" in lower:
        return TransactionError(message, reason=data if isinstance(data, str) else None)
    if "timeout" in lower or "timed out" in lower:
        return RpcTimeoutError(message)
    return RpcError(message, rpc_code=code, data=data)


class JsonRpcClient(Provider):
    """
    JSON-RPC client for an Ethereum-compatible node.

    Usage:
        async with JsonRpcClient("https://mainnet.base.org") as rpc:
            block = await rpc.get_latest_block()
    """

    name = "jsonrpc"

    def __init__(
        self,
        url: str,
        timeout_s: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout_s = timeout_s
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._owns_client = client is None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "JsonRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make a JSON-RPC call and return its ``result``."""
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        try:
            response = await self._client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise RpcTimeoutError(f"RPC {method} timed out") from e
        except httpx.TransportError as e:
            raise NetworkError(f"Network error calling {method}: {e}") from e

        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            raise RateLimitError(
                f"Rate limit exceeded calling {method}",
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code in (502, 503, 504):
            raise SequencerUnavailableError(
                f"{method} failed: HTTP {response.status_code} (sequencer temporarily unavailable)"
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RpcError(f"{method} failed: HTTP {response.status_code}") from e

        body = response.json()
        if body.get("error"):
            raise map_rpc_error(method, body["error"])
        return body.get("result")

    # ------------------------------------------------------------------ reads

    async def get_chain_id(self) -> int:
        return int(await self._rpc_call("eth_chainId", []), 16)

    async def get_block_number(self) -> int:
        return int(await self._rpc_call("eth_blockNumber", []), 16)

    async def get_latest_block(self) -> Block:
        data = await self._rpc_call("eth_getBlockByNumber", ["latest", False])
        if not data:
            raise RpcError("Latest block not available")
        return Block.from_rpc(data)

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        return await self._rpc_call("eth_call", [{"to": to, "data": data}, block])

    async def get_token_balance(self, token_address: str, owner: str) -> int:
        """Read ``balanceOf(owner)`` from an ERC-20 contract."""
        request = build_balance_of_call(token_address, owner)
        result = await self.call(request.to, request.data)
        return int(result, 16) if result and result != "0x" else 0

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        data = await self._rpc_call("eth_getTransactionReceipt", [tx_hash])
        return TransactionReceipt.from_rpc(data) if data else None

    async def wait_for_transaction_receipt(
        self,
        tx_hash: str,
        timeout: float = 120.0,
        poll_interval: float = 2.0,
    ) -> TransactionReceipt:
        """Poll until the receipt is available or ``timeout`` elapses."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            receipt = await self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if loop.time() + poll_interval > deadline:
                raise OperationTimeoutError(
                    f"Timed out waiting for receipt of {tx_hash}", timeout=timeout
                )
            await asyncio.sleep(poll_interval)

    # ----------------------------------------------------------------- writes

    async def send_transaction(self, tx: TxRequest, from_address: str) -> str:
        """Submit via ``eth_sendTransaction`` for a node-managed account."""
        payload = tx.to_dict()
        payload["from"] = from_address
        tx_hash = await self._rpc_call("eth_sendTransaction", [payload])
        logger.info(f"Broadcast transaction {tx_hash} to {tx.to}")
        return tx_hash

    # ----------------------------------------------------------------- health

    async def ready(self) -> bool:
        return bool(self.url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC URL not configured"}
        try:
            chain_id = await self.get_chain_id()
            return {"status": "healthy", "chain_id": chain_id}
        except Exception as e:
            return {"status": "error", "reason": str(e)}


__all__ = [
    "Block",
    "Log",
    "TransactionReceipt",
    "JsonRpcClient",
    "map_rpc_error",
]
