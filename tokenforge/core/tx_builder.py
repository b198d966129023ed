"""
Transaction builder for the token factory and ERC-20 token calls.

Builders take already-validated, already-scaled integer arguments and return
an unsigned ``TxRequest``. They never touch the network and are
deterministic for identical inputs.
"""

from dataclasses import dataclass
from typing import Any, Dict

from eth_abi import encode
from eth_utils import (
    event_signature_to_log_topic,
    function_signature_to_4byte_selector,
    is_address,
    to_checksum_address,
)

from .amounts import MAX_UINT256
from .constants import TOKEN_FACTORY_ADDRESS
from .errors import InvalidAddressError, InvalidAmountError

CREATE_TOKEN_SIGNATURE = "createToken(string,string,uint8,uint256)"
ERC20_TRANSFER_SIGNATURE = "transfer(address,uint256)"
ERC20_APPROVE_SIGNATURE = "approve(address,uint256)"
ERC20_BURN_SIGNATURE = "burn(uint256)"
ERC20_BALANCE_OF_SIGNATURE = "balanceOf(address)"

CREATE_TOKEN_SELECTOR = function_signature_to_4byte_selector(CREATE_TOKEN_SIGNATURE)
ERC20_TRANSFER_SELECTOR = function_signature_to_4byte_selector(ERC20_TRANSFER_SIGNATURE)  # 0xa9059cbb
ERC20_APPROVE_SELECTOR = function_signature_to_4byte_selector(ERC20_APPROVE_SIGNATURE)  # 0x095ea7b3
ERC20_BURN_SELECTOR = function_signature_to_4byte_selector(ERC20_BURN_SIGNATURE)  # 0x42966c68
ERC20_BALANCE_OF_SELECTOR = function_signature_to_4byte_selector(ERC20_BALANCE_OF_SIGNATURE)  # 0x70a08231

# TokenCreated(address indexed tokenAddress, address indexed creator, string name,
#              string symbol, uint8 decimals, uint256 initialSupply)
TOKEN_CREATED_SIGNATURE = "TokenCreated(address,address,string,string,uint8,uint256)"
TOKEN_CREATED_TOPIC = "0x" + event_signature_to_log_topic(TOKEN_CREATED_SIGNATURE).hex()


@dataclass(frozen=True)
class TxRequest:
    """An unsigned transaction ready for a wallet to sign and broadcast."""

    to: str
    data: str
    value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-RPC transaction fields."""
        return {
            "to": self.to,
            "data": self.data,
            "value": hex(self.value),
        }


def _require_units(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{name} must be an integer number of base units, got {value!r}")
    if value < 0:
        raise InvalidAmountError(f"{name} must not be negative, got {value}")
    if value > MAX_UINT256:
        raise InvalidAmountError(f"{name} exceeds uint256")
    return value


def _require_address(address: Any, name: str) -> str:
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"{name} is not a valid address: {address!r}")
    return to_checksum_address(address)


def _calldata(selector: bytes, types: list, args: list) -> str:
    return "0x" + (selector + encode(types, args)).hex()


def build_create(
    name: str,
    symbol: str,
    decimals: int,
    supply_units: int,
    fee_wei: int,
    factory_address: str = TOKEN_FACTORY_ADDRESS,
) -> TxRequest:
    """Build ``createToken(name, symbol, decimals, initialSupply)`` on the factory.

    The creation fee is sent as the transaction value.
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 255:
        raise InvalidAmountError(f"decimals must fit in uint8, got {decimals!r}")
    supply_units = _require_units(supply_units, "supply_units")
    fee_wei = _require_units(fee_wei, "fee_wei")

    data = _calldata(
        CREATE_TOKEN_SELECTOR,
        ["string", "string", "uint8", "uint256"],
        [name, symbol, decimals, supply_units],
    )
    return TxRequest(
        to=_require_address(factory_address, "factory_address"),
        data=data,
        value=fee_wei,
    )


def build_transfer(token_address: str, to: str, amount_units: int) -> TxRequest:
    """Build ERC-20 ``transfer(to, amount)``."""
    amount_units = _require_units(amount_units, "amount_units")
    recipient = _require_address(to, "to")
    data = _calldata(ERC20_TRANSFER_SELECTOR, ["address", "uint256"], [recipient, amount_units])
    return TxRequest(to=_require_address(token_address, "token_address"), data=data, value=0)


def build_approve(token_address: str, spender: str, amount_units: int) -> TxRequest:
    """Build ERC-20 ``approve(spender, amount)``."""
    amount_units = _require_units(amount_units, "amount_units")
    spender = _require_address(spender, "spender")
    data = _calldata(ERC20_APPROVE_SELECTOR, ["address", "uint256"], [spender, amount_units])
    return TxRequest(to=_require_address(token_address, "token_address"), data=data, value=0)


def build_unlimited_approve(token_address: str, spender: str) -> TxRequest:
    return build_approve(token_address, spender, MAX_UINT256)


def build_burn(token_address: str, amount_units: int) -> TxRequest:
    """Build ``burn(amount)`` on a forge token."""
    amount_units = _require_units(amount_units, "amount_units")
    data = _calldata(ERC20_BURN_SELECTOR, ["uint256"], [amount_units])
    return TxRequest(to=_require_address(token_address, "token_address"), data=data, value=0)


def build_balance_of_call(token_address: str, owner: str) -> TxRequest:
    """Build the read-only ``balanceOf(owner)`` call for ``eth_call``."""
    owner = _require_address(owner, "owner")
    data = _calldata(ERC20_BALANCE_OF_SELECTOR, ["address"], [owner])
    return TxRequest(to=_require_address(token_address, "token_address"), data=data, value=0)


def estimate_tx_data_size(data: str) -> int:
    """Calldata size in bytes."""
    hex_data = data[2:] if data.startswith("0x") else data
    return len(hex_data) // 2


__all__ = [
    "TxRequest",
    "build_create",
    "build_transfer",
    "build_approve",
    "build_unlimited_approve",
    "build_burn",
    "build_balance_of_call",
    "estimate_tx_data_size",
    "CREATE_TOKEN_SELECTOR",
    "ERC20_TRANSFER_SELECTOR",
    "ERC20_APPROVE_SELECTOR",
    "ERC20_BURN_SELECTOR",
    "TOKEN_CREATED_TOPIC",
]
