from .base import Provider
from .rpc import Block, JsonRpcClient, TransactionReceipt, map_rpc_error
from .wallet import RpcWallet, Wallet

__all__ = [
    "Provider",
    "Block",
    "JsonRpcClient",
    "TransactionReceipt",
    "map_rpc_error",
    "RpcWallet",
    "Wallet",
]
