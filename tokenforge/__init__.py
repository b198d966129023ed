"""Token Forge: ERC-20 token deployment and transfer pipeline for Base."""

__version__ = "0.1.0"
