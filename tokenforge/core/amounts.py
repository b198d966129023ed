"""Conversions between human-readable decimal amounts and integer base units."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Union

from .errors import ValidationError

MAX_UINT256 = 2**256 - 1
# A whole part with more digits than this cannot fit in a uint256
MAX_UINT256_DIGITS = len(str(MAX_UINT256))
WEI_PER_ETH = 10**18
WEI_PER_GWEI = 10**9

_DECIMAL_RE = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def whole_digits(text: str) -> int:
    """Significant digits before the decimal point of a plain decimal string."""
    return len(text.partition(".")[0].lstrip("0"))


def parse_amount(amount: str, decimals: int = 18, field: str = "amount") -> int:
    """Scale a decimal string by ``10**decimals`` into integer base units.

    Raises ``ValidationError`` when the string is not a plain non-negative
    ASCII decimal, carries more fractional digits than ``decimals`` allows,
    or scales past uint256.
    """

    text = (amount or "").strip().replace(",", "")
    if not _DECIMAL_RE.match(text):
        raise ValidationError(f"'{amount}' is not a valid number", field=field)
    if whole_digits(text) > MAX_UINT256_DIGITS:
        raise ValidationError("Amount is too large to represent on-chain", field=field)

    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise ValidationError(
            f"Amount has more than {decimals} decimal places",
            field=field,
        )
    units = int(whole.lstrip("0") or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    if units > MAX_UINT256:
        raise ValidationError("Amount is too large to represent on-chain", field=field)
    return units


def format_units(units: int, decimals: int = 18) -> str:
    """Render integer base units as an exact decimal string without trailing zeros."""

    sign = "-" if units < 0 else ""
    whole, remainder = divmod(abs(units), 10**decimals)
    if decimals == 0 or remainder == 0:
        return f"{sign}{whole}"
    fraction = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction}"


def to_decimal(units: int, decimals: int = 18) -> Decimal:
    return Decimal(format_units(units, decimals))


def format_transfer_amount(amount_units: int, symbol: str, decimals: int = 18) -> str:
    """Format a transfer amount for confirmation screens.

    Uses thousands separators and keeps every significant digit so the
    displayed value parses back to exactly the amount being sent.
    """

    whole, _, fraction = format_units(amount_units, decimals).partition(".")
    negative = whole.startswith("-")
    grouped = f"{int(whole.lstrip('-')):,}"
    text = f"-{grouped}" if negative else grouped
    if fraction:
        text = f"{text}.{fraction}"
    return f"{text} {symbol}".rstrip()


def parse_display_amount(text: str) -> Decimal:
    """Read back a string produced by ``format_transfer_amount``."""

    number = text.strip().split(" ")[0].replace(",", "")
    try:
        return Decimal(number)
    except InvalidOperation as e:
        raise ValidationError(f"'{text}' is not a formatted amount", field="amount") from e


def format_compact(value: Union[int, float, Decimal, str]) -> str:
    """Abbreviate large numbers (1.2K, 3.4M, 5.6B, 7.8T) for badges and stats."""

    n = Decimal(str(value))
    for threshold, suffix in (
        (Decimal(10**12), "T"),
        (Decimal(10**9), "B"),
        (Decimal(10**6), "M"),
        (Decimal(10**3), "K"),
    ):
        if n >= threshold:
            scaled = (n / threshold).quantize(Decimal("0.1"), rounding=ROUND_DOWN)
            return f"{scaled}{suffix}"
    return f"{n.normalize():f}"


def format_eth(wei: int, display_decimals: int = 6) -> str:
    if wei == 0:
        return "0 ETH"
    eth = to_decimal(wei, 18)
    floor = Decimal(1).scaleb(-display_decimals)
    if eth < floor:
        return f"< {floor:f} ETH"
    rounded = eth.quantize(floor, rounding=ROUND_DOWN).normalize()
    return f"{rounded:,f} ETH"


def format_address(address: str, chars: int = 4) -> str:
    """Shorten an address for display (0x1234...5678)."""

    if not address:
        return ""
    if len(address) <= chars * 2 + 2:
        return address
    return f"{address[:chars + 2]}...{address[-chars:]}"


def format_tx_hash(tx_hash: str, chars: int = 6) -> str:
    return f"{tx_hash[:chars + 2]}...{tx_hash[-chars:]}"


__all__ = [
    "MAX_UINT256",
    "MAX_UINT256_DIGITS",
    "WEI_PER_ETH",
    "WEI_PER_GWEI",
    "whole_digits",
    "parse_amount",
    "format_units",
    "to_decimal",
    "format_transfer_amount",
    "parse_display_amount",
    "format_compact",
    "format_eth",
    "format_address",
    "format_tx_hash",
]
