"""
Token Parameter Validation

Pure checks for token creation forms and transfer requests. Every field is
validated independently so one bad field never hides problems in another.
Errors block submission; warnings are informational.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from eth_utils import is_address

from .amounts import MAX_UINT256, MAX_UINT256_DIGITS, whole_digits
from .constants import (
    RESERVED_SYMBOLS,
    STANDARD_DECIMALS,
    WELL_KNOWN_NAMES,
    ZERO_ADDRESS,
)
from .errors import FieldIssue, ValidationError

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 64
NAME_PATTERN = re.compile(r"^[A-Za-z0-9\s\-_.]+$")

SYMBOL_MIN_LENGTH = 2
SYMBOL_MAX_LENGTH = 11
SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]+$")

DECIMALS_MIN = 0
DECIMALS_MAX = 18

SUPPLY_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")
LARGE_SUPPLY_THRESHOLD = Decimal(10**15)


@dataclass(frozen=True)
class TokenFormParams:
    """Raw token creation input as typed by the user."""

    name: str
    symbol: str
    decimals: Any
    supply: str


@dataclass(frozen=True)
class TransferParams:
    """A requested ERC-20 transfer, amount in human units."""

    token_address: str
    recipient_address: str
    amount: str
    decimals: int = 18


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a form."""

    errors: Tuple[FieldIssue, ...] = ()
    warnings: Tuple[FieldIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def errors_for(self, field_name: str) -> List[str]:
        return [issue.message for issue in self.errors if issue.field == field_name]

    def warnings_for(self, field_name: str) -> List[str]:
        return [issue.message for issue in self.warnings if issue.field == field_name]

    @property
    def error_fields(self) -> List[str]:
        return sorted({issue.field for issue in self.errors})

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "errors": [{"field": i.field, "message": i.message} for i in self.errors],
            "warnings": [{"field": i.field, "message": i.message} for i in self.warnings],
        }


@dataclass
class _Collector:
    errors: List[FieldIssue] = field(default_factory=list)
    warnings: List[FieldIssue] = field(default_factory=list)

    def error(self, field_name: str, message: str) -> None:
        self.errors.append(FieldIssue(field_name, message))

    def warn(self, field_name: str, message: str) -> None:
        self.warnings.append(FieldIssue(field_name, message))

    def result(self) -> ValidationResult:
        return ValidationResult(tuple(self.errors), tuple(self.warnings))


# =============================================================================
# Field checks
# =============================================================================

def _check_name(name: Any, out: _Collector) -> None:
    if not isinstance(name, str) or not name.strip():
        out.error("name", "Token name is required")
        return

    trimmed = name.strip()
    if len(trimmed) < NAME_MIN_LENGTH:
        out.error("name", "Token name is too short")
    elif len(trimmed) > NAME_MAX_LENGTH:
        out.error("name", f"Token name must be {NAME_MAX_LENGTH} characters or less")
    elif not NAME_PATTERN.match(trimmed):
        out.error(
            "name",
            "Token name can only contain letters, numbers, spaces, hyphens, underscores, and dots",
        )
    elif trimmed.lower() in WELL_KNOWN_NAMES:
        out.warn(
            "name",
            "This name is similar to a well-known cryptocurrency. Make sure this is intentional.",
        )


def _check_symbol(symbol: Any, out: _Collector) -> None:
    if not isinstance(symbol, str) or not symbol.strip():
        out.error("symbol", "Token symbol is required")
        return

    trimmed = symbol.strip()
    if len(trimmed) < SYMBOL_MIN_LENGTH:
        out.error("symbol", f"Token symbol must be at least {SYMBOL_MIN_LENGTH} characters")
    elif len(trimmed) > SYMBOL_MAX_LENGTH:
        out.error("symbol", f"Token symbol must be {SYMBOL_MAX_LENGTH} characters or less")
    elif not SYMBOL_PATTERN.match(trimmed):
        out.error("symbol", "Token symbol can only contain uppercase letters and numbers")
    elif trimmed in RESERVED_SYMBOLS:
        out.warn(
            "symbol",
            "This symbol is used by a well-known token. Consider using a unique symbol.",
        )


def _coerce_decimals(decimals: Any) -> Optional[int]:
    if isinstance(decimals, bool):
        return None
    if isinstance(decimals, int):
        return decimals
    if isinstance(decimals, float) and decimals.is_integer():
        return int(decimals)
    return None


def _check_decimals(decimals: Any, out: _Collector, warn_nonstandard: bool = True) -> Optional[int]:
    value = _coerce_decimals(decimals)
    if value is None:
        out.error("decimals", "Decimals must be a whole number")
        return None
    if value < DECIMALS_MIN or value > DECIMALS_MAX:
        out.error("decimals", f"Decimals must be between {DECIMALS_MIN} and {DECIMALS_MAX}")
        return None
    if warn_nonstandard and value not in STANDARD_DECIMALS:
        out.warn(
            "decimals",
            "Non-standard decimal value. Most tokens use 18, 8, 6, or 0 decimals.",
        )
    return value


def _scale(amount: str, decimals: int) -> Optional[int]:
    """Scale a validated decimal string, or None if precision would be lost."""
    whole, _, fraction = amount.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        return None
    return int(whole.lstrip("0") or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def _check_positive_amount(
    amount: Any,
    decimals: Optional[int],
    field_name: str,
    label: str,
    out: _Collector,
) -> Optional[Decimal]:
    if not isinstance(amount, str) or not amount.strip():
        out.error(field_name, f"{label} is required")
        return None

    trimmed = amount.strip()
    if not SUPPLY_PATTERN.match(trimmed):
        out.error(field_name, f"{label} must be a valid number")
        return None

    # Must precede any int() conversion
    if whole_digits(trimmed) > MAX_UINT256_DIGITS:
        out.error(field_name, f"{label} is too large to represent on-chain")
        return None

    value = Decimal(trimmed)
    if value <= 0:
        out.error(field_name, f"{label} must be greater than 0")
        return None

    if decimals is not None:
        units = _scale(trimmed, decimals)
        if units is None:
            out.error(field_name, f"{label} cannot have more than {decimals} decimal places")
            return None
        if units <= 0:
            out.error(field_name, f"{label} must be greater than 0")
            return None
        if units > MAX_UINT256:
            out.error(field_name, f"{label} is too large to represent on-chain")
            return None

    return value


def _check_supply(supply: Any, decimals: Optional[int], out: _Collector) -> None:
    value = _check_positive_amount(supply, decimals, "supply", "Supply", out)
    if value is not None and value >= LARGE_SUPPLY_THRESHOLD:
        out.warn("supply", "Very large supply (quadrillions). Consider if this is necessary.")


def _check_address(address: Any, field_name: str, label: str, out: _Collector) -> None:
    if not isinstance(address, str) or not address.strip():
        out.error(field_name, f"{label} is required")
    elif not is_address(address.strip()):
        out.error(field_name, f"{label} is not a valid address")


# =============================================================================
# Public API
# =============================================================================

def validate_token_params(params: TokenFormParams) -> ValidationResult:
    """Validate all token creation fields and collect errors and warnings."""

    out = _Collector()
    _check_name(params.name, out)
    _check_symbol(params.symbol, out)
    decimals = _check_decimals(params.decimals, out)
    _check_supply(params.supply, decimals, out)
    return out.result()


def validate_transfer_params(params: TransferParams) -> ValidationResult:
    """Validate a transfer request before any calldata is built."""

    out = _Collector()
    _check_address(params.token_address, "token_address", "Token address", out)
    _check_address(params.recipient_address, "recipient_address", "Recipient address", out)
    if (
        isinstance(params.recipient_address, str)
        and params.recipient_address.strip().lower() == ZERO_ADDRESS
    ):
        out.error("recipient_address", "Cannot transfer to the zero address")
    decimals = _check_decimals(params.decimals, out, warn_nonstandard=False)
    _check_positive_amount(params.amount, decimals, "amount", "Amount", out)
    return out.result()


def ensure_valid(result: ValidationResult) -> ValidationResult:
    """Raise ``ValidationError`` with every field issue if the result has errors."""

    if not result.is_valid:
        first = result.errors[0]
        raise ValidationError(first.message, field=first.field, issues=list(result.errors))
    return result


__all__ = [
    "TokenFormParams",
    "TransferParams",
    "ValidationResult",
    "validate_token_params",
    "validate_transfer_params",
    "ensure_valid",
]
