"""
Tests for token and transfer parameter validation.
"""

import pytest

from tokenforge.core.errors import ValidationError
from tokenforge.core.validation import (
    TokenFormParams,
    TransferParams,
    ensure_valid,
    validate_token_params,
    validate_transfer_params,
)

TOKEN = "0x" + "a" * 40
RECIPIENT = "0x" + "b" * 40


def _params(**overrides) -> TokenFormParams:
    values = dict(name="My Token", symbol="MTK", decimals=18, supply="1000000")
    values.update(overrides)
    return TokenFormParams(**values)


# =============================================================================
# Token Params
# =============================================================================

class TestValidTokenParams:
    """A well-formed form passes cleanly."""

    def test_valid_params_have_no_errors_or_warnings(self):
        result = validate_token_params(_params())

        assert result.is_valid is True
        assert result.errors == ()
        assert result.warnings == ()

    @pytest.mark.parametrize("decimals", [0, 6, 8, 18])
    def test_standard_decimals_accepted_without_warning(self, decimals):
        result = validate_token_params(_params(decimals=decimals, supply="100"))
        assert result.is_valid
        assert result.warnings_for("decimals") == []

    def test_validator_does_not_mutate_input(self):
        params = _params(name="  Padded  ")
        before = TokenFormParams(**params.__dict__)

        validate_token_params(params)

        assert params == before


class TestSingleFieldCorruption:
    """Exactly the corrupted field reports an error."""

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"symbol": "eth😀"}, "symbol"),
            ({"name": ""}, "name"),
            ({"name": "Bad$Name"}, "name"),
            ({"decimals": 19}, "decimals"),
            ({"supply": "abc"}, "supply"),
            ({"supply": "0"}, "supply"),
        ],
    )
    def test_only_corrupted_field_has_error(self, overrides, field):
        result = validate_token_params(_params(**overrides))

        assert result.is_valid is False
        assert result.error_fields == [field]

    def test_all_fields_checked_independently(self):
        result = validate_token_params(
            TokenFormParams(name="", symbol="x", decimals=-1, supply="-5")
        )

        assert result.error_fields == ["decimals", "name", "supply", "symbol"]


class TestNameRules:
    def test_name_too_long(self):
        result = validate_token_params(_params(name="A" * 65))
        assert result.errors_for("name") == ["Token name must be 64 characters or less"]

    def test_name_at_max_length_is_valid(self):
        assert validate_token_params(_params(name="A" * 64)).is_valid

    def test_whitespace_only_name_is_required_error(self):
        result = validate_token_params(_params(name="   "))
        assert result.errors_for("name") == ["Token name is required"]

    @pytest.mark.parametrize("name", ["Bitcoin", "ETHEREUM", "base"])
    def test_well_known_name_is_warning_only(self, name):
        result = validate_token_params(_params(name=name))

        assert result.is_valid
        assert len(result.warnings_for("name")) == 1

    def test_allowed_punctuation(self):
        assert validate_token_params(_params(name="My-Token_v2.0")).is_valid


class TestSymbolRules:
    @pytest.mark.parametrize("symbol", ["A", "ABCDEFGHIJKL"])
    def test_symbol_length_bounds(self, symbol):
        result = validate_token_params(_params(symbol=symbol))
        assert result.error_fields == ["symbol"]

    def test_lowercase_symbol_is_rejected_not_uppercased(self):
        result = validate_token_params(_params(symbol="mtk"))
        assert result.errors_for("symbol") == [
            "Token symbol can only contain uppercase letters and numbers"
        ]

    def test_reserved_symbol_is_warning(self):
        result = validate_token_params(_params(symbol="USDC"))

        assert result.is_valid
        assert result.warnings_for("symbol")

    def test_digits_allowed(self):
        assert validate_token_params(_params(symbol="T0K3N")).is_valid


class TestDecimalsRules:
    @pytest.mark.parametrize("decimals", [True, 18.5, "18", None, -1, 19])
    def test_invalid_decimals(self, decimals):
        result = validate_token_params(_params(decimals=decimals))
        assert result.error_fields == ["decimals"]

    def test_non_standard_decimals_warn(self):
        result = validate_token_params(_params(decimals=9))

        assert result.is_valid
        assert result.warnings_for("decimals")

    def test_integral_float_is_accepted(self):
        assert validate_token_params(_params(decimals=18.0)).is_valid


class TestSupplyRules:
    def test_fraction_beyond_decimals_rejected(self):
        result = validate_token_params(_params(decimals=0, supply="1.5"))
        assert result.errors_for("supply") == ["Supply cannot have more than 0 decimal places"]

    def test_fraction_within_decimals_accepted(self):
        assert validate_token_params(_params(decimals=6, supply="1.000001")).is_valid

    def test_trailing_zeros_do_not_count_as_precision(self):
        assert validate_token_params(_params(decimals=0, supply="10.000")).is_valid

    def test_invalid_decimals_skip_scale_check(self):
        result = validate_token_params(_params(decimals=19, supply="1.123456789012345678901"))
        assert result.error_fields == ["decimals"]

    def test_supply_over_uint256_rejected(self):
        result = validate_token_params(_params(supply="1" + "0" * 70))
        assert result.errors_for("supply") == ["Supply is too large to represent on-chain"]

    def test_thousands_of_digits_is_a_field_error(self):
        result = validate_token_params(_params(supply="9" * 5000))
        assert result.errors_for("supply") == ["Supply is too large to represent on-chain"]

    def test_leading_zeros_do_not_count_toward_size(self):
        assert validate_token_params(_params(supply="0" * 5000 + "1")).is_valid

    @pytest.mark.parametrize("supply", ["\u0661\u0660", "\uff11\uff10", "1.\u0665"])
    def test_non_ascii_digits_rejected(self, supply):
        result = validate_token_params(_params(supply=supply))
        assert result.errors_for("supply") == ["Supply must be a valid number"]

    def test_very_large_supply_warns(self):
        result = validate_token_params(_params(supply="1000000000000000"))

        assert result.is_valid
        assert result.warnings_for("supply")

    @pytest.mark.parametrize("supply", ["-1", "1e6", "1,000", ".5", "1."])
    def test_bad_formats(self, supply):
        result = validate_token_params(_params(supply=supply))
        assert result.error_fields == ["supply"]


# =============================================================================
# Transfer Params
# =============================================================================

class TestTransferParams:
    def test_valid_transfer(self):
        result = validate_transfer_params(TransferParams(TOKEN, RECIPIENT, "10"))
        assert result.is_valid

    def test_zero_address_recipient_rejected(self):
        result = validate_transfer_params(
            TransferParams(TOKEN, "0x0000000000000000000000000000000000000000", "10")
        )
        assert result.error_fields == ["recipient_address"]

    def test_malformed_token_address(self):
        result = validate_transfer_params(TransferParams("0x1234", RECIPIENT, "10"))
        assert result.error_fields == ["token_address"]

    def test_bad_checksum_rejected(self):
        # Mixed case with a wrong checksum
        bad = "0x" + "aB" * 20
        result = validate_transfer_params(TransferParams(TOKEN, bad, "10"))
        assert "recipient_address" in result.error_fields

    def test_amount_precision_checked_against_decimals(self):
        result = validate_transfer_params(TransferParams(TOKEN, RECIPIENT, "0.0000001", decimals=6))
        assert result.error_fields == ["amount"]

    def test_zero_amount_rejected(self):
        result = validate_transfer_params(TransferParams(TOKEN, RECIPIENT, "0"))
        assert result.error_fields == ["amount"]

    def test_thousands_of_digits_is_a_field_error(self):
        result = validate_transfer_params(TransferParams(TOKEN, RECIPIENT, "9" * 5000))
        assert result.errors_for("amount") == ["Amount is too large to represent on-chain"]


class TestEnsureValid:
    def test_raises_with_all_issues(self):
        result = validate_token_params(TokenFormParams(name="", symbol="", decimals=18, supply="1"))

        with pytest.raises(ValidationError) as exc_info:
            ensure_valid(result)

        assert exc_info.value.field == "name"
        assert {issue.field for issue in exc_info.value.issues} == {"name", "symbol"}

    def test_returns_result_when_valid(self):
        result = validate_token_params(_params())
        assert ensure_valid(result) is result
