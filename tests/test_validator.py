"""Tests for the split validation pipeline."""

from decimal import Decimal

import pytest

from src.models.transaction import CategoryRef
from src.validation import SplitValidator
from tests.factories import make_split

BASE = Decimal("100.00")


@pytest.fixture
def validator():
    return SplitValidator(min_description_length=3)


class TestPipeline:

    def test_valid_splits_pass(self, validator):
        splits = [make_split(-1, "40.00"), make_split(-2, "60.00")]
        result = validator.validate(splits, BASE)
        assert result.is_valid
        assert result.issue is None

    def test_empty_split_set_is_valid(self, validator):
        assert validator.validate([], BASE).is_valid

    def test_invalid_date(self, validator):
        result = validator.validate([make_split(-1, "10.00", transaction_date="2024-13-01")], BASE)
        assert result.error_message == "All splits must have a valid date"
        assert result.issue.split_id == -1

    def test_missing_date(self, validator):
        result = validator.validate([make_split(-1, "10.00", transaction_date="")], BASE)
        assert result.error_message == "All splits must have a valid date"

    def test_short_description(self, validator):
        result = validator.validate([make_split(-1, "10.00", description="ab")], BASE)
        assert result.error_message == (
            "All splits must have a description with at least 3 characters"
        )

    def test_description_is_trimmed_before_counting(self, validator):
        result = validator.validate([make_split(-1, "10.00", description="  ab  ")], BASE)
        assert result.issue.field == "description"

    def test_missing_subcategory(self, validator):
        result = validator.validate([make_split(-1, "10.00", subcategory=CategoryRef())], BASE)
        assert result.error_message == "All splits must have a subcategory"

    @pytest.mark.parametrize("amount", ["0.00", "", "abc"])
    def test_zero_or_unparsable_amount(self, validator, amount):
        result = validator.validate([make_split(-1, amount)], BASE)
        assert result.error_message == "Splits must have a non-zero amount"

    def test_over_allocation(self, validator):
        splits = [make_split(-1, "70.00"), make_split(-2, "40.00")]
        result = validator.validate(splits, BASE)
        assert result.error_message == (
            "Total split amounts cannot exceed the original transaction amount of $100.00"
        )
        assert result.issue.split_id is None

    def test_over_allocation_uses_magnitude(self, validator):
        result = validator.validate([make_split(-1, "-150.00")], BASE)
        assert result.issue.issue_type == "over_allocated"

    def test_total_equal_to_base_passes(self, validator):
        assert validator.validate([make_split(-1, "-100.00")], Decimal("-100.00")).is_valid

    def test_stops_at_first_failing_check(self, validator):
        split = make_split(
            -1,
            "0.00",
            transaction_date="",
            description="",
            subcategory=CategoryRef(),
        )
        result = validator.validate([split], BASE)
        assert result.issue.field == "transaction_date"

    def test_checks_run_in_order(self, validator):
        names = [check.__name__ for check in validator.checks]
        assert names == [
            "_check_dates",
            "_check_descriptions",
            "_check_subcategories",
            "_check_amounts",
            "_check_total",
        ]

    def test_later_splits_are_checked(self, validator):
        splits = [make_split(-1, "10.00"), make_split(-2, "10.00", description="x")]
        result = validator.validate(splits, BASE)
        assert result.issue.split_id == -2


class TestMinimumLength:

    def test_override(self):
        validator = SplitValidator(min_description_length=6)
        result = validator.validate([make_split(-1, "10.00", description="Soap")], BASE)
        assert "at least 6 characters" in result.error_message

    def test_default_from_settings(self):
        validator = SplitValidator()
        assert validator.validate([make_split(-1, "10.00", description="Tea")], BASE).is_valid
        assert not validator.validate([make_split(-1, "10.00", description="Te")], BASE).is_valid


class TestFieldErrors:

    def test_clean_split_has_no_errors(self, validator):
        assert validator.field_errors(make_split(-1, "10.00")) == {}

    def test_blank_split(self, validator):
        split = make_split(-1, "0.00", transaction_date="", description="", subcategory=CategoryRef())
        assert validator.field_errors(split) == {
            "transaction_date": "Transaction date is required",
            "description": "Description must be at least 3 characters",
            "subcategory": "Category selection required",
            "amount": "Enter a valid, non-zero amount",
        }

    def test_malformed_date(self, validator):
        errors = validator.field_errors(make_split(-1, "10.00", transaction_date="yesterday"))
        assert errors == {"transaction_date": "Invalid date format"}
