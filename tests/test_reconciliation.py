"""Tests for base amount capture and remainder reconciliation."""

from decimal import Decimal

import pytest

from src.splits.reconciliation import (
    base_amount_at_load,
    exceeds_base_amount,
    reconcile,
)
from tests.factories import make_split, make_transaction


class TestBaseAmount:

    def test_original_plus_existing_splits(self):
        original = make_transaction(amount="60.00")
        splits = [make_split(2, "25.00"), make_split(3, "15.00")]
        assert base_amount_at_load(original, splits) == Decimal("100.00")

    def test_no_splits(self):
        assert base_amount_at_load(make_transaction(amount="-82.10"), []) == Decimal("-82.10")

    def test_invalid_original_amount_rejected(self):
        with pytest.raises(ValueError, match="invalid amount"):
            base_amount_at_load(make_transaction(amount="n/a"), [])


class TestExceedsBaseAmount:

    @pytest.mark.parametrize("total,base,expected", [
        ("150.00", "100.00", True),
        ("-150.00", "100.00", True),
        ("100.00", "100.00", False),
        ("100.00", "-100.00", False),
        ("0.00", "0.00", False),
    ])
    def test_compares_magnitudes(self, total, base, expected):
        assert exceeds_base_amount(Decimal(total), Decimal(base)) is expected


class TestReconcile:

    def test_remainder_shrinks_with_splits(self):
        result = reconcile(Decimal("100.00"), [make_split(-1, "40.00")])
        assert result.remaining_amount == "60.00"
        assert result.error_message is None
        assert result.split_total == Decimal("40.00")

    def test_empty_split_set_reconciles_to_base(self):
        result = reconcile(Decimal("100.00"), [])
        assert result.remaining_amount == "100.00"
        assert not result.is_over_allocated

    def test_debit_remainder_keeps_sign(self):
        result = reconcile(Decimal("-100.00"), [make_split(-1, "-30.00")])
        assert result.remaining_amount == "-70.00"

    def test_over_allocation_clamps_display(self):
        splits = [make_split(-1, "100.00"), make_split(-2, "50.00")]
        result = reconcile(Decimal("100.00"), splits)
        assert result.remaining_amount == "0.00"
        assert result.error_message == (
            "Total split amounts cannot exceed the original transaction amount of $100.00"
        )

    def test_fully_allocated_is_not_an_error(self):
        result = reconcile(Decimal("100.00"), [make_split(-1, "100.00")])
        assert result.remaining_amount == "0.00"
        assert result.error_message is None
