"""Tests for the in-memory split ledger."""

from decimal import Decimal

import pytest

from src.models.transaction import CategoryRef
from src.splits.ledger import SplitLedger
from tests.factories import GROCERIES, make_split


def make_ledger(base="100.00", splits=(), on_change=None) -> SplitLedger:
    return SplitLedger(
        base_amount=Decimal(base),
        splits=splits,
        page_size=5,
        on_change=on_change,
    )


def ledger_with(count: int) -> SplitLedger:
    ledger = make_ledger()
    for _ in range(count):
        ledger.add_split("2024-05-01")
    return ledger


class TestAddSplit:

    def test_new_split_defaults(self):
        ledger = make_ledger()
        split = ledger.add_split("2024-05-01")

        assert split.id == -1
        assert split.amount == "0.00"
        assert split.description == ""
        assert split.subcategory == CategoryRef(id=0, name="")
        assert split.transaction_date == "2024-05-01"
        assert split.is_new

    def test_ids_decrease(self):
        ledger = ledger_with(3)
        assert [s.id for s in ledger.splits] == [-1, -2, -3]

    def test_jumps_to_last_page(self):
        ledger = ledger_with(6)
        assert ledger.page_count() == 2
        assert ledger.current_page == 2
        assert [s.id for s in ledger.page()] == [-6]

    def test_existing_splits_keep_their_ids(self):
        ledger = make_ledger(splits=[make_split(7, "10.00")])
        ledger.add_split("2024-05-01")
        assert [s.id for s in ledger.splits] == [7, -1]


class TestUpdateSplit:

    def test_merges_fields(self):
        ledger = ledger_with(2)
        assert ledger.update_split(-2, description="Toys", amount="12.00") is True

        updated = ledger.get_split(-2)
        assert updated.description == "Toys"
        assert updated.amount == "12.00"
        assert ledger.get_split(-1).description == ""

    def test_unknown_id_is_a_no_op(self):
        ledger = ledger_with(1)
        before = ledger.splits
        assert ledger.update_split(99, description="Toys") is False
        assert ledger.splits == before

    def test_empty_update_leaves_ledger_unchanged(self):
        ledger = make_ledger(splits=[make_split(2, "40.00")])
        before = ledger.splits
        ledger.update_split(2)
        assert ledger.splits == before

    def test_rejects_non_editable_fields(self):
        ledger = ledger_with(1)
        with pytest.raises(ValueError, match="not editable"):
            ledger.update_split(-1, id=5)

    def test_update_subcategory(self):
        ledger = ledger_with(1)
        ledger.update_subcategory(-1, GROCERIES)
        assert ledger.get_split(-1).subcategory == GROCERIES


class TestRemoveSplit:

    def test_removes_matching_split(self):
        ledger = ledger_with(3)
        assert ledger.remove_split(-2) is True
        assert [s.id for s in ledger.splits] == [-1, -3]

    def test_unknown_id_returns_false(self):
        ledger = ledger_with(1)
        assert ledger.remove_split(42) is False
        assert len(ledger) == 1

    def test_emptied_last_page_steps_back_one(self):
        ledger = ledger_with(6)
        assert ledger.current_page == 2

        ledger.remove_split(-6)
        assert ledger.current_page == 1

    def test_never_below_first_page(self):
        ledger = ledger_with(1)
        ledger.remove_split(-1)
        assert ledger.current_page == 1
        assert ledger.page_count() == 0

    def test_page_kept_when_not_emptied(self):
        ledger = ledger_with(7)
        ledger.remove_split(-7)
        assert ledger.current_page == 2


class TestPagination:

    def test_totals_use_every_page(self):
        ledger = ledger_with(6)
        for split in ledger.splits:
            ledger.update_split(split.id, amount="10.00")

        assert len(ledger.page()) == 1
        assert ledger.split_total() == Decimal("60.00")

    def test_go_to_page_clamps(self):
        ledger = ledger_with(6)
        assert ledger.go_to_page(0) == 1
        assert ledger.go_to_page(9) == 2

    def test_page_out_of_range_is_empty(self):
        ledger = ledger_with(2)
        assert ledger.page(3) == []
        assert ledger.page(0) == []


class TestChangeNotification:

    def test_every_mutation_notifies(self):
        calls = []
        ledger = make_ledger(on_change=calls.append)

        ledger.add_split("2024-05-01")
        ledger.update_split(-1, amount="5.00")
        ledger.update_subcategory(-1, GROCERIES)
        ledger.remove_split(-1)

        assert len(calls) == 4
        assert all(call is ledger for call in calls)

    def test_base_amount_never_changes(self):
        ledger = make_ledger(base="-250.00")
        ledger.add_split("2024-05-01")
        ledger.update_split(-1, amount="-300.00")
        ledger.remove_split(-1)
        assert ledger.base_amount == Decimal("-250.00")
