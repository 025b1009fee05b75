"""Tests for the in-memory transaction store."""

import asyncio

import pytest

from src.models.transaction import SplitUpdate
from src.services.storage import CommitError, NotFoundError
from tests.factories import make_split, make_store


def update(split_id=None, amount="10.00", subcategory_id=11, **fields) -> SplitUpdate:
    return SplitUpdate(
        id=split_id,
        transaction_date=fields.pop("transaction_date", "2024-05-01"),
        amount=amount,
        description=fields.pop("description", "Dish soap"),
        subcategory_id=subcategory_id,
        **fields,
    )


class TestCommit:

    def test_category_derived_from_subcategory(self):
        store = make_store()
        result = asyncio.run(store.commit_splits(1, [update(subcategory_id=12)]))

        split = result.splits[0]
        assert split.subcategory.name == "Restaurants"
        assert split.category.name == "Food"
        assert split.account_id == "acct-1"

    def test_rejected_commit_changes_nothing(self):
        store = make_store(amount="60.00", splits=[make_split(2, "40.00")])
        items = [update(2, amount="40.00"), update(amount="70.00")]

        with pytest.raises(CommitError, match="cannot exceed"):
            asyncio.run(store.commit_splits(1, items))

        assert store.get(1).amount == "60.00"
        assert store.get(2).amount == "40.00"
        assert store.commit_count == 0

    def test_unknown_split_id(self):
        store = make_store()
        with pytest.raises(CommitError, match="does not belong"):
            asyncio.run(store.commit_splits(1, [update(42)]))

    def test_unknown_subcategory(self):
        store = make_store()
        with pytest.raises(CommitError, match="Unknown subcategory"):
            asyncio.run(store.commit_splits(1, [update(subcategory_id=99)]))

    def test_amounts_normalized(self):
        store = make_store()
        result = asyncio.run(store.commit_splits(1, [update(amount="12.5")]))
        assert result.splits[0].amount == "12.50"
        assert result.original.amount == "87.50"


class TestFetch:

    def test_unknown_transaction(self):
        with pytest.raises(NotFoundError):
            asyncio.run(make_store().fetch_split_data(7))

    def test_returned_records_are_copies(self):
        store = make_store()
        data = asyncio.run(store.fetch_split_data(1))
        data.original.description = "changed"
        assert store.get(1).description == "WAREHOUSE CLUB #0412"

    def test_categories(self):
        categories = asyncio.run(make_store().fetch_categories())
        assert [s.name for s in categories[0].subcategories] == ["Groceries", "Restaurants"]
