"""
In-memory ledger of the splits of one transaction.

The ledger owns the split rows of a single editing session: adding, editing
and removing them, plus a page-by-page view for the editor table. It knows
nothing about the remote store.

IMPORTANT: Pagination is a view only. Totals and validation always see the
full split set, never the current page.
"""

import math
from decimal import Decimal
from typing import Callable, Iterable, Optional

import structlog

from src.models.transaction import (
    CategoryRef,
    NewSplitId,
    Transaction,
    empty_split,
)
from src.splits.amounts import sum_amounts

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 5

# Fields a user can change on a split row.
EDITABLE_FIELDS = frozenset({
    "transaction_date",
    "amount",
    "description",
    "notes",
    "subcategory",
})


class SplitLedger:
    """
    Ordered split rows for one original transaction.

    Every mutation calls the on_change listener afterwards, which is how the
    session keeps the original's remainder in step with the rows.
    """

    def __init__(
        self,
        base_amount: Decimal,
        splits: Iterable[Transaction] = (),
        page_size: int = DEFAULT_PAGE_SIZE,
        on_change: Optional[Callable[["SplitLedger"], None]] = None,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._base_amount = base_amount
        self._splits: list[Transaction] = list(splits)
        self._page_size = page_size
        self._next_new_id = -1
        self._current_page = 1
        self._on_change = on_change

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def base_amount(self) -> Decimal:
        return self._base_amount

    @property
    def splits(self) -> list[Transaction]:
        return list(self._splits)

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> int:
        return self._current_page

    def __len__(self) -> int:
        return len(self._splits)

    def get_split(self, split_id: int) -> Optional[Transaction]:
        for split in self._splits:
            if split.id == split_id:
                return split
        return None

    def split_total(self) -> Decimal:
        return sum_amounts(split.amount for split in self._splits)

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def page_count(self) -> int:
        return math.ceil(len(self._splits) / self._page_size)

    def page(self, number: Optional[int] = None) -> list[Transaction]:
        """Rows on the given page (default: the current page)."""
        number = self._current_page if number is None else number
        start = (number - 1) * self._page_size
        if start < 0:
            return []
        return self._splits[start:start + self._page_size]

    def go_to_page(self, number: int) -> int:
        """Move to a page, clamped to the valid range. Returns the new page."""
        self._current_page = max(1, min(number, self.page_count()))
        return self._current_page

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_split(self, original_date: str) -> Transaction:
        """Append a blank split and jump to the page that shows it."""
        split = empty_split(NewSplitId(self._next_new_id), original_date)
        self._splits.append(split)
        self._next_new_id -= 1
        self._current_page = self.page_count()

        logger.debug("split_added", split_id=split.id, split_count=len(self._splits))
        self._changed()
        return split

    def update_split(self, split_id: int, **fields) -> bool:
        """
        Merge fields into the split with the given id.

        Unknown ids are ignored. Returns True if a split was found.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields are not editable: {sorted(unknown)}")

        for index, split in enumerate(self._splits):
            if split.id == split_id:
                if fields:
                    self._splits[index] = split.model_copy(update=fields)
                    logger.debug("split_updated", split_id=split_id, fields=sorted(fields))
                self._changed()
                return True
        return False

    def update_subcategory(self, split_id: int, subcategory: CategoryRef) -> bool:
        """Change a split's subcategory. Same rules as update_split()."""
        return self.update_split(
            split_id,
            subcategory=CategoryRef(id=subcategory.id, name=subcategory.name),
        )

    def remove_split(self, split_id: int) -> bool:
        """Delete a split, stepping back a page if the current one emptied."""
        remaining = [split for split in self._splits if split.id != split_id]
        if len(remaining) == len(self._splits):
            return False

        self._splits = remaining
        pages = self.page_count()
        if self._current_page > pages:
            self._current_page = max(1, pages)

        logger.debug("split_removed", split_id=split_id, split_count=len(self._splits))
        self._changed()
        return True

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)
