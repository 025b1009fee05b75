"""
Commit payload construction.

The remote sync endpoint receives the full split set in one request. Splits
left out of the payload are deleted by the server, so the payload is always
built from every row in the ledger.
"""

from typing import Iterable

from src.models.transaction import SplitUpdate, Transaction, TransactionId


def to_split_update(split: Transaction) -> SplitUpdate:
    """New splits go without an id so the server assigns one."""
    return SplitUpdate(
        id=None if split.is_new else TransactionId(split.id),
        transaction_date=split.transaction_date,
        amount=split.amount,
        description=split.description,
        notes=split.notes,
        subcategory_id=split.subcategory.id,
    )


def build_commit_payload(splits: Iterable[Transaction]) -> list[SplitUpdate]:
    return [to_split_update(split) for split in splits]


def count_new_and_existing(items: Iterable[SplitUpdate]) -> tuple[int, int]:
    """(new, existing) split counts in a payload."""
    new = existing = 0
    for item in items:
        if item.id is None:
            new += 1
        else:
            existing += 1
    return new, existing
