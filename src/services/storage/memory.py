"""
In-Memory Storage Implementation

Behaves like the transactions API's sync endpoint: a commit is validated in
full before anything is applied, ids are assigned to new splits, splits left
out of the payload are deleted, and the original's amount is recomputed.

Used by the test suite and by the editor's demo mode.
"""

from typing import Iterable
from uuid import UUID

from src.models.audit import AuditEvent
from src.models.transaction import (
    Category,
    CategoryRef,
    SplitUpdate,
    Transaction,
    TransactionId,
    TransactionSplit,
)
from src.services.storage.interface import (
    AuditStorageInterface,
    CommitError,
    NotFoundError,
    TransactionSplitStoreInterface,
)
from src.splits.amounts import normalize, parse_amount, sum_amounts
from src.splits.reconciliation import (
    base_amount_at_load,
    exceeds_base_amount,
    over_allocation_message,
)


class InMemoryTransactionSplitStore(TransactionSplitStoreInterface):
    """
    Transaction store held in a dict.

    Records are copied on the way in and out so callers can never mutate
    stored state directly.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        categories: Iterable[Category] = (),
    ):
        self._transactions: dict[int, Transaction] = {
            t.id: t.model_copy(deep=True) for t in transactions
        }
        self._categories = [c.model_copy(deep=True) for c in categories]
        self._next_id = max(self._transactions, default=0) + 1
        self.commit_count = 0

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def get(self, transaction_id: int) -> Transaction:
        """Stored copy of a transaction."""
        if transaction_id not in self._transactions:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return self._transactions[transaction_id].model_copy(deep=True)

    def _splits_of(self, transaction_id: int) -> list[Transaction]:
        return sorted(
            (t for t in self._transactions.values() if t.split_from_id == transaction_id),
            key=lambda t: t.id,
        )

    def _resolve_subcategory(self, subcategory_id: int) -> tuple[CategoryRef, CategoryRef]:
        """(category, subcategory) for a subcategory id."""
        if not self._categories:
            return CategoryRef(), CategoryRef(id=subcategory_id)
        for category in self._categories:
            for subcategory in category.subcategories:
                if subcategory.id == subcategory_id:
                    return (
                        CategoryRef(id=category.id, name=category.name),
                        CategoryRef(id=subcategory.id, name=subcategory.name),
                    )
        raise CommitError(f"Unknown subcategory: {subcategory_id}")

    def _check_commit(
        self,
        transaction_id: int,
        original: Transaction,
        existing: dict[int, Transaction],
        items: list[SplitUpdate],
    ) -> None:
        """Reject the whole commit before anything is written."""
        for item in items:
            if item.id is not None and item.id not in existing:
                raise CommitError(
                    f"Split {item.id} does not belong to transaction {transaction_id}"
                )
            if parse_amount(item.amount) is None:
                raise CommitError(f"Invalid split amount: {item.amount!r}")
            self._resolve_subcategory(item.subcategory_id)

        base_amount = base_amount_at_load(original, existing.values())
        split_total = sum_amounts(item.amount for item in items)
        if exceeds_base_amount(split_total, base_amount):
            raise CommitError(over_allocation_message(base_amount))

    # -------------------------------------------------------------------------
    # Interface
    # -------------------------------------------------------------------------

    async def fetch_split_data(
        self,
        transaction_id: TransactionId,
    ) -> TransactionSplit:
        original = self.get(transaction_id)
        return TransactionSplit(
            original=original,
            splits=[s.model_copy(deep=True) for s in self._splits_of(transaction_id)],
        )

    async def commit_splits(
        self,
        transaction_id: TransactionId,
        items: list[SplitUpdate],
    ) -> TransactionSplit:
        original = self.get(transaction_id)
        existing = {s.id: s for s in self._splits_of(transaction_id)}
        self._check_commit(transaction_id, original, existing, items)

        base_amount = base_amount_at_load(original, existing.values())
        kept_ids = {item.id for item in items if item.id is not None}
        for split_id in existing:
            if split_id not in kept_ids:
                del self._transactions[split_id]

        for item in items:
            category, subcategory = self._resolve_subcategory(item.subcategory_id)
            fields = {
                "transaction_date": item.transaction_date,
                "amount": normalize(parse_amount(item.amount)),
                "description": item.description,
                "notes": item.notes,
                "category": category,
                "subcategory": subcategory,
            }
            if item.id is not None:
                split = existing[item.id].model_copy(update=fields)
            else:
                split = Transaction(
                    id=self._next_id,
                    account_id=original.account_id,
                    user_id=original.user_id,
                    pending=original.pending,
                    split_from_id=original.id,
                    **fields,
                )
                self._next_id += 1
            self._transactions[split.id] = split

        split_total = sum_amounts(item.amount for item in items)
        self._transactions[original.id] = original.model_copy(update={
            "amount": normalize(base_amount - split_total),
            "has_splits": bool(items),
        })
        self.commit_count += 1

        return await self.fetch_split_data(transaction_id)

    async def fetch_categories(self) -> list[Category]:
        return [c.model_copy(deep=True) for c in self._categories]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
