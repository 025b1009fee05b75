"""
Reconciliation of split totals against the original transaction.

The base amount is what the original was worth before any splits existed:
its current amount plus whatever was already split off. The original's
displayed amount is always derived from it and never edited directly.

DESIGN DECISION: exceeds_base_amount() is the only place the over-allocation
rule lives. The reactive recomputation here and the save-time total check in
the validator both call it, so the two can never disagree.
"""

from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from src.models.transaction import Transaction
from src.splits.amounts import (
    format_currency,
    normalize,
    parse_amount,
    round_amount,
    sum_amounts,
)


class Reconciliation(BaseModel):
    """Derived state after a ledger change."""

    split_total: Decimal
    remaining_amount: str
    error_message: Optional[str] = None

    @property
    def is_over_allocated(self) -> bool:
        return self.error_message is not None


def base_amount_at_load(
    original: Transaction,
    splits: Iterable[Transaction],
) -> Decimal:
    """
    Capture the immutable base amount when a session opens.

    Raises ValueError if the original's amount is not a number.
    """
    original_amount = parse_amount(original.amount)
    if original_amount is None:
        raise ValueError(
            f"Transaction {original.id} has an invalid amount: {original.amount!r}"
        )
    return round_amount(original_amount) + sum_amounts(s.amount for s in splits)


def exceeds_base_amount(split_total: Decimal, base_amount: Decimal) -> bool:
    """True when the splits claim more than the original is worth."""
    return abs(split_total) > abs(base_amount)


def over_allocation_message(base_amount: Decimal) -> str:
    return (
        "Total split amounts cannot exceed the original transaction amount "
        f"of {format_currency(base_amount)}"
    )


def reconcile(
    base_amount: Decimal,
    splits: Iterable[Transaction],
) -> Reconciliation:
    """
    Recompute the original's displayed amount from the current splits.

    While over-allocated the display is clamped to "0.00"; the error message,
    not the clamp, is what blocks a save.
    """
    split_total = sum_amounts(s.amount for s in splits)

    if exceeds_base_amount(split_total, base_amount):
        return Reconciliation(
            split_total=split_total,
            remaining_amount="0.00",
            error_message=over_allocation_message(base_amount),
        )

    return Reconciliation(
        split_total=split_total,
        remaining_amount=normalize(base_amount - split_total),
    )
