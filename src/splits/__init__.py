"""Split ledger, amount arithmetic and reconciliation."""

from src.splits.amounts import (
    format_currency,
    normalize,
    parse_amount,
    signed_format,
    sum_amounts,
)
from src.splits.ledger import SplitLedger
from src.splits.reconciliation import (
    Reconciliation,
    base_amount_at_load,
    exceeds_base_amount,
    over_allocation_message,
    reconcile,
)
from src.splits.sync import build_commit_payload

__all__ = [
    "format_currency",
    "normalize",
    "parse_amount",
    "signed_format",
    "sum_amounts",
    "SplitLedger",
    "Reconciliation",
    "base_amount_at_load",
    "exceeds_base_amount",
    "over_allocation_message",
    "reconcile",
    "build_commit_payload",
]
