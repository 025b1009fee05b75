"""
Split Validation Pipeline

DESIGN DECISION: Validation is an ordered sequence of independent checks:

1. DATES        - every split has a valid calendar date
2. DESCRIPTIONS - every split has a meaningful description
3. SUBCATEGORIES - every split has a subcategory selected
4. AMOUNTS      - every split has a non-zero amount
5. TOTAL        - the splits do not claim more than the original is worth

The pipeline stops at the first failing check. The user sees one message,
fixes it, and the next problem (if any) surfaces on the following attempt.

The total check reuses the reconciliation predicate rather than re-deriving
the rule, so the live remainder display and the save-time gate agree.

IMPORTANT: Validation NEVER raises and NEVER fixes anything.
It reports the first problem for the user to correct.
"""

from decimal import Decimal
from typing import Callable, Optional, Sequence

from src.config import get_settings
from src.models.transaction import (
    Transaction,
    ValidationIssue,
    ValidationResult,
    parse_iso_date,
)
from src.splits.amounts import parse_amount, sum_amounts
from src.splits.reconciliation import exceeds_base_amount, over_allocation_message

Check = Callable[[Sequence[Transaction], Decimal], Optional[ValidationIssue]]


class SplitValidator:
    """
    Validates the full split set of an editing session before commit.
    """

    def __init__(self, min_description_length: Optional[int] = None):
        """
        Initialize validator.

        Args:
            min_description_length: Override for the configured minimum
                                    description length.
        """
        self._settings = get_settings().app
        self._min_description_length = (
            min_description_length
            if min_description_length is not None
            else self._settings.min_description_length
        )

    # -------------------------------------------------------------------------
    # Row predicates (shared by the pipeline and the per-row messages)
    # -------------------------------------------------------------------------

    def _has_valid_description(self, split: Transaction) -> bool:
        return len((split.description or "").strip()) >= self._min_description_length

    @staticmethod
    def _has_valid_amount(split: Transaction) -> bool:
        amount = parse_amount(split.amount)
        return amount is not None and amount != 0

    # -------------------------------------------------------------------------
    # Pipeline checks
    # -------------------------------------------------------------------------

    def _check_dates(
        self,
        splits: Sequence[Transaction],
        base_amount: Decimal,
    ) -> Optional[ValidationIssue]:
        for split in splits:
            if split.parsed_date is None:
                return ValidationIssue(
                    field="transaction_date",
                    issue_type="invalid_date",
                    message="All splits must have a valid date",
                    split_id=split.id,
                )
        return None

    def _check_descriptions(
        self,
        splits: Sequence[Transaction],
        base_amount: Decimal,
    ) -> Optional[ValidationIssue]:
        for split in splits:
            if not self._has_valid_description(split):
                return ValidationIssue(
                    field="description",
                    issue_type="too_short",
                    message=(
                        "All splits must have a description with at least "
                        f"{self._min_description_length} characters"
                    ),
                    split_id=split.id,
                )
        return None

    def _check_subcategories(
        self,
        splits: Sequence[Transaction],
        base_amount: Decimal,
    ) -> Optional[ValidationIssue]:
        for split in splits:
            if not split.subcategory.is_selected:
                return ValidationIssue(
                    field="subcategory",
                    issue_type="missing",
                    message="All splits must have a subcategory",
                    split_id=split.id,
                )
        return None

    def _check_amounts(
        self,
        splits: Sequence[Transaction],
        base_amount: Decimal,
    ) -> Optional[ValidationIssue]:
        for split in splits:
            if not self._has_valid_amount(split):
                return ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Splits must have a non-zero amount",
                    split_id=split.id,
                )
        return None

    def _check_total(
        self,
        splits: Sequence[Transaction],
        base_amount: Decimal,
    ) -> Optional[ValidationIssue]:
        split_total = sum_amounts(split.amount for split in splits)
        if exceeds_base_amount(split_total, base_amount):
            return ValidationIssue(
                field="total",
                issue_type="over_allocated",
                message=over_allocation_message(base_amount),
            )
        return None

    @property
    def checks(self) -> list[Check]:
        """Checks in the order they run."""
        return [
            self._check_dates,
            self._check_descriptions,
            self._check_subcategories,
            self._check_amounts,
            self._check_total,
        ]

    def validate(
        self,
        splits: Sequence[Transaction],
        base_amount: Decimal,
    ) -> ValidationResult:
        """
        Run the pipeline, stopping at the first failing check.

        Args:
            splits: The full split set (never a single page)
            base_amount: The session's base original amount

        Returns:
            ValidationResult with at most one issue
        """
        for check in self.checks:
            issue = check(splits, base_amount)
            if issue is not None:
                return ValidationResult(is_valid=False, issue=issue)
        return ValidationResult(is_valid=True)

    def field_errors(self, split: Transaction) -> dict[str, str]:
        """
        Live per-field messages for one split row.

        These are shown next to the inputs while editing and do not gate
        saving on their own.
        """
        errors = {}

        if not split.transaction_date:
            errors["transaction_date"] = "Transaction date is required"
        elif split.parsed_date is None:
            errors["transaction_date"] = "Invalid date format"

        if not self._has_valid_description(split):
            errors["description"] = (
                f"Description must be at least {self._min_description_length} characters"
            )

        if not split.subcategory.is_selected:
            errors["subcategory"] = "Category selection required"

        if not self._has_valid_amount(split):
            errors["amount"] = "Enter a valid, non-zero amount"

        return errors
