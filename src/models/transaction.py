"""
Core Data Models for Transaction Splits

These models define the schemas for all data flowing between the split
editor and the remote transactions API. They are designed to:
1. Mirror the API's camelCase wire format while exposing snake_case attributes
2. Tolerate in-progress user input (raw amount text, empty dates)
3. Be serializable for commit payloads and logging

DESIGN DECISION: Amounts stay strings on the Transaction model.
The API sends and expects 2-decimal strings, and while a split is being
edited its amount may briefly hold whatever the user typed. Arithmetic
happens in src.splits.amounts, never on the model.
"""

from datetime import date, datetime
from typing import NewType, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# IDENTIFIERS
# =============================================================================

# Durable id assigned by the remote store.
TransactionId = NewType("TransactionId", int)

# Session-local id of a split that has not been persisted yet (always < 0).
NewSplitId = NewType("NewSplitId", int)


def is_new_split_id(split_id: int) -> bool:
    """Negative ids mark splits created in the current session."""
    return split_id < 0


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO calendar date, returning None when empty or invalid."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


class ApiModel(BaseModel):
    """Base for models that travel over the wire in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryRef(ApiModel):
    """
    Id/name pair attached to a transaction.

    A subcategory with id 0 means nothing has been selected yet.
    """

    id: int = 0
    name: str = ""

    @property
    def is_selected(self) -> bool:
        return self.id != 0


UNSELECTED = CategoryRef(id=0, name="")


class Subcategory(ApiModel):
    """A subcategory as returned by the categories endpoint."""

    id: int
    name: str
    category_id: int
    has_transactions: bool = False


class Category(ApiModel):
    """A category with its subcategories."""

    id: int
    name: str
    category_type: str = ""
    has_transactions: bool = False
    subcategories: list[Subcategory] = Field(default_factory=list)


class CategoryResponse(ApiModel):
    """Envelope of the categories endpoint."""

    total_items: int = 0
    filtered_items: int = 0
    categories: list[Category] = Field(default_factory=list)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(ApiModel):
    """
    A single monetary line item.

    The same shape is used for the original transaction and for its splits.
    A split points back at its original through split_from_id; that is a
    lookup key only and never owns the original.
    """

    id: int = Field(
        ...,
        description="Server id, or a negative session-local id for new splits"
    )
    amount: str = Field(
        default="0.00",
        description="Signed decimal string with 2 fraction digits"
    )
    description: str = ""
    notes: Optional[str] = None
    pending: bool = False
    account_id: str = "0"
    user_id: str = "0"
    transaction_date: str = Field(
        default="",
        description="ISO calendar date (YYYY-MM-DD)"
    )
    statement_transaction_date: Optional[str] = None
    statement_description: Optional[str] = None
    split_from_id: Optional[int] = Field(
        default=None,
        description="Id of the original this record was split from"
    )
    has_splits: bool = False
    category: CategoryRef = Field(default_factory=CategoryRef)
    subcategory: CategoryRef = Field(default_factory=CategoryRef)

    @property
    def is_new(self) -> bool:
        return is_new_split_id(self.id)

    @property
    def parsed_date(self) -> Optional[date]:
        return parse_iso_date(self.transaction_date)


def empty_split(split_id: NewSplitId, transaction_date: str) -> Transaction:
    """A blank split row, dated like its original."""
    return Transaction(
        id=split_id,
        amount="0.00",
        description="",
        transaction_date=transaction_date,
        category=UNSELECTED.model_copy(),
        subcategory=UNSELECTED.model_copy(),
    )


class TransactionSplit(ApiModel):
    """An original transaction together with the splits that reference it."""

    original: Transaction
    splits: list[Transaction] = Field(default_factory=list)


class SplitUpdate(ApiModel):
    """
    One entry of a commit payload.

    New splits carry no id so the server assigns one. Category is not sent:
    the server derives it from the subcategory.
    """

    id: Optional[TransactionId] = None
    transaction_date: str
    amount: str
    description: str
    notes: Optional[str] = None
    subcategory_id: int

    def to_payload(self) -> dict:
        """Wire form: camelCase keys, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_short', 'over_allocated')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    split_id: Optional[int] = Field(
        default=None,
        description="First split that failed the check, if any"
    )


class ValidationResult(BaseModel):
    """
    Result of running the split validation pipeline.

    The pipeline stops at the first failing check, so there is at most
    one issue.
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    is_valid: bool
    issue: Optional[ValidationIssue] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.issue.message if self.issue else None
