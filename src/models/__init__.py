"""
Data Models Package

This package contains all Pydantic models used by the split editor.
All data flowing through the system must conform to these schemas.
"""

from src.models.transaction import (
    UNSELECTED,
    Category,
    CategoryRef,
    CategoryResponse,
    NewSplitId,
    SplitUpdate,
    Subcategory,
    Transaction,
    TransactionId,
    TransactionSplit,
    ValidationIssue,
    ValidationResult,
    empty_split,
    is_new_split_id,
    parse_iso_date,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "UNSELECTED",
    "Category",
    "CategoryRef",
    "CategoryResponse",
    "NewSplitId",
    "SplitUpdate",
    "Subcategory",
    "Transaction",
    "TransactionId",
    "TransactionSplit",
    "ValidationIssue",
    "ValidationResult",
    "empty_split",
    "is_new_split_id",
    "parse_iso_date",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
