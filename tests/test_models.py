"""
Tests for Transaction Splits

Test strategy:
1. Unit tests for individual components (models, amounts, ledger, validator)
2. Session flows run against the in-memory store
3. No real API calls in tests (httpx.MockTransport stands in for the server)
"""

import pytest
from datetime import date
from uuid import uuid4

from src.models.transaction import (
    UNSELECTED,
    CategoryRef,
    CategoryResponse,
    SplitUpdate,
    Transaction,
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


class TestTransactionModels:
    """Tests for transaction-related Pydantic models."""

    def test_transaction_from_wire_format(self):
        """Test parsing the API's camelCase payload."""
        transaction = Transaction.model_validate({
            "id": 7,
            "amount": "-45.10",
            "description": "HARDWARE STORE",
            "accountId": "acct-9",
            "userId": "user-2",
            "transactionDate": "2024-03-09",
            "splitFromId": 3,
            "hasSplits": False,
            "category": {"id": 2, "name": "Home"},
            "subcategory": {"id": 21, "name": "Household Supplies"},
        })
        assert transaction.account_id == "acct-9"
        assert transaction.split_from_id == 3
        assert transaction.subcategory.name == "Household Supplies"
        assert transaction.parsed_date == date(2024, 3, 9)

    def test_transaction_accepts_field_names(self):
        """Test populating by snake_case names."""
        transaction = Transaction(id=1, transaction_date="2024-01-02")
        assert transaction.amount == "0.00"
        assert transaction.subcategory == CategoryRef()

    def test_new_split_ids_are_negative(self):
        assert is_new_split_id(-1)
        assert not is_new_split_id(0)
        assert not is_new_split_id(12)

    def test_empty_split(self):
        split = empty_split(-3, "2024-05-01")
        assert split.is_new
        assert split.amount == "0.00"
        assert split.subcategory == UNSELECTED
        assert split.category == UNSELECTED
        assert split.subcategory is not UNSELECTED

    def test_transaction_split_envelope(self):
        data = TransactionSplit.model_validate({
            "original": {"id": 1, "amount": "60.00"},
            "splits": [{"id": 2, "amount": "40.00", "splitFromId": 1}],
        })
        assert data.splits[0].split_from_id == 1

    def test_category_response(self):
        response = CategoryResponse.model_validate({
            "totalItems": 1,
            "filteredItems": 1,
            "categories": [{
                "id": 1,
                "name": "Food",
                "categoryType": "expense",
                "subcategories": [{"id": 11, "name": "Groceries", "categoryId": 1}],
            }],
        })
        assert response.categories[0].subcategories[0].category_id == 1


class TestParseIsoDate:

    @pytest.mark.parametrize("value", ["", None, "2024-02-30", "05/01/2024", "soon"])
    def test_invalid_is_none(self, value):
        assert parse_iso_date(value) is None

    def test_valid(self):
        assert parse_iso_date("2024-02-29") == date(2024, 2, 29)


class TestCategoryRef:

    def test_zero_id_is_unselected(self):
        assert not CategoryRef().is_selected
        assert CategoryRef(id=11, name="Groceries").is_selected


class TestSplitUpdate:
    """Tests for commit payload entries."""

    def test_new_split_payload_has_no_id(self):
        item = SplitUpdate(
            transaction_date="2024-05-01",
            amount="-30.00",
            description="Toys",
            subcategory_id=12,
        )
        assert item.to_payload() == {
            "transactionDate": "2024-05-01",
            "amount": "-30.00",
            "description": "Toys",
            "subcategoryId": 12,
        }

    def test_existing_split_payload_keeps_id_and_notes(self):
        item = SplitUpdate(
            id=5,
            transaction_date="2024-05-01",
            amount="10.00",
            description="Soap",
            notes="bulk",
            subcategory_id=11,
        )
        payload = item.to_payload()
        assert payload["id"] == 5
        assert payload["notes"] == "bulk"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SESSION_OPENED,
            description="Split editor opened",
        )
        assert event.event_type == AuditEventType.SESSION_OPENED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.SPLITS_SAVED,
            description="Saved 2 splits",
            correlation_id=correlation_id,
            details={"split_count": 2},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "splits_saved"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["details"]["split_count"] == 2

    def test_audit_event_builder_save_started(self):
        """Test AuditEventBuilder.save_started."""
        correlation_id = uuid4()
        event = AuditEventBuilder.save_started(
            transaction_id=1,
            new_count=2,
            updated_count=1,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.SAVE_STARTED
        assert event.entity_id == "1"
        assert event.details == {"new_splits": 2, "updated_splits": 1}
        assert event.is_user_action is True

    def test_audit_event_builder_validation_failed(self):
        """Test AuditEventBuilder.validation_failed."""
        event = AuditEventBuilder.validation_failed(
            transaction_id=4,
            field="description",
            message="All splits must have a description with at least 3 characters",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["field"] == "description"


class TestValidationResult:

    def test_error_message_from_issue(self):
        result = ValidationResult(
            is_valid=False,
            issue=ValidationIssue(
                field="subcategory",
                issue_type="missing",
                message="All splits must have a subcategory",
            ),
        )
        assert result.error_message == "All splits must have a subcategory"

    def test_valid_result_has_no_message(self):
        assert ValidationResult(is_valid=True).error_message is None

    def test_severity_is_constrained(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
