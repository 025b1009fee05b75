"""
Audit Logger

DESIGN DECISION: Every session-level action in the split editor is logged.
This provides:
1. Traceability of every commit
2. Debugging capability when the remote API misbehaves
3. A record of sessions that were abandoned

The audit logger:
- Is async so it can sit next to the fetch/commit calls
- Gracefully handles failures (doesn't crash the editor if logging fails)
- Uses one correlation ID per editing session
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_session_opened(
        self,
        transaction_id: int,
        correlation_id: UUID,
    ) -> None:
        """Log the start of an editing session."""
        event = AuditEventBuilder.session_opened(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_split_data_fetched(
        self,
        transaction_id: int,
        split_count: int,
        base_amount: str,
        correlation_id: UUID,
    ) -> None:
        """Log a successful initial fetch."""
        event = AuditEventBuilder.split_data_fetched(
            transaction_id=transaction_id,
            split_count=split_count,
            base_amount=base_amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_fetch_failed(
        self,
        transaction_id: int,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed initial fetch."""
        event = AuditEventBuilder.fetch_failed(
            transaction_id=transaction_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        transaction_id: int,
        field: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a save blocked by validation."""
        event = AuditEventBuilder.validation_failed(
            transaction_id=transaction_id,
            field=field,
            message=message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_started(
        self,
        transaction_id: int,
        new_count: int,
        updated_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a commit about to be sent."""
        event = AuditEventBuilder.save_started(
            transaction_id=transaction_id,
            new_count=new_count,
            updated_count=updated_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_splits_saved(
        self,
        transaction_id: int,
        split_count: int,
        original_amount: str,
        correlation_id: UUID,
    ) -> None:
        """Log a successful commit."""
        event = AuditEventBuilder.splits_saved(
            transaction_id=transaction_id,
            split_count=split_count,
            original_amount=original_amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        transaction_id: int,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed commit."""
        event = AuditEventBuilder.save_failed(
            transaction_id=transaction_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_session_cancelled(
        self,
        transaction_id: int,
        discarded_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a session closed without saving."""
        event = AuditEventBuilder.session_cancelled(
            transaction_id=transaction_id,
            discarded_count=discarded_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when an editing session opens and pass it to every
    subsequent audit call of that session.
    """
    return uuid4()
