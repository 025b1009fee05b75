"""
Main Orchestrator for Transaction Splits

This module ties together the ledger, reconciliation, validation, the remote
store and the audit trail, and defines the split editing session:

    LOADING -> READY <-> SAVING -> CLOSED (refresh needed)
    LOADING / READY  ------------> CLOSED (no refresh)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is committed unless the full validation pipeline passes
- At most one commit is in flight, and nothing else happens meanwhile
- A failed commit leaves the ledger exactly as the user left it
- The caller is told exactly once whether it must re-fetch
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings
from src.models.transaction import (
    CategoryRef,
    Transaction,
    TransactionId,
    TransactionSplit,
)
from src.services.storage import (
    HttpTransactionSplitStore,
    InMemoryAuditStorage,
    StorageError,
    TransactionSplitStoreInterface,
)
from src.splits.amounts import normalize, signed_format
from src.splits.ledger import SplitLedger
from src.splits.reconciliation import base_amount_at_load, reconcile
from src.splits.sync import build_commit_payload, count_new_and_existing
from src.validation import SplitValidator

logger = structlog.get_logger(__name__)

OnClose = Callable[[bool], None]


class SessionState(str, Enum):
    """Lifecycle of one split editing session."""
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    CLOSED = "closed"


class SessionStateError(Exception):
    """An operation was attempted in a state that does not allow it."""

    def __init__(self, operation: str, state: SessionState):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state.value}")


class SplitEditingSession:
    """
    Orchestrates editing the splits of one transaction.

    Flow:
    1. Open    -> fetch {original, splits}, capture the base amount
    2. Edit    -> add / update / remove splits; remainder recomputed each time
    3. Save    -> validate, commit atomically, close with refresh
       Cancel  -> discard everything, close without refresh

    Each session owns its own ledger; nothing is shared between sessions.
    """

    def __init__(
        self,
        transaction_id: TransactionId,
        store: TransactionSplitStoreInterface,
        on_close: Optional[OnClose] = None,
        validator: Optional[SplitValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        page_size: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ):
        self.transaction_id = transaction_id
        self._store = store
        self._on_close = on_close
        self._validator = validator or SplitValidator()
        self._audit_logger = audit_logger
        self._page_size = page_size or get_settings().app.splits_per_page
        self.correlation_id = correlation_id or create_correlation_id()

        self.state = SessionState.LOADING
        self.original: Optional[Transaction] = None
        self.ledger: Optional[SplitLedger] = None
        self.error_message: Optional[str] = None
        self.load_error: Optional[str] = None
        self.refresh_needed: Optional[bool] = None

        # Set once a save is blocked by validation; from then on every edit
        # re-runs the pipeline so the message clears as soon as it is fixed.
        self._revalidate_on_change = False
        self._opening = False

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def base_amount(self) -> Decimal:
        self._require_loaded()
        return self.ledger.base_amount

    @property
    def splits(self) -> list[Transaction]:
        return self.ledger.splits if self.ledger else []

    @property
    def visible_splits(self) -> list[Transaction]:
        return self.ledger.page() if self.ledger else []

    @property
    def current_page(self) -> int:
        return self.ledger.current_page if self.ledger else 1

    @property
    def page_count(self) -> int:
        return self.ledger.page_count() if self.ledger else 0

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.CLOSED

    def field_errors(self, split_id: int) -> dict[str, str]:
        """Live per-field messages for one split row."""
        split = self.ledger.get_split(split_id) if self.ledger else None
        return self._validator.field_errors(split) if split else {}

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def open(self) -> bool:
        """
        Fetch the split data and make the session editable.

        Returns False if the fetch failed; the session stays LOADING with
        load_error set, and open() may be called again. Also returns False
        if the session was cancelled while the fetch was in flight.
        """
        self._require_state("open", SessionState.LOADING)
        if self._opening:
            raise SessionStateError("open", self.state)

        self._opening = True
        try:
            return await self._open()
        finally:
            self._opening = False

    async def _open(self) -> bool:
        if self._audit_logger:
            await self._audit_logger.log_session_opened(
                transaction_id=self.transaction_id,
                correlation_id=self.correlation_id,
            )

        try:
            data = await self._store.fetch_split_data(self.transaction_id)
            base_amount = base_amount_at_load(data.original, data.splits)
        except Exception as e:
            if self.state != SessionState.LOADING:
                return False
            self.load_error = f"Failed to load transaction splits: {e}"
            logger.warning(
                "split_fetch_failed",
                transaction_id=self.transaction_id,
                error=str(e),
            )
            if self._audit_logger:
                await self._audit_failure(e)
                await self._audit_logger.log_fetch_failed(
                    transaction_id=self.transaction_id,
                    error_message=str(e),
                    correlation_id=self.correlation_id,
                )
            return False

        # Cancelled while the fetch was in flight.
        if self.state != SessionState.LOADING:
            logger.info("split_fetch_discarded", transaction_id=self.transaction_id)
            return False

        self._load(data, base_amount)

        if self._audit_logger:
            await self._audit_logger.log_split_data_fetched(
                transaction_id=self.transaction_id,
                split_count=len(data.splits),
                base_amount=normalize(base_amount),
                correlation_id=self.correlation_id,
            )
        return True

    def _load(self, data: TransactionSplit, base_amount: Decimal) -> None:
        self.original = data.original
        self.load_error = None
        self.ledger = SplitLedger(
            base_amount=base_amount,
            splits=data.splits,
            page_size=self._page_size,
            on_change=self._reconcile,
        )
        self.state = SessionState.READY
        self._reconcile(self.ledger)

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def _reconcile(self, ledger: SplitLedger) -> None:
        """Recompute the original's displayed amount and the error banner."""
        result = reconcile(ledger.base_amount, ledger.splits)

        if self.original.amount != result.remaining_amount:
            self.original = self.original.model_copy(
                update={"amount": result.remaining_amount}
            )

        if result.is_over_allocated:
            self.error_message = result.error_message
        elif self._revalidate_on_change:
            validation = self._validator.validate(ledger.splits, ledger.base_amount)
            self.error_message = validation.error_message
        else:
            self.error_message = None

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def add_split(self) -> Transaction:
        """Add a blank split dated like the original."""
        self._require_state("add a split", SessionState.READY)
        return self.ledger.add_split(self.original.transaction_date)

    def update_split(self, split_id: int, **fields) -> bool:
        self._require_state("update a split", SessionState.READY)
        return self.ledger.update_split(split_id, **fields)

    def update_subcategory(self, split_id: int, subcategory: CategoryRef) -> bool:
        self._require_state("update a split", SessionState.READY)
        return self.ledger.update_subcategory(split_id, subcategory)

    def enter_amount(self, split_id: int, text: str) -> bool:
        """
        Commit a typed amount to a split.

        The amount is normalized to 2 decimals and given the sign of the
        original, so "30" against a debit becomes "-30.00".
        """
        self._require_state("update a split", SessionState.READY)
        split = self.ledger.get_split(split_id)
        if split is None:
            return False
        formatted = signed_format(text.strip(), self.ledger.base_amount)
        if split.amount == formatted:
            return True
        return self.ledger.update_split(split_id, amount=formatted)

    def remove_split(self, split_id: int) -> bool:
        self._require_state("remove a split", SessionState.READY)
        return self.ledger.remove_split(split_id)

    def go_to_page(self, number: int) -> int:
        self._require_state("change page", SessionState.READY)
        return self.ledger.go_to_page(number)

    def dismiss_error(self) -> None:
        """Hide the current error banner until the next change."""
        self.error_message = None

    # -------------------------------------------------------------------------
    # Saving / closing
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _saving(self):
        """Hold the SAVING state for the duration of a commit attempt."""
        self.state = SessionState.SAVING
        try:
            yield
        finally:
            if self.state == SessionState.SAVING:
                self.state = SessionState.READY

    async def save(self) -> bool:
        """
        Validate and commit the splits.

        Returns True if the splits were committed and the session closed.
        On False, error_message explains why and the session is editable.
        """
        self._require_state("save", SessionState.READY)

        async with self._saving():
            splits = self.ledger.splits
            validation = self._validator.validate(splits, self.ledger.base_amount)

            if not validation.is_valid:
                self.error_message = validation.error_message
                self._revalidate_on_change = True
                if self._audit_logger:
                    await self._audit_logger.log_validation_failed(
                        transaction_id=self.transaction_id,
                        field=validation.issue.field,
                        message=validation.issue.message,
                        correlation_id=self.correlation_id,
                    )
                return False

            self.error_message = None
            payload = build_commit_payload(splits)

            if self._audit_logger:
                new_count, updated_count = count_new_and_existing(payload)
                await self._audit_logger.log_save_started(
                    transaction_id=self.transaction_id,
                    new_count=new_count,
                    updated_count=updated_count,
                    correlation_id=self.correlation_id,
                )

            try:
                committed = await self._store.commit_splits(self.transaction_id, payload)
            except Exception as e:
                self.error_message = f"Failed to save splits: {e}"
                logger.error(
                    "split_commit_failed",
                    transaction_id=self.transaction_id,
                    error=str(e),
                )
                if self._audit_logger:
                    await self._audit_failure(e)
                    await self._audit_logger.log_save_failed(
                        transaction_id=self.transaction_id,
                        error_message=str(e),
                        correlation_id=self.correlation_id,
                    )
                return False

            if self._audit_logger:
                await self._audit_logger.log_splits_saved(
                    transaction_id=self.transaction_id,
                    split_count=len(committed.splits),
                    original_amount=committed.original.amount,
                    correlation_id=self.correlation_id,
                )
            self.state = SessionState.CLOSED

        self._close(refresh_needed=True)
        return True

    async def cancel(self) -> None:
        """Discard all edits and close without asking for a refresh."""
        self._require_state("cancel", SessionState.LOADING, SessionState.READY)

        discarded = len(self.ledger) if self.ledger else 0
        if self._audit_logger:
            await self._audit_logger.log_session_cancelled(
                transaction_id=self.transaction_id,
                discarded_count=discarded,
                correlation_id=self.correlation_id,
            )

        self.ledger = None
        self.original = None
        self.error_message = None
        self._close(refresh_needed=False)

    async def _audit_failure(self, error: Exception) -> None:
        """Record a fetch or commit failure by where it came from."""
        if isinstance(error, StorageError):
            await self._audit_logger.log_external_service_error(
                service="transactions_api",
                error_message=str(error),
                correlation_id=self.correlation_id,
            )
        else:
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details={"transaction_id": self.transaction_id},
                correlation_id=self.correlation_id,
            )

    def _close(self, refresh_needed: bool) -> None:
        self.state = SessionState.CLOSED
        self.refresh_needed = refresh_needed
        if self._on_close is None:
            return
        try:
            self._on_close(refresh_needed)
        except Exception as e:
            # The session stays closed when the listener fails.
            logger.error(
                "on_close_failed",
                transaction_id=self.transaction_id,
                refresh_needed=refresh_needed,
                error=str(e),
            )

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def _require_state(self, operation: str, *allowed: SessionState) -> None:
        if self.state not in allowed:
            raise SessionStateError(operation, self.state)

    def _require_loaded(self) -> None:
        if self.ledger is None:
            raise SessionStateError("read split data", self.state)


async def open_split_session(
    transaction_id: TransactionId,
    store: TransactionSplitStoreInterface,
    on_close: Optional[OnClose] = None,
    audit_logger: Optional[AuditLogger] = None,
    validator: Optional[SplitValidator] = None,
) -> SplitEditingSession:
    """
    Begin a split editing session for a transaction.

    The returned session is READY, or still LOADING with load_error set if
    the fetch failed.
    """
    session = SplitEditingSession(
        transaction_id=transaction_id,
        store=store,
        on_close=on_close,
        validator=validator,
        audit_logger=audit_logger,
    )
    await session.open()
    return session


def create_app_components(
    store: Optional[TransactionSplitStoreInterface] = None,
) -> tuple[TransactionSplitStoreInterface, AuditLogger]:
    """
    Factory function to create the application components.

    Args:
        store: Store to use. Defaults to the HTTP store configured from
               settings.

    Returns:
        (store, audit_logger)
    """
    store = store or HttpTransactionSplitStore()
    audit_logger = AuditLogger(InMemoryAuditStorage())
    return store, audit_logger
