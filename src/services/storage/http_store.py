"""
HTTP Storage Implementation

Talks to the transactions API:

    GET   /transactions/{id}/splits       -> {original, splits}
    PATCH /transactions/{id}/sync-splits  -> {original, splits}
    GET   /categories                     -> {totalItems, filteredItems, categories}

TRADEOFFS:
- The initial fetch is retried with exponential backoff on transport
  failures only. An HTTP error status is an answer, not a glitch.
- The commit is NEVER retried. The user retries by pressing save again,
  which keeps a half-seen commit from being sent twice behind their back.
"""

from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_settings
from src.models.transaction import (
    Category,
    CategoryResponse,
    SplitUpdate,
    TransactionId,
    TransactionSplit,
)
from src.services.storage.interface import (
    CommitError,
    ConnectionError,
    NotFoundError,
    StorageError,
    TransactionSplitStoreInterface,
)


class HttpTransactionSplitStore(TransactionSplitStoreInterface):
    """
    Remote transaction store backed by the transactions HTTP API.

    A fresh httpx.AsyncClient is opened per call, so a store instance can be
    shared across event loops (Streamlit runs each action on a new loop).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_fetch_attempts: Optional[int] = None,
        max_fetch_wait_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings().api
        self._base_url = (base_url or settings.base_url).rstrip("/")
        self._timeout = timeout_seconds or settings.timeout_seconds
        self._max_fetch_attempts = max_fetch_attempts or settings.fetch_retry_attempts
        self._max_fetch_wait = (
            max_fetch_wait_seconds
            if max_fetch_wait_seconds is not None
            else settings.fetch_retry_max_wait_seconds
        )
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise ConnectionError(f"Could not reach transactions API: {e}") from e

    async def _fetch_with_retry(self, path: str) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_fetch_attempts),
            wait=wait_exponential(multiplier=1, min=0, max=self._max_fetch_wait),
            retry=retry_if_exception_type(ConnectionError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._request("GET", path)
        return response

    @staticmethod
    def _decode_split(response: httpx.Response) -> TransactionSplit:
        try:
            return TransactionSplit.model_validate(response.json())
        except ValueError as e:
            raise StorageError(f"Unexpected response from transactions API: {e}") from e

    async def fetch_split_data(
        self,
        transaction_id: TransactionId,
    ) -> TransactionSplit:
        response = await self._fetch_with_retry(f"/transactions/{transaction_id}/splits")

        if response.status_code == 404:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        if not response.is_success:
            raise StorageError(
                f"Error fetching transaction splits: {response.status_code}"
            )
        return self._decode_split(response)

    async def commit_splits(
        self,
        transaction_id: TransactionId,
        items: list[SplitUpdate],
    ) -> TransactionSplit:
        response = await self._request(
            "PATCH",
            f"/transactions/{transaction_id}/sync-splits",
            json={"splits": [item.to_payload() for item in items]},
        )

        if not response.is_success:
            raise CommitError(f"Error syncing transaction splits: {response.text}")
        return self._decode_split(response)

    async def fetch_categories(self) -> list[Category]:
        response = await self._fetch_with_retry("/categories")

        if not response.is_success:
            raise StorageError(f"Error fetching categories: {response.status_code}")
        try:
            return CategoryResponse.model_validate(response.json()).categories
        except ValueError as e:
            raise StorageError(f"Unexpected response from transactions API: {e}") from e
