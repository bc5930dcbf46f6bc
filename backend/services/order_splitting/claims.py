import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Tuple

from config import ClaimStoreKind, Settings
from repositories import split_claim_repository as repo

logger = logging.getLogger("truckload-splitter")

# Shopify stops retrying a webhook after 48 hours
DEFAULT_RETENTION_SECONDS = 48 * 60 * 60


class InMemoryClaimStore:
    """Per-process split claims, enough for a single worker deployment."""

    def __init__(
        self,
        ttl_seconds: float,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._claims: Dict[str, Tuple[str, float]] = {}

    async def acquire(self, order_id) -> bool:
        key = str(order_id)
        async with self._lock:
            now = self._clock()
            self._prune(now)
            if key in self._claims:
                return False
            self._claims[key] = (repo.STATUS_PROCESSING, now)
            return True

    def __len__(self) -> int:
        return len(self._claims)

    def _prune(self, now: float) -> None:
        """Forget finished claims past retention and processing claims past the ttl."""
        for key, (status_value, claimed_at) in list(self._claims.items()):
            if status_value == repo.STATUS_DONE:
                if now - claimed_at >= self.retention_seconds:
                    del self._claims[key]
            elif now - claimed_at >= self.ttl_seconds:
                logger.warning("Dropping stale split claim for order=%s", key)
                del self._claims[key]

    async def complete(self, order_id) -> None:
        async with self._lock:
            self._claims[str(order_id)] = (repo.STATUS_DONE, self._clock())

    async def release(self, order_id) -> None:
        async with self._lock:
            self._claims.pop(str(order_id), None)

    def status_of(self, order_id) -> str | None:
        existing = self._claims.get(str(order_id))
        return existing[0] if existing else None


class SupabaseClaimStore:
    """Split claims stored in the ``order_split_claims`` table, shared by all workers."""

    def __init__(self, client, ttl_seconds: float) -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds

    async def acquire(self, order_id) -> bool:
        key = str(order_id)
        now = datetime.now(timezone.utc)
        if await asyncio.to_thread(repo.insert_claim, self.client, key, now):
            return True
        stale_before = now - timedelta(seconds=self.ttl_seconds)
        taken = await asyncio.to_thread(repo.take_over_stale_claim, self.client, key, stale_before, now)
        if taken:
            logger.warning("Taking over stale split claim for order=%s", key)
        return taken

    async def complete(self, order_id) -> None:
        await asyncio.to_thread(
            repo.update_status,
            self.client,
            str(order_id),
            status_value=repo.STATUS_DONE,
            updated_at=datetime.now(timezone.utc),
        )

    async def release(self, order_id) -> None:
        await asyncio.to_thread(repo.delete_claim, self.client, str(order_id))


def create_claim_store(settings: Settings):
    if settings.split_claim_store is ClaimStoreKind.SUPABASE:
        from supabase_client import create_supabase_client

        return SupabaseClaimStore(create_supabase_client(settings), settings.split_claim_ttl_seconds)
    return InMemoryClaimStore(settings.split_claim_ttl_seconds, settings.split_claim_retention_seconds)
