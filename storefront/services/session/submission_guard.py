"""In-flight flags that reject duplicate submissions, plus simulated latency."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from storefront.config import settings
from storefront.services.session.redis_client import RedisDependency

logger = logging.getLogger(__name__)


class SubmissionInProgressError(RuntimeError):
    """Raised when the same action is already pending for a caller."""

    def __init__(self, action: str, owner: str):
        super().__init__(f"'{action}' is already being processed")
        self.action = action
        self.owner = owner


class SubmissionGuard:
    """Mutex-by-flag: one pending submission per (action, owner)."""

    def __init__(self, client: redis.Redis, ttl_seconds: int | None = None):
        self._client = client
        self._ttl = ttl_seconds or settings.SUBMISSION_GUARD_TTL_SECONDS

    @staticmethod
    def _key(action: str, owner: str) -> str:
        return f"inflight:{action}:{owner}"

    @asynccontextmanager
    async def hold(self, action: str, owner: str) -> AsyncIterator[None]:
        key = self._key(action, owner)
        acquired = await self._client.set(key, "1", nx=True, ex=self._ttl)
        if not acquired:
            logger.warning(
                "Rejected duplicate submission",
                extra={"action": action, "owner": owner},
            )
            raise SubmissionInProgressError(action, owner)
        try:
            yield
        finally:
            await self._client.delete(key)


async def simulate_latency(delay_ms: int) -> None:
    """Stand-in for a network round trip."""

    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)


def get_submission_guard(client: RedisDependency) -> SubmissionGuard:
    return SubmissionGuard(client)


SubmissionGuardDependency = Annotated[SubmissionGuard, Depends(get_submission_guard)]
