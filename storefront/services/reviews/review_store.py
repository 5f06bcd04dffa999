"""Redis-backed product reviews."""

from __future__ import annotations

import logging
import secrets
from collections import Counter
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from storefront.config import settings
from storefront.models.review import RatingBucket, Review, ReviewPayload, ReviewSummary
from storefront.services.analytics.metrics import safe_divide, safe_percentage
from storefront.services.session.redis_client import RedisDependency
from storefront.services.session.submission_guard import (
    SubmissionGuard,
    get_submission_guard,
    simulate_latency,
)

logger = logging.getLogger(__name__)


def summarize_reviews(reviews: list[Review]) -> ReviewSummary:
    """Count, average rating and per-star distribution (5 stars first)."""

    counts = Counter(review.rating for review in reviews)
    total = len(reviews)
    return ReviewSummary(
        count=total,
        average=round(safe_divide(sum(review.rating for review in reviews), total), 1),
        distribution=[
            RatingBucket(
                stars=stars,
                count=counts[stars],
                percentage=safe_percentage(counts[stars], total),
            )
            for stars in range(5, 0, -1)
        ],
        with_photos=sum(1 for review in reviews if review.photos),
    )


class ReviewStore:
    """One Redis list of serialized reviews per product, newest first."""

    def __init__(self, client: redis.Redis, guard: SubmissionGuard):
        self._client = client
        self._guard = guard
        self._prefix = settings.REVIEW_KEY_PREFIX

    def _key(self, product_id: str) -> str:
        return f"{self._prefix}{product_id}"

    async def list_reviews(self, product_id: str) -> list[Review]:
        raw_reviews = await self._client.lrange(self._key(product_id), 0, -1)
        return [Review.model_validate_json(raw) for raw in raw_reviews]

    async def submit_review(
        self,
        product_id: str,
        payload: ReviewPayload,
        session_id: str,
    ) -> Review:
        async with self._guard.hold("review", f"{session_id}:{product_id}"):
            await simulate_latency(settings.REVIEW_DELAY_MS)
            review = Review(
                **payload.model_dump(mode="json"),
                id=f"rev-{secrets.token_hex(6)}",
                product_id=product_id,
            )
            await self._client.lpush(self._key(product_id), review.model_dump_json())

        logger.info(
            "Review %s stored for product %s (rating=%d)",
            review.id,
            product_id,
            review.rating,
        )
        return review


def get_review_store(
    client: RedisDependency,
    guard: Annotated[SubmissionGuard, Depends(get_submission_guard)],
) -> ReviewStore:
    return ReviewStore(client, guard)


ReviewStoreDependency = Annotated[ReviewStore, Depends(get_review_store)]
