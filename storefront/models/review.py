"""Product review schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import AnyHttpUrl, BaseModel, Field, field_validator


class ReviewPayload(BaseModel):
    """Review submitted by a shopper."""

    author: str = Field(..., min_length=2, max_length=100)
    rating: int = Field(..., ge=1, le=5)
    title: str | None = Field(None, max_length=120)
    comment: str = Field("", max_length=2000)
    photos: list[AnyHttpUrl] = Field(default_factory=list, max_length=5)

    @field_validator("author", "comment")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class Review(ReviewPayload):
    id: str
    product_id: str
    verified_purchase: bool = False
    helpful: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RatingBucket(BaseModel):
    stars: int
    count: int
    percentage: float


class ReviewSummary(BaseModel):
    count: int
    average: float
    distribution: list[RatingBucket]
    with_photos: int


class ReviewListResponse(BaseModel):
    product_id: str
    summary: ReviewSummary
    reviews: list[Review]
