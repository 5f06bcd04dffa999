"""Seller verification requests reviewed by marketplace admins."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

VerificationStatus = Literal[
    "submitted",
    "under_review",
    "info_requested",
    "approved",
    "rejected",
]
VerificationLevel = Literal[
    "basic_seller",
    "verified_artisan",
    "master_artisan",
    "certified_workshop",
]
Priority = Literal["urgent", "high", "normal", "low"]

REVIEWABLE_STATUSES: frozenset[str] = frozenset(
    {"submitted", "under_review", "info_requested"}
)
PRIORITY_ORDER: dict[str, int] = {"urgent": 0, "high": 1, "normal": 2, "low": 3}


class VerificationDocument(BaseModel):
    name: str
    status: str


class WorkshopLocation(BaseModel):
    state: str
    city: str
    address: str | None = None
    has_physical_workshop: bool = False


class Questionnaire(BaseModel):
    craft_type: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    years_of_experience: int = Field(0, ge=0)
    production_capacity: str | None = None
    location: WorkshopLocation
    heritage_info: str | None = None
    cultural_significance: str | None = None
    indigenous_community: str | None = None
    traditional_techniques: bool | None = None


class VerificationRequest(BaseModel):
    id: str
    seller_id: str
    seller_name: str
    seller_email: EmailStr
    seller_type: Literal["individual", "hobby", "company"]
    shop_name: str
    requested_level: VerificationLevel
    status: VerificationStatus
    priority: Priority = "normal"
    days_waiting: int = Field(0, ge=0)
    flagged: bool = False
    flag_reason: str | None = None
    assigned_to: str | None = None
    documents: dict[str, VerificationDocument | list[VerificationDocument]] = Field(
        default_factory=dict
    )
    questionnaire: Questionnaire
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    approved_level: VerificationLevel | None = None
    rejection_reason: str | None = None
    requested_info: str | None = None
    created_at: datetime
    submitted_at: datetime | None = None
    updated_at: datetime


class VerificationStats(BaseModel):
    total: int
    pending: int
    under_review: int
    info_requested: int
    approved: int
    rejected: int
    urgent: int


class ReviewerPayload(BaseModel):
    reviewer: str = Field(..., min_length=1, max_length=100)


class ApproveRequest(ReviewerPayload):
    level: VerificationLevel | None = None
    notes: str | None = Field(None, max_length=1000)


class RejectRequest(ReviewerPayload):
    reason: str = Field(..., min_length=10, max_length=1000)


class RequestInfoRequest(ReviewerPayload):
    message: str = Field(..., min_length=10, max_length=1000)
