"""Admin review of seller verification requests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.config import settings
from storefront.models.verification import (
    ApproveRequest,
    RejectRequest,
    RequestInfoRequest,
    ReviewerPayload,
    VerificationRequest,
    VerificationStats,
    VerificationStatus,
)
from storefront.services.session.submission_guard import (
    SubmissionGuardDependency,
    SubmissionInProgressError,
    simulate_latency,
)
from storefront.services.verification.registry import (
    VerificationNotFoundError,
    VerificationRegistry,
    VerificationStateError,
    get_verification_registry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/verifications", tags=["verifications"])

RegistryDependency = Annotated[VerificationRegistry, Depends(get_verification_registry)]


async def _decide(
    guard: SubmissionGuardDependency,
    request_id: str,
    decision: Callable[[], VerificationRequest],
) -> VerificationRequest:
    """Run one admin decision behind the duplicate-submission guard."""

    try:
        async with guard.hold("verification", request_id):
            await simulate_latency(settings.VERIFICATION_DELAY_MS)
            return decision()
    except VerificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (VerificationStateError, SubmissionInProgressError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.get("", response_model=list[VerificationRequest])
async def list_verification_requests(
    registry: RegistryDependency,
    status_filter: Annotated[VerificationStatus | None, Query(alias="status")] = None,
    q: Annotated[str | None, Query(max_length=100)] = None,
) -> list[VerificationRequest]:
    return registry.list_requests(status_filter, q)


@router.get("/stats", response_model=VerificationStats)
async def verification_stats(registry: RegistryDependency) -> VerificationStats:
    return registry.stats()


@router.get("/{request_id}", response_model=VerificationRequest)
async def get_verification_request(
    request_id: str,
    registry: RegistryDependency,
) -> VerificationRequest:
    try:
        return registry.get(request_id)
    except VerificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/{request_id}/start-review", response_model=VerificationRequest)
async def start_review(
    request_id: str,
    payload: ReviewerPayload,
    registry: RegistryDependency,
    guard: SubmissionGuardDependency,
) -> VerificationRequest:
    return await _decide(
        guard, request_id, lambda: registry.start_review(request_id, payload.reviewer)
    )


@router.post("/{request_id}/approve", response_model=VerificationRequest)
async def approve_request(
    request_id: str,
    payload: ApproveRequest,
    registry: RegistryDependency,
    guard: SubmissionGuardDependency,
) -> VerificationRequest:
    return await _decide(
        guard,
        request_id,
        lambda: registry.approve(request_id, payload.reviewer, payload.level, payload.notes),
    )


@router.post("/{request_id}/reject", response_model=VerificationRequest)
async def reject_request(
    request_id: str,
    payload: RejectRequest,
    registry: RegistryDependency,
    guard: SubmissionGuardDependency,
) -> VerificationRequest:
    return await _decide(
        guard,
        request_id,
        lambda: registry.reject(request_id, payload.reviewer, payload.reason),
    )


@router.post("/{request_id}/request-info", response_model=VerificationRequest)
async def request_more_info(
    request_id: str,
    payload: RequestInfoRequest,
    registry: RegistryDependency,
    guard: SubmissionGuardDependency,
) -> VerificationRequest:
    return await _decide(
        guard,
        request_id,
        lambda: registry.request_info(request_id, payload.reviewer, payload.message),
    )
