"""Routes driving the three-step checkout."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from storefront.models.checkout import (
    BackRequest,
    CheckoutOverview,
    CheckoutSession,
    PlaceOrderRequest,
)
from storefront.models.order import Order
from storefront.services.checkout.flow import (
    CheckoutError,
    CheckoutFlowDependency,
    CheckoutStepError,
)
from storefront.services.session.session_store import SessionIdDependency
from storefront.services.session.submission_guard import SubmissionInProgressError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


def _step_conflict(exc: CheckoutStepError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"message": str(exc), "current_step": exc.current.value},
    )


def _invalid(exc: CheckoutError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"step": exc.step.value, "errors": exc.errors},
    )


@router.get("", response_model=CheckoutOverview)
async def get_checkout(
    flow: CheckoutFlowDependency,
    session_id: SessionIdDependency,
) -> CheckoutOverview:
    return await flow.overview(session_id)


@router.post("/shipping", response_model=CheckoutSession)
async def submit_shipping(
    flow: CheckoutFlowDependency,
    session_id: SessionIdDependency,
    payload: dict[str, Any] = Body(...),
) -> CheckoutSession:
    """Validate the shipping address; field errors come back as a map."""

    try:
        return await flow.submit_shipping(session_id, payload)
    except CheckoutError as exc:
        raise _invalid(exc) from exc


@router.post("/payment", response_model=CheckoutSession)
async def submit_payment(
    flow: CheckoutFlowDependency,
    session_id: SessionIdDependency,
    payload: dict[str, Any] = Body(...),
) -> CheckoutSession:
    try:
        return await flow.submit_payment(session_id, payload)
    except CheckoutStepError as exc:
        raise _step_conflict(exc) from exc
    except CheckoutError as exc:
        raise _invalid(exc) from exc


@router.post("/back", response_model=CheckoutSession)
async def go_back(
    payload: BackRequest,
    flow: CheckoutFlowDependency,
    session_id: SessionIdDependency,
) -> CheckoutSession:
    try:
        return await flow.go_back(session_id, payload.step)
    except CheckoutStepError as exc:
        raise _step_conflict(exc) from exc


@router.post(
    "/place-order",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Place the reviewed order",
)
async def place_order(
    payload: PlaceOrderRequest,
    flow: CheckoutFlowDependency,
    session_id: SessionIdDependency,
) -> Order:
    try:
        return await flow.place_order(session_id, payload)
    except CheckoutStepError as exc:
        raise _step_conflict(exc) from exc
    except CheckoutError as exc:
        raise _invalid(exc) from exc
    except SubmissionInProgressError as exc:
        logger.warning("Duplicate order submission for session %s", session_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
