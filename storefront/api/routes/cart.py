"""Session shopping cart routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from storefront.models.cart import (
    AddToCartRequest,
    CartResponse,
    CouponRequest,
    UpdateQuantityRequest,
)
from storefront.services.cart.cart_service import (
    CartServiceDependency,
    UnknownProductError,
)
from storefront.services.checkout.coupons import CouponError
from storefront.services.session.session_store import SessionIdDependency
from storefront.services.session.submission_guard import SubmissionInProgressError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(carts: CartServiceDependency, session_id: SessionIdDependency) -> CartResponse:
    return await carts.summary(session_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(carts: CartServiceDependency, session_id: SessionIdDependency) -> None:
    await carts.clear(session_id)


@router.post(
    "/items",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product to the cart",
)
async def add_item(
    payload: AddToCartRequest,
    carts: CartServiceDependency,
    session_id: SessionIdDependency,
) -> CartResponse:
    try:
        await carts.add_item(session_id, payload.product_id, payload.quantity)
    except UnknownProductError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return await carts.summary(session_id)


@router.patch("/items/{product_id}", response_model=CartResponse)
async def update_item(
    product_id: str,
    payload: UpdateQuantityRequest,
    carts: CartServiceDependency,
    session_id: SessionIdDependency,
) -> CartResponse:
    try:
        await carts.update_quantity(session_id, product_id, payload.quantity)
    except UnknownProductError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return await carts.summary(session_id)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_item(
    product_id: str,
    carts: CartServiceDependency,
    session_id: SessionIdDependency,
) -> CartResponse:
    await carts.remove_item(session_id, product_id)
    return await carts.summary(session_id)


@router.post("/coupon", response_model=CartResponse)
async def apply_coupon(
    payload: CouponRequest,
    carts: CartServiceDependency,
    session_id: SessionIdDependency,
) -> CartResponse:
    try:
        coupon = await carts.apply_coupon(session_id, payload.code)
    except CouponError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": {"code": str(exc)}},
        ) from exc

    logger.info("Coupon %s applied for session %s", coupon.code, session_id)
    return await carts.summary(session_id)


@router.delete("/coupon", response_model=CartResponse)
async def remove_coupon(
    carts: CartServiceDependency,
    session_id: SessionIdDependency,
) -> CartResponse:
    await carts.remove_coupon(session_id)
    return await carts.summary(session_id)
