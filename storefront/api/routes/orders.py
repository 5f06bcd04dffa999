"""Order history and fulfilment status routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from storefront.models.order import Order, OrderStatusUpdate
from storefront.services.orders.order_store import OrderStoreDependency

router = APIRouter(prefix="/orders", tags=["orders"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pedido no encontrado")


@router.get("", response_model=list[Order])
async def list_orders(orders: OrderStoreDependency) -> list[Order]:
    return await orders.list_orders()


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, orders: OrderStoreDependency) -> Order:
    """Look an order up by id or by its human-readable number."""

    order = await orders.get(order_id) or await orders.get_by_number(order_id)
    if order is None:
        raise _not_found()
    return order


@router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    orders: OrderStoreDependency,
) -> Order:
    order = await orders.update_status(order_id, payload.status, payload.tracking)
    if order is None:
        raise _not_found()
    return order
