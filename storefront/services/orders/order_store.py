"""Redis-backed persistence for placed orders."""

from __future__ import annotations

import logging
import random
import secrets
import time
from datetime import UTC, datetime
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from storefront.config import settings
from storefront.models.order import Order, OrderStatus
from storefront.services.session.redis_client import RedisDependency

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_order_id() -> str:
    """Unique id such as ``ORD-LZ3K2X1A-9F3K2B``."""

    timestamp = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"ORD-{timestamp}-{suffix}".upper()


def generate_order_number(now: datetime | None = None) -> str:
    """Human-readable number such as ``PM2610-0421``."""

    now = now or datetime.now(UTC)
    return f"PM{now:%y%m}-{random.randint(0, 9999):04d}"


class OrderStore:
    """Wrapper responsible for persisting orders in Redis."""

    def __init__(self, client: redis.Redis):
        self._client = client
        self._prefix = settings.ORDER_KEY_PREFIX

    def _key(self, order_id: str) -> str:
        return f"{self._prefix}{order_id}"

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}index"

    async def save(self, order: Order) -> Order:
        await self._client.set(self._key(order.id), order.model_dump_json())
        await self._client.lrem(self._index_key, 0, order.id)
        await self._client.lpush(self._index_key, order.id)
        return order

    async def get(self, order_id: str) -> Order | None:
        raw = await self._client.get(self._key(order_id))
        if not raw:
            return None
        return Order.model_validate_json(raw)

    async def list_orders(self) -> list[Order]:
        """All orders, newest first."""

        order_ids = await self._client.lrange(self._index_key, 0, -1)
        orders = []
        for order_id in order_ids:
            order = await self.get(order_id)
            if order is not None:
                orders.append(order)
        return orders

    async def get_by_number(self, order_number: str) -> Order | None:
        for order in await self.list_orders():
            if order.order_number == order_number:
                return order
        return None

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        tracking: str | None = None,
    ) -> Order | None:
        order = await self.get(order_id)
        if order is None:
            return None
        updated = order.model_copy(
            update={
                "status": status,
                "tracking": tracking or order.tracking,
                "updated_at": datetime.now(UTC),
            }
        )
        await self._client.set(self._key(order_id), updated.model_dump_json())
        logger.info(
            "Order status updated",
            extra={"order_id": order_id, "status": status},
        )
        return updated


def get_order_store(client: RedisDependency) -> OrderStore:
    return OrderStore(client)


OrderStoreDependency = Annotated[OrderStore, Depends(get_order_store)]
