"""Redis-backed storage for per-session shopper state."""

from __future__ import annotations

import json
import logging
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, Header

from storefront.config import settings
from storefront.models.checkout import SavedAddress
from storefront.models.filters import FilterState
from storefront.services.session.redis_client import RedisDependency

logger = logging.getLogger(__name__)

COUPON_KEY = "checkout-coupon"
RECENTLY_VIEWED_KEY = "recently-viewed"
SEARCH_HISTORY_KEY = "search-history"
FILTERS_KEY = "filters"
ADDRESSES_KEY = "addresses"


class SessionStore:
    """Wrapper responsible for persisting session state in Redis."""

    def __init__(self, client: redis.Redis):
        self._client = client
        self._prefix = settings.SESSION_KEY_PREFIX
        self._ttl = settings.SESSION_TTL_SECONDS

    def _key(self, session_id: str, name: str) -> str:
        return f"{self._prefix}{session_id}:{name}"

    async def get_json(self, session_id: str, name: str) -> dict | list | None:
        raw = await self._client.get(self._key(session_id, name))
        if not raw:
            return None
        return json.loads(raw)

    async def set_json(self, session_id: str, name: str, payload: dict | list) -> None:
        await self._client.set(
            self._key(session_id, name), json.dumps(payload), ex=self._ttl
        )

    async def delete(self, session_id: str, name: str) -> None:
        await self._client.delete(self._key(session_id, name))

    # Coupon handoff from cart to checkout

    async def get_coupon_code(self, session_id: str) -> str | None:
        raw = await self._client.get(self._key(session_id, COUPON_KEY))
        return raw or None

    async def set_coupon_code(self, session_id: str, code: str) -> None:
        await self._client.set(self._key(session_id, COUPON_KEY), code, ex=self._ttl)

    async def clear_coupon_code(self, session_id: str) -> None:
        await self.delete(session_id, COUPON_KEY)

    # Recently viewed products

    async def record_recently_viewed(self, session_id: str, product_id: str) -> list[str]:
        key = self._key(session_id, RECENTLY_VIEWED_KEY)
        await self._client.lrem(key, 0, product_id)
        await self._client.lpush(key, product_id)
        await self._client.ltrim(key, 0, settings.RECENTLY_VIEWED_LIMIT - 1)
        await self._client.expire(key, self._ttl)
        return await self.recently_viewed(session_id)

    async def recently_viewed(self, session_id: str) -> list[str]:
        key = self._key(session_id, RECENTLY_VIEWED_KEY)
        return list(await self._client.lrange(key, 0, -1))

    # Search history

    async def _drop_search_query(self, key: str, query: str) -> None:
        wanted = query.lower()
        for item in set(await self._client.lrange(key, 0, -1)):
            if item.lower() == wanted:
                await self._client.lrem(key, 0, item)

    async def add_search_query(self, session_id: str, query: str) -> list[str]:
        query = query.strip()
        if not query:
            return await self.search_history(session_id)
        key = self._key(session_id, SEARCH_HISTORY_KEY)
        await self._drop_search_query(key, query)
        await self._client.lpush(key, query)
        await self._client.ltrim(key, 0, settings.SEARCH_HISTORY_LIMIT - 1)
        await self._client.expire(key, self._ttl)
        return await self.search_history(session_id)

    async def search_history(self, session_id: str) -> list[str]:
        key = self._key(session_id, SEARCH_HISTORY_KEY)
        return list(await self._client.lrange(key, 0, -1))

    async def remove_search_query(self, session_id: str, query: str) -> list[str]:
        await self._drop_search_query(self._key(session_id, SEARCH_HISTORY_KEY), query.strip())
        return await self.search_history(session_id)

    async def clear_search_history(self, session_id: str) -> None:
        await self.delete(session_id, SEARCH_HISTORY_KEY)

    # Interactive filter snapshot

    async def get_filters(self, session_id: str) -> FilterState | None:
        data = await self.get_json(session_id, FILTERS_KEY)
        if data is None:
            return None
        return FilterState.model_validate(data)

    async def save_filters(self, session_id: str, state: FilterState) -> None:
        await self.set_json(session_id, FILTERS_KEY, state.model_dump(mode="json"))

    async def clear_filters(self, session_id: str) -> None:
        await self.delete(session_id, FILTERS_KEY)

    # Saved shipping addresses

    async def saved_addresses(self, session_id: str) -> list[SavedAddress]:
        data = await self.get_json(session_id, ADDRESSES_KEY) or []
        return [SavedAddress.model_validate(item) for item in data]

    async def save_address(self, session_id: str, address: SavedAddress) -> list[SavedAddress]:
        addresses = await self.saved_addresses(session_id)
        if address.is_default:
            addresses = [item.model_copy(update={"is_default": False}) for item in addresses]
        for index, existing in enumerate(addresses):
            if existing.id == address.id:
                addresses[index] = address
                break
        else:
            addresses.append(address)
        await self.set_json(
            session_id,
            ADDRESSES_KEY,
            [item.model_dump(mode="json") for item in addresses],
        )
        return addresses

    async def default_address(self, session_id: str) -> SavedAddress | None:
        addresses = await self.saved_addresses(session_id)
        for address in addresses:
            if address.is_default:
                return address
        return addresses[0] if addresses else None


def get_session_store(client: RedisDependency) -> SessionStore:
    return SessionStore(client)


SessionStoreDependency = Annotated[SessionStore, Depends(get_session_store)]

SessionIdDependency = Annotated[
    str, Header(alias="X-Session-Id", min_length=1, max_length=128)
]
OptionalSessionIdDependency = Annotated[
    str | None, Header(alias="X-Session-Id", max_length=128)
]
