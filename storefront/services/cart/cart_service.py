"""Session shopping cart backed by the session store."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends

from storefront.config import settings
from storefront.models.cart import (
    MAX_LINE_QUANTITY,
    AppliedCoupon,
    Cart,
    CartItem,
    CartResponse,
)
from storefront.models.product import Product
from storefront.services.catalog.loader import Catalog, get_catalog
from storefront.services.checkout.coupons import CouponError, apply_coupon
from storefront.services.checkout.shipping import calculate_shipping_cost
from storefront.services.session.session_store import SessionStore, get_session_store
from storefront.services.session.submission_guard import (
    SubmissionGuard,
    get_submission_guard,
    simulate_latency,
)

logger = logging.getLogger(__name__)

CART_KEY = "cart"


class UnknownProductError(LookupError):
    """Raised when a product id is not in the catalog."""

    def __init__(self, product_id: str):
        super().__init__(f"Producto no encontrado: {product_id}")
        self.product_id = product_id


class CartService:
    """Cart operations for one shopper session."""

    def __init__(
        self,
        catalog: Catalog,
        sessions: SessionStore,
        guard: SubmissionGuard,
    ) -> None:
        self._catalog = catalog
        self._sessions = sessions
        self._guard = guard

    async def get_cart(self, session_id: str) -> Cart:
        data = await self._sessions.get_json(session_id, CART_KEY)
        if not data:
            return Cart()
        return Cart.model_validate(data)

    async def _save(self, session_id: str, cart: Cart) -> Cart:
        await self._sessions.set_json(
            session_id,
            CART_KEY,
            cart.model_dump(mode="json", exclude={"count", "subtotal"}),
        )
        return cart

    def _product(self, product_id: str) -> Product:
        product = self._catalog.get(product_id)
        if product is None:
            raise UnknownProductError(product_id)
        return product

    async def add_item(self, session_id: str, product_id: str, quantity: int = 1) -> Cart:
        """Add ``quantity`` units, merging with an existing line."""

        product = self._product(product_id)
        async with self._guard.hold("add-to-cart", session_id):
            await simulate_latency(settings.ADD_TO_CART_DELAY_MS)
            cart = await self.get_cart(session_id)
            items = list(cart.items)
            for index, item in enumerate(items):
                if item.product_id == product_id:
                    merged = min(item.quantity + quantity, MAX_LINE_QUANTITY)
                    items[index] = item.model_copy(update={"quantity": merged})
                    break
            else:
                items.append(
                    CartItem(
                        product_id=product.id,
                        name=product.name,
                        price=product.price,
                        quantity=quantity,
                        maker=product.maker,
                        state=product.state,
                        in_stock=product.in_stock,
                        image=product.images[0],
                    )
                )
            logger.info(
                "Added %d x %s to cart of session %s", quantity, product_id, session_id
            )
            return await self._save(session_id, Cart(items=items))

    async def update_quantity(self, session_id: str, product_id: str, quantity: int) -> Cart:
        """Set a line's quantity; zero removes the line."""

        if quantity <= 0:
            return await self.remove_item(session_id, product_id)
        cart = await self.get_cart(session_id)
        if not any(item.product_id == product_id for item in cart.items):
            raise UnknownProductError(product_id)
        items = [
            item.model_copy(update={"quantity": quantity})
            if item.product_id == product_id
            else item
            for item in cart.items
        ]
        return await self._save(session_id, Cart(items=items))

    async def remove_item(self, session_id: str, product_id: str) -> Cart:
        cart = await self.get_cart(session_id)
        items = [item for item in cart.items if item.product_id != product_id]
        return await self._save(session_id, Cart(items=items))

    async def clear(self, session_id: str) -> None:
        await self._sessions.delete(session_id, CART_KEY)

    async def apply_coupon(self, session_id: str, code: str) -> AppliedCoupon:
        """Validate ``code`` against the cart and hand it off to checkout."""

        cart = await self.get_cart(session_id)
        coupon = apply_coupon(code, cart.subtotal, calculate_shipping_cost(cart.subtotal))
        await self._sessions.set_coupon_code(session_id, coupon.code)
        return coupon

    async def remove_coupon(self, session_id: str) -> None:
        await self._sessions.clear_coupon_code(session_id)

    async def current_coupon(
        self,
        session_id: str,
        cart: Cart,
        state: str | None = None,
    ) -> AppliedCoupon | None:
        """Re-validate the stored coupon against the current cart.

        A coupon that no longer qualifies is dropped from the session.
        """
        code = await self._sessions.get_coupon_code(session_id)
        if not code:
            return None
        try:
            return apply_coupon(
                code, cart.subtotal, calculate_shipping_cost(cart.subtotal, state)
            )
        except CouponError as error:
            logger.info("Dropping coupon %s for session %s: %s", code, session_id, error)
            await self._sessions.clear_coupon_code(session_id)
            return None

    async def summary(self, session_id: str) -> CartResponse:
        cart = await self.get_cart(session_id)
        coupon = await self.current_coupon(session_id, cart)
        shipping = calculate_shipping_cost(cart.subtotal) if cart.items else 0
        discount = 0.0
        if coupon is not None:
            if coupon.type == "free_shipping":
                shipping = 0
            else:
                discount = coupon.discount_amount
        return CartResponse(
            cart=cart,
            coupon=coupon,
            shipping_cost=shipping,
            total=round(cart.subtotal + shipping - discount, 2),
        )


def get_cart_service(
    catalog: Annotated[Catalog, Depends(get_catalog)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    guard: Annotated[SubmissionGuard, Depends(get_submission_guard)],
) -> CartService:
    return CartService(catalog, sessions, guard)


CartServiceDependency = Annotated[CartService, Depends(get_cart_service)]
