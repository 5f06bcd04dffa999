"""Three-step checkout state machine: shipping, payment, review."""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends
from pydantic import ValidationError

from storefront.config import settings
from storefront.models.cart import Cart
from storefront.models.checkout import (
    CheckoutOverview,
    CheckoutSession,
    CheckoutStep,
    OrderTotals,
    PaymentSelection,
    PlaceOrderRequest,
    SavedAddress,
    ShippingAddress,
    field_errors,
)
from storefront.models.order import Order, OrderCoupon, OrderItem
from storefront.services.cart.cart_service import CartService, get_cart_service
from storefront.services.checkout.shipping import (
    GIFT_WRAP_COST,
    amount_to_free_shipping,
    calculate_estimated_delivery,
    calculate_shipping_cost,
)
from storefront.services.orders.order_store import (
    OrderStore,
    generate_order_id,
    generate_order_number,
    get_order_store,
)
from storefront.services.session.session_store import SessionStore, get_session_store
from storefront.services.session.submission_guard import (
    SubmissionGuard,
    get_submission_guard,
    simulate_latency,
)

logger = logging.getLogger(__name__)

CHECKOUT_KEY = "checkout"

_DEFERRED_PAYMENT_METHODS = {"oxxo", "spei"}


class CheckoutError(ValueError):
    """Raised when a checkout step cannot proceed.

    ``errors`` maps field names to messages for inline display.
    """

    def __init__(self, step: CheckoutStep, errors: dict[str, str]):
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.step = step
        self.errors = errors


class CheckoutStepError(RuntimeError):
    """Raised when a step is submitted out of order."""

    def __init__(self, expected: CheckoutStep, current: CheckoutStep):
        super().__init__(
            f"Checkout is at step '{current.value}', '{expected.value}' is not available yet"
        )
        self.expected = expected
        self.current = current


class CheckoutFlow:
    """Checkout progress for shopper sessions, persisted in the session store."""

    def __init__(
        self,
        sessions: SessionStore,
        carts: CartService,
        orders: OrderStore,
        guard: SubmissionGuard,
    ) -> None:
        self._sessions = sessions
        self._carts = carts
        self._orders = orders
        self._guard = guard

    async def get_session(self, session_id: str) -> CheckoutSession:
        data = await self._sessions.get_json(session_id, CHECKOUT_KEY)
        if not data:
            return CheckoutSession()
        return CheckoutSession.model_validate(data)

    async def _save(self, session_id: str, checkout: CheckoutSession) -> CheckoutSession:
        await self._sessions.set_json(session_id, CHECKOUT_KEY, checkout.model_dump(mode="json"))
        return checkout

    async def totals(
        self,
        session_id: str,
        cart: Cart,
        checkout: CheckoutSession,
    ) -> OrderTotals:
        """Price the cart for the address and gift options chosen so far.

        The stored coupon is re-validated against the current subtotal.
        """
        subtotal = cart.subtotal
        state = checkout.shipping_address.state if checkout.shipping_address else None
        coupon = await self._carts.current_coupon(session_id, cart, state)
        shipping_cost = calculate_shipping_cost(subtotal, state) if cart.items else 0
        discount = 0.0
        if coupon is not None:
            if coupon.type == "free_shipping":
                shipping_cost = 0
            else:
                discount = coupon.discount_amount
        gift_wrap_fee = GIFT_WRAP_COST if checkout.gift_wrap else 0
        return OrderTotals(
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            discount=discount,
            gift_wrap_fee=gift_wrap_fee,
            total=round(subtotal + shipping_cost + gift_wrap_fee - discount, 2),
            coupon=coupon,
            amount_to_free_shipping=amount_to_free_shipping(subtotal),
        )

    async def overview(self, session_id: str) -> CheckoutOverview:
        checkout = await self.get_session(session_id)
        cart = await self._carts.get_cart(session_id)
        return CheckoutOverview(
            checkout=checkout,
            cart=cart,
            totals=await self.totals(session_id, cart, checkout),
            default_address=await self._sessions.default_address(session_id),
        )

    @staticmethod
    def _require_step(checkout: CheckoutSession, step: CheckoutStep) -> None:
        if checkout.current_step.position < step.position:
            raise CheckoutStepError(step, checkout.current_step)

    async def submit_shipping(self, session_id: str, data: dict[str, Any]) -> CheckoutSession:
        """Validate the address and advance to the payment step."""

        try:
            address = ShippingAddress.model_validate(data)
        except ValidationError as error:
            raise CheckoutError(CheckoutStep.SHIPPING, field_errors(error)) from error

        checkout = await self.get_session(session_id)
        checkout = checkout.model_copy(
            update={"shipping_address": address, "current_step": CheckoutStep.PAYMENT}
        )
        return await self._save(session_id, checkout)

    async def submit_payment(self, session_id: str, data: dict[str, Any]) -> CheckoutSession:
        checkout = await self.get_session(session_id)
        self._require_step(checkout, CheckoutStep.PAYMENT)
        try:
            selection = PaymentSelection.model_validate(data)
        except ValidationError as error:
            errors = field_errors(error)
            if "__root__" in errors:
                errors["gift_message"] = errors.pop("__root__")
            raise CheckoutError(CheckoutStep.PAYMENT, errors) from error

        checkout = checkout.model_copy(
            update={
                "payment_method": selection.payment_method,
                "gift_wrap": selection.gift_wrap,
                "gift_message": selection.gift_message if selection.gift_wrap else None,
                "current_step": CheckoutStep.REVIEW,
            }
        )
        return await self._save(session_id, checkout)

    async def go_back(self, session_id: str, step: CheckoutStep) -> CheckoutSession:
        checkout = await self.get_session(session_id)
        self._require_step(checkout, step)
        return await self._save(session_id, checkout.model_copy(update={"current_step": step}))

    async def _purchasable(
        self,
        session_id: str,
        request: PlaceOrderRequest,
    ) -> tuple[CheckoutSession, Cart]:
        """Load the reviewed checkout and its cart, or raise why it cannot be bought."""

        checkout = await self.get_session(session_id)
        self._require_step(checkout, CheckoutStep.REVIEW)
        if not request.accept_terms:
            raise CheckoutError(
                CheckoutStep.REVIEW,
                {"accept_terms": "Debes aceptar los términos y condiciones"},
            )

        cart = await self._carts.get_cart(session_id)
        if not cart.items:
            raise CheckoutError(CheckoutStep.REVIEW, {"cart": "Tu carrito está vacío"})
        out_of_stock = [item.name for item in cart.items if not item.in_stock]
        if out_of_stock:
            raise CheckoutError(
                CheckoutStep.REVIEW,
                {"cart": "Productos sin stock: " + ", ".join(out_of_stock)},
            )

        if checkout.shipping_address is None or checkout.payment_method is None:
            raise CheckoutStepError(CheckoutStep.REVIEW, CheckoutStep.SHIPPING)
        return checkout, cart

    async def place_order(self, session_id: str, request: PlaceOrderRequest) -> Order:
        """Turn the reviewed checkout into an order.

        Raises:
            CheckoutStepError: If the review step has not been reached.
            CheckoutError: If terms are not accepted or the cart cannot be bought.
            SubmissionInProgressError: If an order is already being placed.
        """
        await self._purchasable(session_id, request)

        async with self._guard.hold("place-order", session_id):
            await simulate_latency(settings.PLACE_ORDER_DELAY_MS)
            # Re-read under the guard so a cart is bought at most once.
            checkout, cart = await self._purchasable(session_id, request)
            address = checkout.shipping_address

            totals = await self.totals(session_id, cart, checkout)
            coupon = totals.coupon
            deferred = checkout.payment_method in _DEFERRED_PAYMENT_METHODS

            order = Order(
                id=generate_order_id(),
                order_number=generate_order_number(),
                status="pending" if deferred else "confirmed",
                items=[
                    OrderItem(
                        product_id=item.product_id,
                        name=item.name,
                        quantity=item.quantity,
                        price=item.price,
                        maker=item.maker,
                        state=item.state,
                    )
                    for item in cart.items
                ],
                subtotal=totals.subtotal,
                shipping_cost=totals.shipping_cost,
                discount=totals.discount,
                gift_wrap_fee=totals.gift_wrap_fee,
                total=totals.total,
                shipping_address=address,
                payment_method=checkout.payment_method,
                payment_status="pending" if deferred else "completed",
                gift_wrap=checkout.gift_wrap,
                gift_message=checkout.gift_message,
                coupon=(
                    OrderCoupon(
                        code=coupon.code,
                        type=coupon.type,
                        value=coupon.value,
                        discount_amount=coupon.discount_amount,
                    )
                    if coupon
                    else None
                ),
                notes=request.notes,
                estimated_delivery=calculate_estimated_delivery(address.state),
            )
            await self._orders.save(order)

            if request.save_address:
                await self._sessions.save_address(
                    session_id,
                    SavedAddress(
                        **address.model_dump(),
                        id=f"addr-{secrets.token_hex(4)}",
                        is_default=True,
                        label="Casa",
                    ),
                )
            await self._carts.clear(session_id)
            await self._sessions.clear_coupon_code(session_id)
            await self._sessions.delete(session_id, CHECKOUT_KEY)

        logger.info(
            "Order placed",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "total": order.total,
                "placed_at": datetime.now(UTC).isoformat(),
            },
        )
        return order


def get_checkout_flow(
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    carts: Annotated[CartService, Depends(get_cart_service)],
    orders: Annotated[OrderStore, Depends(get_order_store)],
    guard: Annotated[SubmissionGuard, Depends(get_submission_guard)],
) -> CheckoutFlow:
    return CheckoutFlow(sessions, carts, orders, guard)


CheckoutFlowDependency = Annotated[CheckoutFlow, Depends(get_checkout_flow)]
