"""API route registration."""

from fastapi import FastAPI

from storefront.api.routes import (
    analytics,
    cart,
    checkout,
    orders,
    products,
    search,
    session,
    system,
    verifications,
)


def include_api_routes(app: FastAPI) -> None:
    """Attach all API routers to the application."""

    app.include_router(system.router)
    app.include_router(products.router)
    app.include_router(search.router)
    app.include_router(session.router)
    app.include_router(cart.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(verifications.router)
    app.include_router(analytics.router)
