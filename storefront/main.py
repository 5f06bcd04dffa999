"""ASGI entry point: ``uvicorn storefront.main:app``."""

from storefront.application import create_app
from storefront.config import settings

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=not settings.is_production,
    )
