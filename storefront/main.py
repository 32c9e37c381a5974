# storefront/main.py
from fastapi import FastAPI
from storefront.data.database import init_db
from storefront.api.routers import admin, carts, events, health, orders, products, users
from storefront.services.broadcast import Broadcaster, RedisBroadcaster
from storefront.utils.logging import get_logger
import uvicorn

logger = get_logger(__name__)


def create_app(broadcaster: Broadcaster | None = None, create_tables: bool = True) -> FastAPI:
    if create_tables:
        init_db()
        logger.info("Database tables ready")

    app = FastAPI(
        title="Storefront Orders",
        version="1.0.0",
    )
    app.state.broadcaster = broadcaster or RedisBroadcaster()

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(events.router)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
