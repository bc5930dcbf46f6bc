import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from api import order_splitting_router, webhooks_router
from config import Settings, get_settings
from services.order_splitting.claims import create_claim_store
from services.order_splitting_service import OrderSplittingService
from shopify import ShopifyClient

logger = logging.getLogger("truckload-splitter")


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    claims=None,
) -> FastAPI:
    app = FastAPI(title="Truckload Splitter")
    app.state.settings = settings

    app.include_router(webhooks_router)
    app.include_router(order_splitting_router)

    @app.on_event("startup")
    async def _on_startup() -> None:
        app_settings = app.state.settings or get_settings()
        app.state.settings = app_settings
        logging.basicConfig(level=app_settings.log_level)
        client = ShopifyClient(app_settings, transport=transport)
        app.state.shopify_client = client
        app.state.splitting_service = OrderSplittingService(
            app_settings,
            client,
            claims if claims is not None else create_claim_store(app_settings),
        )
        if not app_settings.shopify_webhook_secret:
            logger.warning(
                "SHOPIFY_WEBHOOK_SECRET is not set; webhook signatures are not verified."
            )
        logger.info(
            "Splitting orders for %s (api %s, capacity lookup policy=%s)",
            app_settings.shop_domain,
            app_settings.shopify_api_version,
            app_settings.capacity_lookup_policy.value,
        )

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        client = getattr(app.state, "shopify_client", None)
        if client is not None:
            await client.aclose()

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return "OK"

    return app


app = create_app()
