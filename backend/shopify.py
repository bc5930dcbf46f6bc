from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from config import Settings
from services.order_splitting.errors import CreationError, ServiceError, ShopifyRequestError, TaggingError

logger = logging.getLogger("truckload-splitter")

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


class ShopifyClient:
    """Thin async wrapper around the three Admin REST calls the splitter needs."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.admin_api_base_url,
            headers={
                "Content-Type": "application/json",
                ACCESS_TOKEN_HEADER: settings.shopify_access_token,
            },
            timeout=settings.shopify_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type[ShopifyRequestError],
        *,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise error_cls(None, str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            raise error_cls(response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as exc:
            raise error_cls(response.status_code, response.text) from exc
        return data if isinstance(data, dict) else {}

    async def get_product_metafields(self, product_id: int | str) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/products/{product_id}/metafields.json", ServiceError)
        metafields = data.get("metafields")
        return metafields if isinstance(metafields, list) else []

    async def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request("POST", "/orders.json", CreationError, json=payload)
        order = data.get("order")
        return order if isinstance(order, dict) else {}

    async def update_order_tags(self, order_id: int | str, tags: str) -> Dict[str, Any]:
        payload = {"order": {"id": order_id, "tags": tags}}
        data = await self._request("PUT", f"/orders/{order_id}.json", TaggingError, json=payload)
        order = data.get("order")
        return order if isinstance(order, dict) else {}
