# tests/conftest.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List

import pytest

from config import Settings
from services.order_splitting.claims import InMemoryClaimStore
from services.order_splitting.errors import CreationError, ServiceError, TaggingError


def capacity_metafield(value: Any, namespace: str = "custom", key: str = "truckload_capacity") -> Dict[str, Any]:
    return {"id": 1, "namespace": namespace, "key": key, "value": value}


def make_order(**overrides: Any) -> Dict[str, Any]:
    order = {
        "id": 5551001,
        "name": "#1001",
        "tags": "wholesale",
        "email": "buyer@example.com",
        "customer": {"id": 42, "email": "buyer@example.com", "first_name": "Ada"},
        "shipping_address": {"address1": "1 Depot Rd", "city": "Springfield"},
        "billing_address": {"address1": "1 Depot Rd", "city": "Springfield"},
        "line_items": [
            {"id": 11, "product_id": 100, "variant_id": 200, "quantity": 2300, "title": "Gravel"},
        ],
    }
    order.update(overrides)
    return order


class FakeShopifyClient:
    """Records every call the splitter makes; failures are injected per call."""

    def __init__(
        self,
        metafields: Dict[Any, List[Dict[str, Any]]] | None = None,
        *,
        failing_products: Iterable[Any] = (),
        failing_creates: Iterable[int] = (),
        fail_tagging: bool = False,
    ) -> None:
        self.metafields = metafields or {}
        self.failing_products = set(failing_products)
        self.failing_creates = set(failing_creates)
        self.fail_tagging = fail_tagging
        self.calls: List[tuple] = []
        self.created: List[Dict[str, Any]] = []
        self.tag_updates: List[tuple] = []

    async def get_product_metafields(self, product_id):
        self.calls.append(("metafields", product_id))
        if product_id in self.failing_products:
            raise ServiceError(503, "Service Unavailable")
        return self.metafields.get(product_id, [])

    async def create_order(self, payload):
        self.calls.append(("create", payload))
        self.created.append(payload)
        attempt = len(self.created)
        if attempt in self.failing_creates:
            raise CreationError(422, '{"errors":{"line_items":["is invalid"]}}')
        return {"id": 9000 + attempt, "name": f"#{9000 + attempt}"}

    async def update_order_tags(self, order_id, tags):
        self.calls.append(("tags", order_id, tags))
        if self.fail_tagging:
            raise TaggingError(500, "Internal Server Error")
        self.tag_updates.append((order_id, tags))
        return {"id": order_id, "tags": tags}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        shop="truckload-test",
        shopify_access_token="shpat_test",
        shopify_webhook_secret="hush",
    )


@pytest.fixture
def claims() -> InMemoryClaimStore:
    return InMemoryClaimStore(ttl_seconds=900)
