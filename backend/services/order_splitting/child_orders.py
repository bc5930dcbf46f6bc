import logging
from typing import Any, Dict

from schemas import ChildOrderRef, ShopifyId, ShopifyOrder

from .constants import CHILD_NOTE_TEMPLATE, PARENT_TAG_TEMPLATE, SHIPMENT_TAG_TEMPLATE
from .tags import join_tags

logger = logging.getLogger("truckload-splitter")


def child_order_tags(parent: ShopifyOrder, shipment_index: int) -> str:
    return join_tags(
        [
            SHIPMENT_TAG_TEMPLATE.format(index=shipment_index),
            PARENT_TAG_TEMPLATE.format(name=parent.display_name),
        ]
    )


def build_child_order_payload(
    parent: ShopifyOrder,
    variant_id: ShopifyId,
    quantity: int,
    shipment_index: int,
    shipment_count: int,
) -> Dict[str, Any]:
    order: Dict[str, Any] = {
        "line_items": [{"variant_id": variant_id, "quantity": quantity}],
        "tags": child_order_tags(parent, shipment_index),
        "note": CHILD_NOTE_TEMPLATE.format(
            index=shipment_index,
            count=shipment_count,
            name=parent.display_name,
            order_id=parent.id,
        ),
    }
    if parent.email:
        order["email"] = parent.email
    customer_id = (parent.customer or {}).get("id")
    if customer_id:
        order["customer"] = {"id": customer_id}
    if parent.shipping_address:
        order["shipping_address"] = parent.shipping_address
    if parent.billing_address:
        order["billing_address"] = parent.billing_address
    return {"order": order}


async def create_child_order(
    client,
    parent: ShopifyOrder,
    variant_id: ShopifyId,
    quantity: int,
    shipment_index: int,
    shipment_count: int,
) -> ChildOrderRef:
    payload = build_child_order_payload(parent, variant_id, quantity, shipment_index, shipment_count)
    created = await client.create_order(payload)
    ref = ChildOrderRef(
        shipment_index=shipment_index,
        quantity=quantity,
        order_id=created.get("id"),
        name=created.get("name"),
    )
    logger.info(
        "Created truckload %s/%s for order=%s qty=%s child=%s",
        shipment_index,
        shipment_count,
        parent.id,
        quantity,
        ref.order_id,
    )
    return ref
