import logging
from typing import Optional, Tuple

from config import CapacityLookupPolicy, EmptyOrderPolicy
from schemas import ChildOrderFailure, LineItemReport, ShopifyLineItem, ShopifyOrder, SplitOutcome, SplitReport

from .capacity import resolve_capacity
from .child_orders import create_child_order
from .completion import mark_split_processed
from .constants import (
    SKIP_CAPACITY_LOOKUP_FAILED,
    SKIP_INVALID_QUANTITY,
    SKIP_MISSING_IDENTIFIERS,
    SKIP_NO_CAPACITY,
    SKIP_WITHIN_CAPACITY,
)
from .errors import CreationError, MalformedInput, ServiceError, TaggingError
from .partition import split_quantity
from .tags import is_split_processed

logger = logging.getLogger("truckload-splitter")


def _is_missing(value) -> bool:
    return value is None or value == ""


async def _lookup_capacity(client, item: ShopifyLineItem) -> Tuple[Optional[int], Optional[ServiceError]]:
    try:
        return await resolve_capacity(client, item.product_id), None
    except ServiceError as exc:
        return None, exc


async def _create_shipments(
    client,
    order: ShopifyOrder,
    item: ShopifyLineItem,
    item_report: LineItemReport,
) -> None:
    shipment_count = len(item_report.shipments)
    for index, quantity in enumerate(item_report.shipments, start=1):
        try:
            ref = await create_child_order(client, order, item.variant_id, quantity, index, shipment_count)
        except CreationError as exc:
            logger.warning(
                "Truckload %s/%s for order=%s failed: %s", index, shipment_count, order.id, exc
            )
            item_report.children_failed.append(
                ChildOrderFailure(shipment_index=index, quantity=quantity, status=exc.status, body=exc.body)
            )
            continue
        item_report.children_created.append(ref)


async def process_line_item(client, order: ShopifyOrder, item: ShopifyLineItem) -> LineItemReport:
    item_report = LineItemReport(
        line_item_id=item.id,
        product_id=item.product_id,
        variant_id=item.variant_id,
        quantity=item.quantity,
    )
    if _is_missing(item.product_id) or _is_missing(item.variant_id):
        logger.warning("Skipping line item=%s on order=%s: missing product or variant", item.id, order.id)
        item_report.skip_reason = SKIP_MISSING_IDENTIFIERS
        return item_report
    if item.quantity is None or item.quantity <= 0:
        logger.warning("Skipping line item=%s on order=%s: quantity=%s", item.id, order.id, item.quantity)
        item_report.skip_reason = SKIP_INVALID_QUANTITY
        return item_report

    capacity, lookup_error = await _lookup_capacity(client, item)
    if lookup_error is not None:
        logger.error("Capacity lookup failed for product=%s order=%s: %s", item.product_id, order.id, lookup_error)
        item_report.skip_reason = SKIP_CAPACITY_LOOKUP_FAILED
        item_report.error = str(lookup_error)
        return item_report
    item_report.capacity = capacity
    if capacity is None:
        item_report.skip_reason = SKIP_NO_CAPACITY
        return item_report
    if item.quantity <= capacity:
        logger.info("No split needed for product=%s qty=%s capacity=%s", item.product_id, item.quantity, capacity)
        item_report.skip_reason = SKIP_WITHIN_CAPACITY
        return item_report

    item_report.shipments = split_quantity(item.quantity, capacity)
    logger.info("Splitting product=%s qty=%s into %s", item.product_id, item.quantity, item_report.shipments)
    await _create_shipments(client, order, item, item_report)
    return item_report


async def _finish(client, claims, order: ShopifyOrder, report: SplitReport) -> SplitReport:
    try:
        report.tags = await mark_split_processed(client, order)
    except TaggingError as exc:
        logger.error("Order=%s split but not tagged, a redelivery will split it again: %s", order.id, exc)
        report.tagging_error = str(exc)
        report.outcome = SplitOutcome.PARTIALLY_DONE
        await _release_after_failure(claims, order.id)
        return report
    report.outcome = SplitOutcome.DONE
    try:
        await claims.complete(order.id)
    except Exception:
        # the claim stays processing until its ttl runs out
        logger.exception("Order=%s tagged but its split claim was not finalized", order.id)
    return report


async def _release_after_failure(claims, order_id) -> None:
    try:
        await claims.release(order_id)
    except Exception:
        logger.exception("Could not release split claim for order=%s", order_id)


async def split_order(
    client,
    claims,
    order: ShopifyOrder,
    *,
    capacity_policy: CapacityLookupPolicy = CapacityLookupPolicy.ABORT,
    empty_order_policy: EmptyOrderPolicy = EmptyOrderPolicy.ACCEPT,
) -> SplitReport:
    """Split every over-capacity line item of ``order`` into truckload child orders.

    The order is tagged once at the end, whether or not every child order was
    created. A capacity lookup failure either aborts the whole order or skips the
    item, depending on ``capacity_policy``.
    """
    report = SplitReport(order_id=order.id, order_name=order.display_name)
    if is_split_processed(order.tags):
        logger.info("Order=%s already processed, skipping split", order.id)
        report.outcome = SplitOutcome.ALREADY_PROCESSED
        return report
    if not order.line_items:
        if empty_order_policy is EmptyOrderPolicy.REJECT:
            raise MalformedInput(f"Order {order.id} has no line items")
        logger.info("Order=%s has no line items", order.id)
        report.outcome = SplitOutcome.NO_LINE_ITEMS
        return report
    if not await claims.acquire(order.id):
        logger.info("Order=%s split already claimed by another delivery", order.id)
        report.outcome = SplitOutcome.ALREADY_PROCESSED
        return report

    try:
        for item in order.line_items:
            item_report = await process_line_item(client, order, item)
            report.line_items.append(item_report)
            if (
                item_report.skip_reason == SKIP_CAPACITY_LOOKUP_FAILED
                and capacity_policy is CapacityLookupPolicy.ABORT
            ):
                report.outcome = SplitOutcome.ABORTED
                report.error = item_report.error
                await claims.release(order.id)
                return report
        return await _finish(client, claims, order, report)
    except Exception:
        await _release_after_failure(claims, order.id)
        raise
