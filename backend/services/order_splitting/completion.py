import logging

from schemas import ShopifyOrder

from .constants import SPLIT_PROCESSED_TAG
from .tags import append_tag, join_tags

logger = logging.getLogger("truckload-splitter")


async def mark_split_processed(client, order: ShopifyOrder) -> str:
    """Append the sentinel tag to the original order and return the new tag string."""
    tags = join_tags(append_tag(order.tags, SPLIT_PROCESSED_TAG))
    await client.update_order_tags(order.id, tags)
    logger.info("Order=%s tagged %s", order.id, SPLIT_PROCESSED_TAG)
    return tags
