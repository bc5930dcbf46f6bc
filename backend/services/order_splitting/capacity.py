import logging
import re
from typing import Any, Dict, Iterable, Optional

from .constants import CAPACITY_METAFIELD_KEY, CAPACITY_METAFIELD_NAMESPACES

logger = logging.getLogger("truckload-splitter")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_capacity(value: Any) -> Optional[int]:
    """Read a positive integer the way the metafield is usually filled in.

    Accepts ``500``, ``"500"`` and ``"500 pallets"``; anything else is ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        capacity = value
    elif isinstance(value, float):
        capacity = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return None
        capacity = int(match.group(1))
    else:
        return None
    return capacity if capacity > 0 else None


def find_capacity_metafield(metafields: Iterable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    for metafield in metafields:
        if not isinstance(metafield, dict):
            continue
        if metafield.get("key") != CAPACITY_METAFIELD_KEY:
            continue
        if metafield.get("namespace") in CAPACITY_METAFIELD_NAMESPACES:
            return metafield
    return None


async def resolve_capacity(client, product_id) -> Optional[int]:
    """Return the truckload capacity of ``product_id`` or ``None`` when unset.

    ServiceError from the client propagates to the caller.
    """
    metafields = await client.get_product_metafields(product_id)
    metafield = find_capacity_metafield(metafields)
    if metafield is None:
        logger.info("No %s metafield on product=%s", CAPACITY_METAFIELD_KEY, product_id)
        return None
    capacity = parse_capacity(metafield.get("value"))
    if capacity is None:
        logger.warning(
            "Ignoring unusable %s value on product=%s: %r",
            CAPACITY_METAFIELD_KEY,
            product_id,
            metafield.get("value"),
        )
    return capacity
