# Sentinel tag marking an order whose truckload split already ran
SPLIT_PROCESSED_TAG = "Split-Processed"

# Product metafield holding the per-shipment capacity
CAPACITY_METAFIELD_KEY = "truckload_capacity"
CAPACITY_METAFIELD_NAMESPACES = ("custom", "logistics")

SHIPMENT_TAG_TEMPLATE = "Truckload {index}"
PARENT_TAG_TEMPLATE = "Split from {name}"
CHILD_NOTE_TEMPLATE = "Truckload {index} of {count} split from order {name} (id {order_id})."

# Line item skip reasons reported by the orchestrator
SKIP_MISSING_IDENTIFIERS = "missing_identifiers"
SKIP_INVALID_QUANTITY = "invalid_quantity"
SKIP_CAPACITY_LOOKUP_FAILED = "capacity_lookup_failed"
SKIP_NO_CAPACITY = "no_capacity"
SKIP_WITHIN_CAPACITY = "within_capacity"
