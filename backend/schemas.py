from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.order_splitting.tags import parse_tags

ShopifyId = Union[int, str]


class ShopifyLineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[ShopifyId] = None
    product_id: Optional[ShopifyId] = None
    variant_id: Optional[ShopifyId] = None
    quantity: Optional[int] = None
    title: Optional[str] = None
    sku: Optional[str] = None


class ShopifyOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: ShopifyId
    name: str = ""
    tags: List[str] = Field(default_factory=list, description="Parsed from the comma-separated tag string")
    line_items: List[ShopifyLineItem]
    email: Optional[str] = None
    customer: Optional[Dict[str, Any]] = None
    shipping_address: Optional[Dict[str, Any]] = None
    billing_address: Optional[Dict[str, Any]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> List[str]:
        return parse_tags(value)

    @property
    def display_name(self) -> str:
        return self.name or f"#{self.id}"


class SplitOutcome(str, Enum):
    ALREADY_PROCESSED = "already_processed"
    NO_LINE_ITEMS = "no_line_items"
    DONE = "done"
    PARTIALLY_DONE = "partially_done"
    ABORTED = "aborted"


class ChildOrderRef(BaseModel):
    shipment_index: int
    quantity: int
    order_id: Optional[ShopifyId] = None
    name: Optional[str] = None


class ChildOrderFailure(BaseModel):
    shipment_index: int
    quantity: int
    status: Optional[int] = None
    body: str = ""


class LineItemReport(BaseModel):
    line_item_id: Optional[ShopifyId] = None
    product_id: Optional[ShopifyId] = None
    variant_id: Optional[ShopifyId] = None
    quantity: Optional[int] = None
    capacity: Optional[int] = None
    shipments: List[int] = []
    children_created: List[ChildOrderRef] = []
    children_failed: List[ChildOrderFailure] = []
    skip_reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def children_attempted(self) -> int:
        return len(self.children_created) + len(self.children_failed)


class SplitReport(BaseModel):
    order_id: ShopifyId
    order_name: str
    outcome: Optional[SplitOutcome] = None
    line_items: List[LineItemReport] = []
    tags: Optional[str] = None
    tagging_error: Optional[str] = None
    error: Optional[str] = None

    @property
    def children_created(self) -> int:
        return sum(len(item.children_created) for item in self.line_items)

    @property
    def children_failed(self) -> int:
        return sum(len(item.children_failed) for item in self.line_items)


class OrderSplittingStatusResponse(BaseModel):
    received_count: int
    split_count: int
    last_run_at: Optional[datetime]
    last_success_at: Optional[datetime]
    last_error: Optional[str]
    last_report: Optional[SplitReport] = None
