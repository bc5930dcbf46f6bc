import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config import Settings
from schemas import ShopifyOrder, SplitOutcome, SplitReport
from services.order_splitting.errors import MalformedInput
from services.order_splitting.processors import split_order

logger = logging.getLogger("truckload-splitter")


def parse_order(payload: Any) -> ShopifyOrder:
    if not isinstance(payload, dict):
        raise MalformedInput("Order payload must be a JSON object")
    if not isinstance(payload.get("line_items"), list):
        raise MalformedInput(f"Order {payload.get('id')} has no line_items array")
    try:
        return ShopifyOrder.model_validate(payload)
    except ValidationError as exc:
        raise MalformedInput(f"Invalid order payload: {exc}") from exc


class OrderSplittingService:
    def __init__(self, settings: Settings, client, claims) -> None:
        self.settings = settings
        self.client = client
        self.claims = claims
        self._received_count = 0
        self._split_count = 0
        self._last_run_at: Optional[datetime] = None
        self._last_success_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._last_report: Optional[SplitReport] = None

    async def handle_order_created(self, payload: Any) -> SplitReport:
        self._received_count += 1
        self._last_run_at = datetime.now(timezone.utc)
        try:
            order = parse_order(payload)
            report = await split_order(
                self.client,
                self.claims,
                order,
                capacity_policy=self.settings.capacity_lookup_policy,
                empty_order_policy=self.settings.empty_order_policy,
            )
        except MalformedInput as exc:
            self._last_error = str(exc)
            logger.error("Rejected order payload: %s", exc)
            raise
        except Exception as exc:
            self._last_error = str(exc)
            logger.exception("Order split failed: %s", exc)
            raise

        self._last_report = report
        if report.outcome is SplitOutcome.ABORTED:
            self._last_error = report.error
            return report
        if report.outcome is SplitOutcome.PARTIALLY_DONE:
            self._last_error = report.tagging_error
        elif report.children_failed:
            self._last_error = f"{report.children_failed} child order(s) failed for order {report.order_id}"
        else:
            self._last_error = None
        if report.outcome in (SplitOutcome.DONE, SplitOutcome.PARTIALLY_DONE):
            self._split_count += 1
        self._last_success_at = datetime.now(timezone.utc)
        logger.info(
            "Order=%s outcome=%s created=%s failed=%s",
            report.order_id,
            report.outcome.value if report.outcome else None,
            report.children_created,
            report.children_failed,
        )
        return report

    def get_status(self) -> Dict[str, Any]:
        return {
            "received_count": self._received_count,
            "split_count": self._split_count,
            "last_run_at": self._last_run_at,
            "last_success_at": self._last_success_at,
            "last_error": self._last_error,
            "last_report": self._last_report,
        }
