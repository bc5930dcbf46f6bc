import json
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from auth import verify_shopify_webhook
from schemas import SplitOutcome
from services.order_splitting_service import OrderSplittingService

from .deps import get_splitting_service

logger = logging.getLogger("truckload-splitter")

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

OUTCOME_TEXT = {
    SplitOutcome.ALREADY_PROCESSED: "Already processed",
    SplitOutcome.NO_LINE_ITEMS: "No line items",
    SplitOutcome.DONE: "Split processed",
    SplitOutcome.PARTIALLY_DONE: "Split processed, tagging failed",
    SplitOutcome.ABORTED: "Error",
}


def _server_error() -> PlainTextResponse:
    return PlainTextResponse("Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post("/orders/create", response_class=PlainTextResponse)
async def order_created(
    body: bytes = Depends(verify_shopify_webhook),
    service: OrderSplittingService = Depends(get_splitting_service),
) -> PlainTextResponse:
    try:
        payload = json.loads(body)
    except ValueError as exc:
        logger.error("Webhook body is not valid JSON: %s", exc)
        return _server_error()
    try:
        report = await service.handle_order_created(payload)
    except Exception:
        # logged by the service
        return _server_error()
    if report.outcome is SplitOutcome.ABORTED:
        return _server_error()
    return PlainTextResponse(OUTCOME_TEXT[report.outcome])
