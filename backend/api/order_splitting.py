from fastapi import APIRouter, Depends

from schemas import OrderSplittingStatusResponse
from services.order_splitting_service import OrderSplittingService

from .deps import get_splitting_service

router = APIRouter(prefix="/api/order-splitting", tags=["order-splitting"])


@router.get("/status", response_model=OrderSplittingStatusResponse)
async def get_status(
    service: OrderSplittingService = Depends(get_splitting_service),
) -> OrderSplittingStatusResponse:
    return OrderSplittingStatusResponse(**service.get_status())
