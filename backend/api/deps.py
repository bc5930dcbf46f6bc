from fastapi import Request

from services.order_splitting_service import OrderSplittingService


def get_splitting_service(request: Request) -> OrderSplittingService:
    return request.app.state.splitting_service
