from typing import Optional


class OrderSplittingError(Exception):
    """Base class for failures raised while splitting an order."""


class MalformedInput(OrderSplittingError):
    """The inbound order payload cannot be processed."""


class ShopifyRequestError(OrderSplittingError):
    action = "request"

    def __init__(self, status: Optional[int], body: str, message: Optional[str] = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message or f"Shopify {self.action} failed (status={status}): {body}")


class ServiceError(ShopifyRequestError):
    """Capacity lookup could not reach the catalog or got a non-success answer."""

    action = "metafield lookup"


class CreationError(ShopifyRequestError):
    action = "order creation"


class TaggingError(ShopifyRequestError):
    action = "order tag update"
