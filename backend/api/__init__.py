from .order_splitting import router as order_splitting_router
from .webhooks import router as webhooks_router

__all__ = [
    "order_splitting_router",
    "webhooks_router",
]
