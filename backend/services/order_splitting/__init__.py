"""
Order splitting helpers split by responsibility.
External callers should import from services.order_splitting_service.
"""
