from typing import List


def split_quantity(quantity: int, capacity: int) -> List[int]:
    """Break ``quantity`` into full truckloads of ``capacity`` plus the remainder.

    ``split_quantity(2300, 500) == [500, 500, 500, 500, 300]``
    """
    if quantity <= 0:
        raise ValueError(f"quantity must be positive, got {quantity}")
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")
    if quantity <= capacity:
        return [quantity]
    full_loads, remainder = divmod(quantity, capacity)
    shipments = [capacity] * full_loads
    if remainder:
        shipments.append(remainder)
    return shipments
