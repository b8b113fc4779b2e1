PENDING = "pending"
PROCESSING = "processing"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCELLED = "cancelled"

# customers may only cancel before the order ships
ALLOWED_TRANSITIONS = {
    PENDING: [PROCESSING, CANCELLED],
    PROCESSING: [SHIPPED, CANCELLED],
    SHIPPED: [DELIVERED],
    DELIVERED: [],
    CANCELLED: [],
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get((current or "").lower(), [])
