"""Domain exceptions for the marketplace API.

Services raise these; ``karigarverse.main`` maps each class to an HTTP
status code through ``ERROR_STATUS_CODES``.
"""


class KarigarVerseError(Exception):
    """Base exception for all marketplace errors."""

    pass


class InvalidArgumentError(KarigarVerseError):
    """Raised when a request field is missing, malformed or out of range."""

    pass


class NotFoundError(KarigarVerseError):
    """Raised when an order, product, profile or cart item doesn't exist."""

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        msg = f"{entity} not found"
        if entity_id is not None:
            msg = f"{entity} not found: {entity_id}"
        super().__init__(msg)


class PermissionDeniedError(KarigarVerseError):
    """Raised when the caller does not own the resource."""

    pass


class ConflictError(KarigarVerseError):
    """Raised on duplicate unique keys, including order number collisions."""

    pass


class InvalidStateError(KarigarVerseError):
    """Raised when a status transition is not allowed."""

    pass


class InsufficientStockError(KarigarVerseError):
    """Raised when a product has fewer units than requested."""

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, Requested: {requested}"
        )


class AuthenticationError(KarigarVerseError):
    """Raised when credentials or a bearer token are rejected."""

    pass


ERROR_STATUS_CODES = {
    InvalidArgumentError: 400,
    InvalidStateError: 400,
    AuthenticationError: 401,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InsufficientStockError: 409,
}
