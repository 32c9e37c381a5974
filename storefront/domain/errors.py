# storefront/domain/errors.py
"""
Domain errors raised by the services.

Validation errors derive from ValueError, so routers can keep mapping
ValueError -> 400 and PermissionError -> 403.
"""


class EmptyCartError(ValueError):
    def __init__(self, message: str = "Cart is empty. Please add items to your cart first."):
        super().__init__(message)


class InvalidProductError(ValueError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class InsufficientStockError(ValueError):
    def __init__(self, product_name: str, available: int, requested: int, product_id=None):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )

    def to_detail(self) -> dict:
        return {
            "message": str(self),
            "product_id": self.product_id,
            "product": self.product_name,
            "available": self.available,
            "requested": self.requested,
        }


class InvalidStatusError(ValueError):
    def __init__(self, status, allowed):
        self.status = status
        super().__init__(f"Invalid status '{status}'. Must be one of: {', '.join(allowed)}")


class NotFoundError(LookupError):
    pass


class ForbiddenError(PermissionError):
    pass


class ConcurrencyConflictError(RuntimeError):
    pass


class StorageFailureError(RuntimeError):
    """Unexpected persistence error, the message never carries storage details."""

    def __init__(self, message: str = "Order creation failed"):
        super().__init__(message)
