"""
Exceptions raised by the sale transaction engine.

Every error carries a stable `code` that the API layer returns to the
POS client together with the human readable message.
"""

from decimal import Decimal


class SaleEngineError(Exception):
    """Base class for all sale engine errors."""

    code = "sale_error"
    fatal = False

    def __init__(self, message=None):
        super().__init__(message or self.default_message())

    def default_message(self):
        return "The sale could not be processed."

    def as_dict(self):
        return {"code": self.code, "detail": str(self)}


# Validation


class ValidationError(SaleEngineError):
    """Bad input: empty cart, bad quantity, unknown payment method."""

    code = "validation_error"


class EmptyCart(ValidationError):
    code = "empty_cart"

    def default_message(self):
        return "Cannot check out an empty cart."


class StoreMismatch(ValidationError):
    """A product of another store was offered to a store-bound cart."""

    code = "store_mismatch"

    def __init__(self, product_id, cart_store_id, product_store_id):
        self.product_id = product_id
        self.cart_store_id = cart_store_id
        self.product_store_id = product_store_id
        super().__init__(
            f"Product {product_id} belongs to store {product_store_id}, "
            f"not to the cart's store {cart_store_id}."
        )


class ProductNotFound(ValidationError):
    code = "product_not_found"

    def __init__(self, product_id, store_id=None):
        self.product_id = product_id
        self.store_id = store_id
        super().__init__(f"Product {product_id} was not found or is inactive.")


# Stock


class StockError(SaleEngineError):
    """Base class for stock shortages. The cart is left untouched."""

    code = "stock_error"

    def __init__(self, product_id, product_name, requested, available, message=None):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(message)

    def as_dict(self):
        data = super().as_dict()
        data.update(
            {
                "product_id": self.product_id,
                "product_name": self.product_name,
                "requested": self.requested,
                "available": self.available,
            }
        )
        return data


class OutOfStock(StockError):
    code = "out_of_stock"

    def __init__(self, product_id, product_name):
        super().__init__(product_id, product_name, requested=1, available=0)

    def default_message(self):
        return f"{self.product_name} is out of stock."


class InsufficientStock(StockError):
    code = "insufficient_stock"

    def default_message(self):
        return (
            f"Insufficient stock for {self.product_name}. "
            f"Available: {self.available}, Requested: {self.requested}"
        )


# Payment


class InsufficientPayment(SaleEngineError):
    code = "insufficient_payment"

    def __init__(self, total, tendered):
        self.total = total
        self.tendered = tendered
        self.shortfall = total - tendered
        super().__init__(f"Insufficient cash received. Short by {self.shortfall}.")

    def as_dict(self):
        data = super().as_dict()
        data.update(
            {
                "total": str(self.total),
                "tendered": str(self.tendered),
                "shortfall": str(self.shortfall),
            }
        )
        return data


# Store resolution


class StoreResolutionError(SaleEngineError):
    code = "store_resolution_error"


class NoStoreAssigned(StoreResolutionError):
    code = "no_store_assigned"
    fatal = True

    def default_message(self):
        return "No store is assigned to this user. Ask an administrator to assign one."


class NoStoresAvailable(StoreResolutionError):
    code = "no_stores_available"
    fatal = True

    def default_message(self):
        return "This company has no active stores."


class StoreSelectionRequired(StoreResolutionError):
    code = "store_selection_required"

    def __init__(self, stores):
        self.stores = list(stores)
        super().__init__("Select a store before opening the point of sale.")

    def as_dict(self):
        data = super().as_dict()
        data["stores"] = [{"id": str(store.id), "name": store.name} for store in self.stores]
        return data


class StoreNotAccessible(StoreResolutionError):
    code = "store_not_accessible"

    def __init__(self, store_id):
        self.store_id = store_id
        super().__init__(f"Store {store_id} is not available to this user.")


class CartSessionNotFound(SaleEngineError):
    code = "session_not_found"

    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"POS session {session_id} does not exist or has expired.")


# Reservation / persistence


class ReservationError(SaleEngineError):
    """A reservation could not be committed or released."""

    code = "reservation_error"

    def __init__(self, message=None, product_id=None):
        self.product_id = product_id
        super().__init__(message)


class SalePersistenceError(SaleEngineError):
    code = "sale_persistence_error"

    def default_message(self):
        return "The sale could not be saved. No stock was deducted."


def to_decimal(value, field="amount"):
    """Coerce user input into a Decimal or raise a ValidationError."""
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        raise ValidationError(f"Invalid {field}: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    return result
