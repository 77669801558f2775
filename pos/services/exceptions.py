"""Domain errors raised by the service layer and mapped to HTTP status codes in the routers."""


class ProductNotFoundError(Exception):
    """Exception raised when the requested product doesn't exist or is inactive."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with id {product_id} not found")


class InsufficientStockError(Exception):
    """Exception raised when there's not enough stock to fulfill a sale."""

    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for '{product_name}' (id {product_id}). "
            f"Available: {available}, Requested: {requested}"
        )


class TransactionNotFoundError(Exception):
    """Exception raised when the referenced transaction doesn't exist."""

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with id {transaction_id} not found")


class TransactionNumberConflictError(Exception):
    """
    Raised when a unique transaction number could not be generated within the
    configured number of attempts. Callers may retry the request as-is.
    """

    retryable = True

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not allocate a unique transaction number after {attempts} attempts"
        )


class CategoryNotFoundError(Exception):
    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category with id {category_id} not found")


class DuplicateBarcodeError(Exception):
    def __init__(self, barcode: str):
        self.barcode = barcode
        super().__init__(f"Product with barcode {barcode} already exists")
