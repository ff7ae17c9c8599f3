# biztrack/billing/exceptions.py


class BillingError(Exception):
    """Base class for errors raised by the billing engine."""


class CartError(BillingError):
    pass


class OutOfStock(CartError):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__("This product is out of stock.")


class InsufficientStock(CartError):
    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(f"Only {available} units available in stock.")


class PaymentRejected(BillingError):
    def __init__(self, message: str):
        self.field = "paidAmount"
        self.message = message
        super().__init__(message)


class InvalidTransition(BillingError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move sale from {current.value} to {target.value}")


class MalformedResponse(BillingError):
    """The backend returned an object missing required fields."""


class BillingAPIError(BillingError):
    def __init__(self, message: str, status_code: int | None = None, network: bool = False):
        self.message = message
        self.status_code = status_code
        self.network = network
        super().__init__(message)


class CustomerConflict(BillingAPIError):
    pass


class SaleLocked(BillingError):
    def __init__(self, state):
        self.state = state
        super().__init__(f"Sale cannot be changed while {state.value}")
