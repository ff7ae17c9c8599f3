# =========================================================
# BILLING SESSION
#
# One in-progress sale at the till: product and customer
# lookups, the cart, payment fields, validation errors and the
# sale lifecycle. Owned by the presentation layer and passed
# explicitly; nothing here is module-level state.
# =========================================================

import logging
from decimal import Decimal
from uuid import uuid4

from biztrack.billing.cart import Cart
from biztrack.billing.client import BillingClient
from biztrack.billing.exceptions import (
    BillingAPIError,
    BillingError,
    CartError,
    CustomerConflict,
    PaymentRejected,
    SaleLocked,
)
from biztrack.billing.models import Customer, ItemId, NewCustomer, Product, Receipt
from biztrack.billing.notifier import LoggingNotifier, Notifier
from biztrack.billing.submitter import (
    build_payload,
    build_receipt,
    notify_low_stock,
    sold_items,
)
from biztrack.billing.validation import (
    SaleState,
    check_transition,
    paid_amount_error,
    validate_new_customer,
    validate_sale,
)
from biztrack.core.config import settings
from biztrack.core.pricing import PAYMENT_METHODS, Totals, to_money

logger = logging.getLogger("biztrack")


def _describe(error: BillingError, default: str) -> str:
    if isinstance(error, BillingAPIError):
        return error.message or default
    return str(error) or default


class BillingSession:
    def __init__(self, api: BillingClient | None = None, notifier: Notifier | None = None):
        self.api = api or BillingClient()
        self.notifier = notifier or LoggingNotifier()

        self.products: list[Product] = []
        self.customers: list[Customer] = []

        self.cart = Cart()
        self.selected_customer: Customer | None = None
        self.show_customer_form = False
        self.payment_method: str | None = settings.DEFAULT_PAYMENT_METHOD
        self.paid_amount = Decimal("0.00")
        self.notes = ""

        self.validation_errors: dict[str, str] = {}
        self.receipt: Receipt | None = None
        self.state = SaleState.BUILDING

        # Reused across retries of the same sale so the backend can dedupe
        self.request_id = uuid4().hex

        self._saving_customer = False

    # -------------------------------------------------------
    # State
    # -------------------------------------------------------
    @property
    def is_processing(self) -> bool:
        return self.state == SaleState.SUBMITTING or self._saving_customer

    @property
    def totals(self) -> Totals:
        return self.cart.totals()

    def _transition(self, target: SaleState) -> None:
        self.state = check_transition(self.state, target)

    def _require_building(self) -> None:
        if self.state != SaleState.BUILDING or self._saving_customer:
            raise SaleLocked(self.state)

    # -------------------------------------------------------
    # Lookups
    # -------------------------------------------------------
    def load_products(self, search: str | None = None) -> list[Product]:
        try:
            self.products = self.api.get_billing_products(search or None)
        except BillingError as e:
            logger.error(f"Error loading products: {str(e)}")
            self.notifier.error("Failed to load products", _describe(e, "Please try again"))

        return self.products

    def load_customers(self, search: str | None = None) -> list[Customer]:
        try:
            self.customers = self.api.get_all_customers(search or None)
        except BillingError as e:
            logger.error(f"Error loading customers: {str(e)}")
            self.notifier.error("Failed to load customers", _describe(e, "Please try again"))

        return self.customers

    def find_product(self, product_id: ItemId) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    # -------------------------------------------------------
    # Cart
    # -------------------------------------------------------
    def add_to_cart(self, product: Product):
        self._require_building()

        try:
            item = self.cart.add(product)
        except CartError as e:
            self.notifier.error(str(e))
            raise

        self.validation_errors.pop("cart", None)
        return item

    def update_quantity(self, item_id: ItemId, quantity: int):
        self._require_building()

        try:
            return self.cart.update_quantity(item_id, quantity, self.find_product(item_id))
        except CartError as e:
            self.notifier.error(str(e))
            raise

    def remove_item(self, item_id: ItemId) -> None:
        self._require_building()
        self.cart.remove(item_id)

    # -------------------------------------------------------
    # Customer
    # -------------------------------------------------------
    def select_customer(self, customer: Customer | None) -> None:
        self._require_building()
        self.selected_customer = customer
        self.validation_errors.pop("customer", None)

    def open_customer_form(self) -> None:
        self.show_customer_form = True

    def close_customer_form(self) -> None:
        self.show_customer_form = False

    def create_customer(self, new_customer: NewCustomer) -> Customer | None:
        """Create a customer inline and select it.

        Returns None when the form is invalid or the backend refuses it;
        the reasons are left in ``validation_errors``.
        """
        self._require_building()

        errors = validate_new_customer(new_customer)
        if errors:
            self.validation_errors = errors
            return None

        self._saving_customer = True
        try:
            customer = self.api.create_customer(new_customer)
        except BillingError as e:
            message = _describe(e, "Failed to create customer")
            logger.error(f"Error creating customer: {message}")

            if isinstance(e, CustomerConflict):
                self.validation_errors = {"email": message}
            else:
                self.validation_errors = {"general": message}

            self.notifier.error("Failed to create customer", message)
            return None
        finally:
            self._saving_customer = False

        self.selected_customer = customer
        self.show_customer_form = False
        self.validation_errors = {}

        self.load_customers()
        self.notifier.success("Customer created successfully")

        return customer

    # -------------------------------------------------------
    # Payment
    # -------------------------------------------------------
    def set_payment_method(self, method: str | None) -> None:
        self._require_building()

        if method is not None and method not in PAYMENT_METHODS:
            raise ValueError(f"Unsupported payment method: {method}")

        self.payment_method = method
        if method:
            self.validation_errors.pop("payment", None)

    def set_paid_amount(self, amount) -> None:
        """Set the amount tendered; rejected amounts leave the old value."""
        self._require_building()

        try:
            amount = to_money(amount)
        except (ArithmeticError, TypeError, ValueError):
            amount = None

        if amount is None or not amount.is_finite():
            self.validation_errors["paidAmount"] = "Invalid payment amount"
            raise PaymentRejected("Invalid payment amount")

        message = paid_amount_error(amount, self.totals.total)

        if message:
            self.validation_errors["paidAmount"] = message
            raise PaymentRejected(message)

        self.paid_amount = amount
        self.validation_errors.pop("paidAmount", None)

    def set_notes(self, notes: str) -> None:
        self._require_building()
        self.notes = notes or ""

    # -------------------------------------------------------
    # Submission
    # -------------------------------------------------------
    def validate(self) -> bool:
        self._transition(SaleState.VALIDATING)

        self.validation_errors = validate_sale(
            customer=self.selected_customer,
            item_count=len(self.cart),
            payment_method=self.payment_method,
            paid_amount=self.paid_amount,
            total=self.totals.total,
        )

        if self.validation_errors:
            self._transition(SaleState.INVALID)
            self._transition(SaleState.BUILDING)
            return False

        self._transition(SaleState.VALID)
        return True

    def submit_sale(self) -> Receipt | None:
        if not self.validate():
            return None

        self._transition(SaleState.SUBMITTING)

        customer = self.selected_customer
        items = self.cart.items
        payload = build_payload(
            customer=customer,
            items=items,
            totals=self.totals,
            payment_method=self.payment_method,
            paid_amount=self.paid_amount,
            notes=self.notes,
            request_id=self.request_id,
        )

        try:
            created = self.api.create_bill(payload)
            receipt = build_receipt(
                created,
                customer=customer,
                items=items,
                payment_method=self.payment_method,
                paid_amount=self.paid_amount,
                notes=self.notes,
            )
            sold = sold_items(created)
        except BillingError as e:
            self._transition(SaleState.FAILED)

            message = _describe(e, "Failed to complete sale")
            logger.error(f"Error completing sale: {message}")

            self.validation_errors = {"general": message}
            self.notifier.error("Failed to complete sale", message)

            # Cart stays as it was so the sale can be retried
            self._transition(SaleState.BUILDING)
            return None
        except Exception:
            # Unlock before propagating so the till is never left submitting
            logger.exception("Unexpected error completing sale")
            self._transition(SaleState.FAILED)
            self.validation_errors = {"general": "Failed to complete sale"}
            self._transition(SaleState.BUILDING)
            raise

        self._transition(SaleState.COMPLETED)
        self.receipt = receipt

        notify_low_stock(sold, self.notifier)
        self.notifier.success(
            "Sale completed successfully!",
            f"Invoice #{receipt.invoice_number}",
        )
        logger.info(f"Sale {receipt.invoice_number} completed. Total: {receipt.total}")

        self._reset_form()
        self._transition(SaleState.BUILDING)

        self.load_products()

        return receipt

    def start_new_sale(self) -> None:
        self._require_building()
        self._reset_form()
        self.receipt = None

    def _reset_form(self) -> None:
        self.cart.clear()
        self.selected_customer = None
        self.payment_method = settings.DEFAULT_PAYMENT_METHOD
        self.paid_amount = Decimal("0.00")
        self.notes = ""
        self.validation_errors = {}
        self.request_id = uuid4().hex
