# =========================================================
# BILLING API CLIENT
# requests-based access to the billing backend. Every failure
# is raised as BillingAPIError carrying the server's message.
# =========================================================

import logging

import requests

from biztrack.billing.exceptions import BillingAPIError, CustomerConflict
from biztrack.billing.models import (
    Customer,
    NewCustomer,
    Product,
    normalize_customer,
    normalize_product,
)
from biztrack.core.config import settings

logger = logging.getLogger("biztrack")


def _error_message(response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text or 'Request failed'}"

    detail = None
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("error")

    # FastAPI request validation errors come back as a list
    if isinstance(detail, list):
        return "; ".join(str(err.get("msg", err)) if isinstance(err, dict) else str(err) for err in detail)

    if detail:
        return str(detail)

    return f"HTTP error! status: {response.status_code}"


class BillingClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        session=None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.API_TIMEOUT
        self.session = session or requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs):
        url = f"{self.base_url}{endpoint}"

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Billing API connection error: {str(e)}")
            raise BillingAPIError("Failed to fetch - Cannot connect to server", network=True)

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(
                f"Billing API {method} {endpoint} failed. "
                f"Status: {response.status_code}, Detail: {message}"
            )
            raise BillingAPIError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            logger.error(f"Billing API returned invalid JSON for {method} {endpoint}")
            raise BillingAPIError("Invalid response from server", status_code=response.status_code)

    def get_all_customers(self, search: str | None = None) -> list[Customer]:
        params = {"search": search} if search else None
        data = self._request("GET", "/billing/customers", params=params)
        return [normalize_customer(raw) for raw in data]

    def get_billing_products(self, search: str | None = None) -> list[Product]:
        params = {"search": search} if search else None
        data = self._request("GET", "/billing/products", params=params)
        return [normalize_product(raw) for raw in data]

    def create_customer(self, new_customer: NewCustomer) -> Customer:
        try:
            data = self._request("POST", "/billing/customers", json=new_customer.model_dump())
        except BillingAPIError as e:
            if e.status_code == 409 or "already exists" in e.message:
                raise CustomerConflict(e.message, status_code=e.status_code)
            raise

        return normalize_customer(data)

    def create_bill(self, payload: dict) -> dict:
        return self._request("POST", "/billing/bills", json=payload)
