# biztrack/billing/cart.py

import logging

from biztrack.billing.exceptions import InsufficientStock, OutOfStock
from biztrack.billing.models import CartItem, ItemId, Product
from biztrack.core.pricing import Totals, calculate_totals

logger = logging.getLogger("biztrack")


class Cart:
    """Ordered line items of the sale being built.

    Quantities never exceed the stock known for the product at the time
    of the change. A failed change leaves the cart untouched.
    """

    def __init__(self):
        self._items: dict[ItemId, CartItem] = {}

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self.items)

    def __contains__(self, item_id):
        return item_id in self._items

    @property
    def items(self) -> list[CartItem]:
        return list(self._items.values())

    def get(self, item_id: ItemId) -> CartItem | None:
        return self._items.get(item_id)

    def add(self, product: Product) -> CartItem:
        if product.stock <= 0:
            raise OutOfStock(product.name)

        existing = self._items.get(product.id)

        if existing is not None:
            new_quantity = existing.quantity + 1
            if new_quantity > product.stock:
                raise InsufficientStock(product.name, product.stock, new_quantity)

            existing.quantity = new_quantity
            existing.stock = product.stock
            return existing

        item = CartItem(
            id=product.id,
            name=product.name,
            price=product.price,
            quantity=1,
            stock=product.stock,
        )
        self._items[product.id] = item

        logger.debug(f"Added {product.name} to cart")

        return item

    def update_quantity(
        self,
        item_id: ItemId,
        quantity: int,
        product: Product | None = None,
    ) -> CartItem | None:
        """Set an item's quantity.

        Non-positive quantities and unknown ids are ignored. ``product`` is
        the latest snapshot for the item; without one the stock recorded
        when the item was last changed is used.
        """
        if quantity <= 0:
            return None

        item = self._items.get(item_id)
        if item is None:
            return None

        stock = product.stock if product is not None else item.stock

        if quantity > stock:
            raise InsufficientStock(item.name, stock, quantity)

        item.quantity = quantity
        item.stock = stock

        return item

    def remove(self, item_id: ItemId) -> None:
        self._items.pop(item_id, None)

    def clear(self) -> None:
        self._items.clear()

    def totals(self) -> Totals:
        return calculate_totals(item.total for item in self._items.values())
