"""Cart as the customer sees it.

Lines are joined against the catalog. A line whose product is gone stays
in the view, flagged unavailable, and is left out of the local subtotal.
The store's total always wins over the local one.
"""
from dataclasses import dataclass
from typing import List, Optional
import logging

from bargen.client.records import CartItem, CartTotal, Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLine:
    item: CartItem
    product: Optional[Product]

    @property
    def available(self):
        return self.product is not None

    @property
    def line_total(self):
        if self.product is None:
            return 0
        return self.product.price * self.item.quantity


@dataclass(frozen=True)
class CartView:
    lines: List[CartLine]
    local_subtotal: int
    total: CartTotal

    @property
    def unavailable_lines(self):
        return [line for line in self.lines if not line.available]

    @property
    def subtotal(self):
        return self.total.subtotal

    @property
    def grand_total(self):
        return self.total.total

    @property
    def in_sync(self):
        """Whether the local subtotal agrees with the store's."""
        return self.local_subtotal == self.total.subtotal


def build_lines(items, catalog):
    by_id = {p.id: p for p in catalog}
    return [CartLine(item, by_id.get(item.product_id)) for item in items]


def local_subtotal(lines):
    return sum(line.line_total for line in lines)


def load_cart_view(client):
    """Read lines, catalog and the authoritative total, then join them."""
    items = client.get_cart_items()
    catalog = client.browse_products_with_shop()
    total = client.get_cart_total_with_insurance()

    lines = build_lines(items, catalog)
    subtotal = local_subtotal(lines)
    view = CartView(lines=lines, local_subtotal=subtotal, total=total)
    if view.unavailable_lines:
        logger.info(
            "Cart for %s has %d unavailable line(s)",
            client.session.principal, len(view.unavailable_lines))
    if not view.in_sync:
        logger.warning(
            "Local cart subtotal %s differs from store subtotal %s for %s",
            subtotal, total.subtotal, client.session.principal)
    return view


def add_and_reload(client, product_id, quantity=1):
    """Write, then re-read. The resulting quantity is never computed here."""
    client.add_to_cart(product_id, quantity)
    return load_cart_view(client)
