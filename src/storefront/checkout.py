"""Checkout pricing and order placement."""

import logging
from dataclasses import dataclass
from typing import Iterable

from .aggregates import cart_item_count, cart_original_total, cart_total, round_money
from .cart import CartRepository
from .errors import EmptyCartError, NotAuthenticatedError, StorageError
from .models import CartItem, Order
from .orders import OrderRepository
from .session import SessionManager

logger = logging.getLogger(__name__)

SHIPPING_FEE = 6.95
TAX_RATE = 0.094


@dataclass(frozen=True)
class CheckoutSummary:
    """Cost breakdown shown before payment. Money values are rounded to cents."""

    original_subtotal: float
    subtotal: float
    discount: float
    shipping: float
    taxes: float
    total: float
    item_count: int

    @classmethod
    def from_items(cls, items: Iterable[CartItem]) -> "CheckoutSummary":
        items = list(items)
        subtotal = cart_total(items)
        original = cart_original_total(items)
        shipping = SHIPPING_FEE if items else 0.0
        taxes = round_money(subtotal * TAX_RATE)
        return cls(
            original_subtotal=round_money(original),
            subtotal=round_money(subtotal),
            discount=round_money(max(original - subtotal, 0.0)),
            shipping=shipping,
            taxes=taxes,
            total=round_money(subtotal + shipping + taxes),
            item_count=cart_item_count(items),
        )


async def place_order(
    session: SessionManager, cart: CartRepository, orders: OrderRepository
) -> Order:
    """
    Turn the logged-in user's cart into a pending order and empty the cart.

    If the order cannot be stored the cart is left as it was. Once the order
    is stored, a failure to empty the cart is logged and the order is still
    returned; the cart keeps its items until the next successful write.

    Raises:
        NotAuthenticatedError: If nobody is logged in.
        EmptyCartError: If the cart has no items.
        StorageError: If the order cannot be written.
    """
    if not session.is_logged_in or session.username is None:
        raise NotAuthenticatedError("check out")
    username = session.username

    if cart.user_id != username:
        await cart.load_cart(username)
    items = list(cart.cart_items)
    if not items:
        raise EmptyCartError(username)

    summary = CheckoutSummary.from_items(items)
    order = await orders.create_order(username, items, summary.total)
    try:
        await cart.clear()
    except StorageError as e:
        logger.error("Order %s placed but cart for %s was not emptied: %s", order.id, username, e)
    logger.info("Checked out %d item(s) for %s as order %s", summary.item_count, username, order.id)
    return order
