"""Order history storage for storefront."""

import copy
import logging
from dataclasses import replace
from typing import Any

from .errors import ValidationError
from .models import CartItem, Order, OrderStatus, _utc_now
from .repository import EntityRepository, Scope

logger = logging.getLogger(__name__)

ORDERS_KEY = "user_orders"


class OrderRepository(EntityRepository[Order]):
    """All users' orders in one flat array, viewed per user."""

    storage_key = ORDERS_KEY
    scope_field = "user_id"
    label = "orders"

    def _decode(self, data: dict[str, Any]) -> Order:
        return Order.from_dict(data)

    @property
    def orders(self) -> list[Order]:
        return self.items

    async def load_user_orders(self, user_id: str) -> list[Order]:
        return await self.load_scoped(user_id)

    async def create_order(self, user_id: str, items: list[CartItem], total: float) -> Order:
        """
        Create a pending order from a snapshot of cart items.

        Raises:
            ValidationError: If user_id is empty, items is empty or total is negative.
            StorageError: If the order history cannot be read or written.
        """
        if not user_id:
            raise ValidationError("user_id", "must not be empty")
        if not items:
            raise ValidationError("items", "an order needs at least one item")
        if total < 0:
            raise ValidationError("total", "must not be negative")

        order = Order.create(user_id=user_id, items=copy.deepcopy(list(items)), total=total)
        await self._add(order, Scope(self.scope_field, user_id), f"create order for {user_id}")
        logger.info("Created order %s for %s (total %.2f)", order.id, user_id, total)
        return order

    async def update_order_status(self, order_id: str, status: OrderStatus | str) -> Order | None:
        """
        Set an order's status and bump updated_at.

        Returns:
            The updated order, or None if order_id doesn't exist.

        Raises:
            ValidationError: If status is not a known OrderStatus.
        """
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValidationError("status", f"unknown order status {status!r}") from None

        return await self._replace(
            order_id,
            lambda order: replace(order, status=new_status, updated_at=_utc_now()),
            f"update status of order {order_id}",
        )

    async def advance_order_status(self, order_id: str) -> Order | None:
        """Move an order to the next status, wrapping from Delivered back to Pending."""
        return await self._replace(
            order_id,
            lambda order: replace(order, status=order.status.next(), updated_at=_utc_now()),
            f"advance status of order {order_id}",
        )

    def get_order_by_id(self, order_id: str) -> Order | None:
        return self.find(order_id)

    def clear_orders(self) -> None:
        self.clear_scope()
