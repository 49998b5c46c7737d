"""Shopping cart storage for storefront."""

import copy
import logging
from dataclasses import replace
from typing import Any, Callable, Iterable

from . import aggregates
from .errors import NotAuthenticatedError, ValidationError
from .models import CartItem, Product, UserCart
from .repository import EntityRepository, Scope

logger = logging.getLogger(__name__)

CART_KEY = "user_cart"


def _check_selection(product: Product, selected: dict[str, str] | None) -> None:
    """
    Require exactly one valid option for each variation the product declares.

    Raises:
        ValidationError: On a missing, unknown or invalid selection.
    """
    selected = selected or {}
    declared = {v.name: v.options for v in product.variations or []}

    for name in selected:
        if name not in declared:
            raise ValidationError(
                f"selected_variations.{name}", f"product {product.id} has no such variation"
            )
    for name, options in declared.items():
        choice = selected.get(name)
        if choice is None:
            raise ValidationError(f"selected_variations.{name}", "a selection is required")
        if choice not in options:
            raise ValidationError(f"selected_variations.{name}", f"{choice!r} is not an option")


class CartRepository(EntityRepository[UserCart]):
    """
    Carts stored as one array of per-user shards ({userId, cartItems}).

    The in-memory view is the cart items of the current user's shard.
    """

    storage_key = CART_KEY
    scope_field = "user_id"
    label = "carts"

    def __init__(self, store):
        super().__init__(store)
        self.items: list[CartItem] = []  # type: ignore[assignment]

    def _decode(self, data: dict[str, Any]) -> UserCart:
        return UserCart.from_dict(data)

    def _publish(self, carts: list[UserCart], scope: Scope) -> None:
        self.scope = scope
        shard = next((cart for cart in carts if scope.includes(cart)), None)
        self.items = list(shard.cart_items) if shard else []  # type: ignore[assignment]

    @property
    def user_id(self) -> str | None:
        return self.scope.value if self.scope else None

    @property
    def cart_items(self) -> list[CartItem]:
        return self.items  # type: ignore[return-value]

    def _require_user(self, action: str) -> str:
        if self.user_id is None:
            raise NotAuthenticatedError(action)
        return self.user_id

    async def load_cart(self, user_id: str) -> list[CartItem]:
        return await self.load_scoped(user_id)  # type: ignore[return-value]

    async def _mutate(
        self, action: str, change: Callable[[list[CartItem]], list[CartItem]]
    ) -> list[CartItem]:
        """Read-modify-write the current user's shard, then publish it."""
        user_id = self._require_user(action)
        carts = await self._read_all()
        shard = next((cart for cart in carts if cart.user_id == user_id), None)
        if shard is None:
            shard = UserCart(user_id=user_id)
            carts.append(shard)

        shard.cart_items = change(list(shard.cart_items))
        await self._save(carts, action)
        self.items = list(shard.cart_items)  # type: ignore[assignment]
        return self.cart_items

    @staticmethod
    def _targets(
        item: CartItem, product_id: str, selected_variations: dict[str, str] | None
    ) -> bool:
        if selected_variations is None:
            return item.product.id == product_id
        return item.matches(product_id, selected_variations)

    async def add_item(
        self, product: Product, selected_variations: dict[str, str] | None = None
    ) -> list[CartItem]:
        """
        Add one unit of a product.

        An existing row with the same product and selection gets its quantity
        bumped instead of a duplicate row being added.

        Raises:
            ValidationError: If the variation selection doesn't fit the product.
            NotAuthenticatedError: If no cart is loaded.
        """
        _check_selection(product, selected_variations)
        selection = dict(selected_variations) if selected_variations else None

        def change(items: list[CartItem]) -> list[CartItem]:
            for i, item in enumerate(items):
                if item.matches(product.id, selection):
                    items[i] = replace(item, quantity=item.quantity + 1)
                    return items
            items.append(
                CartItem(product=copy.deepcopy(product), quantity=1, selected_variations=selection)
            )
            return items

        return await self._mutate(f"add {product.id} to cart", change)

    async def set_quantity(
        self,
        product_id: str,
        quantity: int,
        selected_variations: dict[str, str] | None = None,
    ) -> list[CartItem]:
        """
        Set the quantity of a product's rows. Zero or less removes them.

        Without selected_variations every row of the product is affected.
        """
        if quantity <= 0:
            return await self.remove_item(product_id, selected_variations)

        def change(items: list[CartItem]) -> list[CartItem]:
            return [
                replace(item, quantity=quantity)
                if self._targets(item, product_id, selected_variations)
                else item
                for item in items
            ]

        return await self._mutate(f"set quantity of {product_id}", change)

    async def remove_item(
        self, product_id: str, selected_variations: dict[str, str] | None = None
    ) -> list[CartItem]:
        def change(items: list[CartItem]) -> list[CartItem]:
            return [item for item in items if not self._targets(item, product_id, selected_variations)]

        return await self._mutate(f"remove {product_id} from cart", change)

    def find(self, product_id: str) -> CartItem | None:  # type: ignore[override]
        """First row of the loaded cart holding product_id."""
        for item in self.cart_items:
            if item.product.id == product_id:
                return item
        return None

    async def delete(self, product_id: str) -> bool:
        """
        Remove every row of a product from the current cart.

        Returns:
            True if a row was removed. A product not in the cart skips the write.

        Raises:
            NotAuthenticatedError: If no cart is loaded.
        """
        user_id = self._require_user(f"delete {product_id} from cart")
        carts = await self._read_all()
        shard = next((cart for cart in carts if cart.user_id == user_id), None)
        if shard is None or not any(item.product.id == product_id for item in shard.cart_items):
            logger.debug("No cart row for %s; nothing to delete", product_id)
            return False

        await self.remove_item(product_id)
        return True

    async def clear(self) -> list[CartItem]:
        return await self._mutate("clear cart", lambda items: [])

    async def refresh_from_products(self, current_products: Iterable[Product]) -> list[CartItem]:
        """
        Re-sync product snapshots in the current cart with the catalog.

        Rows whose product is missing from current_products are dropped, so
        pass the full catalog rather than one user's view. Does nothing when
        no cart is loaded.
        """
        if self.user_id is None:
            return []
        catalog = {product.id: product for product in current_products}

        carts = await self._read_all()
        shard = next((cart for cart in carts if cart.user_id == self.user_id), None)
        if shard is None:
            self.items = []  # type: ignore[assignment]
            return self.cart_items

        refreshed: list[CartItem] = []
        for item in shard.cart_items:
            current = catalog.get(item.product.id)
            if current is None:
                logger.info("Dropping cart row for deleted product %s", item.product.id)
                continue
            if current != item.product:
                item = replace(item, product=copy.deepcopy(current))
            refreshed.append(item)

        if refreshed != shard.cart_items:
            shard.cart_items = refreshed
            await self._save(carts, "refresh cart items")
        self.items = refreshed  # type: ignore[assignment]
        return self.cart_items

    def total(self) -> float:
        return aggregates.cart_total(self.cart_items)

    def original_total(self) -> float:
        return aggregates.cart_original_total(self.cart_items)

    def discount_total(self) -> float:
        return aggregates.round_money(self.original_total() - self.total())

    def item_count(self) -> int:
        return aggregates.cart_item_count(self.cart_items)
