"""Wiring of the store, session and repositories into one application object."""

from typing import Any

from .cart import CartRepository
from .checkout import CheckoutSummary, place_order
from .errors import NotAuthenticatedError, ValidationError
from .models import CartItem, Order, Product, ProductVariation, Review
from .orders import OrderRepository
from .products import ProductRepository
from .reviews import ReviewRepository
from .session import SessionManager, SessionState
from .storage import FileStore, KeyValueStore


class Storefront:
    """
    One instance per process. Repositories follow the session: they load the
    new user's data on login and drop their views on logout.
    """

    def __init__(self, store: KeyValueStore | None = None):
        self.store = store if store is not None else FileStore()
        self.session = SessionManager(self.store)
        self.products = ProductRepository(self.store)
        self.cart = CartRepository(self.store)
        self.orders = OrderRepository(self.store)
        self.reviews = ReviewRepository(self.store)

        for repository in (self.products, self.cart, self.orders, self.reviews):
            self.session.subscribe(repository.on_session_change)

    def _current_user(self, action: str) -> str:
        if not self.session.is_logged_in or self.session.username is None:
            raise NotAuthenticatedError(action)
        return self.session.username

    async def start(self) -> SessionState:
        return await self.session.restore()

    async def login(self, username: str, password: str) -> str:
        return await self.session.login(username, password)

    async def logout(self) -> None:
        await self.session.logout()

    async def create_product(
        self,
        name: str,
        description: str,
        price: float,
        discount_percentage: float | None = None,
        variations: list[ProductVariation] | list[dict[str, Any]] | None = None,
    ) -> Product:
        user_id = self._current_user("create a product")
        return await self.products.create_product(
            user_id, name, description, price, discount_percentage, variations
        )

    async def update_product(
        self,
        product_id: str,
        name: str,
        description: str,
        price: float,
        discount_percentage: float | None = None,
        variations: list[ProductVariation] | list[dict[str, Any]] | None = None,
    ) -> Product | None:
        updated = await self.products.update_product(
            product_id, name, description, price, discount_percentage, variations
        )
        await self.refresh_cart()
        return updated

    async def delete_product(self, product_id: str) -> bool:
        removed = await self.products.delete_product(product_id)
        await self.refresh_cart()
        return removed

    async def refresh_cart(self) -> list[CartItem]:
        """Bring cart snapshots in line with the full catalog."""
        if self.cart.user_id is None:
            return []
        catalog = await self.products.load_all()
        return await self.cart.refresh_from_products(catalog)

    async def add_to_cart(
        self, product_id: str, selected_variations: dict[str, str] | None = None
    ) -> list[CartItem]:
        """
        Add a catalog product to the cart by id.

        Raises:
            ValidationError: If the product doesn't exist.
        """
        self._current_user("add to cart")
        product = self.products.get_product(product_id)
        if product is None:
            catalog = await self.products.load_all()
            product = next((p for p in catalog if p.id == product_id), None)
        if product is None:
            raise ValidationError("product_id", f"no product with id {product_id}")
        return await self.cart.add_item(product, selected_variations)

    async def review_product(self, product_id: str, rating: int, comment: str) -> Review:
        user_id = self._current_user("review a product")
        return await self.reviews.create_review(product_id, user_id, user_id, rating, comment)

    def checkout_summary(self) -> CheckoutSummary:
        return CheckoutSummary.from_items(self.cart.cart_items)

    async def checkout(self) -> Order:
        return await place_order(self.session, self.cart, self.orders)
