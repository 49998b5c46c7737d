"""Product catalog storage for storefront."""

import logging
from dataclasses import replace
from typing import Any

from .errors import ValidationError
from .models import Product, ProductVariation
from .repository import EntityRepository, Scope
from .schemas import ProductInput, validate_input

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "products"


class ProductRepository(EntityRepository[Product]):
    """All users' products in one flat array, viewed per owning user."""

    storage_key = PRODUCTS_KEY
    scope_field = "user_id"
    label = "products"

    def _decode(self, data: dict[str, Any]) -> Product:
        return Product.from_dict(data)

    @property
    def products(self) -> list[Product]:
        return self.items

    async def load_user_products(self, user_id: str) -> list[Product]:
        return await self.load_scoped(user_id)

    async def create_product(
        self,
        user_id: str,
        name: str,
        description: str,
        price: float,
        discount_percentage: float | None = None,
        variations: list[ProductVariation] | list[dict[str, Any]] | None = None,
    ) -> Product:
        """
        Create a product owned by user_id.

        Args:
            price: List price. With a non-zero discount the stored price is the
                discounted one and the list price is kept as original_price.

        Raises:
            ValidationError: If any field is out of range.
            StorageError: If the catalog cannot be read or written.
        """
        if not user_id:
            raise ValidationError("user_id", "must not be empty")
        fields = validate_input(
            ProductInput,
            name=name,
            description=description,
            price=price,
            discount_percentage=discount_percentage,
            variations=variations,
        )
        effective, original, discount = fields.pricing()
        product = Product.create(
            name=fields.name,
            description=fields.description,
            price=effective,
            user_id=user_id,
            original_price=original,
            discount_percentage=discount,
            variations=fields.product_variations(),
        )
        await self._add(product, Scope(self.scope_field, user_id), f"create product {fields.name!r}")
        logger.debug("Created product %s for %s", product.id, user_id)
        return product

    async def update_product(
        self,
        product_id: str,
        name: str,
        description: str,
        price: float,
        discount_percentage: float | None = None,
        variations: list[ProductVariation] | list[dict[str, Any]] | None = None,
    ) -> Product | None:
        """
        Replace a product's editable fields.

        Omitting variations or discount_percentage clears them. Owner, id and
        created_at are kept.

        Returns:
            The updated product, or None if product_id doesn't exist.
        """
        fields = validate_input(
            ProductInput,
            name=name,
            description=description,
            price=price,
            discount_percentage=discount_percentage,
            variations=variations,
        )
        effective, original, discount = fields.pricing()

        def apply(product: Product) -> Product:
            return replace(
                product,
                name=fields.name,
                description=fields.description,
                price=effective,
                original_price=original,
                discount_percentage=discount,
                variations=fields.product_variations(),
            )

        return await self._replace(product_id, apply, f"update product {product_id}")

    async def delete_product(self, product_id: str) -> bool:
        return await self.delete(product_id)

    def get_product(self, product_id: str) -> Product | None:
        return self.find(product_id)

    def clear_products(self) -> None:
        self.clear_scope()
