"""Data models for storefront."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
import time

_last_id = 0


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _generate_id() -> str:
    """Generate a time-based entity ID, strictly increasing within this process."""
    global _last_id
    candidate = int(time.time() * 1000)
    if candidate <= _last_id:
        candidate = _last_id + 1
    _last_id = candidate
    return str(candidate)


def variation_key(selected: dict[str, str] | None) -> tuple[tuple[str, str], ...]:
    """Order-independent key for a variation selection. None and {} are the same selection."""
    return tuple(sorted((selected or {}).items()))


@dataclass
class ProductVariation:
    """A named product option group, e.g. Size with S/M/L."""

    name: str
    options: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "options": list(self.options)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductVariation":
        return cls(name=data["name"], options=list(data.get("options", [])))


@dataclass
class Product:
    """A catalog entry owned by the user who created it."""

    id: str
    name: str
    description: str
    price: float  # effective price, after any discount
    user_id: str
    original_price: float | None = None
    discount_percentage: float | None = None
    variations: list[ProductVariation] | None = None
    created_at: str = field(default_factory=_utc_now)

    @property
    def has_discount(self) -> bool:
        return self.discount_percentage is not None

    @property
    def list_price(self) -> float:
        """Price before discount."""
        if self.original_price is not None:
            return self.original_price
        return self.price

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "createdAt": self.created_at,
            "userId": self.user_id,
        }
        if self.original_price is not None:
            result["originalPrice"] = self.original_price
        if self.discount_percentage is not None:
            result["discountPercentage"] = self.discount_percentage
        if self.variations is not None:
            result["variations"] = [v.to_dict() for v in self.variations]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        variations = None
        if data.get("variations") is not None:
            variations = [ProductVariation.from_dict(v) for v in data["variations"]]
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            price=data["price"],
            user_id=data["userId"],
            original_price=data.get("originalPrice"),
            discount_percentage=data.get("discountPercentage"),
            variations=variations,
            created_at=data.get("createdAt", ""),
        )

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        price: float,
        user_id: str,
        original_price: float | None = None,
        discount_percentage: float | None = None,
        variations: list[ProductVariation] | None = None,
    ) -> "Product":
        """Create a new product with generated ID and timestamp."""
        return cls(
            id=_generate_id(),
            name=name,
            description=description,
            price=price,
            user_id=user_id,
            original_price=original_price,
            discount_percentage=discount_percentage,
            variations=variations,
            created_at=_utc_now(),
        )


@dataclass
class CartItem:
    """A cart row holding a snapshot of the product as it was when added."""

    product: Product
    quantity: int
    selected_variations: dict[str, str] | None = None

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity

    def matches(self, product_id: str, selected_variations: dict[str, str] | None = None) -> bool:
        return (
            self.product.id == product_id
            and variation_key(self.selected_variations) == variation_key(selected_variations)
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
        }
        if self.selected_variations:
            result["selectedVariations"] = dict(self.selected_variations)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartItem":
        return cls(
            product=Product.from_dict(data["product"]),
            quantity=data["quantity"],
            selected_variations=data.get("selectedVariations"),
        )


@dataclass
class UserCart:
    """One user's shard of the persisted cart collection."""

    user_id: str
    cart_items: list[CartItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "cartItems": [item.to_dict() for item in self.cart_items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserCart":
        return cls(
            user_id=data["userId"],
            cart_items=[CartItem.from_dict(i) for i in data.get("cartItems", [])],
        )


class OrderStatus(str, Enum):
    """Fulfilment state of an order."""

    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"

    def next(self) -> "OrderStatus":
        """The following status in the cycle; Delivered wraps around to Pending."""
        members = list(OrderStatus)
        return members[(members.index(self) + 1) % len(members)]


@dataclass
class Order:
    """A placed order. Only status and updated_at change after creation."""

    id: str
    user_id: str
    items: list[CartItem]
    total: float
    status: OrderStatus = OrderStatus.PENDING
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            items=[CartItem.from_dict(i) for i in data.get("items", [])],
            total=data["total"],
            status=OrderStatus(data.get("status", OrderStatus.PENDING.value)),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
        )

    @classmethod
    def create(cls, user_id: str, items: list[CartItem], total: float) -> "Order":
        """Create a new pending order with generated ID and timestamps."""
        now = _utc_now()
        return cls(
            id=_generate_id(),
            user_id=user_id,
            items=items,
            total=total,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )


@dataclass
class Review:
    """A user's rating and comment on a product."""

    id: str
    product_id: str
    user_id: str
    username: str
    rating: int  # 1-5 stars
    comment: str
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "userId": self.user_id,
            "username": self.username,
            "rating": self.rating,
            "comment": self.comment,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Review":
        return cls(
            id=data["id"],
            product_id=data["productId"],
            user_id=data["userId"],
            username=data.get("username", data["userId"]),
            rating=data["rating"],
            comment=data.get("comment", ""),
            created_at=data.get("createdAt", ""),
        )

    @classmethod
    def create(
        cls,
        product_id: str,
        user_id: str,
        username: str,
        rating: int,
        comment: str,
    ) -> "Review":
        """Create a new review with generated ID and timestamp."""
        return cls(
            id=_generate_id(),
            product_id=product_id,
            user_id=user_id,
            username=username,
            rating=rating,
            comment=comment,
            created_at=_utc_now(),
        )
