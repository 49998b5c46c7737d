"""Storefront - client data layer for a single-device shop: catalog, cart, orders and reviews."""

from .app import Storefront
from .errors import (
    EmptyCartError,
    NotAuthenticatedError,
    StorageError,
    StorefrontError,
    ValidationError,
)
from .models import CartItem, Order, OrderStatus, Product, ProductVariation, Review
from .session import SessionManager, SessionState
from .storage import FileStore, KeyValueStore, MemoryStore

__version__ = "0.1.0"

__all__ = [
    "CartItem",
    "EmptyCartError",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "NotAuthenticatedError",
    "Order",
    "OrderStatus",
    "Product",
    "ProductVariation",
    "Review",
    "SessionManager",
    "SessionState",
    "StorageError",
    "Storefront",
    "StorefrontError",
    "ValidationError",
]
