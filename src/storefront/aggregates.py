"""Derived totals and ratings computed from in-memory collections."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .models import CartItem, Review


def _round_half_up(value: float, places: str) -> float:
    return float(Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP))


def round_money(value: float) -> float:
    """Round to whole cents, halves away from zero."""
    return _round_half_up(value, "0.01")


def cart_total(items: Iterable[CartItem]) -> float:
    """Sum of effective (discounted) price times quantity."""
    return sum((item.product.price * item.quantity for item in items), 0.0)


def cart_original_total(items: Iterable[CartItem]) -> float:
    """Sum of list price times quantity, ignoring product discounts."""
    return sum((item.product.list_price * item.quantity for item in items), 0.0)


def cart_item_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def review_count(reviews: Iterable[Review], product_id: str) -> int:
    return sum(1 for review in reviews if review.product_id == product_id)


def average_rating(reviews: Iterable[Review], product_id: str) -> float:
    """Mean rating for a product rounded to one decimal; 0 when it has no reviews."""
    ratings = [review.rating for review in reviews if review.product_id == product_id]
    if not ratings:
        return 0
    return _round_half_up(sum(ratings) / len(ratings), "0.1")
