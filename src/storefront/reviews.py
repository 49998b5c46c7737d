"""Product review storage for storefront."""

from dataclasses import replace
from typing import Any

from . import aggregates
from .errors import ValidationError
from .models import Review
from .repository import EntityRepository, Scope
from .schemas import ReviewInput, validate_input

REVIEWS_KEY = "product_reviews"


class ReviewRepository(EntityRepository[Review]):
    """
    All reviews in one flat array.

    The in-memory view is scoped either to a product (product detail) or to
    a user (the user's own reviews).
    """

    storage_key = REVIEWS_KEY
    scope_field = "user_id"
    label = "reviews"

    def _decode(self, data: dict[str, Any]) -> Review:
        return Review.from_dict(data)

    @property
    def reviews(self) -> list[Review]:
        return self.items

    async def load_product_reviews(self, product_id: str) -> list[Review]:
        return await self.load_scoped(product_id, "product_id")

    async def load_user_reviews(self, user_id: str) -> list[Review]:
        return await self.load_scoped(user_id, "user_id")

    async def create_review(
        self,
        product_id: str,
        user_id: str,
        username: str,
        rating: int,
        comment: str,
    ) -> Review:
        """
        Create the user's review of a product, or replace it if one exists.

        A replaced review keeps its id and created_at.

        Raises:
            ValidationError: If rating is outside 1-5 or comment is blank.
            StorageError: If reviews cannot be read or written.
        """
        if not product_id:
            raise ValidationError("product_id", "must not be empty")
        if not user_id:
            raise ValidationError("user_id", "must not be empty")
        fields = validate_input(ReviewInput, rating=rating, comment=comment)

        entities = await self._read_all()
        for i, existing in enumerate(entities):
            if existing.product_id == product_id and existing.user_id == user_id:
                review = replace(
                    existing, username=username, rating=fields.rating, comment=fields.comment
                )
                entities[i] = review
                break
        else:
            review = Review.create(
                product_id=product_id,
                user_id=user_id,
                username=username,
                rating=fields.rating,
                comment=fields.comment,
            )
            entities.append(review)

        await self._save(entities, f"save review of {product_id} by {user_id}")
        self._publish(entities, self.scope or Scope("product_id", product_id))
        return review

    async def update_review(self, review_id: str, rating: int, comment: str) -> Review | None:
        """Change rating and comment. Returns None if review_id doesn't exist."""
        fields = validate_input(ReviewInput, rating=rating, comment=comment)
        return await self._replace(
            review_id,
            lambda review: replace(review, rating=fields.rating, comment=fields.comment),
            f"update review {review_id}",
        )

    async def delete_review(self, review_id: str) -> bool:
        return await self.delete(review_id)

    def clear_reviews(self) -> None:
        self.clear_scope()

    def average_rating(self, product_id: str) -> float:
        return aggregates.average_rating(self.items, product_id)

    def review_count(self, product_id: str) -> int:
        return aggregates.review_count(self.items, product_id)

    def user_review_for_product(self, product_id: str, user_id: str) -> Review | None:
        for review in self.items:
            if review.product_id == product_id and review.user_id == user_id:
                return review
        return None
