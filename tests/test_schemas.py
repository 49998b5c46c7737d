"""Tests for input validation."""

import pytest

from storefront.errors import ValidationError
from storefront.models import ProductVariation
from storefront.schemas import Credentials, ProductInput, ReviewInput, validate_input


class TestCredentials:
    def test_strips_username(self):
        creds = validate_input(Credentials, username="  alice ", password="pw")
        assert creds.username == "alice"

    @pytest.mark.parametrize("username,password", [("", "pw"), ("   ", "pw"), ("alice", "")])
    def test_rejects_empty(self, username, password):
        with pytest.raises(ValidationError):
            validate_input(Credentials, username=username, password=password)


class TestProductInput:
    def test_pricing_without_discount(self):
        fields = validate_input(ProductInput, name="Widget", description="d", price=10.0)
        assert fields.pricing() == (10.0, None, None)

    def test_zero_discount_means_no_discount(self):
        fields = validate_input(
            ProductInput, name="Widget", description="d", price=10.0, discount_percentage=0
        )
        assert fields.pricing() == (10.0, None, None)

    def test_pricing_with_discount(self):
        fields = validate_input(
            ProductInput, name="Widget", description="d", price=50.0, discount_percentage=20
        )
        assert fields.pricing() == (40.0, 50.0, 20)

    def test_discounted_price_rounded_to_cents(self):
        fields = validate_input(
            ProductInput, name="Widget", description="d", price=19.99, discount_percentage=15
        )
        price, original, _ = fields.pricing()
        assert price == 16.99
        assert original == 19.99

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"name": " "}, "name"),
            ({"description": ""}, "description"),
            ({"price": 0}, "price"),
            ({"price": -1}, "price"),
            ({"discount_percentage": -5}, "discount_percentage"),
            ({"discount_percentage": 101}, "discount_percentage"),
        ],
    )
    def test_rejects_out_of_range(self, overrides, field):
        values = dict(name="Widget", description="d", price=10.0)
        values.update(overrides)
        with pytest.raises(ValidationError) as exc_info:
            validate_input(ProductInput, **values)
        assert exc_info.value.field == field

    def test_accepts_model_variations(self):
        fields = validate_input(
            ProductInput,
            name="Shirt",
            description="d",
            price=10.0,
            variations=[ProductVariation(name="Size", options=["S", "M"])],
        )
        assert fields.product_variations() == [ProductVariation(name="Size", options=["S", "M"])]

    def test_empty_variations_become_none(self):
        fields = validate_input(ProductInput, name="Shirt", description="d", price=10.0, variations=[])
        assert fields.product_variations() is None

    def test_variation_needs_options(self):
        with pytest.raises(ValidationError):
            validate_input(
                ProductInput,
                name="Shirt",
                description="d",
                price=10.0,
                variations=[{"name": "Size", "options": []}],
            )


class TestReviewInput:
    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_range(self, rating):
        with pytest.raises(ValidationError) as exc_info:
            validate_input(ReviewInput, rating=rating, comment="ok")
        assert exc_info.value.field == "rating"

    def test_comment_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_input(ReviewInput, rating=3, comment="  ")
        assert exc_info.value.field == "comment"

    def test_valid(self):
        fields = validate_input(ReviewInput, rating=5, comment=" Great ")
        assert fields.rating == 5
        assert fields.comment == "Great"
