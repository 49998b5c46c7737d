"""Tests for entity serialization and helpers."""

from storefront.models import (
    CartItem,
    Order,
    OrderStatus,
    Product,
    ProductVariation,
    Review,
    UserCart,
    _generate_id,
    variation_key,
)


def make_product(**overrides) -> Product:
    fields = dict(name="Widget", description="A widget", price=10.0, user_id="alice")
    fields.update(overrides)
    return Product.create(**fields)


class TestProduct:
    def test_to_dict_uses_persisted_names(self):
        product = make_product()
        data = product.to_dict()

        assert data["userId"] == "alice"
        assert data["createdAt"] == product.created_at
        assert "originalPrice" not in data
        assert "discountPercentage" not in data
        assert "variations" not in data

    def test_roundtrip_with_optional_fields(self):
        product = make_product(
            price=40.0,
            original_price=50.0,
            discount_percentage=20,
            variations=[ProductVariation(name="Size", options=["S", "M"])],
        )
        loaded = Product.from_dict(product.to_dict())

        assert loaded == product
        assert loaded.has_discount
        assert loaded.list_price == 50.0

    def test_list_price_without_discount(self):
        product = make_product()
        assert not product.has_discount
        assert product.list_price == 10.0


class TestCartItem:
    def test_matches_ignores_selection_order(self):
        item = CartItem(
            product=make_product(), quantity=1, selected_variations={"Size": "M", "Color": "Red"}
        )
        assert item.matches(item.product.id, {"Color": "Red", "Size": "M"})
        assert not item.matches(item.product.id, {"Color": "Blue", "Size": "M"})

    def test_no_selection_equals_empty_selection(self):
        assert variation_key(None) == variation_key({})

    def test_selected_variations_omitted_when_absent(self):
        item = CartItem(product=make_product(), quantity=2)
        data = item.to_dict()
        assert "selectedVariations" not in data
        assert CartItem.from_dict(data) == item

    def test_user_cart_layout(self):
        cart = UserCart(user_id="alice", cart_items=[CartItem(product=make_product(), quantity=1)])
        data = cart.to_dict()
        assert set(data) == {"userId", "cartItems"}
        assert UserCart.from_dict(data) == cart


class TestOrder:
    def test_create_is_pending(self):
        order = Order.create("alice", [CartItem(product=make_product(), quantity=1)], 10.0)
        assert order.status is OrderStatus.PENDING
        assert order.created_at == order.updated_at

    def test_status_serialized_as_label(self):
        order = Order.create("alice", [], 0.0)
        data = order.to_dict()
        assert data["status"] == "Pending"
        assert Order.from_dict(data).status is OrderStatus.PENDING

    def test_status_cycle(self):
        assert OrderStatus.PENDING.next() is OrderStatus.PROCESSING
        assert OrderStatus.PROCESSING.next() is OrderStatus.SHIPPED
        assert OrderStatus.SHIPPED.next() is OrderStatus.DELIVERED
        assert OrderStatus.DELIVERED.next() is OrderStatus.PENDING


class TestReview:
    def test_roundtrip(self):
        review = Review.create("p1", "alice", "alice", 4, "Nice")
        assert Review.from_dict(review.to_dict()) == review


def test_generated_ids_strictly_increase():
    ids = [int(_generate_id()) for _ in range(50)]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
