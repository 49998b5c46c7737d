"""Tests for OrderRepository."""

import asyncio

import pytest

from storefront.errors import StorageError, ValidationError
from storefront.models import CartItem, OrderStatus, Product
from storefront.orders import OrderRepository


@pytest.fixture
def items():
    return [CartItem(product=Product.create("Widget", "w", 10.0, "seller"), quantity=2)]


class TestOrderRepository:
    def test_create_and_load(self, store, items):
        repo = OrderRepository(store)

        async def run():
            order = await repo.create_order("alice", items, 20.0)
            loaded = await OrderRepository(store).load_user_orders("alice")
            return order, loaded

        order, loaded = asyncio.run(run())
        assert loaded == [order]
        assert order.status is OrderStatus.PENDING
        assert order.total == 20.0
        assert order.items == items
        assert repo.get_order_by_id(order.id) == order

    def test_items_are_snapshotted(self, store, items):
        repo = OrderRepository(store)
        order = asyncio.run(repo.create_order("alice", items, 20.0))

        items[0].quantity = 99
        assert order.items[0].quantity == 2

    def test_orders_scoped_per_user(self, store, items):
        repo = OrderRepository(store)

        async def run():
            await repo.create_order("alice", items, 20.0)
            await repo.create_order("bob", items, 20.0)
            return await repo.load_user_orders("bob")

        bob_orders = asyncio.run(run())
        assert len(bob_orders) == 1
        assert all(order.user_id == "bob" for order in bob_orders)

    @pytest.mark.parametrize(
        "user_id,use_items,total",
        [("", True, 1.0), ("alice", False, 1.0), ("alice", True, -1.0)],
    )
    def test_create_validation(self, store, items, user_id, use_items, total):
        repo = OrderRepository(store)
        with pytest.raises(ValidationError):
            asyncio.run(repo.create_order(user_id, items if use_items else [], total))
        assert store.set_calls == 0

    def test_update_status(self, store, items):
        repo = OrderRepository(store)

        async def run():
            order = await repo.create_order("alice", items, 20.0)
            updated = await repo.update_order_status(order.id, "Shipped")
            return order, updated

        order, updated = asyncio.run(run())
        assert updated.status is OrderStatus.SHIPPED
        assert updated.created_at == order.created_at
        assert updated.total == order.total
        assert repo.orders[0].status is OrderStatus.SHIPPED

    def test_unknown_status_rejected(self, store, items):
        repo = OrderRepository(store)
        order = asyncio.run(repo.create_order("alice", items, 20.0))

        with pytest.raises(ValidationError):
            asyncio.run(repo.update_order_status(order.id, "Lost"))

    def test_update_unknown_order_is_noop(self, store, items):
        repo = OrderRepository(store)
        asyncio.run(repo.create_order("alice", items, 20.0))
        writes = store.set_calls

        assert asyncio.run(repo.update_order_status("missing", OrderStatus.DELIVERED)) is None
        assert store.set_calls == writes

    def test_advance_status_cycles(self, store, items):
        repo = OrderRepository(store)

        async def run():
            order = await repo.create_order("alice", items, 20.0)
            seen = []
            for _ in range(4):
                seen.append((await repo.advance_order_status(order.id)).status)
            return seen

        assert asyncio.run(run()) == [
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.PENDING,
        ]

    def test_create_failure_propagates(self, store, items):
        repo = OrderRepository(store)
        store.fail_set = True

        with pytest.raises(StorageError):
            asyncio.run(repo.create_order("alice", items, 20.0))
        assert repo.orders == []

    def test_clear_orders(self, store, items):
        repo = OrderRepository(store)
        asyncio.run(repo.create_order("alice", items, 20.0))

        repo.clear_orders()

        assert repo.orders == []
        assert repo.get_order_by_id("anything") is None
