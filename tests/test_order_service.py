from decimal import Decimal

import pytest
from redis.exceptions import RedisError
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.data.models import OrderItemModel, OrderModel, ProductModel
from app.domain.cart import Cart, CartItem
from app.domain.errors import (
    EmptyCart,
    InsufficientInventory,
    OrderInProgress,
    OrderNotFound,
    PersistenceError,
    ProductNotFound,
    ProductUnavailable,
)
from app.repos.product_repo import ProductRepo
from app.services.lock_service import LockService
from app.services.order_service import OrderService

from tests.conftest import ADDRESS


def _create(svc, user, session_id="s1", **kwargs):
    return svc.create_order(
        user_id=user.id,
        session_id=session_id,
        shipping_address=ADDRESS,
        billing_address=ADDRESS,
        payment_intent_id="pi_123",
        **kwargs,
    )


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def _inventory(db, product_id):
    db.expire_all()
    return db.get(ProductModel, product_id).inventory


class TestCreateOrder:
    def test_empty_cart(self, order_service, customer):
        with pytest.raises(EmptyCart):
            _create(order_service, customer)

    def test_creates_pending_order_and_decrements_inventory(self, order_service, cart_service, customer, make_product, db):
        p = make_product(price="99.99", inventory=5)
        cart_service.add_item("s1", p.id, 2)

        order = _create(order_service, customer, notes="leave at the door")

        assert order.status == "pending"
        assert order.user_id == customer.id
        assert order.subtotal == Decimal("199.98")
        assert order.total == Decimal("199.98")
        assert order.notes == "leave at the door"
        assert order.shipping_address["city"] == "Warszawa"
        assert len(order.items) == 1
        assert order.items[0].product.id == p.id
        assert order.items[0].total == Decimal("199.98")
        assert order.user.email == customer.email
        assert _inventory(db, p.id) == 3

    def test_cart_cleared_after_commit(self, order_service, cart_service, customer, make_product):
        p = make_product()
        cart_service.add_item("s1", p.id, 1)

        _create(order_service, customer)

        assert cart_service.get_cart("s1").is_empty()

    def test_price_taken_live_not_from_cart(self, order_service, cart_service, customer, make_product, db):
        p = make_product(price="10.00")
        cart_service.add_item("s1", p.id, 3)

        p.price = Decimal("12.50")
        db.commit()

        order = _create(order_service, customer)

        assert order.items[0].price == Decimal("12.50")
        assert order.subtotal == Decimal("37.50")

    def test_tax_and_shipping_policy(self, db, cart_service, customer, make_product):
        svc = OrderService(db, cart_service=cart_service, tax_rate=Decimal("0.10"), shipping_rate=Decimal("5"))
        p = make_product(price="19.99")
        cart_service.add_item("s1", p.id, 1)

        order = _create(svc, customer)

        assert order.tax == Decimal("2.00")
        assert order.shipping == Decimal("5.00")
        assert order.total == Decimal("26.99")

    def test_rows_locked_in_product_id_order(self, order_service, cart_service, customer, make_product, monkeypatch):
        a = make_product()
        b = make_product()
        cart_service.add_item("s1", b.id, 1)
        cart_service.add_item("s1", a.id, 1)

        original = ProductRepo.get_for_update
        locked = []

        def recording(self, product_id):
            locked.append(product_id)
            return original(self, product_id)

        monkeypatch.setattr(ProductRepo, "get_for_update", recording)

        order = _create(order_service, customer)

        # koszyk {B,A} blokuje w tej samej kolejnosci co {A,B}
        assert locked == sorted([a.id, b.id])
        assert sorted(i.product_id for i in order.items) == sorted([a.id, b.id])


class TestCreateOrderRollback:
    def test_insufficient_second_item_rolls_back_everything(self, order_service, cart_repo, customer, make_product, db):
        plenty = make_product(inventory=5)
        scarce = make_product(inventory=2)
        cart_repo.save(
            Cart(
                session_id="s1",
                items=[
                    CartItem(product_id=plenty.id, quantity=1, price=Decimal("10.00")),
                    CartItem(product_id=scarce.id, quantity=3, price=Decimal("10.00")),
                ],
            )
        )

        with pytest.raises(InsufficientInventory) as exc:
            _create(order_service, customer)

        assert "only 2 available" in exc.value.message
        assert _count(db, OrderModel) == 0
        assert _count(db, OrderItemModel) == 0
        assert _inventory(db, plenty.id) == 5
        assert _inventory(db, scarce.id) == 2

    def test_failed_decrement_of_second_item_rolls_back(self, order_service, cart_service, customer, make_product, db, monkeypatch):
        a = make_product(inventory=5)
        b = make_product(inventory=5)
        cart_service.add_item("s1", a.id, 1)
        cart_service.add_item("s1", b.id, 1)

        original = ProductRepo.decrement_inventory
        calls = []

        def flaky(self, product_id, quantity):
            calls.append(product_id)
            if len(calls) == 2:
                raise OperationalError("UPDATE products", {}, Exception("connection lost"))
            return original(self, product_id, quantity)

        monkeypatch.setattr(ProductRepo, "decrement_inventory", flaky)

        with pytest.raises(PersistenceError):
            _create(order_service, customer)

        assert _count(db, OrderModel) == 0
        assert _count(db, OrderItemModel) == 0
        assert _inventory(db, a.id) == 5
        # koszyk zostaje, klient moze sprobowac ponownie
        assert not order_service.cart_service.get_cart("s1").is_empty()

    def test_missing_product(self, order_service, cart_repo, customer):
        cart_repo.save(Cart(session_id="s1", items=[CartItem(product_id="ghost", quantity=1, price=Decimal("1"))]))
        with pytest.raises(ProductNotFound):
            _create(order_service, customer)

    def test_product_deactivated_after_adding(self, order_service, cart_service, customer, make_product, db):
        p = make_product()
        cart_service.add_item("s1", p.id, 1)
        p.is_active = False
        db.commit()

        with pytest.raises(ProductUnavailable):
            _create(order_service, customer)
        assert _count(db, OrderModel) == 0


class TestCreateOrderSideEffects:
    def test_cart_clear_failure_is_logged_not_raised(self, order_service, cart_service, customer, make_product, monkeypatch, caplog):
        p = make_product()
        cart_service.add_item("s1", p.id, 1)

        def broken_clear(session_id):
            raise RedisError("connection refused")

        monkeypatch.setattr(cart_service, "clear_cart", broken_clear)

        order = _create(order_service, customer)

        assert order.status == "pending"
        assert "Failed to clear cart" in caplog.text

    def test_concurrent_checkout_of_same_session_is_conflict(self, db, cart_service, redis_client, customer, make_product):
        lock = LockService(redis_client)
        svc = OrderService(db, cart_service=cart_service, lock_service=lock)
        p = make_product()
        cart_service.add_item("s1", p.id, 1)
        redis_client.set(LockService.checkout_key("s1"), "other-request", nx=True, ex=30)

        with pytest.raises(OrderInProgress):
            _create(svc, customer)
        assert not cart_service.get_cart("s1").is_empty()

    def test_checkout_lock_released(self, db, cart_service, redis_client, customer, make_product):
        svc = OrderService(db, cart_service=cart_service, lock_service=LockService(redis_client))
        p = make_product()
        cart_service.add_item("s1", p.id, 1)

        _create(svc, customer)

        assert redis_client.get(LockService.checkout_key("s1")) is None

    def test_lock_released_on_failure(self, db, cart_service, redis_client, customer):
        svc = OrderService(db, cart_service=cart_service, lock_service=LockService(redis_client))
        with pytest.raises(EmptyCart):
            _create(svc, customer)
        assert redis_client.get(LockService.checkout_key("s1")) is None


class TestOrderQueries:
    def test_get_order_filters_by_owner(self, order_service, make_user, make_order):
        owner = make_user()
        other = make_user()
        order = make_order(owner)

        assert order_service.get_order(order.id, owner.id).id == order.id
        assert order_service.get_order(order.id).id == order.id
        with pytest.raises(OrderNotFound):
            order_service.get_order(order.id, other.id)

    def test_get_user_orders_paginates(self, order_service, make_user, make_order):
        owner = make_user()
        other = make_user()
        for _ in range(3):
            make_order(owner)
        make_order(other)

        orders, total = order_service.get_user_orders(owner.id, page=1, limit=2)

        assert total == 3
        assert len(orders) == 2
        assert all(o.user_id == owner.id for o in orders)

        orders, _ = order_service.get_user_orders(owner.id, page=2, limit=2)
        assert len(orders) == 1

    def test_get_all_orders_by_status(self, order_service, customer, make_order):
        make_order(customer, status="pending")
        make_order(customer, status="shipped")

        orders, total = order_service.get_all_orders(1, 10, status="shipped")

        assert total == 1
        assert orders[0].status == "shipped"

    def test_get_all_customers(self, order_service, make_user, make_order):
        alice = make_user(first_name="Alice", last_name="Nowak")
        bob = make_user(first_name="Bob", last_name="Zielinski")
        make_user(first_name="Admin", role="admin")
        make_user(first_name="Alicja", is_active=False)
        make_order(alice)
        make_order(alice)

        rows, total = order_service.get_all_customers(1, 10)
        counts = {user.id: n for user, n in rows}
        assert total == 2
        assert counts == {alice.id: 2, bob.id: 0}

        rows, total = order_service.get_all_customers(1, 10, search="ALI")
        assert total == 1
        assert rows[0][0].id == alice.id
