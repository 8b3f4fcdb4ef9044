import pytest

from app.domain.errors import EmptyCart, OrderInProgress
from app.services.lock_service import LockService
from app.services.order_service import OrderService

from tests.conftest import ADDRESS


class TestLockService:
    def test_second_acquire_blocked_until_release(self, redis_client):
        locks = LockService(redis_client)
        key = LockService.checkout_key("s1")

        token = locks.acquire(key, ttl=30)
        assert token
        assert locks.acquire(key, ttl=30) is None

        assert locks.release(key, token)
        assert locks.acquire(key, ttl=30)

    def test_release_with_foreign_token_keeps_lock(self, redis_client):
        locks = LockService(redis_client)
        key = LockService.checkout_key("s1")
        locks.acquire(key, ttl=30)

        assert not locks.release(key, "not-mine")
        assert locks.acquire(key, ttl=30) is None

    def test_lock_expires(self, redis_client, clock):
        locks = LockService(redis_client)
        key = LockService.checkout_key("s1")
        locks.acquire(key, ttl=30)

        clock.advance(30)

        assert locks.acquire(key, ttl=30)


class TestCheckoutLock:
    @pytest.fixture
    def locked_service(self, db, cart_service, redis_client):
        return OrderService(db, cart_service=cart_service, lock_service=LockService(redis_client))

    def test_checkout_in_progress_rejected(self, locked_service, cart_service, customer, make_product, redis_client):
        p = make_product(inventory=5)
        cart_service.add_item("s1", p.id, 1)
        LockService(redis_client).acquire(LockService.checkout_key("s1"), ttl=30)

        with pytest.raises(OrderInProgress):
            locked_service.create_order(customer.id, "s1", ADDRESS, ADDRESS, "pi_1")

        assert not cart_service.get_cart("s1").is_empty()

    def test_lock_released_after_checkout(self, locked_service, cart_service, customer, make_product, redis_client):
        p = make_product(inventory=5)
        cart_service.add_item("s1", p.id, 1)

        locked_service.create_order(customer.id, "s1", ADDRESS, ADDRESS, "pi_1")

        assert redis_client.get(LockService.checkout_key("s1")) is None

    def test_lock_released_after_failure(self, locked_service, customer, redis_client):
        with pytest.raises(EmptyCart):
            locked_service.create_order(customer.id, "empty", ADDRESS, ADDRESS, "pi_1")

        assert redis_client.get(LockService.checkout_key("empty")) is None
