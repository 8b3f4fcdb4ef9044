from decimal import Decimal
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.data import models  # noqa: F401
from app.data.database import Base, make_session_factory
from app.data.models import OrderModel, ProductModel, UserModel
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.cart_service import CartService
from app.services.order_service import OrderService

from tests.fakes import FakeClock, FakeGateway, FakeRedis, RecordingNotifier

CART_TTL = 24 * 60 * 60

ADDRESS = {
    "first_name": "Jan",
    "last_name": "Kowalski",
    "address1": "ul. Dluga 1",
    "city": "Warszawa",
    "state": "MZ",
    "postal_code": "00-001",
    "country": "PL",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def redis_client(clock):
    return FakeRedis(clock)


@pytest.fixture
def cart_repo(redis_client):
    return CartRepo(redis_client, ttl_seconds=CART_TTL)


@pytest.fixture
def cart_service(db, cart_repo):
    return CartService(repo=cart_repo, products=ProductRepo(db))


@pytest.fixture
def order_service(db, cart_service):
    return OrderService(db, cart_service=cart_service)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_product(db):
    seq = count(1)

    def _make(price="10.00", inventory=10, is_active=True, name=None):
        n = next(seq)
        product = ProductModel(
            id=f"prod-{n}",
            name=name or f"Product {n}",
            price=Decimal(price),
            inventory=inventory,
            is_active=is_active,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_user(db):
    seq = count(1)

    def _make(first_name="Jan", last_name="Kowalski", role="customer", is_active=True, email=None):
        n = next(seq)
        user = UserModel(
            id=f"user-{n}",
            email=email or f"user{n}@example.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def make_order(db):
    def _make(user, status="pending", total="100.00"):
        order = OrderModel(
            user_id=user.id,
            status=status,
            subtotal=Decimal(total),
            tax=Decimal("0"),
            shipping=Decimal("0"),
            total=Decimal(total),
            shipping_address=ADDRESS,
            billing_address=ADDRESS,
            payment_intent_id="pi_test",
        )
        db.add(order)
        db.commit()
        return order

    return _make
