# app/services/order_service.py
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.domain.errors import (
    CheckoutError,
    EmptyCart,
    InsufficientInventory,
    OrderInProgress,
    OrderNotFound,
    PersistenceError,
    ProductNotFound,
    ProductUnavailable,
)
from app.domain.statuses import OrderStatus
from app.repos.order_repo import OrderRepo
from app.repos.product_repo import ProductRepo
from app.repos.user_repo import UserRepo
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, TAX_RATE, SHIPPING_FLAT_RATE
from app.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Koszyk (Redis) -> zamowienie (baza) w jednej transakcji.
    """

    def __init__(
        self,
        db: Session,
        cart_service: CartService,
        lock_service: LockService | None = None,
        tax_rate: Decimal = TAX_RATE,
        shipping_rate: Decimal = SHIPPING_FLAT_RATE,
        lock_ttl: int = CHECKOUT_LOCK_TTL_SECONDS,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.cart_service = cart_service
        self.lock_service = lock_service
        self.tax_rate = tax_rate
        self.shipping_rate = shipping_rate
        self.lock_ttl = lock_ttl

    def create_order(
        self,
        user_id: str,
        session_id: str,
        shipping_address: dict,
        billing_address: dict,
        payment_intent_id: str,
        notes: str | None = None,
    ) -> OrderModel:
        """
        Use Case: Tworzenie zamowienia z koszyka.

        1. Blokada checkoutu dla sesji (drugi rownolegly request -> konflikt)
        2. Pusty koszyk -> EmptyCart
        3. Transakcja: odczyt produktow z blokada, warunkowe zmniejszenie stanu,
           ceny zawsze aktualne z bazy
        4. Commit, potem czyszczenie koszyka (best effort)
        """
        lock_key = LockService.checkout_key(session_id)
        token = None
        if self.lock_service is not None:
            token = self.lock_service.acquire(lock_key, ttl=self.lock_ttl)
            if token is None:
                raise OrderInProgress()

        try:
            cart = self.cart_service.get_cart(session_id)
            if cart.is_empty():
                raise EmptyCart()

            order_id = self._persist_order(
                user_id=user_id,
                cart=cart,
                shipping_address=shipping_address,
                billing_address=billing_address,
                payment_intent_id=payment_intent_id,
                notes=notes,
            )
        finally:
            if token is not None:
                self._release_lock(lock_key, token)

        # poza transakcja, zamowienie juz jest trwale
        try:
            self.cart_service.clear_cart(session_id)
        except Exception as e:
            logger.warning(f"Failed to clear cart {session_id} after order {order_id}: {e}")

        order = self.repo.get_order(order_id)
        if order is None:
            raise PersistenceError(f"Failed to load created order {order_id}")
        return order

    def _persist_order(self, user_id, cart, shipping_address, billing_address, payment_intent_id, notes) -> str:
        try:
            items: List[OrderItemModel] = []
            subtotal = Decimal("0.00")

            # blokady wierszy zawsze w kolejnosci id produktu
            for line in sorted(cart.items, key=lambda l: l.product_id):
                product = self.products.get_for_update(line.product_id)
                if product is None:
                    raise ProductNotFound(f"Product not found: {line.product_id}")
                if not product.is_active:
                    raise ProductUnavailable(f"Product {product.name} is no longer available")
                if product.inventory < line.quantity:
                    raise InsufficientInventory(
                        f"Insufficient inventory for product {product.name}: only {product.inventory} available"
                    )

                price = product.price
                if not self.products.decrement_inventory(product.id, line.quantity):
                    raise InsufficientInventory(f"Insufficient inventory for product {product.name}")

                line_total = price * line.quantity
                items.append(
                    OrderItemModel(
                        product_id=product.id,
                        quantity=line.quantity,
                        price=price,
                        total=line_total,
                    )
                )
                subtotal += line_total

            tax = (subtotal * self.tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)
            shipping = self.shipping_rate.quantize(CENT)
            total = subtotal + tax + shipping

            order = OrderModel(
                user_id=user_id,
                status=OrderStatus.PENDING.value,
                subtotal=subtotal,
                tax=tax,
                shipping=shipping,
                total=total,
                shipping_address=shipping_address,
                billing_address=billing_address,
                payment_intent_id=payment_intent_id,
                notes=notes,
                items=items,
            )
            self.repo.add_order(order)
            order_id = order.id
            self.repo.commit()

        except CheckoutError as e:
            self.repo.rollback()
            logger.error(f"Order creation for user {user_id} rolled back: {e}")
            raise
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order creation for user {user_id} failed in database: {e}")
            raise PersistenceError("Failed to create order") from e

        logger.info(f"Order {order_id} created for user {user_id}, total {total}")
        return order_id

    def _release_lock(self, key: str, token: str):
        try:
            self.lock_service.release(key, token)
        except Exception as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release {key}: {e}")

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: str, user_id: str = "") -> OrderModel:
        """Pusty user_id = admin, bez filtra po wlascicielu."""
        order = self.repo.get_order(order_id, user_id)
        if order is None:
            raise OrderNotFound()
        return order

    def get_user_orders(self, user_id: str, page: int, limit: int) -> Tuple[List[OrderModel], int]:
        return self.repo.list_orders(page, limit, user_id=user_id)

    def get_all_orders(self, page: int, limit: int, status: str = "", user_id: str = "") -> Tuple[List[OrderModel], int]:
        return self.repo.list_orders(page, limit, status=status, user_id=user_id)

    def get_all_customers(self, page: int, limit: int, search: str = ""):
        return self.users.list_customers(page, limit, search)
