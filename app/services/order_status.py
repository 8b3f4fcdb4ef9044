# app/services/order_status.py
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.domain.errors import InvalidStatus, InvalidStatusTransition, OrderNotFound, PersistenceError
from app.domain.statuses import ADMIN_STATUSES, ALLOWED_TRANSITIONS
from app.repos.order_repo import OrderRepo
from app.utils.settings import ORDER_STRICT_TRANSITIONS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    def send_order_status_update(self, order: OrderModel, old_status: str, new_status: str) -> None:
        ...


class OrderStatusService:
    """
    Zmiana statusu zamowienia przez admina.
    Domyslnie dowolne przejscie miedzy znanymi statusami,
    tabela ALLOWED_TRANSITIONS tylko w trybie strict.
    """

    def __init__(self, db: Session, notifier: Notifier, strict: bool = ORDER_STRICT_TRANSITIONS):
        self.repo = OrderRepo(db)
        self.notifier = notifier
        self.strict = strict

    def update_status(self, order_id: str, new_status: str) -> OrderModel:
        if new_status not in ADMIN_STATUSES:
            raise InvalidStatus(f"Invalid order status: {new_status}")

        order = self.repo.get_order(order_id)
        if order is None:
            raise OrderNotFound()

        old_status = order.status

        if self.strict and old_status != new_status and new_status not in ALLOWED_TRANSITIONS.get(old_status, set()):
            raise InvalidStatusTransition(f"Cannot change order status from {old_status} to {new_status}")

        try:
            self.repo.set_status(order_id, new_status)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to update status of order {order_id}: {e}")
            raise PersistenceError("Failed to update order status") from e

        order = self.repo.get_order(order_id)
        logger.info(f"Order {order_id} status {old_status} -> {new_status}")

        if old_status != new_status:
            try:
                self.notifier.send_order_status_update(order, old_status, new_status)
            except Exception as e:
                logger.warning(f"Failed to send status update notification for order {order_id}: {e}")

        return order
