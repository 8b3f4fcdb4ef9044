# app/services/payment_service.py
import hashlib
import hmac
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.payment import PaymentModel
from app.domain.errors import (
    InvalidSignature,
    InvalidWebhookPayload,
    OrderNotFound,
    PaymentRecordNotFound,
    PersistenceError,
    ValidationFailed,
)
from app.domain.statuses import PAYMENT_UPDATABLE_STATUSES, OrderStatus, PaymentStatus
from app.repos.order_repo import OrderRepo
from app.repos.payment_repo import PaymentRepo
from app.services.razorpay_client import RazorpayClient
from app.utils import settings
from app.utils.settings import DEFAULT_CURRENCY
from app.utils.logging import get_logger

logger = get_logger(__name__)

EVENT_CAPTURED = "payment.captured"
EVENT_FAILED = "payment.failed"


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentService:
    """
    Platnosci przez bramke.
    Weryfikacja i webhook moga przyjsc wielokrotnie i w dowolnej kolejnosci,
    dlatego zapisy nadpisuja stan koncowy zamiast go zmieniac przyrostowo.
    """

    def __init__(
        self,
        db: Session,
        gateway: RazorpayClient,
        key_secret: str | None = None,
        webhook_secret: str | None = None,
    ):
        self.db = db
        self.repo = PaymentRepo(db)
        self.orders = OrderRepo(db)
        self.gateway = gateway
        self.key_secret = settings.RAZORPAY_KEY_SECRET if key_secret is None else key_secret
        self.webhook_secret = settings.RAZORPAY_WEBHOOK_SECRET if webhook_secret is None else webhook_secret

    def create_payment_request(
        self,
        order_id: str,
        amount: Decimal,
        currency: str = DEFAULT_CURRENCY,
        description: str = "",
    ) -> PaymentModel:
        if self.db.get(OrderModel, order_id) is None:
            raise OrderNotFound()

        amount_minor = to_minor_units(amount)
        if amount_minor <= 0:
            raise ValidationFailed("Amount must be greater than 0")

        currency = currency or DEFAULT_CURRENCY
        notes = {"description": description} if description else None

        # wywolanie bramki przed jakimkolwiek zapisem
        remote = self.gateway.create_order(amount_minor, currency, receipt=order_id, notes=notes)

        payment = PaymentModel(
            order_id=order_id,
            gateway_order_id=remote["id"],
            amount=amount_minor,
            currency=currency,
            status=PaymentStatus.CREATED.value,
            description=description or None,
        )
        try:
            created = self.repo.add(payment)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to save payment for order {order_id}: {e}")
            raise PersistenceError("Failed to save payment record") from e

        logger.info(f"Payment {created.id} created for order {order_id}, gateway order {created.gateway_order_id}")
        return created

    def verify_payment(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> PaymentModel:
        expected = hmac_sha256_hex(self.key_secret, f"{gateway_order_id}|{gateway_payment_id}".encode())
        if not hmac.compare_digest(expected, signature or ""):
            logger.warning(f"Invalid payment signature for gateway order {gateway_order_id}")
            raise InvalidSignature()

        payment = self._payment_for(gateway_order_id)
        payment.gateway_payment_id = gateway_payment_id
        payment.signature = signature
        payment.status = PaymentStatus.PAID.value
        self._commit_with_order_status(payment, OrderStatus.PAID.value)

        logger.info(f"Payment {payment.id} verified, order {payment.order_id} paid")
        return payment

    def verify_webhook_signature(self, body: bytes, signature: str | None) -> None:
        # bez sekretu odrzucamy kazdy webhook
        # bez sekretu nie da sie odroznic bramki od falszywki, odrzucamy wszystko
        if not self.webhook_secret:
            logger.error("RAZORPAY_WEBHOOK_SECRET is not configured, rejecting webhook")
            raise InvalidSignature("Webhook secret is not configured")
        expected = hmac_sha256_hex(self.webhook_secret, body)
        if not signature or not hmac.compare_digest(expected, signature):
            raise InvalidSignature("Invalid webhook signature")

    def handle_webhook(self, event: dict) -> bool:
        """
        Zwraca True gdy zdarzenie zostalo zastosowane, False dla
        nieobslugiwanych typow (potwierdzamy, zeby bramka nie ponawiala).
        """
        if not isinstance(event, dict):
            raise InvalidWebhookPayload()
        name = event.get("event")
        if not isinstance(name, str) or not name:
            raise InvalidWebhookPayload("Invalid webhook payload: missing event")

        if name == EVENT_CAPTURED:
            self._apply_captured(self._payment_entity(event))
            return True
        if name == EVENT_FAILED:
            self._apply_failed(self._payment_entity(event))
            return True

        logger.info(f"Ignoring webhook event {name}")
        return False

    def get_payment_by_order_id(self, order_id: str) -> PaymentModel:
        payment = self.repo.get_latest_for_order(order_id)
        if payment is None:
            raise PaymentRecordNotFound()
        return payment

    @staticmethod
    def _payment_entity(event: dict) -> dict:
        payload = event.get("payload")
        if not isinstance(payload, dict):
            raise InvalidWebhookPayload("Invalid webhook payload: missing payment data")
        payment = payload.get("payment")
        if not isinstance(payment, dict):
            raise InvalidWebhookPayload("Invalid webhook payload: missing payment entity")
        # bramka opakowuje encje w "entity"
        entity = payment.get("entity", payment)
        if not isinstance(entity, dict):
            raise InvalidWebhookPayload("Invalid webhook payload: missing payment entity")
        if not isinstance(entity.get("order_id"), str) or not entity["order_id"]:
            raise InvalidWebhookPayload("Invalid webhook payload: missing order_id")
        return entity

    def _apply_captured(self, entity: dict):
        payment_id = entity.get("id")
        if not isinstance(payment_id, str) or not payment_id:
            raise InvalidWebhookPayload("Invalid webhook payload: missing payment id")

        payment = self._payment_for(entity["order_id"])
        payment.gateway_payment_id = payment_id
        payment.status = PaymentStatus.PAID.value
        if isinstance(entity.get("method"), str):
            payment.method = entity["method"]
        self._commit_with_order_status(payment, OrderStatus.PAID.value)
        logger.info(f"Webhook: payment {payment_id} captured for order {payment.order_id}")

    def _apply_failed(self, entity: dict):
        payment = self._payment_for(entity["order_id"])
        method = entity["method"] if isinstance(entity.get("method"), str) else None

        try:
            downgraded = self.repo.mark_failed(payment.gateway_order_id, method)
            if downgraded:
                self.orders.set_status(
                    payment.order_id,
                    OrderStatus.PAYMENT_FAILED.value,
                    only_from=PAYMENT_UPDATABLE_STATUSES,
                )
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to mark payment {payment.id} as failed: {e}")
            raise PersistenceError("Failed to update payment record") from e
        self.db.refresh(payment)

        if not downgraded:
            # spozniony failed po udanej platnosci nie cofa stanu
            logger.warning(f"Webhook: ignoring payment.failed for already paid payment {payment.id}")
            return
        logger.info(f"Webhook: payment failed for order {payment.order_id}")

    def _payment_for(self, gateway_order_id: str) -> PaymentModel:
        payment = self.repo.get_by_gateway_order_id(gateway_order_id)
        if payment is None:
            raise PaymentRecordNotFound(f"Payment record not found for gateway order {gateway_order_id}")
        return payment

    def _commit_with_order_status(self, payment: PaymentModel, order_status: str):
        try:
            self.orders.set_status(payment.order_id, order_status, only_from=PAYMENT_UPDATABLE_STATUSES)
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            logger.error(f"Payment {payment.id} conflicts with an existing record: {e}")
            raise PersistenceError("Payment id already recorded for another payment") from e
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Failed to update payment {payment.id}: {e}")
            raise PersistenceError("Failed to update payment record") from e
        self.db.refresh(payment)
