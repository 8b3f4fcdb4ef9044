# app/repos/payment_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.payment import PaymentModel
from app.domain.statuses import PaymentStatus


class PaymentRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def get_by_gateway_order_id(self, gateway_order_id: str) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel).where(PaymentModel.gateway_order_id == gateway_order_id)
        ).scalar_one_or_none()

    def get_latest_for_order(self, order_id: str) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel)
            .where(PaymentModel.order_id == order_id)
            .order_by(PaymentModel.created_at.desc())
            .limit(1)
        ).scalar_one_or_none()

    def mark_failed(self, gateway_order_id: str, method: str | None = None) -> bool:
        """
        Warunkowy UPDATE, oplacona platnosc nigdy nie przechodzi w failed
        nawet gdy captured zapisal sie rownolegle po naszym odczycie.
        """
        values = {"status": PaymentStatus.FAILED.value}
        if method:
            values["method"] = method
        result = self.db.execute(
            update(PaymentModel)
            .where(
                PaymentModel.gateway_order_id == gateway_order_id,
                PaymentModel.status != PaymentStatus.PAID.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
