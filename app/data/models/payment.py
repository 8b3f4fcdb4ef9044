from sqlalchemy import Column, String, DateTime, BigInteger, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from app.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)

    gateway_order_id = Column(String(64), nullable=False, unique=True)
    gateway_payment_id = Column(String(64), nullable=True, unique=True)
    signature = Column(String(255), nullable=True)

    amount = Column(BigInteger, nullable=False)  # w groszach/paisa
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default="created", index=True)
    method = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    order = relationship("OrderModel")
