from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, CheckConstraint

from app.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    # jedyne zrodlo prawdy o stanie magazynu
    inventory = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("inventory >= 0", name="ck_products_inventory_non_negative"),)
