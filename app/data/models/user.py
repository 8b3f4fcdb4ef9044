from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.data.database import Base


class UserModel(Base):
    """Tylko odczyt, konta zaklada zewnetrzna warstwa auth."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default="customer")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    orders = relationship("OrderModel", back_populates="user")
