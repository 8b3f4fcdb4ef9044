# app/domain/cart.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

ZERO = Decimal("0.00")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CartProduct(BaseModel):
    id: str
    name: str
    price: Decimal
    inventory: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    # cena z chwili dodania, tylko informacyjnie
    price: Decimal
    total: Decimal = ZERO
    # dolaczany tylko przy odczycie, nie trafia do Redis
    product: Optional[CartProduct] = Field(default=None, exclude=True)


class Cart(BaseModel):
    """
    Koszyk sesji trzymany w Redis jako JSON.
    Wszystkie zmiany przez CartService, totals liczone przed zapisem.
    """

    session_id: str
    items: List[CartItem] = Field(default_factory=list)
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @classmethod
    def empty(cls, session_id: str) -> "Cart":
        return cls(session_id=session_id)

    def find_item(self, product_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def remove_item(self, product_id: str) -> bool:
        for i, item in enumerate(self.items):
            if item.product_id == product_id:
                del self.items[i]
                return True
        return False

    def calculate_totals(self) -> None:
        subtotal = ZERO
        for item in self.items:
            item.total = item.price * item.quantity
            subtotal += item.total
        self.subtotal = subtotal
        # podatek liczony dopiero przy zamowieniu
        self.tax = ZERO
        self.total = self.subtotal + self.tax
        self.updated_at = _now()

    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)
