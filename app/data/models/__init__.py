#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.user import UserModel
from app.data.models.product import ProductModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.payment import PaymentModel

__all__ = ["UserModel", "ProductModel", "OrderModel", "OrderItemModel", "PaymentModel"]
