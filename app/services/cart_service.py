from app.domain.cart import Cart, CartItem, CartProduct
from app.domain.errors import (
    CartItemNotFound,
    InsufficientInventory,
    ProductNotFound,
    ProductUnavailable,
    ValidationFailed,
)
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk sesji w Redis.
    Stan magazynu sprawdzany tylko informacyjnie, prawdziwa rezerwacja
    dzieje sie dopiero przy tworzeniu zamowienia.
    """

    def __init__(self, repo: CartRepo, products: ProductRepo):
        self.repo = repo
        self.products = products

    #query - odczyt
    def get_cart(self, session_id: str) -> Cart:
        cart = self.repo.get(session_id)
        if cart is None:
            return Cart.empty(session_id)
        return cart

    def get_cart_with_products(self, session_id: str) -> Cart:
        cart = self.get_cart(session_id)

        #odswiez ceny i dolacz produkt z bazy, nic nie zapisujemy
        for item in cart.items:
            product = self.products.get(item.product_id)
            if product is None:
                continue
            item.price = product.price
            item.product = CartProduct.model_validate(product)

        cart.calculate_totals()
        return cart

    def save_cart(self, cart: Cart) -> Cart:
        cart.calculate_totals()
        self.repo.save(cart)
        return cart

    #commands
    def add_item(self, session_id: str, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            raise ValidationFailed("Quantity must be greater than 0")

        cart = self.get_cart(session_id)
        product = self._active_product(product_id)

        existing = cart.find_item(product_id)
        requested = quantity + (existing.quantity if existing else 0)
        if product.inventory < requested:
            raise InsufficientInventory(f"Insufficient inventory: only {product.inventory} items available")

        if existing:
            logger.info(
                f"Product {product_id} already in cart {session_id}, "
                f"quantity {existing.quantity} -> {requested}"
            )
            existing.quantity = requested
        else:
            logger.info(f"Adding product {product_id} to cart {session_id}")
            cart.items.append(
                CartItem(product_id=product_id, quantity=quantity, price=product.price)
            )

        return self.save_cart(cart)

    def update_item(self, session_id: str, product_id: str, quantity: int) -> Cart:
        if quantity < 0:
            raise ValidationFailed("Quantity cannot be negative")

        cart = self.get_cart(session_id)
        item = cart.find_item(product_id)
        if item is None:
            raise CartItemNotFound()

        if quantity == 0:
            cart.remove_item(product_id)
        else:
            product = self._active_product(product_id)
            if product.inventory < quantity:
                raise InsufficientInventory(f"Insufficient inventory: only {product.inventory} items available")
            item.quantity = quantity

        return self.save_cart(cart)

    def remove_item(self, session_id: str, product_id: str) -> Cart:
        cart = self.get_cart(session_id)
        if not cart.remove_item(product_id):
            raise CartItemNotFound()

        logger.info(f"Removed product {product_id} from cart {session_id}")
        return self.save_cart(cart)

    def clear_cart(self, session_id: str) -> None:
        self.repo.delete(session_id)

    def _active_product(self, product_id: str):
        product = self.products.get(product_id)
        if product is None:
            raise ProductNotFound(f"Product not found: {product_id}")
        if not product.is_active:
            raise ProductUnavailable()
        return product
