# app/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.auth import AuthContext, get_auth_context
from app.api.errors import clamp_pagination, http_error, pagination
from app.data.database import get_db
from app.data.redis_client import get_redis
from app.domain.errors import CheckoutError
from app.domain.schemas import OrderCreate, OrderListOut, OrderOut
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.services.order_service import OrderService
from app.utils.settings import CART_TTL_SECONDS

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session = Depends(get_db), redis_client=Depends(get_redis)) -> OrderService:
    cart_service = CartService(
        repo=CartRepo(redis_client, ttl_seconds=CART_TTL_SECONDS),
        products=ProductRepo(db),
    )
    return OrderService(db, cart_service=cart_service, lock_service=LockService(redis_client))


@router.post("/create", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    auth: AuthContext = Depends(get_auth_context),
    svc: OrderService = Depends(get_service),
):
    """
    Tworzy zamówienie z koszyka sesji.
    """
    try:
        return svc.create_order(
            user_id=auth.user_id,
            session_id=payload.session_id,
            shipping_address=payload.shipping_address.model_dump(),
            billing_address=payload.billing_address.model_dump(),
            payment_intent_id=payload.payment_intent_id,
            notes=payload.notes,
        )
    except CheckoutError as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    auth: AuthContext = Depends(get_auth_context),
    svc: OrderService = Depends(get_service),
):
    """
    Pobiera szczegóły zamówienia. Admin widzi wszystkie.
    """
    try:
        return svc.get_order(order_id, "" if auth.is_admin else auth.user_id)
    except CheckoutError as e:
        raise http_error(e)


@router.get("", response_model=OrderListOut)
def get_user_orders(
    page: int = Query(1),
    limit: int = Query(10),
    auth: AuthContext = Depends(get_auth_context),
    svc: OrderService = Depends(get_service),
):
    page, limit = clamp_pagination(page, limit)
    orders, total = svc.get_user_orders(auth.user_id, page, limit)
    return {"orders": orders, "pagination": pagination(page, limit, total)}
