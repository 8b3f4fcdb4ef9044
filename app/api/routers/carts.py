#app/api/routers/carts.py
import uuid

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.api.errors import http_error
from app.data.database import get_db
from app.data.redis_client import get_redis
from app.domain.errors import CheckoutError
from app.domain.schemas import CartOut, ItemIn, ItemRemoveIn, ItemUpdateIn
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.services.cart_service import CartService
from app.utils.settings import CART_TTL_SECONDS

router = APIRouter(prefix="/cart", tags=["cart"])

SESSION_COOKIE = "session_id"


def get_service(db: Session = Depends(get_db), redis_client=Depends(get_redis)) -> CartService:
    return CartService(
        repo=CartRepo(redis_client, ttl_seconds=CART_TTL_SECONDS),
        products=ProductRepo(db),
    )


def session_id(request: Request, response: Response) -> str:
    sid = request.cookies.get(SESSION_COOKIE)
    if not sid:
        sid = str(uuid.uuid4())
        response.set_cookie(SESSION_COOKIE, sid, max_age=CART_TTL_SECONDS, httponly=True, samesite="lax")
    return sid


@router.get("", response_model=CartOut)
def get_cart(sid: str = Depends(session_id), svc: CartService = Depends(get_service)):
    return svc.get_cart_with_products(sid)


@router.post("/add", response_model=CartOut)
def add_item(payload: ItemIn, sid: str = Depends(session_id), svc: CartService = Depends(get_service)):
    try:
        return svc.add_item(sid, payload.product_id, payload.quantity)
    except CheckoutError as e:
        raise http_error(e)


@router.post("/update", response_model=CartOut)
def update_item(payload: ItemUpdateIn, sid: str = Depends(session_id), svc: CartService = Depends(get_service)):
    try:
        return svc.update_item(sid, payload.product_id, payload.quantity)
    except CheckoutError as e:
        raise http_error(e)


@router.post("/remove", response_model=CartOut)
def remove_item(payload: ItemRemoveIn, sid: str = Depends(session_id), svc: CartService = Depends(get_service)):
    try:
        return svc.remove_item(sid, payload.product_id)
    except CheckoutError as e:
        raise http_error(e)


@router.delete("/clear", status_code=204)
def clear_cart(sid: str = Depends(session_id), svc: CartService = Depends(get_service)):
    svc.clear_cart(sid)
