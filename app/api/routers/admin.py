# app/api/routers/admin.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.auth import AuthContext, require_admin
from app.api.errors import clamp_pagination, http_error, pagination
from app.api.routers.orders import get_service as get_order_service
from app.data.database import get_db
from app.domain.errors import CheckoutError
from app.domain.schemas import CustomerListOut, OrderListOut, OrderOut, StatusUpdateIn
from app.services.order_service import OrderService
from app.services.order_status import OrderStatusService

router = APIRouter(prefix="/admin", tags=["admin"])


def get_status_service(request: Request, db: Session = Depends(get_db)) -> OrderStatusService:
    return OrderStatusService(db, notifier=request.app.state.notifier)


@router.get("/orders", response_model=OrderListOut)
def get_all_orders(
    page: int = Query(1),
    limit: int = Query(10),
    status: str = Query(""),
    user_id: str = Query("", alias="userId"),
    _: AuthContext = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    page, limit = clamp_pagination(page, limit)
    orders, total = svc.get_all_orders(page, limit, status=status, user_id=user_id)
    return {"orders": orders, "pagination": pagination(page, limit, total)}


@router.put("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: StatusUpdateIn,
    _: AuthContext = Depends(require_admin),
    svc: OrderStatusService = Depends(get_status_service),
):
    try:
        return svc.update_status(order_id, payload.status)
    except CheckoutError as e:
        raise http_error(e)


@router.get("/customers", response_model=CustomerListOut)
def get_all_customers(
    page: int = Query(1),
    limit: int = Query(10),
    search: str = Query(""),
    _: AuthContext = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    page, limit = clamp_pagination(page, limit)
    rows, total = svc.get_all_customers(page, limit, search)
    customers = [
        {
            "id": user.id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "role": user.role,
            "created_at": user.created_at,
            "order_count": count,
        }
        for user, count in rows
    ]
    return {"customers": customers, "pagination": pagination(page, limit, total)}
