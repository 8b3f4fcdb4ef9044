# app/api/routers/payments.py
import json

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.auth import AuthContext, get_auth_context
from app.api.errors import http_error
from app.data.database import get_db
from app.domain.errors import CheckoutError, ErrorKind, InvalidWebhookPayload, OrderNotFound
from app.domain.schemas import PaymentCreateIn, PaymentOut, PaymentVerifyIn
from app.repos.order_repo import OrderRepo
from app.services.payment_service import PaymentService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def get_service(request: Request, db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db, gateway=request.app.state.gateway)


@router.post("/create-order", response_model=PaymentOut, status_code=201)
def create_payment_order(
    payload: PaymentCreateIn,
    _: AuthContext = Depends(get_auth_context),
    svc: PaymentService = Depends(get_service),
):
    try:
        return svc.create_payment_request(
            order_id=payload.order_id,
            amount=payload.amount,
            currency=payload.currency,
            description=payload.description,
        )
    except CheckoutError as e:
        raise http_error(e)


@router.post("/verify")
def verify_payment(
    payload: PaymentVerifyIn,
    _: AuthContext = Depends(get_auth_context),
    svc: PaymentService = Depends(get_service),
):
    try:
        payment = svc.verify_payment(
            payload.razorpay_order_id,
            payload.razorpay_payment_id,
            payload.razorpay_signature,
        )
    except CheckoutError as e:
        raise http_error(e)
    return {"status": payment.status, "order_id": payment.order_id}


@router.get("/status/{order_id}", response_model=PaymentOut)
def get_payment_status(
    order_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    svc: PaymentService = Depends(get_service),
):
    try:
        # klient widzi tylko platnosci swoich zamowien
        if OrderRepo(db).get_order(order_id, "" if auth.is_admin else auth.user_id) is None:
            raise OrderNotFound()
        return svc.get_payment_by_order_id(order_id)
    except CheckoutError as e:
        raise http_error(e)


def process_webhook(app, body: bytes, signature: str | None) -> dict:
    session = app.state.session_factory()
    try:
        svc = PaymentService(session, gateway=app.state.gateway)
        svc.verify_webhook_signature(body, signature)
        try:
            event = json.loads(body)
        except ValueError:
            raise InvalidWebhookPayload("Webhook body is not valid JSON")
        applied = svc.handle_webhook(event)
    except CheckoutError as e:
        if e.kind is ErrorKind.INTERNAL:
            logger.error(f"Webhook processing failed: {e}")
        else:
            logger.warning(f"Webhook rejected: {e.code} {e}")
        raise http_error(e)
    finally:
        session.close()

    return {"status": "ok", "applied": applied}


@router.post("/webhook")
async def handle_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
):
    # podpis liczony z surowego body, dlatego bez modelu pydantic
    body = await request.body()
    return await run_in_threadpool(process_webhook, request.app, body, x_razorpay_signature)
