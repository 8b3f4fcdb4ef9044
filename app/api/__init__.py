# app/api/__init__.py
from fastapi import FastAPI

from app.api.routers import admin, carts, orders, payments
from app.api.routers.health import router as health_router
from app.data.database import Base, make_engine, make_session_factory
from app.data.redis_client import make_redis
from app.services.notification_service import NotificationService
from app.services.razorpay_client import RazorpayClient
from app.utils.settings import DATABASE_URL, REDIS_URL
from app.utils.logging import get_logger

from app.data import models  # noqa: F401  rejestracja modeli w Base.metadata

logger = get_logger(__name__)


def create_app(
    session_factory=None,
    redis_client=None,
    notifier=None,
    gateway=None,
    create_tables: bool = True,
) -> FastAPI:
    """
    Wszystkie zaleznosci (baza, redis, bramka, notifier) trzymane w app.state,
    testy podaja wlasne.
    """
    app = FastAPI(title="Shop Checkout Service", version="1.0.0")

    if session_factory is None:
        engine = make_engine(DATABASE_URL)
        session_factory = make_session_factory(engine)
    if create_tables:
        engine = session_factory.kw["bind"]
        logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created")
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            raise

    app.state.session_factory = session_factory
    app.state.redis = redis_client if redis_client is not None else make_redis(REDIS_URL)
    app.state.notifier = notifier if notifier is not None else NotificationService()
    app.state.gateway = gateway if gateway is not None else RazorpayClient()

    app.include_router(health_router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(payments.router)

    return app
