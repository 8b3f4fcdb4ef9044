# app/celery_worker.py
from celery import Celery

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, NOTIFIER_TIMEOUT_SECONDS

celery_app = Celery(
    "shop",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "app.services.notification_service",
)

# publikacja taska nie moze blokowac requestu
celery_app.conf.broker_connection_timeout = NOTIFIER_TIMEOUT_SECONDS
celery_app.conf.task_acks_late = True
celery_app.conf.timezone = "UTC"
