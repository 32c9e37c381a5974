# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks have to be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "storefront.tasks.messages",
)

celery_app.conf.task_serializer = "json"
celery_app.conf.timezone = "UTC"
