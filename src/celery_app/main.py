from typing import Any

from celery import Celery
from celery.signals import setup_logging

from table_booking.core.config import settings
from table_booking.core.logging import configure_logging

celery_app = Celery(
    'table_booking',
    broker=settings.rabbit_url,
    backend='rpc://',
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    enable_utc=True,
    timezone='UTC',
    include=['celery_app.tasks'],
    task_routes={
        'send-booking-email': {'queue': 'notifications'},
    },
)


@setup_logging.connect
def configure_worker_logging(**kwargs: Any) -> None:
    """Воркер пишет логи через loguru в отдельный файл."""
    configure_logging(log_name='worker.log')
