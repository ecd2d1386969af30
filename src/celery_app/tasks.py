import asyncio

from fastapi_mail.errors import ConnectionErrors
from loguru import logger

from celery_app.main import celery_app
from table_booking.core.notification import send_notification

MAX_DELIVERY_RETRIES = 3
RETRY_DELAY_SECONDS = 60


@celery_app.task(
    bind=True,
    name='send-booking-email',
    max_retries=MAX_DELIVERY_RETRIES,
)
def send_email_task(
    self,
    emails: list[str],
    text: str,
    subject: str,
    html: bool,
) -> int:
    """Отправка письма гостю или владельцу ресторана через SMTP."""
    try:
        asyncio.run(
            send_notification(
                emails=emails,
                text=text,
                subject=subject,
                html=html,
            ),
        )
    except ConnectionErrors as e:
        logger.warning(f'SMTP недоступен, письмо "{subject}" отложено: {e}')
        raise self.retry(exc=e, countdown=RETRY_DELAY_SECONDS)
    return len(emails)
