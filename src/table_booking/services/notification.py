from datetime import datetime
from typing import Iterable, Optional

from loguru import logger

from celery_app.tasks import send_email_task

DEFAULT_SUBJECT = 'Уведомление о бронировании'
NOTIFICATION_QUEUE = 'notifications'


def send_notification_task(
    emails: Iterable[Optional[str]],
    text: str,
    subject: str = DEFAULT_SUBJECT,
    html: bool = False,
    eta: Optional[datetime] = None,
) -> bool:
    """Ставит письмо в очередь Celery.

    Пустые и повторяющиеся адреса отбрасываются; если адресов не
    осталось, задача не создаётся и возвращается False.

    Args:
        emails: адреса получателей.
        text: текст письма.
        subject: тема письма.
        html: отправлять ли письмо в HTML-формате.
        eta: отправить письмо к моменту времени (для напоминаний).

    """
    recipients = list(dict.fromkeys(email for email in emails if email))
    if not recipients:
        logger.warning(f'Нет адресатов для письма "{subject}"')
        return False
    send_email_task.apply_async(
        (recipients, text, subject, html),
        eta=eta,
        queue=NOTIFICATION_QUEUE,
    )
    return True
