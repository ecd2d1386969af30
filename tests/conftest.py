import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///:memory:')
os.environ.setdefault('ADMIN_NAME', 'Admin')
os.environ.setdefault('ADMIN_EMAIL', 'admin@example.com')
os.environ.setdefault('ADMIN_PASSWORD', 'Adm1n!pass')
os.environ.setdefault('NOTIFY_MAIL_FROM', 'noreply@example.com')
os.environ.setdefault('NOTIFY_MAIL_USERNAME', 'noreply')
os.environ.setdefault('NOTIFY_MAIL_PASSWORD', 'secret')
os.environ.setdefault('NOTIFY_MAIL_PORT', '1025')
os.environ.setdefault('NOTIFY_MAIL_SERVER', 'localhost')
os.environ.setdefault('ADMISSION_RETRY_WAIT', '0')

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    async_sessionmaker,
    create_async_engine,
)

from table_booking.core.db import Base, get_async_session  # noqa: E402
from table_booking.main import app  # noqa: E402
from tests.factories import make_user  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    """Файловая SQLite БД на тест: несколько сессий видят одни данные."""
    db_engine = create_async_engine(
        f'sqlite+aiosqlite:///{tmp_path / "booking.db"}',
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine)


@pytest.fixture
async def session(engine):
    """Сессия для подготовки данных: объекты не истекают после commit."""
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session


@pytest.fixture
def sent_emails(monkeypatch):
    """Письма, поставленные в очередь, вместо вызова Celery."""
    sent: list[dict] = []

    def record(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(
        'table_booking.services.send_email_service.send_notification_task',
        record,
    )
    return sent


@pytest.fixture
async def client(session_factory, sent_emails):
    async def override_session():
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_async_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def owner(session):
    return await make_user(session)
