"""
Shared fixtures: an app wired to a temporary SQLite file through aiosqlite,
and an httpx client talking to it in-process.
"""
import base64
from datetime import datetime, timezone
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from sitevisits.core.config import Settings
from sitevisits.main import create_app
from sitevisits.models.visit import Visit
from sitevisits.services.visits import VisitsContext

ADMIN_TOKEN = "s3cret-token"


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": None,
        "ADMIN_TOKEN": ADMIN_TOKEN,
        "STATIC_DIR": None,
        "TELEGRAM_BOT_TOKEN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def basic_auth(password: str, username: str = "admin") -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def db_url(tmp_path):
    # File-based SQLite: every pooled connection sees the same database
    return f"sqlite+aiosqlite:///{tmp_path / 'visits.db'}"


@pytest.fixture
async def visits(db_url):
    ctx = VisitsContext.from_settings(make_settings(DATABASE_URL=db_url))
    yield ctx
    await ctx.close()


@pytest.fixture
async def app(db_url):
    application = create_app(make_settings(DATABASE_URL=db_url))
    yield application
    await application.state.visits.close()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://testserver") as c:
        yield c


@pytest.fixture
def admin_headers():
    return basic_auth(ADMIN_TOKEN)


async def insert_visit(ctx: VisitsContext, visitor_id: str, path: str = "/", ts: Optional[datetime] = None):
    """Insert a row directly, optionally with an explicit timestamp."""
    status = await ctx.schema.ensure()
    assert status.ok, status.reason
    async with ctx.engine.begin() as conn:
        values = {"visitor_id": visitor_id, "path": path}
        if ts is not None:
            values["ts"] = ts
        await conn.execute(Visit.__table__.insert().values(**values))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
