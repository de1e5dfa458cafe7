import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from fitcheck.config import get_settings
from fitcheck.database import Base, get_db
from fitcheck import models  # noqa: F401
from fitcheck.main import app
from fitcheck.services.auth import create_access_token
from fitcheck.services.fit_orchestrator import FitOrchestrator, get_fit_orchestrator

PDF_BYTES = b"%PDF-1.4\n1 0 obj <<>> endobj\ntrailer <<>>\n%%EOF\n"


def run(coro):
    return asyncio.run(coro)


def auth_headers(user_id: str = "user-1") -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


class FakeEngine:
    """Stands in for the analysis engine; answers per stage path and records calls."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def handler(self, request: httpx.Request):
        stage = request.url.path.strip("/")
        self.calls.append((stage, request))
        reply = self.responses.get(stage)
        if callable(reply):
            return reply(request)
        if reply is None:
            return httpx.Response(404, text=f"no route for {stage}")
        # Fresh copy per call, a route may be hit more than once
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def stages(self) -> list:
        return [stage for stage, _ in self.calls]


@pytest.fixture
def settings(tmp_path, monkeypatch):
    s = get_settings()
    monkeypatch.setattr(s, "uploads_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(s, "analysis_mode", "combined")
    return s


@pytest.fixture
def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_all():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    run(create_all())
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    run(engine.dispose())


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def client(session_maker, settings, fake_engine):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_fit_orchestrator] = lambda: FitOrchestrator(
        settings, transport=fake_engine.transport
    )
    yield TestClient(app)
    app.dependency_overrides.clear()
