"""测试公共 Fixtures - 每个测试一个独立的 SQLite 文件库 + 独立 TestClient"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from booktracker.database import get_db, make_engine
from booktracker.migrations import MIGRATIONS, Migrator
from booktracker.stores import MemoryBookStore, SQLAlchemyBookStore


# ──────────── 数据库引擎 ────────────

@pytest_asyncio.fixture
async def engine(tmp_path):
    """未迁移的空库"""
    test_engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'booktracker.db'}")
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """已执行全部迁移的 session 工厂"""
    await Migrator(engine, MIGRATIONS).apply_pending()
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ──────────── 存储 ────────────

@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, session_factory):
    """两种存储实现跑同一组用例"""
    if request.param == "memory":
        yield MemoryBookStore()
        return
    async with session_factory() as session:
        yield SQLAlchemyBookStore(session)


# ──────────── FastAPI TestClient ────────────

@pytest_asyncio.fixture
async def client(session_factory):
    from booktracker.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
