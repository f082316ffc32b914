"""数据库初始化 - SQLite + async SQLAlchemy"""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from booktracker.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def make_engine(url: str) -> AsyncEngine:
    """创建引擎，并让 SQLAlchemy 自行发出 BEGIN，使 DDL 也处于事务之中"""
    engine = create_async_engine(url, echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        # pysqlite 默认只在 DML 前隐式开启事务，DDL 会被直接提交
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


engine = make_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> list[int]:
    """启动时执行全部待应用的迁移"""
    from booktracker.migrations import MIGRATIONS, Migrator

    applied = await Migrator(engine, MIGRATIONS).apply_pending()
    logger.info(f"数据库已就绪，本次应用迁移: {applied or '无'}")
    return applied
