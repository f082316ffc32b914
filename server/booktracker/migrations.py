"""线性版本化迁移 - 每个迁移只应用一次，版本记录在 schema_migrations 表中"""

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from booktracker.errors import MigrationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    up: tuple[str, ...]
    down: tuple[str, ...] = ()


MIGRATIONS_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version INTEGER PRIMARY KEY,
        applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
"""

MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        description="Create books table",
        up=(
            """
            CREATE TABLE IF NOT EXISTS books (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                author TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'to_read',
                category TEXT,
                notes TEXT,
                start_date DATETIME NOT NULL,
                end_date DATETIME
            )
            """,
        ),
        down=("DROP TABLE IF EXISTS books",),
    ),
    Migration(
        version=2,
        description="Index books by status and category",
        up=(
            "CREATE INDEX IF NOT EXISTS ix_books_status ON books(status)",
            "CREATE INDEX IF NOT EXISTS ix_books_category ON books(category)",
        ),
        down=(
            "DROP INDEX IF EXISTS ix_books_category",
            "DROP INDEX IF EXISTS ix_books_status",
        ),
    ),
)


class Migrator:
    """
    按版本升序应用迁移。
    每个迁移的 DDL 与版本记录在同一事务中提交，失败时停留在上一个完整版本。
    """

    def __init__(self, engine: AsyncEngine, migrations: Sequence[Migration]):
        versions = [m.version for m in migrations]
        if any(v <= 0 for v in versions) or len(set(versions)) != len(versions):
            raise ValueError("migration versions must be unique positive integers")
        self._engine = engine
        self._migrations = tuple(sorted(migrations, key=lambda m: m.version))

    @property
    def migrations(self) -> tuple[Migration, ...]:
        return self._migrations

    async def ensure_migrations_table(self) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text(MIGRATIONS_TABLE_DDL))

    async def current_version(self) -> int:
        """已应用的最高版本；表不存在或读取失败时视为 0"""
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    text("SELECT COALESCE(MAX(version), 0) FROM schema_migrations")
                )
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            logger.debug(f"读取迁移版本失败，按版本 0 处理: {e}")
            return 0

    async def apply_pending(self) -> list[int]:
        """应用所有高于当前版本的迁移，返回本次应用的版本号列表"""
        await self.ensure_migrations_table()
        current = await self.current_version()
        logger.info(f"当前数据库版本: {current}")

        applied: list[int] = []
        for migration in self._migrations:
            if migration.version <= current:
                continue

            logger.info(f"应用迁移 {migration.version}: {migration.description}")
            try:
                async with self._engine.begin() as conn:
                    for statement in migration.up:
                        await conn.execute(text(statement))
                    await conn.execute(
                        text("INSERT INTO schema_migrations (version) VALUES (:version)"),
                        {"version": migration.version},
                    )
            except SQLAlchemyError as e:
                raise MigrationError(
                    f"migration {migration.version} failed: {e}"
                ) from e
            applied.append(migration.version)

        if applied:
            logger.info(f"迁移完成，已应用版本: {applied}")
        else:
            logger.info("所有迁移均已是最新")
        return applied

    async def rollback(self) -> int:
        """回滚最近一次应用的迁移，返回被回滚的版本号"""
        current = await self.current_version()
        if current == 0:
            raise MigrationError("no migrations to rollback")

        target = next((m for m in self._migrations if m.version == current), None)
        if target is None:
            raise MigrationError(f"migration {current} not found")

        logger.info(f"回滚迁移 {target.version}: {target.description}")
        try:
            async with self._engine.begin() as conn:
                for statement in target.down:
                    await conn.execute(text(statement))
                await conn.execute(
                    text("DELETE FROM schema_migrations WHERE version = :version"),
                    {"version": current},
                )
        except SQLAlchemyError as e:
            raise MigrationError(f"rollback of migration {current} failed: {e}") from e

        logger.info(f"迁移 {current} 已回滚")
        return current
