"""SQLAlchemyBookStore - 基于 AsyncSession 的持久化存储"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from booktracker.errors import InternalError, NotFoundError
from booktracker.models.book import BookRecord
from booktracker.schemas.book import Book, BookStatus

from .base import BookStore

logger = logging.getLogger(__name__)

SQLITE_MIN_INT = -(2**63)
SQLITE_MAX_INT = 2**63 - 1


def _to_book(record: BookRecord) -> Book:
    return Book.model_validate(record)


def _apply(record: BookRecord, book: Book) -> None:
    record.title = book.title
    record.author = book.author
    record.status = BookStatus(book.status).value
    record.category = book.category
    record.notes = book.notes
    record.start_date = book.start_date
    record.end_date = book.end_date


class SQLAlchemyBookStore(BookStore):
    """
    持久化存储。
    写操作立即 flush，让自增 id 与驱动错误在调用内暴露；
    提交由请求级 session（get_db）负责。
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _query(self, stmt) -> list[Book]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"查询书籍失败: {e}")
            raise InternalError("failed to read books") from e
        return [_to_book(r) for r in result.scalars().all()]

    async def _load(self, book_id: int) -> BookRecord:
        # 超出 SQLite INTEGER 范围的 id 不可能存在，也无法作为参数绑定
        if not SQLITE_MIN_INT <= book_id <= SQLITE_MAX_INT:
            raise NotFoundError("book not found")
        try:
            record = await self._session.get(BookRecord, book_id)
        except SQLAlchemyError as e:
            raise InternalError(f"failed to read book {book_id}") from e
        if record is None:
            raise NotFoundError("book not found")
        return record

    async def _flush(self, action: str) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"{action} 失败: {e}")
            raise InternalError(f"failed to {action}") from e

    async def get_all(self) -> list[Book]:
        return await self._query(select(BookRecord).order_by(BookRecord.id.desc()))

    async def get_by_id(self, book_id: int) -> Book:
        return _to_book(await self._load(book_id))

    async def create(self, book: Book) -> Book:
        record = BookRecord()
        _apply(record, book)
        self._session.add(record)
        await self._flush("create book")
        return _to_book(record)

    async def update(self, book_id: int, book: Book) -> Book:
        record = await self._load(book_id)
        _apply(record, book)
        await self._flush("update book")
        return _to_book(record)

    async def delete(self, book_id: int) -> None:
        record = await self._load(book_id)
        await self._session.delete(record)
        await self._flush("delete book")

    async def get_by_filters(
        self,
        status: BookStatus | None = None,
        category: str | None = None,
        sort_by: str | None = None,
    ) -> list[Book]:
        stmt = select(BookRecord)
        if status:
            stmt = stmt.where(BookRecord.status == BookStatus(status).value)
        if category:
            stmt = stmt.where(BookRecord.category == category)

        if sort_by == "title":
            stmt = stmt.order_by(BookRecord.title.asc())
        elif sort_by == "author":
            stmt = stmt.order_by(BookRecord.author.asc())
        elif sort_by == "date":
            stmt = stmt.order_by(BookRecord.start_date.desc())
        stmt = stmt.order_by(BookRecord.id.desc())
        return await self._query(stmt)

    async def count(self) -> int:
        try:
            result = await self._session.execute(
                select(func.count()).select_from(BookRecord)
            )
        except SQLAlchemyError as e:
            raise InternalError("failed to count books") from e
        return result.scalar_one()
