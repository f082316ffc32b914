import logging
from datetime import datetime, timezone

from booktracker.schemas.book import Book, BookRequest, BookStatus, TERMINAL_STATUSES
from booktracker.stores.base import BookStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_end_date(
    new_status: BookStatus,
    existing_end_date: datetime | None,
    now: datetime,
) -> datetime | None:
    """
    更新时的 end_date 策略：
    - 进入终态且原来没有 end_date → now
    - 回到 reading / to_read → 清空
    - 其余（已是终态之间切换）→ 沿用原值，不刷新
    """
    if new_status in TERMINAL_STATUSES and existing_end_date is None:
        return now
    if new_status in (BookStatus.READING, BookStatus.TO_READ):
        return None
    return existing_end_date


async def list_books(
    store: BookStore,
    status: BookStatus | None = None,
    category: str | None = None,
    sort_by: str | None = None,
) -> list[Book]:
    if not (status or category or sort_by):
        return await store.get_all()
    return await store.get_by_filters(status=status, category=category, sort_by=sort_by)


async def get_book(store: BookStore, book_id: int) -> Book:
    return await store.get_by_id(book_id)


async def create_book(
    store: BookStore, body: BookRequest, now: datetime | None = None
) -> Book:
    """新建书籍：start_date 取服务端时间，状态缺省为 to_read"""
    now = now or utcnow()
    status = body.status or BookStatus.TO_READ
    book = Book(
        title=body.title,
        author=body.author,
        status=status,
        category=body.category,
        notes=body.notes,
        start_date=now,
        end_date=now if status in TERMINAL_STATUSES else None,
    )
    created = await store.create(book)
    logger.info(f"新建书籍 #{created.id}: {created.title} [{created.status.value}]")
    return created


async def update_book(
    store: BookStore, book_id: int, body: BookRequest, now: datetime | None = None
) -> Book:
    """全量更新：start_date 沿用原值，end_date 按状态迁移策略重新计算"""
    existing = await store.get_by_id(book_id)
    status = body.status or BookStatus.TO_READ
    end_date = resolve_end_date(status, existing.end_date, now or utcnow())

    book = Book(
        id=book_id,
        title=body.title,
        author=body.author,
        status=status,
        category=body.category,
        notes=body.notes,
        start_date=existing.start_date,
        end_date=end_date,
    )
    updated = await store.update(book_id, book)
    if existing.status != status:
        logger.info(f"书籍 #{book_id} 状态变更: {existing.status.value} → {status.value}")
    return updated


async def delete_book(store: BookStore, book_id: int) -> None:
    await store.delete(book_id)
    logger.info(f"删除书籍 #{book_id}")
