"""示例数据 - 数据库为空时灌入，便于首次启动后直接体验接口"""

import logging

from booktracker.schemas.book import BookRequest, BookStatus
from booktracker.services.book_service import create_book
from booktracker.stores.base import BookStore

logger = logging.getLogger(__name__)


SAMPLE_BOOKS: list[BookRequest] = [
    BookRequest(
        title="Clean Code",
        author="Robert C. Martin",
        status=BookStatus.TO_READ,
        category="Software Engineering",
    ),
    BookRequest(
        title="Dune",
        author="Frank Herbert",
        status=BookStatus.READING,
        category="Science Fiction",
    ),
]


async def seed_sample_books(store: BookStore) -> int:
    """仅当表为空时写入示例书籍，返回写入数量"""
    if await store.count() > 0:
        return 0

    logger.info("数据库为空，写入示例数据")
    for body in SAMPLE_BOOKS:
        await create_book(store, body)
    return len(SAMPLE_BOOKS)
