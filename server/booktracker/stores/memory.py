"""MemoryBookStore - 进程内存储，主要用于测试替换"""

from booktracker.errors import NotFoundError
from booktracker.schemas.book import Book, BookStatus

from .base import BookStore


class MemoryBookStore(BookStore):
    """
    内存存储。
    自己持有书籍字典与自增计数器，删除后的 id 不会被复用；
    读写都返回副本，调用方无法绕过接口修改已存数据。
    """

    def __init__(self):
        self._books: dict[int, Book] = {}
        self._next_id = 1

    def _get(self, book_id: int) -> Book:
        book = self._books.get(book_id)
        if book is None:
            raise NotFoundError("book not found")
        return book

    async def get_all(self) -> list[Book]:
        return [
            b.model_copy() for b in sorted(self._books.values(), key=lambda b: b.id, reverse=True)
        ]

    async def get_by_id(self, book_id: int) -> Book:
        return self._get(book_id).model_copy()

    async def create(self, book: Book) -> Book:
        stored = book.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._books[stored.id] = stored
        return stored.model_copy()

    async def update(self, book_id: int, book: Book) -> Book:
        self._get(book_id)
        stored = book.model_copy(update={"id": book_id})
        self._books[book_id] = stored
        return stored.model_copy()

    async def delete(self, book_id: int) -> None:
        self._get(book_id)
        del self._books[book_id]

    async def get_by_filters(
        self,
        status: BookStatus | None = None,
        category: str | None = None,
        sort_by: str | None = None,
    ) -> list[Book]:
        books = await self.get_all()
        if status:
            books = [b for b in books if b.status == status]
        if category:
            books = [b for b in books if b.category == category]

        # 已按 id 降序；sorted 是稳定的，同值时保持 id 降序
        if sort_by == "title":
            books = sorted(books, key=lambda b: b.title)
        elif sort_by == "author":
            books = sorted(books, key=lambda b: b.author)
        elif sort_by == "date":
            books = sorted(books, key=lambda b: b.start_date, reverse=True)
        return books

    async def count(self) -> int:
        return len(self._books)
