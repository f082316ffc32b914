"""BookStore 抽象基类 - 定义书籍存储的能力接口"""

from abc import ABC, abstractmethod

from booktracker.schemas.book import Book, BookStatus


class BookStore(ABC):
    """
    书籍存储抽象基类。
    持久化实现与内存实现都需实现此接口，处理层只依赖这里的方法。
    找不到记录时抛 NotFoundError，底层失败统一包装为 InternalError。
    """

    @abstractmethod
    async def get_all(self) -> list[Book]:
        """全部书籍，按 id 降序（最新创建的在前）"""
        ...

    @abstractmethod
    async def get_by_id(self, book_id: int) -> Book:
        ...

    @abstractmethod
    async def create(self, book: Book) -> Book:
        """忽略调用方给出的 id，返回带存储生成 id 的完整书籍"""
        ...

    @abstractmethod
    async def update(self, book_id: int, book: Book) -> Book:
        """按 id 全量替换"""
        ...

    @abstractmethod
    async def delete(self, book_id: int) -> None:
        ...

    @abstractmethod
    async def get_by_filters(
        self,
        status: BookStatus | None = None,
        category: str | None = None,
        sort_by: str | None = None,
    ) -> list[Book]:
        """
        status / category 为空时不参与过滤。
        排序：title 升序、author 升序、date 按 start_date 降序，其余按 id 降序。
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
