"""书籍存储测试 - 内存实现与 SQLAlchemy 实现共用同一组用例"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from booktracker.errors import InternalError, NotFoundError
from booktracker.schemas.book import Book, BookStatus
from booktracker.stores import SQLAlchemyBookStore

T0 = datetime(2025, 3, 1, 8, 30, tzinfo=timezone.utc)


def _book(title="Dune", author="Frank Herbert", **overrides) -> Book:
    data = dict(
        title=title,
        author=author,
        status=BookStatus.TO_READ,
        category="Science Fiction",
        start_date=T0,
    )
    data.update(overrides)
    return Book(**data)


class TestCrud:

    @pytest.mark.asyncio
    async def test_create_assigns_unique_ids(self, store):
        first = await store.create(_book("A"))
        second = await store.create(_book("B"))
        assert first.id is not None
        assert second.id is not None
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_create_ignores_caller_id(self, store):
        created = await store.create(_book(id=999))
        assert created.id != 999

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        created = await store.create(_book(notes="spice"))
        fetched = await store.get_by_id(created.id)
        assert fetched == created
        assert fetched.start_date == T0
        assert fetched.end_date is None

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(NotFoundError):
            await store.get_by_id(404)

    @pytest.mark.asyncio
    async def test_id_beyond_integer_range_not_found(self, store):
        """超出 64 位整数范围的 id：两种实现都按不存在处理"""
        with pytest.raises(NotFoundError):
            await store.get_by_id(2**64)
        with pytest.raises(NotFoundError):
            await store.delete(-(2**64))

    @pytest.mark.asyncio
    async def test_get_all_newest_first(self, store):
        ids = [(await store.create(_book(f"Book {i}"))).id for i in range(3)]
        books = await store.get_all()
        assert [b.id for b in books] == sorted(ids, reverse=True)

    @pytest.mark.asyncio
    async def test_get_all_empty(self, store):
        assert await store.get_all() == []

    @pytest.mark.asyncio
    async def test_update_full_replacement(self, store):
        created = await store.create(_book())
        end = T0 + timedelta(days=10)
        replacement = _book(
            "Dune Messiah", status=BookStatus.FINISHED, category="", end_date=end
        )

        updated = await store.update(created.id, replacement)

        assert updated.id == created.id
        fetched = await store.get_by_id(created.id)
        assert fetched.title == "Dune Messiah"
        assert fetched.status == BookStatus.FINISHED
        assert fetched.category == ""
        assert fetched.end_date == end

    @pytest.mark.asyncio
    async def test_update_missing_leaves_count(self, store):
        await store.create(_book())
        with pytest.raises(NotFoundError):
            await store.update(404, _book("Ghost"))
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_delete(self, store):
        created = await store.create(_book())
        await store.delete(created.id)
        with pytest.raises(NotFoundError):
            await store.get_by_id(created.id)
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_delete_missing_leaves_count(self, store):
        await store.create(_book())
        with pytest.raises(NotFoundError):
            await store.delete(404)
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_delete(self, store):
        first = await store.create(_book("A"))
        await store.delete(first.id)
        second = await store.create(_book("B"))
        assert second.id > first.id


class TestFilters:

    async def _seed(self, store):
        await store.create(_book("Neuromancer", "William Gibson", status=BookStatus.READING,
                                 start_date=T0 + timedelta(days=2)))
        await store.create(_book("Clean Code", "Robert C. Martin", status=BookStatus.TO_READ,
                                 category="Software Engineering", start_date=T0))
        await store.create(_book("Dune", "Frank Herbert", status=BookStatus.READING,
                                 start_date=T0 + timedelta(days=1)))
        await store.create(_book("Anathem", "Neal Stephenson", status=BookStatus.FINISHED,
                                 start_date=T0 + timedelta(days=3), end_date=T0 + timedelta(days=9)))

    @pytest.mark.asyncio
    async def test_status_sorted_by_title(self, store):
        await self._seed(store)
        books = await store.get_by_filters(status=BookStatus.READING, category="", sort_by="title")
        assert [b.title for b in books] == ["Dune", "Neuromancer"]

    @pytest.mark.asyncio
    async def test_status_and_category(self, store):
        await self._seed(store)
        books = await store.get_by_filters(
            status=BookStatus.TO_READ, category="Software Engineering"
        )
        assert [b.title for b in books] == ["Clean Code"]

        books = await store.get_by_filters(
            status=BookStatus.READING, category="Software Engineering"
        )
        assert books == []

    @pytest.mark.asyncio
    async def test_no_filters_default_order(self, store):
        await self._seed(store)
        books = await store.get_by_filters()
        assert [b.title for b in books] == ["Anathem", "Dune", "Clean Code", "Neuromancer"]

    @pytest.mark.asyncio
    async def test_sort_by_author(self, store):
        await self._seed(store)
        books = await store.get_by_filters(sort_by="author")
        assert [b.author for b in books] == [
            "Frank Herbert", "Neal Stephenson", "Robert C. Martin", "William Gibson",
        ]

    @pytest.mark.asyncio
    async def test_sort_by_date_newest_first(self, store):
        await self._seed(store)
        books = await store.get_by_filters(sort_by="date")
        assert [b.title for b in books] == ["Anathem", "Neuromancer", "Dune", "Clean Code"]

    @pytest.mark.asyncio
    async def test_unknown_sort_falls_back_to_id(self, store):
        await self._seed(store)
        books = await store.get_by_filters(sort_by="rating")
        assert [b.id for b in books] == sorted((b.id for b in books), reverse=True)


class TestSqlitePersistence:

    @pytest.mark.asyncio
    async def test_timestamps_stored_as_iso_text(self, session_factory):
        async with session_factory() as session:
            await SQLAlchemyBookStore(session).create(_book(end_date=T0 + timedelta(hours=1)))
            await session.commit()

        async with session_factory() as session:
            result = await session.execute(text("SELECT start_date, end_date FROM books"))
            row = result.one()
        assert row.start_date == "2025-03-01T08:30:00.000000+00:00"
        assert row.end_date == "2025-03-01T09:30:00.000000+00:00"

    @pytest.mark.asyncio
    async def test_round_trip_across_sessions(self, session_factory):
        local = datetime(2025, 3, 1, 16, 30, tzinfo=timezone(timedelta(hours=8)))
        async with session_factory() as session:
            created = await SQLAlchemyBookStore(session).create(_book(start_date=local))
            await session.commit()

        async with session_factory() as session:
            fetched = await SQLAlchemyBookStore(session).get_by_id(created.id)
        assert fetched.start_date == local
        assert fetched.start_date.tzinfo is not None

    @pytest.mark.asyncio
    async def test_read_failure_surfaces(self, engine):
        """表不存在（未迁移）时读失败 → InternalError，而不是空列表"""
        async with AsyncSession(engine) as session:
            with pytest.raises(InternalError):
                await SQLAlchemyBookStore(session).get_all()

        async with AsyncSession(engine) as session:
            with pytest.raises(InternalError):
                await SQLAlchemyBookStore(session).get_by_filters(status=BookStatus.READING)
