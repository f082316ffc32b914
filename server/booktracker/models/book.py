from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from booktracker.database import Base


class IsoDateTime(TypeDecorator):
    """
    以 ISO-8601 文本存储时间（统一转为 UTC，保留微秒和 +00:00 偏移），
    保证字符串顺序与时间顺序一致，读回时得到带时区的 datetime。
    """

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> str | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")

    def process_result_value(self, value: str | None, dialect) -> datetime | None:
        if value is None:
            return None
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class BookRecord(Base):
    """books 表的持久化映射；表结构由 migrations 创建"""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="to_read")
    category: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[datetime] = mapped_column(IsoDateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(IsoDateTime)
